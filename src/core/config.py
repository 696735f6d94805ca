from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PATSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="patstore", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment mode"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    # Database settings
    database_url: str = Field(
        default="sqlite:///./patstore.db", description="Database connection URL"
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")
    pool_size: int = Field(default=20, ge=1, description="Connection pool size")
    max_overflow: int = Field(
        default=40, ge=0, description="Connections allowed above pool_size"
    )
    pool_timeout: int = Field(
        default=30, ge=1, description="Seconds to wait for a pooled connection"
    )

    # Token store settings
    operation_timeout_seconds: Optional[float] = Field(
        default=10.0,
        description="Deadline for a single store operation (None or 0 disables it)",
    )
    max_page_size: int = Field(
        default=100, ge=1, description="Largest page size accepted when listing"
    )
    list_isolation_level: Optional[str] = Field(
        default=None,
        description="Isolation level for list queries, e.g. 'REPEATABLE READ'",
    )

    enable_metrics: bool = Field(default=True, description="Enable Prometheus metrics")

    @model_validator(mode="after")
    def force_json_logs_in_production(self) -> "Settings":
        if self.environment == "production":
            self.log_format = "json"
        return self

    @field_validator("list_isolation_level", mode="before")
    @classmethod
    def normalize_isolation_level(cls, v):
        if v is None or v == "":
            return None
        return str(v).upper().replace("_", " ")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

