"""Database connection management module."""
from typing import Any, AsyncIterator, Dict, Optional
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool

from src.core.config import Settings
from src.infrastructure.logging import get_logger
from .models import Base

logger = get_logger(__name__)


class DatabaseNotConnectedError(RuntimeError):
    """Raised when the connection is used before connect()."""
    pass


class DatabaseConnection:
    """Manages the engine and hands out one session per unit of work."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 40,
        pool_timeout: int = 30,
        echo: bool = False
    ):
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None
        self.database_url = self._convert_to_async_url(database_url)
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.echo = echo

    @classmethod
    def from_settings(cls, config: Settings) -> "DatabaseConnection":
        return cls(
            config.database_url,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            echo=config.database_echo,
        )

    def _convert_to_async_url(self, url: str) -> str:
        """Convert sync database URL to async."""
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        elif url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    async def connect(self) -> None:
        """Initialize database connection."""
        if self._engine is not None:
            return

        engine_options: Dict[str, Any] = {"echo": self.echo}
        if self.is_sqlite:
            # One connection per session; file databases need no pool
            engine_options["poolclass"] = NullPool
        else:
            engine_options.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_timeout=self.pool_timeout,
                pool_pre_ping=True,
            )

        self._engine = create_async_engine(self.database_url, **engine_options)

        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        logger.info("database_connected", backend=self._engine.dialect.name)

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("database_disconnected")

    async def __aenter__(self) -> "DatabaseConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    @asynccontextmanager
    async def get_session(
        self, isolation_level: Optional[str] = None
    ) -> AsyncIterator[AsyncSession]:
        """Get a session that commits on success and rolls back otherwise.

        Cancellation is a BaseException, so the rollback covers it as well.
        """
        if self._sessionmaker is None:
            raise DatabaseNotConnectedError("Database not connected")

        async with self._sessionmaker() as session:
            try:
                if isolation_level:
                    await session.connection(
                        execution_options={"isolation_level": isolation_level}
                    )
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def create_schema(self, drop_existing: bool = False) -> None:
        """Create tables and indexes from model metadata."""
        async with self.engine.begin() as conn:
            if drop_existing:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_created", dropped=drop_existing)

    async def drop_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("database_schema_dropped")

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine."""
        if self._engine is None:
            raise DatabaseNotConnectedError("Database not connected")
        return self._engine
