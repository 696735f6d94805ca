from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

# Width of the hash column
HASH_MAX_LENGTH = 255


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime, treating naive values as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PersonalAccessToken(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: Optional[UUID] = Field(
        None, description="Unique token identifier, assigned at creation"
    )
    user_id: UUID = Field(..., description="UUID of the owning principal")
    hash: str = Field(..., description="Hash of the secret, never the plaintext")
    name: str = Field(default="", max_length=255, description="Display name")
    description: str = Field(
        default="", max_length=255, description="Free-form description"
    )
    scopes: List[str] = Field(
        default_factory=list, description="Ordered permission strings"
    )
    expiration_time: datetime = Field(
        ..., description="Point in time after which the token is invalid"
    )
    created_at: Optional[datetime] = Field(None, description="Insert timestamp")
    last_modified: Optional[datetime] = Field(
        None, description="Timestamp of the last write"
    )

    @field_validator("expiration_time", "created_at", "last_modified")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Pagination(BaseModel):
    """Page request: 1-indexed page number and page size.

    Bounds are not validated here; stores reject out-of-range values.
    """

    page: int = Field(1, description="Page number (1-based)")
    page_size: int = Field(20, description="Items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class PagedResult(BaseModel, Generic[T]):
    """One page of results plus the count of all matching rows"""

    results: List[T] = Field(default_factory=list, description="Items in this page")
    total: int = Field(..., ge=0, description="Total number of matching items")
