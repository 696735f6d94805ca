"""Personal access token database model."""
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.models import HASH_MAX_LENGTH, PersonalAccessToken
from .base import UUIDModel
from .types import ScopeList, UTCDateTime


class PersonalAccessTokenModel(UUIDModel):
    """Personal access token database model.

    ``user_id`` is not a foreign key: the owning user lives in another
    bounded context and ownership is established by value.
    """
    __tablename__ = "personal_access_tokens"

    user_id: Mapped[UUID] = mapped_column(
        nullable=False,
        index=True
    )
    hash: Mapped[str] = mapped_column(
        String(HASH_MAX_LENGTH),
        nullable=False
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=""
    )
    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=""
    )
    scopes: Mapped[List[str]] = mapped_column(
        ScopeList,
        nullable=False,
        default=list
    )
    expiration_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "LENGTH(hash) >= 1",
            name="token_hash_not_empty"
        ),
        Index(
            "ix_personal_access_tokens_user_created",
            "user_id",
            "created_at",
            "id"
        ),
    )

    @classmethod
    def from_domain(cls, token: PersonalAccessToken) -> "PersonalAccessTokenModel":
        return cls(
            id=token.id,
            user_id=token.user_id,
            hash=token.hash,
            name=token.name,
            description=token.description,
            scopes=list(token.scopes),
            expiration_time=token.expiration_time,
            created_at=token.created_at,
            last_modified=token.last_modified,
        )

    def to_domain(self) -> PersonalAccessToken:
        return PersonalAccessToken(
            id=self.id,
            user_id=self.user_id,
            hash=self.hash,
            name=self.name,
            description=self.description,
            scopes=list(self.scopes),
            expiration_time=self.expiration_time,
            created_at=self.created_at,
            last_modified=self.last_modified,
        )
