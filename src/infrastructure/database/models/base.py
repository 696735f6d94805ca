"""Base model classes for database entities."""
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .types import UTCDateTime


class Base(DeclarativeBase):
    """Base model class for all database models."""
    pass


class TimestampedModel(Base):
    """Base model with creation and modification timestamps.

    Values come from the application clock, not the database server, so a
    row reads back exactly as it was written.
    """
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False
    )
    last_modified: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False
    )


class UUIDModel(TimestampedModel):
    """Base model with UUID primary key and timestamps."""
    __abstract__ = True

    id: Mapped[UUID] = mapped_column(primary_key=True)
