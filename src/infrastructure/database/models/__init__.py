"""Database models module."""
from .base import Base, TimestampedModel, UUIDModel
from .personal_access_token import PersonalAccessTokenModel
from .types import CorruptRowError, ScopeList, UTCDateTime

__all__ = [
    'Base',
    'TimestampedModel',
    'UUIDModel',
    'PersonalAccessTokenModel',
    'CorruptRowError',
    'ScopeList',
    'UTCDateTime'
]
