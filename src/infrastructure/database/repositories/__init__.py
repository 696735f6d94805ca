"""Database repositories module."""
from .base import BaseRepository
from .token_repository import SqlTokenStore

__all__ = [
    'BaseRepository',
    'SqlTokenStore'
]
