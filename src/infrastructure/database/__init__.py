"""Database infrastructure module."""
from .connection import DatabaseConnection, DatabaseNotConnectedError
from .repositories import SqlTokenStore

__all__ = [
    'DatabaseConnection',
    'DatabaseNotConnectedError',
    'SqlTokenStore'
]
