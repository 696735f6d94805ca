"""Shared plumbing for SQL-backed repositories."""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import PatStoreError, UnavailableError
from src.infrastructure.database.connection import (
    DatabaseConnection,
    DatabaseNotConnectedError
)
from src.infrastructure.database.models import CorruptRowError
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """Base class for repositories that open one session per operation."""

    def __init__(self, connection: DatabaseConnection):
        self.connection = connection

    @contextmanager
    def translate_errors(
        self, operation: str, resource_id: Optional[str] = None
    ) -> Iterator[None]:
        """Re-signal backend failures as UnavailableError.

        Store errors raised inside the block pass through untouched.
        """
        try:
            yield
        except PatStoreError:
            raise
        except (SQLAlchemyError, OSError, CorruptRowError) as e:
            logger.error(
                "token_store_backend_error",
                operation=operation,
                resource_id=resource_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise UnavailableError(operation, str(e), resource_id) from e
        except DatabaseNotConnectedError as e:
            raise UnavailableError(operation, str(e), resource_id) from e
