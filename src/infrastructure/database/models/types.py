"""Column types with a defined round-trip encoding."""
import json
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Text
from sqlalchemy.types import TypeDecorator

from src.core.models import ensure_utc


class CorruptRowError(ValueError):
    """A stored value could not be decoded."""
    pass


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always returned timezone-aware.

    SQLite drops the offset, so values are normalized to UTC before binding
    and reattached on the way out.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return ensure_utc(value)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        return ensure_utc(value)


class ScopeList(TypeDecorator):
    """Ordered list of strings stored as a JSON array in a TEXT column.

    Example column value: ``["read", "write"]``. NULL or empty text decodes
    to an empty list.
    """
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[List[str]], dialect) -> str:
        return json.dumps([str(scope) for scope in (value or [])])

    def process_result_value(self, value: Optional[str], dialect) -> List[str]:
        if not value:
            return []
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise CorruptRowError(f"scopes column is not valid JSON: {e}") from e
        if not isinstance(decoded, list) or not all(isinstance(s, str) for s in decoded):
            raise CorruptRowError("scopes column must be a JSON array of strings")
        return decoded
