"""Identifier and clock providers consumed by the token stores"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional
from uuid import UUID, uuid4


class IdentifierProvider:
    """Supplies random 128-bit identifiers"""

    def __init__(self, factory: Optional[Callable[[], UUID]] = None):
        self._factory = factory or uuid4

    def new_id(self) -> UUID:
        return self._factory()


class Clock:
    """Timezone-aware UTC wall clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock that always returns the same instant"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


class SequenceIdentifierProvider(IdentifierProvider):
    """Hands out identifiers from a predefined sequence"""

    def __init__(self, ids: Iterable[UUID]):
        self._ids: Iterator[UUID] = iter(ids)
        super().__init__(self._next)

    def _next(self) -> UUID:
        return next(self._ids)
