"""In-memory token store"""

from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from src.core.config import Settings
from src.core.exceptions import ConflictError, NotFoundError
from src.core.models import PagedResult, Pagination, PersonalAccessToken
from src.core.providers import Clock, IdentifierProvider
from src.core.tokens.store import TokenStore
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


class InMemoryTokenStore(TokenStore):
    """Dictionary-backed store with the same contract as the SQL store.

    Entities are copied on the way in and on the way out, so callers never
    share state with the store or with each other.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdentifierProvider] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(clock=clock, id_provider=id_provider, config=config)
        self._tokens: Dict[UUID, PersonalAccessToken] = {}
        self._lock = Lock()

    async def _create(self, token: PersonalAccessToken) -> PersonalAccessToken:
        with self._lock:
            if token.id in self._tokens:
                raise ConflictError("create", str(token.id))
            self._tokens[token.id] = token.model_copy(deep=True)

        return token.model_copy(deep=True)

    async def _get(self, token_id: UUID) -> PersonalAccessToken:
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                logger.debug("token_lookup_miss", token_id=str(token_id))
                raise NotFoundError("get", str(token_id))
            return token.model_copy(deep=True)

    async def _list_for_user(
        self, user_id: UUID, pagination: Pagination
    ) -> PagedResult[PersonalAccessToken]:
        with self._lock:
            owned: List[PersonalAccessToken] = [
                t for t in self._tokens.values() if t.user_id == user_id
            ]
            owned.sort(key=lambda t: (t.created_at, t.id), reverse=True)
            window = owned[pagination.offset:pagination.offset + pagination.limit]

            return PagedResult[PersonalAccessToken](
                results=[t.model_copy(deep=True) for t in window],
                total=len(owned),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
