"""Personal access token store interface.

Concrete stores implement ``_create``, ``_get`` and ``_list_for_user``;
this base class owns argument validation, default identifiers and
timestamps, per-operation deadlines, metrics and logging so that every
implementation exposes the same contract.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, List, Optional, TypeVar
from uuid import UUID

from structlog.contextvars import bound_contextvars

from src.core.config import Settings, get_settings
from src.core.exceptions import DeadlineExceededError, InvalidArgumentError
from src.core.models import (HASH_MAX_LENGTH, PagedResult, Pagination,
                             PersonalAccessToken)
from src.core.providers import Clock, IdentifierProvider
from src.infrastructure.logging import get_logger
from src.infrastructure.metrics import track_operation

logger = get_logger(__name__)

R = TypeVar("R")


class TokenStore(ABC):
    """Durable, user-scoped store of personal access tokens"""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdentifierProvider] = None,
        config: Optional[Settings] = None,
    ):
        self.clock = clock or Clock()
        self.id_provider = id_provider or IdentifierProvider()
        self.config = config or get_settings()

    async def create(
        self, token: PersonalAccessToken, *, timeout: Optional[float] = None
    ) -> PersonalAccessToken:
        """Persist a new token and return a copy of what was written.

        Raises:
            InvalidArgumentError: hash is empty
            ConflictError: a token with the same id already exists
            UnavailableError: backend failure
            DeadlineExceededError: the operation ran past its deadline
        """
        with bound_contextvars(operation="create"), track_operation("create"):
            prepared = self.prepare_for_create(token)
            with bound_contextvars(
                token_id=str(prepared.id), user_id=str(prepared.user_id)
            ):
                created = await self._with_deadline(
                    "create", self._create(prepared), timeout, str(prepared.id)
                )

        logger.info(
            "token_created",
            token_id=str(created.id),
            user_id=str(created.user_id),
            scopes=created.scopes,
        )
        return created

    async def get(
        self, token_id: UUID, *, timeout: Optional[float] = None
    ) -> PersonalAccessToken:
        """Fetch a token by id.

        Raises:
            NotFoundError: no token has this id
            UnavailableError: backend failure
            DeadlineExceededError: the operation ran past its deadline
        """
        with bound_contextvars(operation="get", token_id=str(token_id)), \
                track_operation("get"):
            return await self._with_deadline(
                "get", self._get(token_id), timeout, str(token_id)
            )

    async def list_for_user(
        self,
        user_id: UUID,
        pagination: Pagination,
        *,
        timeout: Optional[float] = None,
    ) -> PagedResult[PersonalAccessToken]:
        """List a user's tokens, newest first.

        Ties on ``created_at`` are broken by id, so repeated calls with the
        same pagination return the same rows in the same order. ``total``
        counts every token of the user regardless of the requested window.

        Raises:
            InvalidArgumentError: page < 1, page_size <= 0 or above the cap
            UnavailableError: backend failure
            DeadlineExceededError: the operation ran past its deadline
        """
        with bound_contextvars(operation="list_for_user", user_id=str(user_id)), \
                track_operation("list_for_user"):
            self.validate_pagination(pagination)
            page = await self._with_deadline(
                "list_for_user",
                self._list_for_user(user_id, pagination),
                timeout,
                str(user_id),
            )

        logger.debug(
            "tokens_listed",
            user_id=str(user_id),
            page=pagination.page,
            page_size=pagination.page_size,
            returned=len(page.results),
            total=page.total,
        )
        return page

    def prepare_for_create(self, token: PersonalAccessToken) -> PersonalAccessToken:
        """Validate a token and fill in id and timestamps left unset"""
        errors: List[str] = []
        if not token.hash or not token.hash.strip():
            errors.append("hash must not be empty")
        elif len(token.hash) > HASH_MAX_LENGTH:
            errors.append(
                f"hash must be at most {HASH_MAX_LENGTH} characters, "
                f"got {len(token.hash)}"
            )
        if errors:
            raise InvalidArgumentError("create", errors)

        prepared = token.model_copy(deep=True)
        now = self.clock.now()
        if prepared.id is None:
            prepared.id = self.id_provider.new_id()
        if prepared.created_at is None:
            prepared.created_at = now
        if prepared.last_modified is None:
            prepared.last_modified = prepared.created_at
        return prepared

    def validate_pagination(self, pagination: Pagination) -> None:
        errors: List[str] = []
        if pagination.page < 1:
            errors.append(f"page must be >= 1, got {pagination.page}")
        if pagination.page_size <= 0:
            errors.append(f"page_size must be > 0, got {pagination.page_size}")
        elif pagination.page_size > self.config.max_page_size:
            errors.append(
                f"page_size must be <= {self.config.max_page_size}, "
                f"got {pagination.page_size}"
            )
        if errors:
            raise InvalidArgumentError("list_for_user", errors)

    def resolve_timeout(self, timeout: Optional[float]) -> Optional[float]:
        """Explicit timeout wins; 0 disables the deadline"""
        if timeout is None:
            timeout = self.config.operation_timeout_seconds
        if not timeout or timeout <= 0:
            return None
        return timeout

    async def _with_deadline(
        self,
        operation: str,
        awaitable: Awaitable[R],
        timeout: Optional[float],
        resource_id: Optional[str] = None,
    ) -> R:
        deadline = self.resolve_timeout(timeout)
        if deadline is None:
            return await awaitable

        try:
            return await asyncio.wait_for(awaitable, timeout=deadline)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "token_store_deadline_exceeded",
                operation=operation,
                timeout=deadline,
                resource_id=resource_id,
            )
            raise DeadlineExceededError(operation, deadline, resource_id) from exc

    @abstractmethod
    async def _create(self, token: PersonalAccessToken) -> PersonalAccessToken:
        """Insert a fully populated token"""
        pass

    @abstractmethod
    async def _get(self, token_id: UUID) -> PersonalAccessToken:
        pass

    @abstractmethod
    async def _list_for_user(
        self, user_id: UUID, pagination: Pagination
    ) -> PagedResult[PersonalAccessToken]:
        pass
