"""Token data access repository."""
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from src.core.config import Settings
from src.core.exceptions import ConflictError, NotFoundError
from src.core.models import PagedResult, Pagination, PersonalAccessToken
from src.core.providers import Clock, IdentifierProvider
from src.core.tokens.store import TokenStore
from src.infrastructure.database.connection import DatabaseConnection
from src.infrastructure.database.models.personal_access_token import PersonalAccessTokenModel
from src.infrastructure.database.repositories.base import BaseRepository
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SqlTokenStore(BaseRepository, TokenStore):
    """Relational token store.

    Every operation opens its own session; nothing is held between calls.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdentifierProvider] = None,
        config: Optional[Settings] = None,
    ):
        BaseRepository.__init__(self, connection)
        TokenStore.__init__(self, clock=clock, id_provider=id_provider, config=config)

    async def _create(self, token: PersonalAccessToken) -> PersonalAccessToken:
        with self.translate_errors("create", str(token.id)):
            try:
                async with self.connection.get_session() as session:
                    session.add(PersonalAccessTokenModel.from_domain(token))
                    await session.flush()
            except IntegrityError as e:
                # The only unique constraint is the primary key
                logger.info("token_id_conflict", token_id=str(token.id))
                raise ConflictError("create", str(token.id)) from e

        return token.model_copy(deep=True)

    async def _get(self, token_id: UUID) -> PersonalAccessToken:
        with self.translate_errors("get", str(token_id)):
            async with self.connection.get_session() as session:
                model = await session.get(PersonalAccessTokenModel, token_id)
                if model is None:
                    logger.debug("token_lookup_miss", token_id=str(token_id))
                    raise NotFoundError("get", str(token_id))
                return model.to_domain()

    async def _list_for_user(
        self, user_id: UUID, pagination: Pagination
    ) -> PagedResult[PersonalAccessToken]:
        owned_by_user = PersonalAccessTokenModel.user_id == user_id

        count_stmt = (
            select(func.count())
            .select_from(PersonalAccessTokenModel)
            .where(owned_by_user)
        )
        page_stmt = (
            select(PersonalAccessTokenModel)
            .where(owned_by_user)
            .order_by(
                PersonalAccessTokenModel.created_at.desc(),
                PersonalAccessTokenModel.id.desc(),
            )
            .offset(pagination.offset)
            .limit(pagination.limit)
        )

        with self.translate_errors("list_for_user", str(user_id)):
            # Count and window share one transaction
            async with self.connection.get_session(
                isolation_level=self.config.list_isolation_level
            ) as session:
                total = (await session.execute(count_stmt)).scalar_one()
                if pagination.offset >= total:
                    return PagedResult[PersonalAccessToken](results=[], total=total)

                models = (await session.execute(page_stmt)).scalars().all()
                return PagedResult[PersonalAccessToken](
                    results=[model.to_domain() for model in models],
                    total=total,
                )
