"""Pytest configuration and fixtures"""

import logging
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio

from src.core.config import Settings
from src.core.tokens import InMemoryTokenStore, TokenStore
from src.infrastructure.database import DatabaseConnection, SqlTokenStore


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's environment"""
    return Settings(
        environment="development",
        log_level="DEBUG",
        operation_timeout_seconds=5.0,
        max_page_size=100,
        enable_metrics=True,
    )


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'tokens.db'}"


@pytest_asyncio.fixture
async def connection(database_url: str) -> AsyncGenerator[DatabaseConnection, None]:
    """Connected SQLite database with the schema created"""
    async with DatabaseConnection(database_url) as conn:
        await conn.create_schema()
        yield conn


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store_factory(
    request, test_settings: Settings, database_url: str
) -> AsyncGenerator[Callable[..., TokenStore], None]:
    """Build stores of either implementation; keyword args go to the store"""
    if request.param == "memory":
        yield lambda **kwargs: InMemoryTokenStore(config=test_settings, **kwargs)
        return

    async with DatabaseConnection(database_url) as conn:
        await conn.create_schema()
        yield lambda **kwargs: SqlTokenStore(conn, config=test_settings, **kwargs)


@pytest.fixture
def store(store_factory: Callable[..., TokenStore]) -> TokenStore:
    return store_factory()


@pytest.fixture
def restore_root_logger() -> Generator[None, None, None]:
    """Undo handler changes made by setup_logging"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
