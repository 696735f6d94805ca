"""CLI context management."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, TypeVar

import typer
from rich.console import Console

from src.core.config import Settings
from src.core.exceptions import InvalidArgumentError, PatStoreError
from src.infrastructure.database import DatabaseConnection, SqlTokenStore
from src.cli.utils.output import OutputFormatter

T = TypeVar("T")


@dataclass
class CLIContext:
    """Context object passed through CLI commands."""

    debug: bool
    settings: Settings
    formatter: OutputFormatter
    console: Console

    @asynccontextmanager
    async def open_database(self) -> AsyncIterator[DatabaseConnection]:
        async with DatabaseConnection.from_settings(self.settings) as connection:
            yield connection

    @asynccontextmanager
    async def open_store(self) -> AsyncIterator[SqlTokenStore]:
        async with self.open_database() as connection:
            yield SqlTokenStore(connection, config=self.settings)

    def run(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run a coroutine, turning store errors into a non-zero exit."""
        try:
            return asyncio.run(func())
        except InvalidArgumentError as e:
            self.formatter.print_error(e.message)
            raise typer.Exit(2)
        except PatStoreError as e:
            self.formatter.print_error(e.message)
            if self.debug and e.details:
                self.console.print(str(e.details), style="dim", markup=False)
            raise typer.Exit(1)
