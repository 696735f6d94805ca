"""Database schema commands."""

import typer

from src.cli.utils.context import CLIContext
from src.infrastructure.database.repositories.base import BaseRepository

app = typer.Typer(help="Manage the token database")


@app.command("init")
def init_db(
    ctx: typer.Context,
    drop: bool = typer.Option(
        False, "--drop", help="Drop existing tables first (destroys all tokens)"
    ),
):
    """Create the token table and indexes."""
    cli_ctx: CLIContext = ctx.obj

    if drop and not typer.confirm("Drop all existing tokens?", default=False):
        raise typer.Abort()

    async def _init() -> None:
        async with cli_ctx.open_database() as connection:
            with BaseRepository(connection).translate_errors("init_db"):
                await connection.create_schema(drop_existing=drop)

    cli_ctx.run(_init)
    cli_ctx.formatter.print_success("Database schema ready")
