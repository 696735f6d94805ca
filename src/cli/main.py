"""patstore management CLI."""

from typing import Any, Dict, Optional

import typer
from rich.console import Console

from src.cli import __version__
from src.cli.commands import db, manifests, token
from src.cli.utils.context import CLIContext
from src.cli.utils.output import OutputFormatter
from src.core.config import get_settings
from src.infrastructure.logging import setup_logging

app = typer.Typer(
    name="patstore",
    help="Personal access token store administration",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    pretty_exceptions_enable=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    """Display version and exit."""
    if value:
        console.print(f"patstore v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug output",
    ),
    output_format: str = typer.Option(
        "table",
        "--output",
        "-o",
        help="Output format: table, json, yaml",
    ),
    database_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        envvar="PATSTORE_DATABASE_URL",
        help="Database URL (overrides settings)",
    ),
):
    """
    patstore CLI

    Create, inspect and list personal access tokens, and render the
    authorization component manifests.
    """
    overrides: Dict[str, Any] = {}
    if database_url:
        overrides["database_url"] = database_url
    # Store events are noise on a terminal unless debugging
    overrides["log_level"] = "DEBUG" if debug else "WARNING"
    settings = get_settings().model_copy(update=overrides)

    setup_logging(settings)

    ctx.obj = CLIContext(
        debug=debug,
        settings=settings,
        formatter=OutputFormatter(output_format, console=console),
        console=console,
    )


app.add_typer(db.app, name="db", help="Manage the token database")
app.add_typer(token.app, name="token", help="Manage personal access tokens")
app.add_typer(manifests.app, name="manifests", help="Render Kubernetes manifests")


if __name__ == "__main__":
    app()
