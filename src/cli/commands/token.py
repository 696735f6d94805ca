"""Token management commands."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

import typer
from pydantic import ValidationError

from src.core.models import Pagination, PersonalAccessToken
from src.cli.utils.context import CLIContext
from src.cli.utils.output import OutputFormat

app = typer.Typer(help="Manage personal access tokens")

DEFAULT_SCOPES = ["read"]
TOKEN_PREFIX = "pat_"

LIST_COLUMNS = ["id", "name", "scopes", "created_at", "expiration_time"]


def generate_secret() -> str:
    """Random plaintext token; only its hash is ever stored."""
    return TOKEN_PREFIX + secrets.token_urlsafe(32)


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def token_to_dict(token: PersonalAccessToken) -> Dict[str, Any]:
    data = token.model_dump(mode="json")
    data.pop("hash", None)
    return data


def parse_uuid(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise typer.BadParameter(f"{field} must be a UUID, got '{value}'")


@app.command("create")
def create_token(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="Owner user ID"),
    name: str = typer.Argument(..., help="Token name"),
    description: str = typer.Option("", "--description", "-D", help="Token description"),
    scope: Optional[List[str]] = typer.Option(
        None, "--scope", "-s", help="Token scopes (can be used multiple times)"
    ),
    expires_in: int = typer.Option(
        30, "--expires-in", min=1, help="Token expiration in days"
    ),
):
    """
    Create a new personal access token.

    Example:
        patstore token create 6f1c... "CI token" --scope read --scope write
    """
    cli_ctx: CLIContext = ctx.obj
    owner = parse_uuid(user_id, "user_id")
    secret = generate_secret()

    try:
        token = PersonalAccessToken(
            user_id=owner,
            hash=hash_secret(secret),
            name=name,
            description=description,
            scopes=list(scope) if scope else list(DEFAULT_SCOPES),
            expiration_time=datetime.now(timezone.utc) + timedelta(days=expires_in),
        )
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        cli_ctx.formatter.print_error(f"Invalid token: {', '.join(errors)}")
        raise typer.Exit(2)

    async def _create() -> PersonalAccessToken:
        async with cli_ctx.open_store() as store:
            return await store.create(token)

    created = cli_ctx.run(_create)

    if cli_ctx.formatter.format != OutputFormat.TABLE:
        details = token_to_dict(created)
        details["token"] = secret
        cli_ctx.formatter.print_detail(details)
        return

    cli_ctx.formatter.print_success(f"Token '{name}' created")
    cli_ctx.console.print(
        "[bold yellow]Save this token now. It cannot be shown again.[/bold yellow]"
    )
    cli_ctx.console.print(secret, markup=False, highlight=False)
    cli_ctx.formatter.print_detail(token_to_dict(created), title="Token Details")


@app.command("get")
def get_token(
    ctx: typer.Context,
    token_id: str = typer.Argument(..., help="Token ID"),
):
    """Show a single token."""
    cli_ctx: CLIContext = ctx.obj
    identifier = parse_uuid(token_id, "token_id")

    async def _get() -> PersonalAccessToken:
        async with cli_ctx.open_store() as store:
            return await store.get(identifier)

    token = cli_ctx.run(_get)
    cli_ctx.formatter.print_detail(token_to_dict(token), title=f"Token {token.id}")


@app.command("list")
def list_tokens(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="Owner user ID"),
    page: int = typer.Option(1, "--page", "-p", help="Page number (1-based)"),
    page_size: int = typer.Option(20, "--page-size", "-n", help="Tokens per page"),
):
    """List a user's tokens, newest first."""
    cli_ctx: CLIContext = ctx.obj
    owner = parse_uuid(user_id, "user_id")
    pagination = Pagination(page=page, page_size=page_size)

    async def _list():
        async with cli_ctx.open_store() as store:
            return await store.list_for_user(owner, pagination)

    result = cli_ctx.run(_list)
    cli_ctx.formatter.print_list(
        [token_to_dict(t) for t in result.results],
        columns=LIST_COLUMNS,
        title=f"Tokens for {owner} (page {page})",
        total=result.total,
    )
