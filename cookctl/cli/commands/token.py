"""Personal access token commands for the cookctl CLI."""

from __future__ import annotations

from typing import Optional

import typer

from cookctl.auth.constants import WARNING_NO_EXPIRATION
from cookctl.auth.flow import parse_expires_at
from cookctl.exceptions import UsageError

from ..constants import CONFIRM_HINT
from . import get_authenticated_client, get_state, handle_errors, render, warn

app = typer.Typer(help="Manage personal access tokens", no_args_is_help=True)


@app.command("list")
def list_tokens(ctx: typer.Context) -> None:
    """List personal access tokens."""
    state = get_state(ctx)
    with handle_errors(state):
        with get_authenticated_client(state) as client:
            tokens = client.list_tokens()

    render(state, tokens)


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Option("", "--name", help="Token name"),
    expires_at: Optional[str] = typer.Option(None, "--expires-at", help="Token expiration (RFC3339)"),
) -> None:
    """Create a personal access token. The secret is shown only once."""
    state = get_state(ctx)
    with handle_errors(state):
        if not name.strip():
            raise UsageError("name is required")
        expires = parse_expires_at(expires_at)
        if expires is None:
            warn(WARNING_NO_EXPIRATION)

        with get_authenticated_client(state) as client:
            created = client.create_token(name.strip(), expires)

    render(state, created)


@app.command()
def revoke(
    ctx: typer.Context,
    token_id: str = typer.Argument(..., help="Token id"),
    yes: bool = typer.Option(False, "--yes", help="Confirm token revocation"),
) -> None:
    """Revoke a personal access token by id."""
    state = get_state(ctx)
    with handle_errors(state):
        token_id = token_id.strip()
        if not token_id:
            raise UsageError("token id is required")
        if not yes:
            raise UsageError(CONFIRM_HINT)

        with get_authenticated_client(state) as client:
            client.revoke_token(token_id)

    render(state, {"id": token_id, "revoked": True})
