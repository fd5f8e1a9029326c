"""Authentication commands for the cookctl CLI."""

from __future__ import annotations

from typing import Optional

import typer

from cookctl.auth.constants import DEFAULT_TOKEN_NAME, TOKEN_ENV_VAR, WARNING_NO_EXPIRATION
from cookctl.auth.flow import (
    clear_local_credentials,
    get_auth_status,
    parse_expires_at,
    revoke_stored_token,
    run_login_flow,
    save_token,
)
from cookctl.auth.resolver import mask_token
from cookctl.auth.types import TokenSource
from cookctl.config import OUTPUT_JSON
from cookctl.exceptions import UsageError

from ..constants import LOGIN_HINT
from . import (
    err_console,
    get_authenticated_client,
    get_state,
    handle_errors,
    prompt_secret,
    read_stdin_secret,
    render,
    render_message,
    warn,
)

app = typer.Typer(help="Manage authentication", no_args_is_help=True)


@app.command()
def login(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(None, "--username", help="Username for login"),
    password_stdin: bool = typer.Option(False, "--password-stdin", help="Read password from stdin"),
    token_name: str = typer.Option(DEFAULT_TOKEN_NAME, "--token-name", help="Name for the new PAT"),
    expires_at: Optional[str] = typer.Option(None, "--expires-at", help="Token expiration (RFC3339)"),
) -> None:
    """Log in with username/password and store a new personal access token.

    The password is never accepted as a flag value: pipe it with
    --password-stdin or type it at the hidden prompt.
    """
    state = get_state(ctx)
    with handle_errors(state):
        if not (username or "").strip():
            raise UsageError("username is required")
        if not token_name.strip():
            raise UsageError("token-name is required")
        expires = parse_expires_at(expires_at)

        password = read_stdin_secret("password") if password_stdin else prompt_secret("password")
        if not password:
            raise UsageError("password is required")

        if expires is None:
            warn(WARNING_NO_EXPIRATION)

        result = run_login_flow(
            state.store,
            state.config.api_url,
            username or "",
            password,
            token_name=token_name,
            expires_at=expires,
            timeout=state.config.timeout,
            check_health=state.check_health,
            transport=state.transport,
        )

    render(
        state,
        {
            "id": result.id,
            "name": result.name,
            "masked_token": mask_token(result.token),
            "created_at": result.created_at,
            "expires_at": result.expires_at,
            "api_url": result.api_url,
        },
    )


@app.command("set")
def set_token(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(None, "--token", help="Personal access token"),
    token_stdin: bool = typer.Option(False, "--token-stdin", help="Read token from stdin"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="API base URL this token belongs to"),
) -> None:
    """Store an existing personal access token."""
    state = get_state(ctx)
    with handle_errors(state):
        if token_stdin and (token or "").strip():
            raise UsageError("token and token-stdin cannot be combined")
        if token_stdin:
            token = read_stdin_secret("token")
        url = (api_url or "").strip() or state.config.api_url
        save_token(state.store, token or "", url)

    render_message(state, "token saved")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show which token and API URL will be used, with the token masked."""
    state = get_state(ctx)
    with handle_errors(state):
        auth_status = get_auth_status(state.store, state.resolver)

    render(state, auth_status)
    if auth_status.source == TokenSource.NONE.value and state.config.output != OUTPUT_JSON:
        err_console.print(f"[yellow]Not authenticated.[/yellow] {LOGIN_HINT}")


@app.command()
def whoami(ctx: typer.Context) -> None:
    """Show the user that owns the current token."""
    state = get_state(ctx)
    with handle_errors(state):
        with get_authenticated_client(state) as client:
            me = client.me()

    render(state, me)


@app.command()
def logout(
    ctx: typer.Context,
    revoke: bool = typer.Option(False, "--revoke", help="Revoke stored token before clearing credentials"),
) -> None:
    """Remove stored credentials, optionally revoking the token server-side."""
    state = get_state(ctx)
    with handle_errors(state):
        if revoke:
            result = revoke_stored_token(
                state.store,
                state.resolver,
                timeout=state.config.timeout,
                check_health=state.check_health,
                transport=state.transport,
            )
        else:
            result = clear_local_credentials(state.store, state.resolver)

    if result.env_token_active:
        warn(f"{TOKEN_ENV_VAR} is still set and will keep authenticating future commands")
    render_message(state, result.message)
