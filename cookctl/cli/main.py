"""Main entry point for the cookctl CLI."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from .commands import auth, get_state, handle_errors, render, token
from .state import create_state

app = typer.Typer(
    name="cookctl",
    help="cookctl - command-line client for the Cooking App API",
    no_args_is_help=True,
)

app.add_typer(auth.app, name="auth")
app.add_typer(token.app, name="token")


def _version_callback(value: bool) -> None:
    """Handle --version and exit early."""
    if value:
        from cookctl import __version__

        typer.echo(f"cookctl {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(None, "--api-url", help="API base URL (overrides stored token URL)"),
    output: Optional[str] = typer.Option(None, "--output", help="Output format: table|json"),
    timeout: Optional[str] = typer.Option(None, "--timeout", help="Request timeout (e.g. 30s)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    skip_health_check: bool = typer.Option(False, "--skip-health-check", help="Skip API health preflight"),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the CLI version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cookctl root callback: loads configuration once per invocation."""
    _ = version
    with handle_errors():
        ctx.obj = create_state(
            api_url=api_url,
            output=output,
            timeout=timeout,
            debug=debug,
            skip_health_check=skip_health_check,
        )
    if ctx.obj.config.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Show the CLI version."""
    from cookctl import __version__

    typer.echo(f"cookctl {__version__}")


@app.command()
def health(ctx: typer.Context) -> None:
    """Check API connectivity."""
    from cookctl.client import CookingClient

    state = get_state(ctx)
    with handle_errors(state):
        with CookingClient(
            base_url=state.config.api_url,
            timeout=state.config.timeout,
            transport=state.transport,
        ) as client:
            result = client.health()

    render(state, result)


if __name__ == "__main__":
    app()
