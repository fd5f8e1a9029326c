"""CLI command modules and the helpers they share."""

from __future__ import annotations

import dataclasses
import json
import sys
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Iterator

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cookctl.auth.gateway import build_client, ensure_healthy
from cookctl.client import CookingClient
from cookctl.config import OUTPUT_JSON
from cookctl.exceptions import APIError, CookctlError, UsageError
from cookctl.timestamps import format_timestamp

from ..exit_codes import exit_code_for
from ..state import CLIState

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("cookctl CLI state is not initialized")
    return state


def get_authenticated_client(state: CLIState) -> CookingClient:
    """Resolve the token, build the client, and run the optional preflight.

    Raises AuthMissingError (exit code 3) when no token is available.
    """
    resolved = state.resolver.resolve()
    client = build_client(resolved, timeout=state.config.timeout, transport=state.transport)
    if state.check_health:
        try:
            ensure_healthy(client)
        except CookctlError:
            client.close()
            raise
    return client


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {k: to_jsonable(v) for k, v in dataclasses.asdict(value).items() if v is not None}
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Enum):
        return value.value
    return value


def render(state: CLIState, data: Any) -> None:
    """Write a result as JSON or as a simple table, per --output."""
    data = to_jsonable(data)
    if state.config.output == OUTPUT_JSON:
        typer.echo(json.dumps(data, indent=2))
        return

    if isinstance(data, list):
        if not data:
            console.print("No results.")
            return
        columns = list(data[0].keys())
        table = Table()
        for column in columns:
            table.add_column(column.upper())
        for row in data:
            table.add_row(*(_cell(row.get(column)) for column in columns))
        console.print(table)
        return

    if isinstance(data, dict):
        table = Table(show_header=False, box=None)
        table.add_column("field", style="bold")
        table.add_column("value")
        for key, value in data.items():
            table.add_row(key, _cell(value))
        console.print(table)
        return

    console.print(escape(str(data)))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return escape(str(value))


def render_message(state: CLIState, message: str) -> None:
    if state.config.output == OUTPUT_JSON:
        typer.echo(json.dumps({"message": message}, indent=2))
    else:
        console.print(f"[green]{escape(message)}[/green]")


def warn(message: str) -> None:
    err_console.print(f"[yellow]warning: {escape(message)}[/yellow]")


def read_stdin_secret(label: str) -> str:
    """Read a secret piped on stdin.

    Surrounding whitespace is trimmed, so a secret cannot begin or end with a
    space.
    """
    try:
        value = typer.get_text_stream("stdin").read()
    except OSError as e:
        raise CookctlError(f"read {label}: {e}") from e
    return value.strip()


def prompt_secret(label: str) -> str:
    """Prompt for a secret without echo; only allowed on an interactive terminal."""
    if not sys.stdin.isatty():
        raise UsageError(f"{label}-stdin is required when stdin is not a terminal")
    return typer.prompt(label.capitalize(), hide_input=True).strip()


def _report_api_error(error: APIError, state: CLIState | None) -> None:
    if state is not None and state.config.output == OUTPUT_JSON:
        message = error.problem.message.strip() or f"request failed with status {error.status_code}"
        payload: dict[str, Any] = {"status": error.status_code, "message": message}
        if error.problem.code:
            payload["code"] = error.problem.code
        if error.problem.details:
            payload["details"] = to_jsonable(error.problem.details)
        typer.echo(json.dumps({"error": payload}, indent=2))
        return
    err_console.print(f"[red]{escape(error.user_message())}[/red]")


@contextmanager
def handle_errors(state: CLIState | None = None) -> Iterator[None]:
    """Turn cookctl errors into a message on stderr and the matching exit code."""
    try:
        yield
    except APIError as e:
        _report_api_error(e, state)
        raise typer.Exit(exit_code_for(e))
    except CookctlError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(exit_code_for(e))
