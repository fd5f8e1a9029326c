"""Runtime state shared across CLI commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from cookctl.auth.credentials import CredentialStore, default_credentials_path
from cookctl.auth.resolver import TokenResolver
from cookctl.config import Config, load_config


@dataclass
class CLIState:
    """Object stored on :class:`typer.Context` for command access."""

    config: Config
    store: CredentialStore
    resolver: TokenResolver
    environ: Mapping[str, str]
    check_health: bool = True
    transport: Optional[httpx.BaseTransport] = None


def create_state(
    *,
    api_url: Optional[str] = None,
    output: Optional[str] = None,
    timeout: Optional[str] = None,
    debug: bool = False,
    skip_health_check: bool = False,
    environ: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> CLIState:
    """Load config once and wire the store and resolver for this invocation."""
    environ = os.environ if environ is None else environ
    config = load_config(environ=environ).with_overrides(
        api_url=api_url,
        timeout=timeout,
        output=output,
        debug=debug,
    )
    store = CredentialStore(default_credentials_path(environ))
    return CLIState(
        config=config,
        store=store,
        resolver=TokenResolver(store, config, environ),
        environ=environ,
        check_health=not skip_health_check,
        transport=transport,
    )


__all__ = ["CLIState", "create_state"]
