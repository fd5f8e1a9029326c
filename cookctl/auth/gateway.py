"""Binds a resolved token and URL into a ready-to-use API client."""

from __future__ import annotations

from typing import Optional

import httpx

from ..client import CookingClient
from ..config import DEFAULT_TIMEOUT_SECONDS
from ..exceptions import AuthMissingError, CookctlError, ConnectivityError
from .constants import ERROR_NOT_AUTHENTICATED
from .types import ResolvedAuth


def build_client(
    resolved: ResolvedAuth,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    require_token: bool = True,
    transport: Optional[httpx.BaseTransport] = None,
) -> CookingClient:
    """Build a CookingClient for the resolved token and URL. No network I/O.

    Raises:
        AuthMissingError: If a token is required and none was resolved.
        CookctlError: If the API URL is invalid.
    """
    if require_token and not resolved.token:
        raise AuthMissingError(ERROR_NOT_AUTHENTICATED)
    return CookingClient(resolved.token, base_url=resolved.api_url, timeout=timeout, transport=transport)


def ensure_healthy(client: CookingClient) -> None:
    """Preflight the API health endpoint.

    Raises:
        ConnectivityError: If the API cannot be reached or reports an error.
    """
    try:
        client.health()
    except CookctlError as e:
        raise ConnectivityError(f"unable to reach API at {client.base_url}: {e}") from e
