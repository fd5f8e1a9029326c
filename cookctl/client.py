"""Synchronous HTTP client for the Cooking App API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ._http import build_headers, handle_response, send
from .config import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, sanitize_base_url
from .exceptions import CookctlError
from .timestamps import format_timestamp, parse_timestamp


@dataclass
class CreatedToken:
    """A freshly minted personal access token, including its secret."""

    id: str
    name: str
    token: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Any) -> CreatedToken:
        if not isinstance(data, dict):
            raise CookctlError("decode response: expected a JSON object")
        created_at = None
        if data.get("created_at"):
            try:
                created_at = parse_timestamp(str(data["created_at"]))
            except ValueError as e:
                raise CookctlError(f"decode response: {e}") from e
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            token=str(data.get("token") or ""),
            created_at=created_at,
        )


def token_payload(name: str, expires_at: Optional[datetime] = None) -> dict[str, Any]:
    """Build the token-creation request body."""
    payload: dict[str, Any] = {"name": name}
    if expires_at is not None:
        payload["expires_at"] = format_timestamp(expires_at)
    return payload


def validate_base_url(url: str) -> str:
    """Return the sanitized URL, rejecting values without a scheme or host."""
    if not url or not url.strip():
        raise CookctlError("api url is required")
    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL as e:
        raise CookctlError(f"invalid api url: {url}") from e
    if not parsed.scheme or not parsed.host:
        raise CookctlError(f"invalid api url: {url}")
    return sanitize_base_url(url.strip())


class CookingClient:
    """Synchronous client for the Cooking App API.

    Example:
        >>> from cookctl import CookingClient
        >>> with CookingClient(token="pat_...", base_url="http://localhost:8080") as client:
        ...     print(client.me())

    The client binds one token to one base URL. Build it through
    :func:`cookctl.auth.gateway.build_client` so both come from the resolver.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Personal access token sent as a bearer credential. May be
                empty for unauthenticated calls such as ``health()``.
            base_url: API base URL (default: http://localhost:8080).
            timeout: Per-request timeout in seconds (default: 30).
            transport: Optional httpx transport, mainly for tests.
        """
        self._token = token or ""
        self._base_url = validate_base_url(base_url)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = send(
            self._client,
            method,
            f"{self._base_url}{path}",
            headers=build_headers(self._token),
            **kwargs,
        )
        return handle_response(response)

    def health(self) -> dict[str, Any]:
        """Check the API health endpoint (no authentication required)."""
        return self._request("GET", "/api/v1/healthz")

    def me(self) -> dict[str, Any]:
        """Return the user that owns the current token."""
        return self._request("GET", "/api/v1/auth/me")

    def list_tokens(self) -> list[dict[str, Any]]:
        """List personal access tokens for the current user."""
        return self._request("GET", "/api/v1/tokens") or []

    def create_token(self, name: str, expires_at: Optional[datetime] = None) -> CreatedToken:
        """Create a new personal access token using bearer authentication."""
        data = self._request("POST", "/api/v1/tokens", json=token_payload(name, expires_at))
        return CreatedToken.from_dict(data)

    def revoke_token(self, token_id: str) -> None:
        """Revoke a personal access token by id."""
        self._request("DELETE", f"/api/v1/tokens/{quote(token_id, safe='')}")

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> CookingClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
