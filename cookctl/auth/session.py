"""Session-cookie client used to bootstrap personal access tokens.

The login protocol is linear: open a session with username/password, read the
CSRF cookie, mint a PAT with the session cookie plus the CSRF header, then
close the session. Once a session is open it is always closed, whether or not
the mint succeeded. Closing is best-effort and never fails the bootstrap.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import httpx

from .._http import build_headers, handle_response, send
from ..client import CreatedToken, token_payload, validate_base_url
from ..config import DEFAULT_TIMEOUT_SECONDS
from ..exceptions import CookctlError
from .constants import (
    CSRF_COOKIE_SUFFIX,
    ERROR_CSRF_NOT_FOUND,
    LOGIN_ENDPOINT,
    LOGOUT_ENDPOINT,
    TOKENS_ENDPOINT,
)

logger = logging.getLogger(__name__)


class SessionClient:
    """Manages session-cookie requests for bootstrapping PATs."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = validate_base_url(base_url)
        # The client's cookie jar carries the session between requests.
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _post(self, path: str, *, csrf_token: Optional[str] = None, json: Any = None) -> Any:
        response = send(
            self._client,
            "POST",
            f"{self._base_url}{path}",
            headers=build_headers(csrf_token=csrf_token),
            json=json,
        )
        return handle_response(response)

    def login(self, username: str, password: str) -> None:
        """Open a session. The server answers with session and CSRF cookies."""
        self._post(LOGIN_ENDPOINT, json={"username": username, "password": password})

    def csrf_token(self) -> str:
        """Return the CSRF value from the first non-empty ``*_csrf`` cookie."""
        for cookie in self._client.cookies.jar:
            if cookie.name.endswith(CSRF_COOKIE_SUFFIX) and cookie.value:
                return cookie.value
        raise CookctlError(ERROR_CSRF_NOT_FOUND)

    def create_token(self, csrf_token: str, name: str, expires_at: Optional[datetime] = None) -> CreatedToken:
        """Mint a PAT, authenticated by the session cookie and CSRF header."""
        data = self._post(TOKENS_ENDPOINT, csrf_token=csrf_token, json=token_payload(name, expires_at))
        return CreatedToken.from_dict(data)

    def logout(self, csrf_token: Optional[str] = None) -> None:
        self._post(LOGOUT_ENDPOINT, csrf_token=csrf_token)

    def _close_session(self, csrf_token: Optional[str]) -> None:
        try:
            self.logout(csrf_token)
        except CookctlError as e:
            logger.warning("session logout failed: %s", e)

    @contextmanager
    def session(self, username: str, password: str) -> Iterator[str]:
        """Open a session and yield its CSRF value; always close it on exit."""
        self.login(username, password)
        csrf_token: Optional[str] = None
        try:
            csrf_token = self.csrf_token()
            yield csrf_token
        finally:
            self._close_session(csrf_token)

    def bootstrap_token(
        self,
        username: str,
        password: str,
        name: str,
        expires_at: Optional[datetime] = None,
    ) -> CreatedToken:
        """Log in with a session cookie, create a PAT, and log out."""
        with self.session(username, password) as csrf_token:
            return self.create_token(csrf_token, name, expires_at)

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> SessionClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
