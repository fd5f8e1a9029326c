"""Login, logout, revocation and status flows for cookctl.

All functions return typed results and never print directly (callers handle
presentation). Failures are raised as :class:`cookctl.exceptions.CookctlError`
subclasses; nothing is retried.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import httpx

from ..client import CookingClient
from ..exceptions import AuthMissingError, CookctlError, UsageError
from ..timestamps import parse_timestamp
from .constants import ERROR_EXPIRES_AT_FORMAT, ERROR_MISSING_TOKEN_ID, ERROR_NOTHING_TO_REVOKE
from .credentials import Credential, CredentialStore
from .gateway import ensure_healthy
from .resolver import TokenResolver, mask_token
from .session import SessionClient
from .types import AuthStatus, LoginResult, LogoutResult, TokenSource

logger = logging.getLogger(__name__)


def parse_expires_at(value: Optional[str]) -> Optional[datetime]:
    """Parse the --expires-at flag. Empty means the token never expires.

    Raises:
        UsageError: If the value is not an RFC 3339 timestamp.
    """
    if value is None or not value.strip():
        return None
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise UsageError(ERROR_EXPIRES_AT_FORMAT) from e


def check_api_health(api_url: str, *, timeout: float, transport: Optional[httpx.BaseTransport] = None) -> None:
    """Preflight an API URL before any session or token is involved."""
    with CookingClient(base_url=api_url, timeout=timeout, transport=transport) as client:
        ensure_healthy(client)


def run_login_flow(
    store: CredentialStore,
    api_url: str,
    username: str,
    password: str,
    *,
    token_name: str,
    expires_at: Optional[datetime] = None,
    timeout: float,
    check_health: bool = True,
    transport: Optional[httpx.BaseTransport] = None,
) -> LoginResult:
    """Exchange a username/password session for a PAT and persist it.

    Steps: health preflight, session login, CSRF capture, token mint,
    credential save, session logout. The session is closed on every exit path
    once it is open.

    Raises:
        UsageError: If username, password or token name is blank.
        ConnectivityError: If the API is unreachable.
        APIError: If the server rejects login or token creation.
        StorageError: If the credential cannot be written.
    """
    if not username.strip():
        raise UsageError("username is required")
    if not password:
        raise UsageError("password is required")
    if not token_name.strip():
        raise UsageError("token-name is required")

    if check_health:
        check_api_health(api_url, timeout=timeout, transport=transport)

    with SessionClient(api_url, timeout=timeout, transport=transport) as session:
        created = session.bootstrap_token(username.strip(), password, token_name.strip(), expires_at)

    if not created.token:
        raise CookctlError("token creation response did not include a token")

    store.save(
        Credential(
            token=created.token,
            token_id=created.id,
            token_name=created.name,
            created_at=created.created_at,
            expires_at=expires_at,
            api_url=session.base_url,
        )
    )
    logger.debug("stored token %s (%s) for %s", created.id, mask_token(created.token), session.base_url)

    return LoginResult(
        id=created.id,
        name=created.name,
        token=created.token,
        created_at=created.created_at,
        expires_at=expires_at,
        api_url=session.base_url,
    )


def save_token(store: CredentialStore, token: str, api_url: str) -> Credential:
    """Store a PAT obtained out of band (``cookctl auth set``)."""
    token = token.strip()
    if not token:
        raise UsageError("token is required (use --token or --token-stdin)")
    credential = Credential(token=token, api_url=api_url.strip())
    store.save(credential)
    return credential


def clear_local_credentials(store: CredentialStore, resolver: TokenResolver) -> LogoutResult:
    """Forget the stored token without contacting the server."""
    store.clear()
    return LogoutResult(revoked=False, env_token_active=bool(resolver.env_token()))


def revoke_stored_token(
    store: CredentialStore,
    resolver: TokenResolver,
    *,
    timeout: float,
    check_health: bool = True,
    transport: Optional[httpx.BaseTransport] = None,
) -> LogoutResult:
    """Revoke the stored token remotely, then clear it locally.

    Local credentials are only cleared after the server confirms revocation;
    on any failure they are left intact and the error is raised.

    Raises:
        AuthMissingError: If no token is stored.
        CookctlError: If the stored record has no token id.
        ConnectivityError / APIError: If the remote revocation fails.
    """
    credential = store.load()
    if credential is None:
        raise AuthMissingError(ERROR_NOTHING_TO_REVOKE)
    if not credential.token_id.strip():
        raise CookctlError(ERROR_MISSING_TOKEN_ID)

    api_url = resolver.api_url_for(credential)
    with CookingClient(credential.token, base_url=api_url, timeout=timeout, transport=transport) as client:
        if check_health:
            ensure_healthy(client)
        client.revoke_token(credential.token_id.strip())

    store.clear()
    return LogoutResult(revoked=True, env_token_active=bool(resolver.env_token()))


def get_auth_status(store: CredentialStore, resolver: TokenResolver) -> AuthStatus:
    """Describe the effective token without revealing it.

    Precedence matches TokenResolver.resolve(): env var > credentials file.
    """
    resolved = resolver.resolve()
    status = AuthStatus(
        source=resolved.source.value,
        token_present=bool(resolved.token),
        masked_token=mask_token(resolved.token),
        api_url=resolved.api_url,
        credentials_path=str(store.path),
    )
    if resolved.source is TokenSource.CREDENTIALS_FILE and resolved.credential is not None:
        status.token_id = resolved.credential.token_id or None
        status.token_name = resolved.credential.token_name or None
        status.created_at = resolved.credential.created_at
        status.expires_at = resolved.credential.expires_at
    return status
