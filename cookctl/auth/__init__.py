"""Authentication utilities for cookctl.

Lightweight imports (credentials, resolver, types) are eager. The login and
revocation flows are lazy so that commands which only resolve a token do not
import the session client.
"""

from .credentials import Credential, CredentialStore, default_credentials_path
from .gateway import build_client, ensure_healthy
from .resolver import TokenResolver, mask_token
from .types import AuthStatus, LoginResult, LogoutResult, ResolvedAuth, TokenSource

_LAZY_FLOW_NAMES = (
    "clear_local_credentials",
    "get_auth_status",
    "revoke_stored_token",
    "run_login_flow",
    "save_token",
)


def __getattr__(name: str):
    if name in _LAZY_FLOW_NAMES:
        from . import flow

        return getattr(flow, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "build_client",
    "clear_local_credentials",
    "default_credentials_path",
    "ensure_healthy",
    "get_auth_status",
    "mask_token",
    "revoke_stored_token",
    "run_login_flow",
    "save_token",
    "AuthStatus",
    "Credential",
    "CredentialStore",
    "LoginResult",
    "LogoutResult",
    "ResolvedAuth",
    "TokenResolver",
    "TokenSource",
]
