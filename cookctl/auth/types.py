"""Typed return values for authentication operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .constants import TOKEN_ENV_VAR
from .credentials import Credential


class TokenSource(str, Enum):
    """Where the effective token came from."""

    ENV = "env"
    CREDENTIALS_FILE = "credentials-file"
    NONE = "none"


@dataclass
class ResolvedAuth:
    """Token and endpoint chosen for one invocation."""

    token: str
    source: TokenSource
    api_url: str
    credential: Optional[Credential] = None


@dataclass
class LoginResult:
    """Result of a successful login."""

    id: str
    name: str
    token: str
    created_at: Optional[datetime]
    expires_at: Optional[datetime]
    api_url: str


@dataclass
class LogoutResult:
    """Result of a logout, with or without remote revocation."""

    revoked: bool
    env_token_active: bool

    @property
    def message(self) -> str:
        text = "token revoked and credentials cleared" if self.revoked else "credentials cleared"
        if self.env_token_active:
            text += f"; {TOKEN_ENV_VAR} is still set"
        return text


@dataclass
class AuthStatus:
    """Current authentication status."""

    source: str
    token_present: bool
    masked_token: str
    api_url: str
    credentials_path: Optional[str] = None
    token_id: Optional[str] = None
    token_name: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
