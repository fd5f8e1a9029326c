"""Token and endpoint resolution.

Token precedence: COOKING_PAT env var > credentials file > none.
Endpoint precedence is independent: explicit --api-url > the URL stored with
a credentials-file token > configured default. A token minted against one
server is never sent to another unless the caller overrides explicitly.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from ..config import Config
from .constants import MASK_PLACEHOLDER, MASK_VISIBLE_SUFFIX, TOKEN_ENV_VAR
from .credentials import Credential, CredentialStore
from .types import ResolvedAuth, TokenSource


def mask_token(token: str) -> str:
    """Return a display-safe form of a token. Never the raw value."""
    if not token:
        return ""
    if len(token) <= MASK_VISIBLE_SUFFIX:
        return MASK_PLACEHOLDER
    return MASK_PLACEHOLDER + token[-MASK_VISIBLE_SUFFIX:]


class TokenResolver:
    """Decides the effective token and API URL for one invocation."""

    def __init__(
        self,
        store: CredentialStore,
        config: Config,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._store = store
        self._config = config
        self._environ = os.environ if environ is None else environ

    @property
    def config(self) -> Config:
        return self._config

    def env_token(self) -> str:
        return self._environ.get(TOKEN_ENV_VAR, "").strip()

    def api_url_for(self, credential: Optional[Credential]) -> str:
        """Resolve the API URL to use with a stored credential (or none)."""
        if self._config.api_url_override:
            return self._config.api_url
        if credential is not None and credential.api_url.strip():
            return credential.api_url.strip()
        return self._config.api_url

    def resolve(self) -> ResolvedAuth:
        """Resolve the token and API URL.

        Raises:
            StorageError: If the credentials file exists but cannot be read.
        """
        token = self.env_token()
        if token:
            return ResolvedAuth(token=token, source=TokenSource.ENV, api_url=self._config.api_url)

        credential = self._store.load()
        if credential is not None:
            return ResolvedAuth(
                token=credential.token.strip(),
                source=TokenSource.CREDENTIALS_FILE,
                api_url=self.api_url_for(credential),
                credential=credential,
            )

        return ResolvedAuth(token="", source=TokenSource.NONE, api_url=self._config.api_url)
