"""Credential storage for cookctl.

Stores the personal access token in ~/.config/cookctl/credentials.json with
restrictive permissions, the same way ~/.aws/credentials or ~/.npmrc do.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import get_config_dir
from ..exceptions import StorageError
from ..timestamps import format_timestamp, parse_timestamp
from .constants import CREDENTIALS_FILE


@dataclass
class Credential:
    """A persisted personal access token and its metadata."""

    token: str
    token_id: str = ""
    token_name: str = ""
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    # The endpoint this token was minted against.
    api_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"token": self.token}
        if self.token_id:
            data["token_id"] = self.token_id
        if self.token_name:
            data["token_name"] = self.token_name
        if self.created_at is not None:
            data["created_at"] = format_timestamp(self.created_at)
        if self.expires_at is not None:
            data["expires_at"] = format_timestamp(self.expires_at)
        if self.api_url:
            data["api_url"] = self.api_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credential:
        """Build a Credential from its JSON form.

        Raises:
            ValueError: If a field has the wrong type or a timestamp is invalid.
        """
        for key in ("token", "token_id", "token_name", "api_url"):
            if key in data and data[key] is not None and not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string")
        return cls(
            token=data.get("token") or "",
            token_id=data.get("token_id") or "",
            token_name=data.get("token_name") or "",
            created_at=_optional_timestamp(data, "created_at"),
            expires_at=_optional_timestamp(data, "expires_at"),
            api_url=data.get("api_url") or "",
        )


def _optional_timestamp(data: dict[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a timestamp string")
    return parse_timestamp(value)


def default_credentials_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    return get_config_dir(environ) / CREDENTIALS_FILE


class CredentialStore:
    """Reads and writes a single Credential record on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Credential]:
        """Load the stored credential.

        Returns None if the file doesn't exist or holds an empty token.
        A file that exists but cannot be parsed raises StorageError.
        """
        try:
            raw = self._path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"read credentials: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"parse credentials: {e}") from e
        if not isinstance(data, dict):
            raise StorageError("parse credentials: expected a JSON object")

        try:
            credential = Credential.from_dict(data)
        except ValueError as e:
            raise StorageError(f"parse credentials: {e}") from e

        if not credential.token.strip():
            return None
        return credential

    def save(self, credential: Credential) -> None:
        """Save the credential with atomic write and restrictive permissions.

        - Directory: 0700 (owner read/write/execute only)
        - File: 0600 (owner read/write only)
        - Atomic: writes to temp file in same dir, then os.replace()
        """
        if not credential.token.strip():
            raise ValueError("token is required")
        for value in (credential.created_at, credential.expires_at):
            if value is not None and value.utcoffset() is None:
                raise ValueError("timestamps must be timezone-aware")

        config_dir = self._path.parent
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(config_dir, 0o700)
        except OSError as e:
            raise StorageError(f"create credentials dir: {e}") from e

        content = json.dumps(credential.to_dict(), indent=2)

        # Atomic write: temp file in same directory, then rename
        try:
            fd, tmp_path = tempfile.mkstemp(dir=config_dir, prefix=".credentials_", suffix=".tmp")
        except OSError as e:
            raise StorageError(f"write credentials: {e}") from e
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except BaseException as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            if isinstance(e, OSError):
                raise StorageError(f"write credentials: {e}") from e
            raise

    def clear(self) -> None:
        """Delete the credentials file if it exists."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"remove credentials: {e}") from e
