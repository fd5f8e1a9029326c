"""Configuration loading for cookctl.

Values are layered: compiled defaults, then ``config.toml`` in the cookctl
config directory, then ``COOKING_*`` environment variables. CLI flags are
applied last by the CLI itself.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from .exceptions import StorageError, UsageError

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 30.0

OUTPUT_TABLE = "table"
OUTPUT_JSON = "json"
OUTPUT_FORMATS = (OUTPUT_TABLE, OUTPUT_JSON)

CONFIG_DIR_ENV = "COOKCTL_CONFIG_DIR"
CONFIG_FILE = "config.toml"

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


@dataclass(frozen=True)
class Config:
    """Runtime configuration for a single cookctl invocation."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    output: str = OUTPUT_TABLE
    debug: bool = False
    # True only when --api-url was passed on this invocation.
    api_url_override: bool = False

    def with_overrides(
        self,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[str] = None,
        output: Optional[str] = None,
        debug: Optional[bool] = None,
    ) -> Config:
        """Return a copy with explicit CLI flag values applied."""
        cfg = self
        if api_url is not None:
            cfg = replace(cfg, api_url=sanitize_base_url(api_url.strip()), api_url_override=True)
        if timeout is not None:
            cfg = replace(cfg, timeout=parse_timeout(timeout))
        if output is not None:
            cfg = replace(cfg, output=parse_output(output))
        if debug:
            cfg = replace(cfg, debug=True)
        return cfg


def sanitize_base_url(url: str) -> str:
    """Ensure the base URL never ends with a trailing slash."""

    return url.rstrip("/")


def get_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    override = environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override)
    return Path.home() / ".config" / "cookctl"


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    return get_config_dir(environ) / CONFIG_FILE


def parse_output(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in OUTPUT_FORMATS:
        raise UsageError(f"invalid output format: {value!r}")
    return normalized


def parse_timeout(value: Any) -> float:
    """Parse a timeout given as seconds or a duration like ``500ms``/``30s``/``2m``."""
    if isinstance(value, bool):
        raise UsageError(f"invalid timeout: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise UsageError(f"invalid timeout: {value!r}")
        seconds = float(match.group(1)) * _DURATION_UNITS[match.group(2) or "s"]
    if seconds <= 0:
        raise UsageError("timeout must be positive")
    return seconds


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except OSError as e:
        raise StorageError(f"read config file: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise StorageError(f"parse config file: {e}") from e


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Load configuration from defaults, the config file, and the environment."""
    environ = os.environ if environ is None else environ
    cfg = Config()

    data = _read_config_file(path or get_config_path(environ))
    if data.get("api_url"):
        cfg = replace(cfg, api_url=sanitize_base_url(str(data["api_url"]).strip()))
    if data.get("output"):
        cfg = replace(cfg, output=parse_output(str(data["output"])))
    if data.get("timeout"):
        cfg = replace(cfg, timeout=parse_timeout(data["timeout"]))
    if "debug" in data:
        cfg = replace(cfg, debug=bool(data["debug"]))

    api_url = environ.get("COOKING_API_URL", "").strip()
    if api_url:
        cfg = replace(cfg, api_url=sanitize_base_url(api_url))
    output = environ.get("COOKING_OUTPUT", "").strip()
    if output:
        cfg = replace(cfg, output=parse_output(output))
    timeout = environ.get("COOKING_TIMEOUT", "").strip()
    if timeout:
        try:
            cfg = replace(cfg, timeout=parse_timeout(timeout))
        except UsageError as e:
            raise UsageError(f"invalid COOKING_TIMEOUT: {e}") from e

    return cfg
