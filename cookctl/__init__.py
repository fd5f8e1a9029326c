"""cookctl - command-line client for the Cooking App API."""

from importlib.metadata import PackageNotFoundError, version

from .client import CookingClient, CreatedToken
from .exceptions import (
    APIError,
    AuthMissingError,
    ConnectivityError,
    CookctlError,
    StorageError,
    UsageError,
)

__all__ = [
    "CookingClient",
    "CreatedToken",
    "CookctlError",
    "UsageError",
    "AuthMissingError",
    "ConnectivityError",
    "StorageError",
    "APIError",
]

try:
    __version__ = version("cookctl")
except PackageNotFoundError:
    __version__ = "0.1.0"
