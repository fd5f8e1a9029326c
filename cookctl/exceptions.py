"""Custom exceptions raised by cookctl."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


class CookctlError(Exception):
    """Base exception for all cookctl specific failures."""


class UsageError(CookctlError):
    """Raised for malformed or missing CLI input, before any network call."""


class AuthMissingError(CookctlError):
    """Raised when no usable token can be resolved."""


class ConnectivityError(CookctlError):
    """Raised when the API cannot be reached or a request times out."""


class StorageError(CookctlError):
    """Raised when the credential or config file cannot be read or written."""


@dataclass
class FieldError:
    """Field-level validation detail returned by the API."""

    field: str
    message: str


@dataclass
class Problem:
    """Structured error body returned by the API."""

    code: str = ""
    message: str = ""
    details: list[FieldError] = field(default_factory=list)


class APIError(CookctlError):
    """Raised when the API returns a non-successful response."""

    def __init__(self, status_code: int, problem: Optional[Problem] = None, response: Optional[Any] = None):
        self.status_code = status_code
        self.problem = problem or Problem()
        self.response = response
        super().__init__(self.user_message())

    @property
    def code(self) -> str:
        return self.problem.code

    @property
    def message(self) -> str:
        return self.problem.message

    @property
    def details(self) -> list[FieldError]:
        return self.problem.details

    def user_message(self) -> str:
        """Return a CLI-friendly message built from the server's problem body."""
        if not self.problem.code:
            return f"request failed with status {self.status_code}"
        text = f"{self.problem.code}: {self.problem.message}"
        if self.problem.code != "validation_error":
            return text
        for detail in self.problem.details:
            text += f"\nfield={detail.field} message={detail.message}"
        return text
