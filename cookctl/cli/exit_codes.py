"""Exit-code constants used by the CLI layer.

Scripts rely on these to tell "not logged in" apart from other failures, so
every exit path goes through :func:`exit_code_for`.
"""

from __future__ import annotations

from cookctl.exceptions import APIError, AuthMissingError, CookctlError, UsageError

SUCCESS: int = 0
GENERAL_ERROR: int = 1
USAGE_ERROR: int = 2
AUTH_ERROR: int = 3
NOT_FOUND: int = 4
CONFLICT: int = 5
RATE_LIMITED: int = 6
FORBIDDEN: int = 7
TOO_LARGE: int = 8

_STATUS_EXIT_CODES = {
    401: AUTH_ERROR,
    403: FORBIDDEN,
    404: NOT_FOUND,
    409: CONFLICT,
    413: TOO_LARGE,
    429: RATE_LIMITED,
}


def exit_code_for(error: CookctlError) -> int:
    """Map a cookctl error to its process exit code."""
    if isinstance(error, UsageError):
        return USAGE_ERROR
    if isinstance(error, AuthMissingError):
        return AUTH_ERROR
    if isinstance(error, APIError):
        return _STATUS_EXIT_CODES.get(error.status_code, GENERAL_ERROR)
    return GENERAL_ERROR
