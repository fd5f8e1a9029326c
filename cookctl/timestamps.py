"""RFC 3339 timestamp helpers shared by the client and the credential store."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

# fromisoformat only keeps microseconds; servers may send nanoseconds.
_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. The UTC offset is mandatory.

    Raises:
        ValueError: If the value is not a valid timestamp or has no offset.
    """
    text = _EXTRA_FRACTION_RE.sub(r"\1", value.strip())
    if "T" not in text and "t" not in text:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a timezone-aware datetime as RFC 3339, using ``Z`` for UTC."""
    text = value.isoformat()
    if value.utcoffset() == timedelta(0) and text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text
