"""Timestamp helpers.

Callers submit wall-clock times from venue forms; anything without an explicit
offset is read in the venue timezone. The store keeps UTC, and SQLite hands
values back naive, so reads go through ``as_utc``.
"""
from datetime import datetime, timezone
from typing import Any, Optional

import pytz

from eventflow.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values read back from the store."""
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def parse_timestamp(value: Any, tz_name: Optional[str] = None) -> Optional[datetime]:
    """Parse caller input into an aware UTC datetime.

    Returns None for empty input and raises ValueError for unparsable strings.
    Naive values are localized to ``tz_name`` (default: the venue timezone),
    which resolves DST correctly for Europe/London.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        tz = pytz.timezone(tz_name or settings.VENUE_TIMEZONE)
        parsed = tz.localize(parsed)
    return parsed.astimezone(pytz.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """JSON-safe ISO-8601 rendering in UTC."""
    if value is None:
        return None
    return as_utc(value).isoformat()
