"""Timestamp helpers.

All persisted timestamps are ISO-8601 strings in UTC.
"""

from datetime import datetime

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def to_iso(value: datetime) -> str:
    """Serialize a datetime as a UTC ISO string; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat()


def parse_iso(value: str) -> datetime:
    """Parse a stored ISO string back into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.utc)
