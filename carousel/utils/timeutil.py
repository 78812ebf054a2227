"""Timestamp and duration helpers."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdwy])\s*$")

_DURATION_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "y": timedelta(days=365),
}


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. ``None`` and empty strings yield ``None``.

    Args:
        value: Timestamp string or datetime

    Returns:
        Optional[datetime]: Parsed timestamp

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_duration(value: Union[str, int, timedelta, None]) -> Optional[timedelta]:
    """
    Parse a duration such as ``90d``, ``12h`` or ``1y``.

    Integers are read as days.

    Args:
        value: Duration string, day count or timedelta

    Returns:
        Optional[timedelta]: Parsed duration, ``None`` when no value was given

    Raises:
        ValueError: If the duration cannot be parsed
    """
    if value is None or value == "":
        return None

    if isinstance(value, timedelta):
        return value

    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, int):
        return timedelta(days=value)

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r} (expected <number><unit>, unit one of s, m, h, d, w, y)")

    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime, reading naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_before(value: Optional[datetime], threshold: Optional[datetime]) -> bool:
    """True when both are given and ``value`` is strictly earlier than ``threshold``."""
    if value is None or threshold is None:
        return False
    return as_utc(value) < as_utc(threshold)
