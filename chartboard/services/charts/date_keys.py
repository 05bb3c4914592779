"""
Date Keys — Canonical calendar-day keys for raw series lookups.

Every insert into and lookup from a RawSeriesStore goes through to_key() so
two timestamps on the same UTC calendar day always collide.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Union

from chartboard.services.charts.errors import InvalidArgument

DateLike = Union[date, datetime, str]

_KEY_FORMAT = "%Y-%m-%d"


def _parse_iso(value: str) -> date:
    """Parse an ISO-8601 date or timestamp string (Supabase returns both)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_date(datetime.fromisoformat(text))
    except ValueError:
        raise InvalidArgument(f"Unparseable date: {value!r}")


def to_date(value: DateLike | None) -> date:
    """Normalize a date, datetime or ISO string to its UTC calendar date.

    Aware datetimes are converted to UTC first; naive datetimes are taken
    as already being UTC.
    """
    if value is None:
        raise InvalidArgument("Date is required")
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _parse_iso(value)
    raise InvalidArgument(f"Unsupported date value: {value!r}")


def to_key(value: DateLike | None) -> str:
    """Return the `YYYY-MM-DD` key for the UTC calendar day of `value`."""
    return to_date(value).strftime(_KEY_FORMAT)


def from_key(key: str) -> date:
    """Inverse of to_key()."""
    try:
        return datetime.strptime(key, _KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid date key: {key!r}")
