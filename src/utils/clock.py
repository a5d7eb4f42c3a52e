"""Timestamp helpers.

Every stored timestamp is a UTC-aware datetime. SQLite and MongoDB both hand
back naive datetimes, so values read from a backing go through ``ensure_utc``.
"""

from datetime import datetime, tzinfo
from typing import Optional

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return the named IANA zone, or None for the server's local zone."""
    if name:
        return pytz.timezone(name)
    return None


def month_start(now: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """First instant of the calendar month containing ``now``.

    With ``tz`` None the server's local zone is used, and its offset is looked
    up at the month start itself rather than at ``now``, so a DST change
    inside the month does not shift the boundary.
    """
    if tz is None:
        local_now = now.astimezone()
        return datetime(local_now.year, local_now.month, 1).astimezone()
    local_now = now.astimezone(tz)
    naive_start = datetime(local_now.year, local_now.month, 1)
    if hasattr(tz, "localize"):
        return tz.localize(naive_start)
    return naive_start.replace(tzinfo=tz)
