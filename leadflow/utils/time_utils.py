"""
Time Utilities
Shared helpers so every domain comparison uses timezone-aware UTC datetimes
"""
from datetime import datetime
from typing import Optional

import pytz

# Missing timestamps sort as "very old"
EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are interpreted as UTC (the storage layer persists UTC
    without tzinfo); aware datetimes are converted.

    Args:
        value: Datetime to normalize (None passes through)

    Returns:
        Aware UTC datetime or None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Return `now` normalized to UTC, defaulting to the current time."""
    if now is None:
        return utc_now()
    return ensure_utc(now)


def timestamp_or_epoch(value: Optional[datetime]) -> datetime:
    """Sort key helper: missing values are treated as the epoch."""
    return ensure_utc(value) if value is not None else EPOCH
