from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator, Optional

import pytz


def utc_now() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now(pytz.UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def to_db(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for MySQL DATETIME columns."""
    if value is None:
        return None
    return as_utc(value).replace(tzinfo=None)


def from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return as_utc(value)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
