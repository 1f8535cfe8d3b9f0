from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime read back from the database to aware UTC.

    SQLite drops tzinfo on DateTime(timezone=True) columns, PostgreSQL keeps it.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """floor((end - start) / 86400s)"""
    elapsed = (as_utc(end) - as_utc(start)).total_seconds()
    return int(elapsed // SECONDS_PER_DAY)


def hours_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600
