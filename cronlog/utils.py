"""
Timestamp helpers shared by the store and its filter clauses.

Stored timestamps are fixed-width ISO 8601 UTC strings with microseconds,
so lexical comparison in SQL equals chronological comparison.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def serialize_timestamp(dt: datetime) -> str:
    """Serialize a datetime to the fixed-width storage format."""
    return as_utc(dt).isoformat(timespec="microseconds")


def deserialize_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Deserialize a stored timestamp back to an aware UTC datetime."""
    if value is None:
        return None
    return as_utc(datetime.fromisoformat(value))
