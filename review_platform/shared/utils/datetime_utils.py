"""Datetime utilities for timezone-aware audit stamps."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone info.

    Used for the creation and modification stamps on uploads and
    submissions instead of the naive ``datetime.utcnow()``.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC.

    SQLite hands timestamps back without tzinfo, so values read from the
    catalog tables go through this before reaching callers.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
