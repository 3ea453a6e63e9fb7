"""UTC time helpers."""

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes read back from the database as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def is_past(dt: datetime | None) -> bool:
    """True when ``dt`` is set and already behind the current time."""
    return dt is not None and as_utc(dt) < now_utc()
