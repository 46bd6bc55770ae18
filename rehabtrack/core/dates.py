"""Date and time helpers shared by entity models."""

from datetime import UTC, date, datetime
from typing import Any


def utcnow() -> datetime:
    """Current UTC-aware timestamp."""
    return datetime.now(UTC)


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def to_date(value: Any) -> date | None:
    """Normalize a Cassandra DATE value (``cassandra.util.Date``) to ``date``."""
    if value is None or isinstance(value, date):
        return value
    return value.date()
