import os
from datetime import date, datetime
from typing import Optional

import pytz

# Calendar dates ("today", opened-at defaults) are taken in this zone.
# Instants are always stored in UTC.
APP_TIMEZONE = pytz.timezone(os.getenv("APP_TIMEZONE", "UTC"))


def utcnow() -> datetime:
    return datetime.now(pytz.utc)


def today() -> date:
    return utcnow().astimezone(APP_TIMEZONE).date()


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, never negative."""
    delta = ensure_aware(end) - ensure_aware(start)
    return max(0, int(delta.total_seconds() // 60))


def days_since(value, reference: Optional[datetime] = None) -> Optional[int]:
    """Whole days elapsed since a date or datetime, never negative."""
    if value is None:
        return None
    reference = reference or utcnow()
    if isinstance(value, datetime):
        delta = ensure_aware(reference) - ensure_aware(value)
        return max(0, delta.days)
    return max(0, (ensure_aware(reference).astimezone(APP_TIMEZONE).date() - value).days)
