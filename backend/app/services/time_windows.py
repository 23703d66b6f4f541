"""Scheduling guard windows relative to the current instant.

All comparisons are on absolute instants. Naive datetimes (what SQLite hands
back) are read as UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime for either a naive (UTC) or aware input."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_storage(dt: datetime) -> datetime:
    """Naive UTC, the form session times are persisted in."""
    return ensure_utc(dt).replace(tzinfo=None)


def is_within_hours(target: datetime, hours: float, now: Optional[datetime] = None) -> bool:
    """True if ``target`` falls before ``now + hours``."""
    now = ensure_utc(now) if now is not None else utcnow()
    return ensure_utc(target) < now + timedelta(hours=hours)


def is_within_four_hours(target: datetime, now: Optional[datetime] = None) -> bool:
    """Booking guard: new sessions may not start this soon."""
    return is_within_hours(target, settings.BOOKING_LEAD_HOURS, now)


def is_within_twelve_hours(target: datetime, now: Optional[datetime] = None) -> bool:
    """Cancellation guard: sessions this close to starting cannot be cancelled."""
    return is_within_hours(target, settings.CANCELLATION_LEAD_HOURS, now)
