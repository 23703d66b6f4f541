"""Tutor calendar conflict detection."""

from datetime import datetime
from typing import Iterable, Optional

from app.models.tutoring_session import TutoringSession, ACTIVE_STATUSES
from app.services.time_windows import ensure_utc


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap. Touching endpoints (end == start) do not overlap."""
    return ensure_utc(start_a) < ensure_utc(end_b) and ensure_utc(end_a) > ensure_utc(start_b)


def find_conflict(
    existing: Iterable[TutoringSession],
    start: datetime,
    end: datetime,
) -> Optional[TutoringSession]:
    """Return the first session holding a slot that overlaps [start, end), if any.

    Only PENDING and CONFIRMED sessions hold a slot; anything else in
    ``existing`` is skipped. A tutor has few sessions, so a linear scan is enough.
    """
    for session in existing:
        if session.status not in ACTIVE_STATUSES:
            continue
        if intervals_overlap(start, end, session.start_time, session.end_time):
            return session
    return None
