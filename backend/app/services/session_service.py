"""Session service — booking, confirmation, cancellation and completion.

Every status change is written as a conditional update
(``UPDATE sessions ... WHERE id = :id AND status = :expected``). If the row
count comes back zero, another request changed the session after we read it,
and the action is rejected instead of overwriting that change.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.tutoring_session import TutoringSession, SessionStatus, ACTIVE_STATUSES
from app.models.user import User
from app.services import conflicts, time_windows
from app.services.errors import BadRequestError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def _audit(db: Session, session_id: str, action: str, actor_id: str, old: Optional[dict] = None, new: Optional[dict] = None) -> None:
    db.add(AuditLog(
        entity_type="session",
        entity_id=session_id,
        action=action,
        actor_id=actor_id,
        old_data=json.dumps(old) if old is not None else None,
        new_data=json.dumps(new) if new is not None else None,
    ))


def conditional_update(db: Session, session_id: str, expected_status: str, values: dict, *criteria) -> bool:
    """Apply ``values`` only if the session is still in ``expected_status``.

    Extra SQL ``criteria`` narrow the guard further. Returns True when the row
    was updated.
    """
    values = {**values, "updated_at": datetime.now(timezone.utc)}
    count = (
        db.query(TutoringSession)
        .filter(TutoringSession.id == session_id, TutoringSession.status == expected_status, *criteria)
        .update(values, synchronize_session=False)
    )
    return count == 1


def lost_race(db: Session, session_id: str) -> BadRequestError:
    """Roll back and build the error for a guard that no longer holds."""
    db.rollback()
    logger.info("Session %s changed concurrently; rejecting stale action", session_id)
    return BadRequestError("Session was updated by another request. Please refresh and try again.")


def get_session(db: Session, session_id: str) -> TutoringSession:
    session = db.query(TutoringSession).filter(TutoringSession.id == session_id).first()
    if not session:
        raise NotFoundError("Session not found")
    return session


def get_session_for_party(db: Session, session_id: str, user_id: str) -> TutoringSession:
    """Fetch a session the user takes part in."""
    session = get_session(db, session_id)
    if not session.is_party(user_id):
        raise ForbiddenError("Access denied")
    return session


def list_user_sessions(db: Session, user_id: str) -> list[TutoringSession]:
    """All sessions the user is student or tutor of, newest first."""
    return (
        db.query(TutoringSession)
        .filter((TutoringSession.student_id == user_id) | (TutoringSession.tutor_id == user_id))
        .order_by(TutoringSession.created_at.desc())
        .all()
    )


def count_closed_sessions(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(TutoringSession.id))
        .filter(
            (TutoringSession.student_id == user_id) | (TutoringSession.tutor_id == user_id),
            TutoringSession.status == SessionStatus.CLOSED.value,
        )
        .scalar()
    ) or 0


def create_session(
    db: Session,
    student_id: str,
    tutor_id: str,
    course: str,
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None,
) -> TutoringSession:
    """Book a new session in PENDING status.

    Guards, in order:
    1. The student is not booking themself
    2. The tutor exists
    3. start_time < end_time
    4. The session does not start within the booking lead window
    5. No PENDING/CONFIRMED session of the tutor overlaps [start_time, end_time)
    """
    if student_id == tutor_id:
        raise BadRequestError("You cannot book a session with yourself.")

    # Lock the tutor row so concurrent bookings for the same tutor serialize
    tutor = db.query(User).filter(User.id == tutor_id).with_for_update().first()
    if not tutor:
        raise NotFoundError("Tutor not found")

    if not course or not course.strip():
        raise BadRequestError("Course is required")

    if time_windows.ensure_utc(start_time) >= time_windows.ensure_utc(end_time):
        raise BadRequestError("Session must end after it starts")

    if time_windows.is_within_four_hours(start_time, now):
        raise BadRequestError("This time slot is within 4 hours. Please pick a later slot.")

    tutor_sessions = (
        db.query(TutoringSession)
        .filter(TutoringSession.tutor_id == tutor_id, TutoringSession.status.in_(ACTIVE_STATUSES))
        .all()
    )
    clash = conflicts.find_conflict(tutor_sessions, start_time, end_time)
    if clash is not None:
        logger.info("Booking rejected: tutor %s already has session %s in that slot", tutor_id, clash.id)
        raise BadRequestError(
            "This time slot is no longer available. The tutor has another session scheduled."
        )

    session = TutoringSession(
        student_id=student_id,
        tutor_id=tutor_id,
        course=course.strip(),
        start_time=time_windows.to_storage(start_time),
        end_time=time_windows.to_storage(end_time),
        status=SessionStatus.PENDING.value,
    )
    db.add(session)
    db.flush()

    _audit(db, session.id, "created", student_id, new={
        "status": SessionStatus.PENDING.value,
        "tutor_id": tutor_id,
        "course": session.course,
        "start_time": session.start_time.isoformat(),
        "end_time": session.end_time.isoformat(),
    })
    db.commit()
    db.refresh(session)
    logger.info("Session %s booked by student %s with tutor %s", session.id, student_id, tutor_id)
    return session


def confirm_session(db: Session, session_id: str, actor_id: str) -> TutoringSession:
    """Tutor accepts a PENDING booking."""
    session = get_session(db, session_id)
    if session.tutor_id != actor_id:
        raise ForbiddenError("Only the tutor can confirm this session")
    if session.status != SessionStatus.PENDING.value:
        raise BadRequestError("Session already processed")

    if not conditional_update(db, session_id, SessionStatus.PENDING.value, {"status": SessionStatus.CONFIRMED.value}):
        raise lost_race(db, session_id)

    _audit(db, session_id, "confirmed", actor_id,
           old={"status": SessionStatus.PENDING.value},
           new={"status": SessionStatus.CONFIRMED.value})
    db.commit()
    db.refresh(session)
    logger.info("Session %s confirmed by tutor %s", session_id, actor_id)
    return session


def cancel_session(
    db: Session,
    session_id: str,
    actor_id: str,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TutoringSession:
    """Either party cancels a PENDING or CONFIRMED session outside the cancellation window."""
    session = get_session(db, session_id)
    if not session.is_party(actor_id):
        raise ForbiddenError("Access denied")
    if session.status not in ACTIVE_STATUSES:
        raise BadRequestError(f"Cannot cancel a session in status '{session.status}'")
    if time_windows.is_within_twelve_hours(session.start_time, now):
        raise BadRequestError(
            "Cannot cancel within 12 hours. Please coordinate with your partner directly."
        )

    old_status = session.status
    updated = conditional_update(db, session_id, old_status, {
        "status": SessionStatus.CANCELLED.value,
        "cancelled": True,
        "cancelled_by": actor_id,
        "cancel_reason": reason or None,
    })
    if not updated:
        raise lost_race(db, session_id)

    _audit(db, session_id, "cancelled", actor_id,
           old={"status": old_status},
           new={"status": SessionStatus.CANCELLED.value, "reason": reason or None})
    db.commit()
    db.refresh(session)
    logger.info("Session %s cancelled by %s", session_id, actor_id)
    return session


def mark_complete(
    db: Session,
    session_id: str,
    actor_id: str,
    now: Optional[datetime] = None,
) -> TutoringSession:
    """Record that the actor considers the session done.

    Only the actor's own completion flag is set, and it is never cleared. Once
    both flags are set the session moves to PENDING_RATING. A party repeating
    the call after that is a no-op.

    One-sided completion leaves the session CONFIRMED; nothing moves it to
    DISPUTED automatically.
    """
    session = get_session(db, session_id)
    if not session.is_party(actor_id):
        raise ForbiddenError("Access denied")

    is_student = session.student_id == actor_id
    flag = "student_completed" if is_student else "tutor_completed"

    if session.status == SessionStatus.PENDING_RATING.value and getattr(session, flag):
        return session
    if session.status != SessionStatus.CONFIRMED.value:
        raise BadRequestError("Only confirmed sessions can be marked complete")

    current = time_windows.ensure_utc(now) if now is not None else time_windows.utcnow()
    if current < time_windows.ensure_utc(session.start_time):
        raise BadRequestError(
            "Cannot mark session as complete before it starts. This prevents fraudulent activity."
        )

    if not conditional_update(db, session_id, SessionStatus.CONFIRMED.value, {flag: True}):
        raise lost_race(db, session_id)

    both_completed = conditional_update(
        db,
        session_id,
        SessionStatus.CONFIRMED.value,
        {"status": SessionStatus.PENDING_RATING.value},
        TutoringSession.student_completed.is_(True),
        TutoringSession.tutor_completed.is_(True),
    )

    _audit(db, session_id, "completed", actor_id, new={
        flag: True,
        "status": SessionStatus.PENDING_RATING.value if both_completed else SessionStatus.CONFIRMED.value,
    })
    db.commit()
    db.refresh(session)
    if both_completed:
        logger.info("Session %s completed by both parties; awaiting ratings", session_id)
    else:
        logger.info("Session %s marked complete by %s; waiting for the other party", session_id, actor_id)
    return session
