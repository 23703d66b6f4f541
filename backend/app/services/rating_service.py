"""Rating service — post-session ratings, cancellation ratings and credit reconciliation."""

import json
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.rating import Rating
from app.models.tutoring_session import TutoringSession, SessionStatus
from app.services import credit_service
from app.services.errors import BadRequestError, ForbiddenError
from app.services.session_service import conditional_update, get_session, lost_race

logger = logging.getLogger(__name__)


def _validate_score(score: int) -> None:
    if not 1 <= score <= 5:
        raise BadRequestError("Score must be between 1 and 5")


def _insert_rating(db: Session, rating: Rating) -> None:
    db.add(rating)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise BadRequestError("Already rated this session")


def submit_rating(
    db: Session,
    session_id: str,
    rater_id: str,
    target_id: str,
    score: int,
    comment: Optional[str] = None,
) -> tuple[Rating, bool]:
    """Rate the other party of a session awaiting ratings.

    Student ratings are public, tutor ratings are private. When this rating
    is the second one, the session closes and both profiles are credited.
    The CLOSED transition is conditional on both rated flags, so exactly one
    request can win it and the credit is paid once.

    Returns (rating, session_closed).
    """
    session = get_session(db, session_id)
    if session.status != SessionStatus.PENDING_RATING.value:
        raise BadRequestError("Session not ready for rating")
    if not session.is_party(rater_id):
        raise ForbiddenError("Access denied")
    if target_id == rater_id:
        raise BadRequestError("You cannot rate yourself.")
    if target_id != session.counterpart_of(rater_id):
        raise BadRequestError("You can only rate the other participant of this session")
    _validate_score(score)

    existing = (
        db.query(Rating)
        .filter(Rating.session_id == session_id, Rating.rater_id == rater_id)
        .first()
    )
    if existing:
        raise BadRequestError("Already rated this session")

    is_student = session.student_id == rater_id
    flag = "student_rated" if is_student else "tutor_rated"
    rating = Rating(
        session_id=session_id,
        rater_id=rater_id,
        target_id=target_id,
        score=score,
        comment=comment or None,
        visibility="public" if is_student else "private",
    )
    _insert_rating(db, rating)

    flagged = conditional_update(
        db,
        session_id,
        SessionStatus.PENDING_RATING.value,
        {flag: True},
        getattr(TutoringSession, flag).is_(False),
    )
    if not flagged:
        raise lost_race(db, session_id)

    closed = conditional_update(
        db,
        session_id,
        SessionStatus.PENDING_RATING.value,
        {"status": SessionStatus.CLOSED.value},
        TutoringSession.student_rated.is_(True),
        TutoringSession.tutor_rated.is_(True),
    )

    db.add(AuditLog(
        entity_type="session",
        entity_id=session_id,
        action="closed" if closed else "rated",
        actor_id=rater_id,
        new_data=json.dumps({
            flag: True,
            "rating_id": rating.id,
            "status": SessionStatus.CLOSED.value if closed else SessionStatus.PENDING_RATING.value,
        }),
    ))
    if closed:
        credit_service.award_session_credit(db, session)

    db.commit()
    db.refresh(rating)
    if closed:
        logger.info("Session %s closed after both ratings", session_id)
    else:
        logger.info("Session %s rated by %s; waiting for the other party", session_id, rater_id)
    return rating, closed


def rate_cancellation(
    db: Session,
    session_id: str,
    rater_id: str,
    score: int,
    comment: Optional[str] = None,
) -> Rating:
    """The party who did not cancel rates the one who did. Always public."""
    session = get_session(db, session_id)
    if session.status != SessionStatus.CANCELLED.value:
        raise BadRequestError("Session is not cancelled")
    if not session.cancelled_by:
        raise BadRequestError("No cancellation to rate")
    if session.cancelled_by == rater_id:
        raise ForbiddenError("Cannot rate your own cancellation")
    if not session.is_party(rater_id):
        raise ForbiddenError("Access denied")
    if session.cancellation_rated:
        raise BadRequestError("Cancellation already rated")
    _validate_score(score)

    rating = Rating(
        session_id=session_id,
        rater_id=rater_id,
        target_id=session.cancelled_by,
        score=score,
        comment=comment or None,
        visibility="public",
    )
    _insert_rating(db, rating)

    updated = conditional_update(
        db,
        session_id,
        SessionStatus.CANCELLED.value,
        {"cancellation_rated": True},
        TutoringSession.cancellation_rated.is_(False),
    )
    if not updated:
        raise lost_race(db, session_id)

    db.add(AuditLog(
        entity_type="session",
        entity_id=session_id,
        action="cancellation_rated",
        actor_id=rater_id,
        new_data=json.dumps({"rating_id": rating.id, "target_id": session.cancelled_by}),
    ))
    db.commit()
    db.refresh(rating)
    logger.info("Cancellation of session %s rated by %s", session_id, rater_id)
    return rating


def get_ratings_for_user(db: Session, user_id: str, visibility: Optional[str] = None) -> list[Rating]:
    """Ratings targeting a user, newest first, optionally filtered by visibility."""
    query = db.query(Rating).filter(Rating.target_id == user_id)
    if visibility:
        query = query.filter(Rating.visibility == visibility)
    return query.order_by(Rating.created_at.desc()).all()


def get_average_rating(db: Session, user_id: str) -> float:
    """Mean score over every rating targeting the user, private ones included.

    Search results pair this with a count of public ratings only.
    """
    avg = db.query(func.avg(Rating.score)).filter(Rating.target_id == user_id).scalar()
    return float(avg) if avg is not None else 0.0
