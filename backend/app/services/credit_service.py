"""Credit service — manages profile credit points."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.profile import Profile
from app.models.tutoring_session import TutoringSession

logger = logging.getLogger(__name__)


def award_credit_points(db: Session, user_id: str, role: str, amount: int, reason: str) -> Optional[int]:
    """Add ``amount`` points to the user's profile for ``role``.

    The increment is done in SQL so concurrent awards cannot lose an update.
    Returns the new balance, or None when the user has no profile for that
    role. Does not commit; the caller owns the transaction.
    """
    count = (
        db.query(Profile)
        .filter(Profile.user_id == user_id, Profile.user_role == role)
        .update({Profile.credit_points: Profile.credit_points + amount}, synchronize_session=False)
    )
    if count == 0:
        logger.warning("No %s profile for user %s; skipped %d credit points (%s)", role, user_id, amount, reason)
        return None

    balance = (
        db.query(Profile.credit_points)
        .filter(Profile.user_id == user_id, Profile.user_role == role)
        .scalar()
    )
    logger.info("Awarded %d credit points to %s profile of %s (%s)", amount, role, user_id, reason)
    return balance


def award_session_credit(db: Session, session: TutoringSession) -> dict:
    """Pay both parties of a session that just closed."""
    amount = settings.CREDIT_POINTS_PER_SESSION
    reason = f"session {session.id} closed"
    return {
        "student": award_credit_points(db, session.student_id, "student", amount, reason),
        "tutor": award_credit_points(db, session.tutor_id, "tutor", amount, reason),
    }
