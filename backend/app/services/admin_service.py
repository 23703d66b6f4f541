"""Admin service — platform-wide session views, analytics and user lookup."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.profile import Profile
from app.models.rating import Rating
from app.models.tutoring_session import TutoringSession, SessionStatus
from app.models.user import User
from app.services.errors import NotFoundError
from app.services.profile_service import get_profile


def list_all_sessions(db: Session) -> list[TutoringSession]:
    return db.query(TutoringSession).order_by(TutoringSession.created_at.desc()).all()


def list_disputed_sessions(db: Session) -> list[TutoringSession]:
    return (
        db.query(TutoringSession)
        .filter(TutoringSession.status == SessionStatus.DISPUTED.value)
        .order_by(TutoringSession.created_at.desc())
        .all()
    )


def _count_status(db: Session, status: SessionStatus) -> int:
    return db.query(func.count(TutoringSession.id)).filter(TutoringSession.status == status.value).scalar() or 0


def _count_profiles(db: Session, role: str) -> int:
    return db.query(func.count(Profile.id)).filter(Profile.user_role == role).scalar() or 0


def get_tutor_count(db: Session) -> int:
    return _count_profiles(db, "tutor")


def get_analytics(db: Session) -> dict:
    return {
        "completed_sessions": _count_status(db, SessionStatus.CLOSED),
        "disputes": _count_status(db, SessionStatus.DISPUTED),
        "pending_ratings": _count_status(db, SessionStatus.PENDING_RATING),
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "student_count": _count_profiles(db, "student"),
        "tutor_count": _count_profiles(db, "tutor"),
    }


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def search_users(db: Session, query: str) -> list[User]:
    """Users whose name or email contains ``query``."""
    pattern = f"%{query}%"
    return (
        db.query(User)
        .filter(User.name.ilike(pattern) | User.email.ilike(pattern))
        .order_by(User.created_at.desc())
        .all()
    )


def get_user_stats(db: Session, user_id: str) -> dict:
    sessions = (
        db.query(TutoringSession)
        .filter((TutoringSession.student_id == user_id) | (TutoringSession.tutor_id == user_id))
        .all()
    )
    scores = [r.score for r in db.query(Rating).filter(Rating.target_id == user_id).all()]
    return {
        "total_sessions": len(sessions),
        "completed_sessions": sum(1 for s in sessions if s.status == SessionStatus.CLOSED.value),
        "disputed_sessions": sum(1 for s in sessions if s.status == SessionStatus.DISPUTED.value),
        "cancelled_sessions": sum(1 for s in sessions if s.cancelled),
        "average_rating": sum(scores) / len(scores) if scores else 0.0,
        "total_ratings": len(scores),
    }


def get_user_detail(db: Session, user_id: str) -> dict:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return {
        "user": user,
        "student_profile": get_profile(db, user_id, "student"),
        "tutor_profile": get_profile(db, user_id, "tutor"),
        "stats": get_user_stats(db, user_id),
    }
