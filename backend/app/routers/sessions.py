"""Sessions router — booking and lifecycle transitions."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.tutoring_session import TutoringSession, SessionStatus
from app.models.user import User
from app.schemas.session import CompletionResponse, SessionCancel, SessionCreate, SessionResponse
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter
from app.services import session_service
from app.services.time_windows import ensure_utc

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def session_to_response(session: TutoringSession) -> SessionResponse:
    """Convert a TutoringSession ORM model to a response schema with party names."""
    return SessionResponse(
        id=session.id,
        student_id=session.student_id,
        tutor_id=session.tutor_id,
        student_name=session.student.name if session.student else "Unknown",
        tutor_name=session.tutor.name if session.tutor else "Unknown",
        course=session.course,
        start_time=ensure_utc(session.start_time).isoformat(),
        end_time=ensure_utc(session.end_time).isoformat(),
        status=session.status,
        student_completed=session.student_completed,
        tutor_completed=session.tutor_completed,
        student_rated=session.student_rated,
        tutor_rated=session.tutor_rated,
        cancelled=session.cancelled,
        cancelled_by=session.cancelled_by,
        cancel_reason=session.cancel_reason,
        cancellation_rated=session.cancellation_rated,
        created_at=ensure_utc(session.created_at).isoformat() if session.created_at else "",
    )


@router.post("", response_model=SessionResponse, status_code=201)
@limiter.limit(settings.BOOKING_RATE_LIMIT)
def book_session(
    request: Request,
    req: SessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Request a session with a tutor (the caller is the student)."""
    session = session_service.create_session(
        db,
        student_id=current_user.id,
        tutor_id=req.tutor_id,
        course=req.course,
        start_time=req.start_time,
        end_time=req.end_time,
    )
    return session_to_response(session)


@router.get("", response_model=list[SessionResponse])
def my_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Sessions the caller takes part in, newest first."""
    sessions = session_service.list_user_sessions(db, current_user.id)
    return [session_to_response(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    session = session_service.get_session_for_party(db, session_id, current_user.id)
    return session_to_response(session)


@router.post("/{session_id}/confirm", response_model=SessionResponse)
def confirm_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Tutor accepts a pending request."""
    session = session_service.confirm_session(db, session_id, current_user.id)
    return session_to_response(session)


@router.post("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: str,
    req: Optional[SessionCancel] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cancel a pending or confirmed session more than 12 hours ahead."""
    reason = req.reason if req else None
    session = session_service.cancel_session(db, session_id, current_user.id, reason=reason)
    return session_to_response(session)


@router.post("/{session_id}/complete", response_model=CompletionResponse)
def mark_complete(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark the session done from the caller's side."""
    session = session_service.mark_complete(db, session_id, current_user.id)
    return CompletionResponse(
        session=session_to_response(session),
        both_completed=session.student_completed and session.tutor_completed,
        disputed=session.status == SessionStatus.DISPUTED.value,
    )
