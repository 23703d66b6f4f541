"""Ratings router — post-session and cancellation ratings."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.rating import Rating
from app.models.user import User
from app.schemas.rating import CancellationRatingCreate, RatingCreate, RatingResponse, RatingSubmitResponse
from app.middleware.auth import get_current_user
from app.services import rating_service
from app.services.time_windows import ensure_utc

router = APIRouter(prefix="/api/sessions", tags=["ratings"])


def rating_to_response(rating: Rating) -> RatingResponse:
    return RatingResponse(
        id=rating.id,
        session_id=rating.session_id,
        rater_id=rating.rater_id,
        target_id=rating.target_id,
        score=rating.score,
        comment=rating.comment,
        visibility=rating.visibility,
        created_at=ensure_utc(rating.created_at).isoformat(),
    )


@router.post("/{session_id}/ratings", response_model=RatingSubmitResponse, status_code=201)
def submit_rating(
    session_id: str,
    req: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rate the other participant once both sides marked the session complete."""
    rating, closed = rating_service.submit_rating(
        db, session_id, current_user.id, req.target_id, req.score, req.comment
    )
    return RatingSubmitResponse(rating=rating_to_response(rating), session_closed=closed)


@router.post("/{session_id}/cancellation-rating", response_model=RatingResponse, status_code=201)
def rate_cancellation(
    session_id: str,
    req: CancellationRatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rate the party who cancelled. Only the other party may do this, once."""
    rating = rating_service.rate_cancellation(db, session_id, current_user.id, req.score, req.comment)
    return rating_to_response(rating)
