"""Users router — preferred roles and ratings received."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import PreferredRolesUpdate, UserResponse
from app.schemas.rating import RatingResponse
from app.middleware.auth import get_current_user
from app.routers.auth import user_to_response
from app.routers.ratings import rating_to_response
from app.services import rating_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.put("/me/preferred-roles", response_model=UserResponse)
def update_preferred_roles(
    req: PreferredRolesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record whether the user acts as a student, a tutor, or both."""
    current_user.preferred_roles = req.preferred_roles
    db.commit()
    db.refresh(current_user)
    return user_to_response(current_user)


@router.get("/{user_id}/ratings", response_model=list[RatingResponse])
def ratings_for_user(
    user_id: str,
    visibility: Optional[Literal["public", "private"]] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Ratings received by a user.

    Private ratings (given by tutors about students) are only shown to the
    rated user themself and to admins.
    """
    if current_user.id != user_id and current_user.role != "admin":
        visibility = "public"
    ratings = rating_service.get_ratings_for_user(db, user_id, visibility)
    return [rating_to_response(r) for r in ratings]
