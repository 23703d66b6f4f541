"""Profiles router — the caller's student and tutor profiles."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.profile import Profile
from app.models.user import User
from app.schemas.profile import AvailabilitySlot, AvailabilityUpdate, ProfileResponse, ProfileSave
from app.middleware.auth import get_current_user
from app.services import profile_service

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

ProfileRole = Literal["student", "tutor"]


def profile_to_response(profile: Profile) -> ProfileResponse:
    """Convert a Profile ORM row (JSON text columns) to a response schema."""
    return ProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        user_role=profile.user_role,
        age=profile.age,
        year=profile.year,
        major=profile.major,
        bio=profile.bio,
        price_min=profile.price_min,
        price_max=profile.price_max,
        courses=profile_service.load_json_list(profile.courses),
        availability=[AvailabilitySlot(**s) for s in profile_service.load_json_list(profile.availability)],
        credit_points=profile.credit_points or 0,
        contact_info=profile.contact_info,
    )


@router.get("/{role}", response_model=Optional[ProfileResponse])
def get_my_profile(
    role: ProfileRole,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's profile for a role, or null if not created yet."""
    profile = profile_service.get_profile(db, current_user.id, role)
    return profile_to_response(profile) if profile else None


@router.put("/{role}", response_model=ProfileResponse)
def save_my_profile(
    role: ProfileRole,
    req: ProfileSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create or update the caller's profile for a role."""
    data = req.model_dump()
    if req.availability is not None:
        data["availability"] = [s.model_dump() for s in req.availability]
    profile = profile_service.save_profile(db, current_user.id, role, data)
    return profile_to_response(profile)


@router.put("/{role}/availability", response_model=ProfileResponse)
def update_my_availability(
    role: ProfileRole,
    req: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = profile_service.update_availability(
        db, current_user.id, role, [s.model_dump() for s in req.availability]
    )
    return profile_to_response(profile)
