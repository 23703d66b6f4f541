"""Tutors router — search by course and public tutor detail."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.profile import MatchingSlot, TutorDetailResponse, TutorSearchResult
from app.middleware.auth import get_current_user
from app.routers.profiles import profile_to_response
from app.routers.ratings import rating_to_response
from app.services import profile_service

router = APIRouter(prefix="/api/tutors", tags=["tutors"])


@router.get("", response_model=list[TutorSearchResult])
def search_tutors(
    course: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Find tutors by course. Includes shared weekly slots if the caller has a student profile."""
    results = profile_service.search_tutors(db, course=course, student_id=current_user.id)
    return [
        TutorSearchResult(
            profile=profile_to_response(r["profile"]),
            user_name=r["user_name"],
            average_rating=r["average_rating"],
            total_ratings=r["total_ratings"],
            matching_slots=[MatchingSlot(**s) for s in r["matching_slots"]]
            if r["matching_slots"] is not None
            else None,
        )
        for r in results
    ]


@router.get("/{tutor_id}", response_model=TutorDetailResponse)
def get_tutor(
    tutor_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    detail = profile_service.get_tutor_detail(db, tutor_id)
    return TutorDetailResponse(
        profile=profile_to_response(detail["profile"]),
        user_name=detail["user_name"],
        average_rating=detail["average_rating"],
        ratings=[rating_to_response(r) for r in detail["ratings"]],
    )
