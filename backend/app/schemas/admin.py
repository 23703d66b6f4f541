"""Admin dashboard schemas."""

from typing import Optional

from pydantic import BaseModel

from app.schemas.auth import UserResponse
from app.schemas.profile import ProfileResponse


class AnalyticsResponse(BaseModel):
    completed_sessions: int
    disputes: int
    pending_ratings: int
    total_users: int
    student_count: int
    tutor_count: int


class TutorCountResponse(BaseModel):
    tutor_count: int


class UserStats(BaseModel):
    total_sessions: int
    completed_sessions: int
    disputed_sessions: int
    cancelled_sessions: int
    average_rating: float
    total_ratings: int


class UserDetailResponse(BaseModel):
    user: UserResponse
    student_profile: Optional[ProfileResponse] = None
    tutor_profile: Optional[ProfileResponse] = None
    stats: UserStats
