"""Profile, availability and tutor search schemas."""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.rating import RatingResponse

HOUR_BLOCK_RE = re.compile(r"^(\d{1,2}):00$")
FIRST_HOUR = 8   # 8 AM
LAST_HOUR = 21   # 9 PM


class AvailabilitySlot(BaseModel):
    """One bookable hour in the four-week availability grid."""

    week_index: int = Field(ge=0, le=3)
    day_of_week: int = Field(ge=0, le=6)  # 0 = Monday
    hour_block: str
    is_bookable: bool = True

    @field_validator("hour_block")
    @classmethod
    def validate_hour_block(cls, v: str) -> str:
        match = HOUR_BLOCK_RE.match(v)
        if not match or not FIRST_HOUR <= int(match.group(1)) <= LAST_HOUR:
            raise ValueError(f"hour_block must look like 'HH:00' between {FIRST_HOUR}:00 and {LAST_HOUR}:00")
        return f"{int(match.group(1)):02d}:00"


class ProfileSave(BaseModel):
    age: Optional[int] = Field(default=None, ge=1, le=120)
    year: Optional[str] = None
    major: Optional[str] = None
    bio: Optional[str] = None
    price_min: Optional[int] = Field(default=None, ge=0)
    price_max: Optional[int] = Field(default=None, ge=0)
    courses: Optional[list[str]] = None
    availability: Optional[list[AvailabilitySlot]] = None
    contact_info: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    availability: list[AvailabilitySlot]


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    user_role: str
    age: Optional[int] = None
    year: Optional[str] = None
    major: Optional[str] = None
    bio: Optional[str] = None
    price_min: Optional[int] = None
    price_max: Optional[int] = None
    courses: list[str]
    availability: list[AvailabilitySlot]
    credit_points: int
    contact_info: Optional[str] = None


class MatchingSlot(BaseModel):
    day_of_week: int
    hour_block: str


class TutorSearchResult(BaseModel):
    profile: ProfileResponse
    user_name: str
    average_rating: float
    total_ratings: int
    matching_slots: Optional[list[MatchingSlot]] = None


class TutorDetailResponse(BaseModel):
    profile: ProfileResponse
    user_name: str
    average_rating: float
    ratings: list[RatingResponse]
