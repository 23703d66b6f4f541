"""Rating request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class RatingCreate(BaseModel):
    target_id: str
    score: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class CancellationRatingCreate(BaseModel):
    score: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class RatingResponse(BaseModel):
    id: str
    session_id: str
    rater_id: str
    target_id: str
    score: int
    comment: Optional[str] = None
    visibility: str
    created_at: str

    class Config:
        from_attributes = True


class RatingSubmitResponse(BaseModel):
    rating: RatingResponse
    session_closed: bool
