"""Tutoring session request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SessionCreate(BaseModel):
    tutor_id: str
    course: str
    start_time: datetime
    end_time: datetime


class SessionCancel(BaseModel):
    reason: Optional[str] = None


class SessionResponse(BaseModel):
    id: str
    student_id: str
    tutor_id: str
    student_name: str
    tutor_name: str
    course: str
    start_time: str
    end_time: str
    status: str
    student_completed: bool
    tutor_completed: bool
    student_rated: bool
    tutor_rated: bool
    cancelled: bool
    cancelled_by: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancellation_rated: bool
    created_at: str


class CompletionResponse(BaseModel):
    session: SessionResponse
    both_completed: bool
    disputed: bool
