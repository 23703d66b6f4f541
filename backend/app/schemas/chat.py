"""Chat message schemas."""

from pydantic import BaseModel


class MessageCreate(BaseModel):
    message: str


class MessageResponse(BaseModel):
    id: str
    session_id: str
    sender_id: str
    sender_name: str
    message: str
    sanitized: bool
    created_at: str
