"""Support ticket schemas."""

from typing import Literal, Optional

from pydantic import BaseModel

TicketCategory = Literal["account", "matching", "cancellation", "ratings", "rules", "technical"]
TicketStatus = Literal["pending", "in_progress", "resolved"]


class TicketCreate(BaseModel):
    category: TicketCategory
    subject: str
    message: str


class TicketUpdate(BaseModel):
    status: TicketStatus
    admin_response: Optional[str] = None


class TicketResponse(BaseModel):
    id: str
    user_id: str
    category: str
    subject: str
    message: str
    status: str
    admin_response: Optional[str] = None
    created_at: str


class AdminTicketResponse(TicketResponse):
    user_name: str
    user_email: str
