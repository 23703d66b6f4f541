"""SQLAlchemy ORM models."""

from app.models.user import User
from app.models.profile import Profile
from app.models.tutoring_session import TutoringSession, SessionStatus
from app.models.rating import Rating
from app.models.ticket import Ticket
from app.models.chat_message import ChatMessage
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Profile",
    "TutoringSession",
    "SessionStatus",
    "Rating",
    "Ticket",
    "ChatMessage",
    "AuditLog",
]
