"""Tutoring session model — the booking that moves through the session lifecycle."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.database import Base


class SessionStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PENDING_RATING = "PENDING_RATING"
    DISPUTED = "DISPUTED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


# Statuses that hold a slot on the tutor's calendar
ACTIVE_STATUSES = (SessionStatus.PENDING.value, SessionStatus.CONFIRMED.value)


class TutoringSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        CheckConstraint("student_id <> tutor_id", name="ck_sessions_distinct_parties"),
        CheckConstraint("start_time < end_time", name="ck_sessions_interval"),
        Index("ix_sessions_tutor_status", "tutor_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course = Column(String(255), nullable=False)
    # Stored as naive UTC
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value)

    student_completed = Column(Boolean, nullable=False, default=False)
    tutor_completed = Column(Boolean, nullable=False, default=False)
    student_rated = Column(Boolean, nullable=False, default=False)
    tutor_rated = Column(Boolean, nullable=False, default=False)

    cancelled = Column(Boolean, nullable=False, default=False)
    cancelled_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    cancel_reason = Column(Text, nullable=True)
    cancellation_rated = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])
    ratings = relationship("Rating", back_populates="session")
    messages = relationship("ChatMessage", back_populates="session", order_by="ChatMessage.created_at")

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.student_id, self.tutor_id)

    def counterpart_of(self, user_id: str) -> str:
        return self.tutor_id if user_id == self.student_id else self.student_id
