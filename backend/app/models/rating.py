"""Rating model — immutable, one per (session, rater)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("session_id", "rater_id", name="uq_ratings_session_rater"),
        CheckConstraint("score BETWEEN 1 AND 5", name="ck_ratings_score_range"),
        CheckConstraint("rater_id <> target_id", name="ck_ratings_not_self"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=False, index=True)
    rater_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    target_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    visibility = Column(String(10), nullable=False, default="public")  # public | private
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    session = relationship("TutoringSession", back_populates="ratings")
    rater = relationship("User", foreign_keys=[rater_id])
