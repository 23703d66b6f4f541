"""Profile model — one row per user per marketplace role (student or tutor)."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (UniqueConstraint("user_id", "user_role", name="uq_profiles_user_role"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user_role = Column(String(20), nullable=False)  # student | tutor

    age = Column(Integer, nullable=True)
    year = Column(String(50), nullable=True)
    major = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    price_min = Column(Integer, nullable=True)
    price_max = Column(Integer, nullable=True)

    courses = Column(Text, nullable=True)        # JSON array of course labels
    availability = Column(Text, nullable=True)   # JSON: [{week_index, day_of_week, hour_block, is_bookable}]

    credit_points = Column(Integer, nullable=False, default=0)
    contact_info = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="profiles")
