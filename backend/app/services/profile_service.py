"""Profile service — student/tutor profiles, availability grids and tutor search."""

import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.profile import Profile
from app.models.user import User
from app.services import rating_service
from app.services.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

PROFILE_ROLES = ("student", "tutor")

# Fields that must be present to save a profile; tutors also need a bio.
REQUIRED_FIELDS = ("age", "year", "major", "price_min", "price_max", "courses", "availability")

EDITABLE_FIELDS = REQUIRED_FIELDS + ("bio", "contact_info")


def load_json_list(raw: Optional[str]) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed JSON profile field")
        return []
    return value if isinstance(value, list) else []


def _check_role(role: str) -> None:
    if role not in PROFILE_ROLES:
        raise BadRequestError("Role must be 'student' or 'tutor'")


def get_profile(db: Session, user_id: str, role: str) -> Optional[Profile]:
    _check_role(role)
    return db.query(Profile).filter(Profile.user_id == user_id, Profile.user_role == role).first()


def save_profile(db: Session, user_id: str, role: str, data: dict) -> Profile:
    """Create or update the user's profile for ``role``.

    ``availability`` must already be a list of validated slot dicts. Credit
    points are never touched here.
    """
    _check_role(role)
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "", [])]
    if role == "tutor" and not (data.get("bio") or "").strip():
        missing.append("bio")
    if missing:
        if role == "tutor":
            raise BadRequestError("All fields are required for tutor profile")
        raise BadRequestError("Please complete all required fields")
    if data["price_min"] > data["price_max"]:
        raise BadRequestError("Minimum price cannot exceed maximum price")

    values = {f: data.get(f) for f in EDITABLE_FIELDS}
    values["courses"] = json.dumps([c.strip() for c in values["courses"] if c and c.strip()])
    values["availability"] = json.dumps(values["availability"])

    profile = get_profile(db, user_id, role)
    if profile:
        for key, value in values.items():
            setattr(profile, key, value)
    else:
        profile = Profile(user_id=user_id, user_role=role, credit_points=0, **values)
        db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Saved %s profile for user %s", role, user_id)
    return profile


def update_availability(db: Session, user_id: str, role: str, availability: list[dict]) -> Profile:
    profile = get_profile(db, user_id, role)
    if not profile:
        raise NotFoundError("Profile not found")
    profile.availability = json.dumps(availability)
    db.commit()
    db.refresh(profile)
    return profile


def matching_slots(tutor_availability: list[dict], student_availability: list[dict]) -> list[dict]:
    """Weekly slots (day_of_week, hour_block) both parties marked bookable."""
    student_slots = {
        (s["day_of_week"], s["hour_block"])
        for s in student_availability
        if s.get("is_bookable", True)
    }
    seen = set()
    overlap = []
    for slot in tutor_availability:
        key = (slot["day_of_week"], slot["hour_block"])
        if not slot.get("is_bookable", True) or key not in student_slots or key in seen:
            continue
        seen.add(key)
        overlap.append({"day_of_week": key[0], "hour_block": key[1]})
    return overlap


def search_tutors(db: Session, course: Optional[str] = None, student_id: Optional[str] = None) -> list[dict]:
    """Tutor profiles teaching a course matching ``course`` (case-insensitive substring).

    If ``student_id`` has a student profile, each result carries the weekly
    slots where both are available.
    """
    tutors = db.query(Profile).filter(Profile.user_role == "tutor").all()
    if course:
        needle = course.lower()
        tutors = [p for p in tutors if any(needle in c.lower() for c in load_json_list(p.courses))]

    student_availability = None
    if student_id:
        student_profile = get_profile(db, student_id, "student")
        if student_profile:
            student_availability = load_json_list(student_profile.availability)

    results = []
    for profile in tutors:
        public_ratings = rating_service.get_ratings_for_user(db, profile.user_id, "public")
        entry = {
            "profile": profile,
            "user_name": profile.user.name if profile.user else "Unknown",
            "average_rating": rating_service.get_average_rating(db, profile.user_id),
            "total_ratings": len(public_ratings),
            "matching_slots": None,
        }
        if student_availability is not None:
            entry["matching_slots"] = matching_slots(load_json_list(profile.availability), student_availability)
        results.append(entry)
    return results


def get_tutor_detail(db: Session, tutor_id: str) -> dict:
    profile = get_profile(db, tutor_id, "tutor")
    if not profile:
        raise NotFoundError("Tutor profile not found")
    user = db.query(User).filter(User.id == tutor_id).first()
    return {
        "profile": profile,
        "user_name": user.name if user else "Unknown",
        "average_rating": rating_service.get_average_rating(db, tutor_id),
        "ratings": rating_service.get_ratings_for_user(db, tutor_id, "public"),
    }
