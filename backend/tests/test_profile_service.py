"""Tests for profiles, availability overlap and tutor search."""

import pytest

from app.services import profile_service
from app.services.errors import BadRequestError, NotFoundError


def _slot(day, hour, week=0, bookable=True):
    return {"week_index": week, "day_of_week": day, "hour_block": hour, "is_bookable": bookable}


def _profile_data(**overrides):
    data = {
        "age": 20,
        "year": "Junior",
        "major": "Computer Science",
        "bio": "TA for CS 16, happy to help with pointers.",
        "price_min": 20,
        "price_max": 40,
        "courses": ["CMPSC 130A - Data Structures and Algorithms I", "MATH 4A - Linear Algebra"],
        "availability": [_slot(1, "14:00"), _slot(3, "10:00")],
        "contact_info": None,
    }
    data.update(overrides)
    return data


class TestMatchingSlots:
    def test_common_bookable_slots(self):
        tutor = [_slot(1, "14:00"), _slot(2, "09:00"), _slot(3, "10:00")]
        student = [_slot(1, "14:00"), _slot(3, "10:00"), _slot(5, "18:00")]
        assert profile_service.matching_slots(tutor, student) == [
            {"day_of_week": 1, "hour_block": "14:00"},
            {"day_of_week": 3, "hour_block": "10:00"},
        ]

    def test_unbookable_slots_excluded(self):
        tutor = [_slot(1, "14:00", bookable=False), _slot(3, "10:00")]
        student = [_slot(1, "14:00"), _slot(3, "10:00", bookable=False)]
        assert profile_service.matching_slots(tutor, student) == []

    def test_weeks_collapse_to_one_weekly_slot(self):
        tutor = [_slot(1, "14:00", week=0), _slot(1, "14:00", week=2)]
        student = [_slot(1, "14:00", week=1)]
        assert profile_service.matching_slots(tutor, student) == [{"day_of_week": 1, "hour_block": "14:00"}]

    def test_no_student_availability(self):
        assert profile_service.matching_slots([_slot(1, "14:00")], []) == []


class TestSaveProfile:
    def test_creates_tutor_profile(self, db, tutor):
        profile = profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        assert profile.user_role == "tutor"
        assert profile.credit_points == 0
        assert profile_service.load_json_list(profile.courses)[0].startswith("CMPSC 130A")

    def test_update_keeps_credit_points(self, db, tutor, make_profile):
        make_profile(tutor, "tutor", credit_points=30)
        profile = profile_service.save_profile(db, tutor.id, "tutor", _profile_data(price_max=55))
        assert profile.price_max == 55
        assert profile.credit_points == 30

    def test_tutor_requires_bio(self, db, tutor):
        with pytest.raises(BadRequestError, match="tutor profile"):
            profile_service.save_profile(db, tutor.id, "tutor", _profile_data(bio=""))

    def test_student_bio_optional(self, db, student):
        profile = profile_service.save_profile(db, student.id, "student", _profile_data(bio=None))
        assert profile.bio is None

    def test_student_missing_courses(self, db, student):
        with pytest.raises(BadRequestError, match="required fields"):
            profile_service.save_profile(db, student.id, "student", _profile_data(courses=[]))

    def test_price_range_checked(self, db, student):
        with pytest.raises(BadRequestError, match="price"):
            profile_service.save_profile(db, student.id, "student", _profile_data(price_min=50, price_max=10))

    def test_unknown_role(self, db, student):
        with pytest.raises(BadRequestError):
            profile_service.save_profile(db, student.id, "parent", _profile_data())

    def test_one_profile_per_role(self, db, student):
        as_student = profile_service.save_profile(db, student.id, "student", _profile_data())
        as_tutor = profile_service.save_profile(db, student.id, "tutor", _profile_data())
        again = profile_service.save_profile(db, student.id, "student", _profile_data(year="Senior"))
        assert as_student.id == again.id
        assert as_student.id != as_tutor.id


class TestAvailability:
    def test_replaces_grid(self, db, tutor):
        profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        profile = profile_service.update_availability(db, tutor.id, "tutor", [_slot(6, "21:00")])
        assert profile_service.load_json_list(profile.availability) == [_slot(6, "21:00")]

    def test_requires_existing_profile(self, db, tutor):
        with pytest.raises(NotFoundError):
            profile_service.update_availability(db, tutor.id, "tutor", [])

    def test_malformed_json_reads_as_empty(self):
        assert profile_service.load_json_list("{not json") == []
        assert profile_service.load_json_list('{"a": 1}') == []


class TestSearchTutors:
    def test_course_filter_is_case_insensitive(self, db, tutor, outsider):
        profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        profile_service.save_profile(db, outsider.id, "tutor", _profile_data(courses=["CHEM 1A - General Chemistry"]))

        results = profile_service.search_tutors(db, course="cmpsc 130a")
        assert [r["profile"].user_id for r in results] == [tutor.id]
        assert results[0]["user_name"] == "Tara Tutor"
        assert results[0]["average_rating"] == 0.0
        assert results[0]["total_ratings"] == 0
        assert results[0]["matching_slots"] is None

    def test_no_course_lists_all_tutors(self, db, tutor, outsider, student):
        profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        profile_service.save_profile(db, outsider.id, "tutor", _profile_data())
        profile_service.save_profile(db, student.id, "student", _profile_data())
        assert len(profile_service.search_tutors(db)) == 2

    def test_matching_slots_for_student(self, db, tutor, student):
        profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        profile_service.save_profile(db, student.id, "student", _profile_data(
            availability=[_slot(3, "10:00"), _slot(4, "12:00")],
        ))
        results = profile_service.search_tutors(db, course="MATH 4A", student_id=student.id)
        assert results[0]["matching_slots"] == [{"day_of_week": 3, "hour_block": "10:00"}]

    def test_tutor_detail(self, db, tutor):
        profile_service.save_profile(db, tutor.id, "tutor", _profile_data())
        detail = profile_service.get_tutor_detail(db, tutor.id)
        assert detail["user_name"] == "Tara Tutor"
        assert detail["ratings"] == []

    def test_tutor_detail_missing(self, db, student):
        with pytest.raises(NotFoundError):
            profile_service.get_tutor_detail(db, student.id)
