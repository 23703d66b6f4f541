"""Tests for ratings, the CLOSED transition and credit reconciliation."""

import pytest

from app.config import settings
from app.models.profile import Profile
from app.models.rating import Rating
from app.services import rating_service
from app.services.errors import BadRequestError, ForbiddenError

CREDIT = settings.CREDIT_POINTS_PER_SESSION


def _balance(db, user, role):
    db.expire_all()
    return db.query(Profile).filter(Profile.user_id == user.id, Profile.user_role == role).one().credit_points


@pytest.fixture
def awaiting(make_session, make_profile, student, tutor):
    """A session both parties have completed, with profiles on both sides."""
    make_profile(student, "student")
    make_profile(tutor, "tutor")
    return make_session(student, tutor, status="PENDING_RATING", student_completed=True, tutor_completed=True)


class TestSubmitRating:
    """Student ratings are public, tutor ratings are private."""

    def test_student_rating_is_public(self, db, awaiting, student, tutor):
        rating, closed = rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5, "Very clear")
        assert rating.visibility == "public"
        assert rating.target_id == tutor.id
        assert rating.comment == "Very clear"
        assert not closed

    def test_tutor_rating_is_private(self, db, awaiting, student, tutor):
        rating, closed = rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 4)
        assert rating.visibility == "private"
        assert rating.comment is None
        assert not closed

    def test_first_rating_keeps_pending_rating(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        db.refresh(awaiting)
        assert awaiting.student_rated
        assert not awaiting.tutor_rated
        assert awaiting.status == "PENDING_RATING"

    def test_self_rating_rejected(self, db, awaiting, student):
        with pytest.raises(BadRequestError, match="rate yourself"):
            rating_service.submit_rating(db, awaiting.id, student.id, student.id, 5)

    def test_target_must_be_counterpart(self, db, awaiting, student, outsider):
        with pytest.raises(BadRequestError, match="other participant"):
            rating_service.submit_rating(db, awaiting.id, student.id, outsider.id, 5)

    def test_outsider_cannot_rate(self, db, awaiting, tutor, outsider):
        with pytest.raises(ForbiddenError):
            rating_service.submit_rating(db, awaiting.id, outsider.id, tutor.id, 5)

    @pytest.mark.parametrize("score", [0, 6, -1])
    def test_score_out_of_range(self, db, awaiting, student, tutor, score):
        with pytest.raises(BadRequestError, match="between 1 and 5"):
            rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, score)

    def test_duplicate_rating_rejected(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        with pytest.raises(BadRequestError, match="Already rated"):
            rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 1)
        assert db.query(Rating).filter(Rating.session_id == awaiting.id).count() == 1

    def test_confirmed_session_cannot_be_rated(self, db, make_session, student, tutor):
        session = make_session(student, tutor, status="CONFIRMED")
        with pytest.raises(BadRequestError, match="not ready"):
            rating_service.submit_rating(db, session.id, student.id, tutor.id, 5)


class TestClosingAndCredit:
    """The second rating closes the session and pays each party exactly once."""

    def test_both_ratings_close_and_credit(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        _, closed = rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 4)
        assert closed
        db.refresh(awaiting)
        assert awaiting.status == "CLOSED"
        assert _balance(db, student, "student") == CREDIT
        assert _balance(db, tutor, "tutor") == CREDIT

    def test_order_does_not_matter(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 3)
        _, closed = rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 4)
        assert closed
        assert _balance(db, student, "student") == CREDIT
        assert _balance(db, tutor, "tutor") == CREDIT

    def test_no_credit_before_close(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        assert _balance(db, student, "student") == 0
        assert _balance(db, tutor, "tutor") == 0

    def test_closed_session_rejects_further_ratings(self, db, awaiting, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 4)
        with pytest.raises(BadRequestError):
            rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        assert _balance(db, student, "student") == CREDIT

    def test_credit_only_touches_matching_role(self, db, awaiting, make_profile, student, tutor):
        """The student's tutor profile is not paid for a session they attended as student."""
        make_profile(student, "tutor", credit_points=7)
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 5)
        assert _balance(db, student, "tutor") == 7

    def test_missing_profile_still_closes(self, db, make_session, make_profile, student, tutor):
        make_profile(tutor, "tutor", credit_points=20)
        session = make_session(student, tutor, status="PENDING_RATING", student_completed=True, tutor_completed=True)
        rating_service.submit_rating(db, session.id, student.id, tutor.id, 5)
        _, closed = rating_service.submit_rating(db, session.id, tutor.id, student.id, 5)
        assert closed
        assert _balance(db, tutor, "tutor") == 20 + CREDIT


class TestCancellationRating:
    """The party who did not cancel may rate the one who did, once."""

    @pytest.fixture
    def cancelled(self, make_session, student, tutor):
        return make_session(student, tutor, status="CANCELLED", cancelled=True, cancelled_by=tutor.id)

    def test_other_party_rates_canceller(self, db, cancelled, student, tutor):
        rating = rating_service.rate_cancellation(db, cancelled.id, student.id, 2, "Cancelled twice")
        assert rating.target_id == tutor.id
        assert rating.visibility == "public"
        db.refresh(cancelled)
        assert cancelled.cancellation_rated

    def test_canceller_cannot_rate_own_cancellation(self, db, cancelled, tutor):
        with pytest.raises(ForbiddenError):
            rating_service.rate_cancellation(db, cancelled.id, tutor.id, 5)

    def test_outsider_cannot_rate(self, db, cancelled, outsider):
        with pytest.raises(ForbiddenError):
            rating_service.rate_cancellation(db, cancelled.id, outsider.id, 1)

    def test_only_once(self, db, cancelled, student):
        rating_service.rate_cancellation(db, cancelled.id, student.id, 2)
        with pytest.raises(BadRequestError, match="already rated"):
            rating_service.rate_cancellation(db, cancelled.id, student.id, 3)

    def test_active_session_rejected(self, db, make_session, student, tutor):
        session = make_session(student, tutor, status="CONFIRMED")
        with pytest.raises(BadRequestError, match="not cancelled"):
            rating_service.rate_cancellation(db, session.id, student.id, 3)


class TestRatingQueries:
    def test_average_without_ratings_is_zero(self, db, tutor):
        assert rating_service.get_average_rating(db, tutor.id) == 0.0

    def test_average_and_visibility_filter(self, db, awaiting, make_session, student, tutor):
        rating_service.submit_rating(db, awaiting.id, student.id, tutor.id, 5)
        rating_service.submit_rating(db, awaiting.id, tutor.id, student.id, 2)
        second = make_session(student, tutor, status="PENDING_RATING", student_completed=True, tutor_completed=True)
        rating_service.submit_rating(db, second.id, student.id, tutor.id, 4)

        assert rating_service.get_average_rating(db, tutor.id) == 4.5
        assert len(rating_service.get_ratings_for_user(db, tutor.id, visibility="public")) == 2
        assert rating_service.get_ratings_for_user(db, student.id, visibility="public") == []
        assert len(rating_service.get_ratings_for_user(db, student.id)) == 1
        # private ratings still count toward the average
        assert rating_service.get_average_rating(db, student.id) == 2.0
