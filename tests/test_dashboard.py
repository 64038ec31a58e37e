"""Tests for the live dashboard views."""

import pytest

from algomastery.constants import Rating
from algomastery.review.dashboard import ReviewDashboard


@pytest.fixture
def dashboard(populated_db, clock):
    board = ReviewDashboard(populated_db, clock)
    yield board
    board.close()


class TestReviewDashboard:
    """Views follow writes without being asked."""

    def test_initial_state(self, dashboard):
        assert dashboard.due_count == 0
        assert dashboard.streak.value.current_streak == 0
        assert dashboard.weekly_stats.value.weekly_total == 0

    def test_enrolment_updates_queue(self, dashboard, engine):
        engine.add_to_review("two-sum")
        assert dashboard.due_count == 1
        assert dashboard.due_today.value[0].problem.id == "two-sum"

    def test_review_updates_every_view(self, dashboard, engine):
        engine.add_to_review("two-sum")
        engine.add_to_review("number-of-islands")
        engine.record_review("two-sum", Rating.GOOD)

        assert [item.problem.id for item in dashboard.due_today.value] == ["number-of-islands"]
        assert dashboard.streak.value.current_streak == 1
        assert dashboard.streak.value.has_reviewed_today is True
        assert dashboard.weekly_stats.value.weekly_total == 1
        assert dashboard.weekly_stats.value.days[-1].good == 1

    def test_listener_notified(self, dashboard, engine):
        counts = []
        dashboard.due_today.subscribe(lambda items: counts.append(len(items)))
        engine.add_to_review("two-sum")
        assert counts == [1]

    def test_failed_review_leaves_views_alone(self, dashboard, engine):
        engine.add_to_review("two-sum")
        with pytest.raises(ValueError):
            engine.record_review("two-sum", 2)
        assert dashboard.due_count == 1
        assert dashboard.weekly_stats.value.weekly_total == 0

    def test_close_stops_updates(self, populated_db, clock, engine):
        board = ReviewDashboard(populated_db, clock)
        board.close()
        engine.add_to_review("two-sum")
        assert board.due_count == 0
        board.refresh()
        assert board.due_count == 1
