"""Tests for today's review queue."""

from datetime import datetime, timedelta

from algomastery.db.models import ReviewState
from algomastery.review.queue import DueQueue

from conftest import NOW, TZ, local_noon


def _schedule(db, problem_id, next_review):
    db.save_review(ReviewState(problem_id=problem_id, next_review=next_review))


class TestDueQueue:
    """Tests for DueQueue.get_due_today."""

    def test_empty(self, populated_db, clock):
        assert DueQueue(populated_db, clock).get_due_today() == []

    def test_most_overdue_first(self, populated_db, clock):
        _schedule(populated_db, "two-sum", local_noon(1))
        _schedule(populated_db, "number-of-islands", local_noon(2))

        due = DueQueue(populated_db, clock).get_due_today()
        assert [item.problem.id for item in due] == ["number-of-islands", "two-sum"]

    def test_joins_problem(self, populated_db, clock, sample_problem):
        _schedule(populated_db, "two-sum", local_noon(0))
        [item] = DueQueue(populated_db, clock).get_due_today()
        assert item.problem.title == sample_problem.title
        assert item.review.problem_id == "two-sum"

    def test_later_today_is_due(self, populated_db, clock):
        """Anything due before local midnight counts as due today."""
        _schedule(populated_db, "two-sum", datetime(2025, 6, 18, 23, 59, tzinfo=TZ))
        assert DueQueue(populated_db, clock).due_count() == 1

    def test_tomorrow_midnight_is_not_due(self, populated_db, clock):
        _schedule(populated_db, "two-sum", datetime(2025, 6, 19, tzinfo=TZ))
        assert DueQueue(populated_db, clock).due_count() == 0

    def test_deleted_problems_skipped(self, populated_db, clock):
        _schedule(populated_db, "two-sum", local_noon(1))
        _schedule(populated_db, "number-of-islands", local_noon(1))
        populated_db.delete_problem("two-sum")

        due = DueQueue(populated_db, clock).get_due_today()
        assert [item.problem.id for item in due] == ["number-of-islands"]

    def test_ties_keep_enrolment_order(self, populated_db, clock):
        start = datetime(2025, 6, 18, tzinfo=TZ)
        _schedule(populated_db, "number-of-islands", start)
        _schedule(populated_db, "two-sum", start)

        due = DueQueue(populated_db, clock).get_due_today()
        assert [item.problem.id for item in due] == ["number-of-islands", "two-sum"]

    def test_day_rollover(self, populated_db, movable_clock):
        """Tomorrow's item becomes due once the clock passes midnight."""
        _schedule(populated_db, "two-sum", datetime(2025, 6, 19, tzinfo=TZ))
        queue = DueQueue(populated_db, movable_clock)
        assert queue.due_count() == 0

        movable_clock.advance(hours=12, minutes=1)
        assert movable_clock.now() > NOW + timedelta(hours=12)
        assert queue.due_count() == 1
