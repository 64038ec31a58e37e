"""Tests for database operations."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from algomastery.db.database import (
    PROBLEMS,
    REVIEW_HISTORY,
    REVIEWS,
    Database,
    decode_timestamp,
    encode_timestamp,
)
from algomastery.db.models import Difficulty, ProblemStatus, ReviewState

from conftest import NOW, TZ


class TestTimestampEncoding:
    """Tests for timestamp storage format."""

    def test_encoded_in_utc(self):
        encoded = encode_timestamp(datetime(2025, 6, 18, 23, 30, tzinfo=TZ))
        assert encoded == "2025-06-19T03:30:00.000000+00:00"

    def test_fixed_width(self):
        """Whole seconds still carry microseconds so strings sort correctly."""
        a = encode_timestamp(datetime(2025, 6, 18, 12, 0, 0, tzinfo=timezone.utc))
        b = encode_timestamp(datetime(2025, 6, 18, 12, 0, 0, 500, tzinfo=timezone.utc))
        assert len(a) == len(b)
        assert a < b

    def test_round_trip(self):
        moment = datetime(2025, 6, 18, 8, 15, 30, 123456, tzinfo=TZ)
        assert decode_timestamp(encode_timestamp(moment)) == moment

    def test_none(self):
        assert encode_timestamp(None) is None
        assert decode_timestamp(None) is None

    def test_naive_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            encode_timestamp(datetime(2025, 6, 18, 23, 30))

    def test_naive_review_not_saved(self, memory_db):
        """A naive due date is refused before anything is written."""
        with pytest.raises(ValueError):
            memory_db.save_review(ReviewState(problem_id="p1", next_review=datetime(2025, 6, 19)))
        assert memory_db.get_review("p1") is None

    def test_naive_problem_not_saved(self, memory_db, sample_problem):
        sample_problem.created_at = datetime(2025, 6, 1, 9, 0)
        with pytest.raises(ValueError):
            memory_db.add_problem(sample_problem)
        assert memory_db.get_problem(sample_problem.id) is None


class TestSchema:
    """Tests for schema setup."""

    def test_init_schema_is_idempotent(self, memory_db):
        """Running init twice should not fail or lose data."""
        memory_db.save_review(ReviewState(problem_id="p1", next_review=NOW))
        memory_db.init_schema()
        assert memory_db.get_review("p1") is not None

    def test_reviews_table_columns(self, memory_db):
        with memory_db.connection() as conn:
            columns = {row[1] for row in conn.execute("PRAGMA table_info(reviews)")}
        assert columns == {
            "id",
            "problem_id",
            "easiness_factor",
            "interval_days",
            "repetitions",
            "next_review",
            "last_reviewed",
        }

    def test_creates_parent_directory(self, tmp_path):
        db = Database(str(tmp_path / "nested" / "dir" / "app.db"))
        db.init_schema()
        assert (tmp_path / "nested" / "dir").exists()
        db.close()


class TestProblemOperations:
    """Tests for problem CRUD."""

    def test_add_and_get_problem(self, memory_db, sample_problem):
        problem_id = memory_db.add_problem(sample_problem)
        retrieved = memory_db.get_problem(problem_id)
        assert retrieved is not None
        assert retrieved.title == sample_problem.title
        assert retrieved.difficulty == Difficulty.EASY
        assert retrieved.status == ProblemStatus.UNSOLVED
        assert retrieved.created_at == sample_problem.created_at

    def test_get_problem_not_found(self, memory_db):
        assert memory_db.get_problem("missing") is None

    def test_get_problems_skips_missing(self, populated_db):
        found = populated_db.get_problems(["two-sum", "missing", "two-sum"])
        assert list(found) == ["two-sum"]

    def test_get_problems_empty(self, memory_db):
        assert memory_db.get_problems([]) == {}

    def test_get_all_problems_newest_first(self, populated_db):
        problems = populated_db.get_all_problems()
        assert [p.id for p in problems] == ["number-of-islands", "two-sum"]

    def test_delete_problem(self, populated_db):
        assert populated_db.delete_problem("two-sum") is True
        assert populated_db.get_problem("two-sum") is None
        assert populated_db.delete_problem("two-sum") is False

    def test_duplicate_problem_rejected(self, populated_db, sample_problem):
        with pytest.raises(sqlite3.IntegrityError):
            populated_db.add_problem(sample_problem)


class TestReviewOperations:
    """Tests for review state storage."""

    def test_save_and_get_review(self, memory_db):
        saved = memory_db.save_review(ReviewState(problem_id="p1", next_review=NOW))
        assert saved.id == 1
        assert saved.easiness_factor == 2.5
        assert saved.interval_days == 0
        assert saved.repetitions == 0
        assert saved.next_review == NOW
        assert saved.last_reviewed is None

    def test_save_review_updates_in_place(self, memory_db):
        first = memory_db.save_review(ReviewState(problem_id="p1", next_review=NOW))
        first.interval_days = 6
        first.repetitions = 2
        second = memory_db.save_review(first)
        assert second.id == first.id
        assert second.interval_days == 6
        assert len(memory_db.get_all_reviews()) == 1

    def test_get_review_not_found(self, memory_db):
        assert memory_db.get_review("missing") is None

    def test_ease_floor_enforced_by_schema(self, memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            memory_db.save_review(ReviewState(problem_id="p1", easiness_factor=1.1, next_review=NOW))

    def test_negative_interval_rejected_by_schema(self, memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            memory_db.save_review(ReviewState(problem_id="p1", interval_days=-1, next_review=NOW))

    def test_reviews_due_by_orders_by_date_then_enrolment(self, memory_db):
        memory_db.save_review(ReviewState(problem_id="late", next_review=NOW - timedelta(days=1)))
        memory_db.save_review(ReviewState(problem_id="early", next_review=NOW - timedelta(days=3)))
        memory_db.save_review(ReviewState(problem_id="tie", next_review=NOW - timedelta(days=1)))
        memory_db.save_review(ReviewState(problem_id="future", next_review=NOW + timedelta(days=2)))

        due = memory_db.get_reviews_due_by(NOW)
        assert [r.problem_id for r in due] == ["early", "late", "tie"]


class TestHistoryOperations:
    """Tests for the review history log."""

    def test_add_and_get_history(self, memory_db, make_entry):
        entry = make_entry(NOW, quality=5)
        memory_db.add_history_entry(entry)
        assert memory_db.get_history() == [entry]

    def test_history_filtered_by_problem(self, memory_db, make_entry):
        memory_db.add_history_entry(make_entry(NOW, problem_id="a"))
        memory_db.add_history_entry(make_entry(NOW, problem_id="b"))
        assert [h.problem_id for h in memory_db.get_history("b")] == ["b"]

    def test_history_chronological(self, memory_db, make_entry):
        later = make_entry(NOW)
        earlier = make_entry(NOW - timedelta(hours=2))
        memory_db.add_history_entry(later)
        memory_db.add_history_entry(earlier)
        assert memory_db.get_history() == [earlier, later]

    def test_history_between_is_half_open(self, memory_db, make_entry):
        start = datetime(2025, 6, 18, tzinfo=TZ)
        end = datetime(2025, 6, 19, tzinfo=TZ)
        at_start = make_entry(start)
        inside = make_entry(start + timedelta(hours=23, minutes=59))
        at_end = make_entry(end)
        for entry in (at_start, inside, at_end):
            memory_db.add_history_entry(entry)

        assert memory_db.get_history_between(start, end) == [at_start, inside]

    def test_invalid_quality_rejected_by_schema(self, memory_db, make_entry):
        with pytest.raises(sqlite3.IntegrityError):
            memory_db.add_history_entry(make_entry(NOW, quality=9))

    def test_review_times(self, memory_db, make_entry):
        memory_db.add_history_entry(make_entry(NOW))
        memory_db.add_history_entry(make_entry(NOW - timedelta(days=1)))
        assert memory_db.get_review_times() == [NOW - timedelta(days=1), NOW]


class TestTransactions:
    """Tests for atomic writes and change notifications."""

    def test_rollback_on_error(self, memory_db, make_entry):
        """A failure inside the scope discards every write in it."""
        with pytest.raises(RuntimeError):
            with memory_db.transaction() as tx:
                tx.put_review(ReviewState(problem_id="p1", next_review=NOW))
                tx.append_history(make_entry(NOW, problem_id="p1"))
                raise RuntimeError("boom")

        assert memory_db.get_review("p1") is None
        assert memory_db.get_history() == []

    def test_publishes_touched_tables_after_commit(self, memory_db, make_entry):
        changes = []
        memory_db.changes.subscribe(changes.append)

        with memory_db.transaction() as tx:
            tx.put_review(ReviewState(problem_id="p1", next_review=NOW))
            tx.append_history(make_entry(NOW, problem_id="p1"))

        assert len(changes) == 1
        assert changes[0].tables == frozenset({REVIEWS, REVIEW_HISTORY})

    def test_no_publish_on_rollback(self, memory_db):
        changes = []
        memory_db.changes.subscribe(changes.append)

        with pytest.raises(RuntimeError):
            with memory_db.transaction() as tx:
                tx.put_review(ReviewState(problem_id="p1", next_review=NOW))
                raise RuntimeError("boom")

        assert changes == []

    def test_read_only_scope_publishes_nothing(self, memory_db):
        changes = []
        memory_db.changes.subscribe(changes.append)
        with memory_db.transaction() as tx:
            tx.get_review("p1")
        assert changes == []

    def test_clear_rejects_unknown_table(self, memory_db):
        with pytest.raises(ValueError):
            with memory_db.transaction() as tx:
                tx.clear(["sqlite_master"])


class TestBulkOperations:
    """Tests for counts and wipes."""

    def test_count_rows(self, populated_db, make_entry):
        populated_db.save_review(ReviewState(problem_id="two-sum", next_review=NOW))
        populated_db.add_history_entry(make_entry(NOW))
        assert populated_db.count_rows() == {PROBLEMS: 2, REVIEWS: 1, REVIEW_HISTORY: 1}

    def test_clear_all(self, populated_db, make_entry):
        populated_db.save_review(ReviewState(problem_id="two-sum", next_review=NOW))
        populated_db.add_history_entry(make_entry(NOW))
        populated_db.clear_all()
        assert populated_db.count_rows() == {PROBLEMS: 0, REVIEWS: 0, REVIEW_HISTORY: 0}
