"""Shared pytest fixtures for the Algo Mastery test suite."""

import uuid
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from algomastery.config import Config
from algomastery.db.database import Database
from algomastery.db.models import Difficulty, Problem, ReviewHistoryEntry
from algomastery.review.dates import LocalClock
from algomastery.review.engine import ReviewEngine

# A zone whose local midnight is not UTC midnight
TZ = ZoneInfo("America/New_York")

# Wednesday noon, local time
NOW = datetime(2025, 6, 18, 12, 0, tzinfo=TZ)
TODAY = NOW.date()


def local_noon(days_ago: int) -> datetime:
    """Noon local time, a number of days before NOW."""
    return NOW - timedelta(days=days_ago)


class MovableClock(LocalClock):
    """LocalClock whose current time can be changed by tests."""

    def __init__(self, start: datetime = NOW):
        self.current = start
        super().__init__(TZ, now_fn=lambda: self.current)

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock pinned to NOW in New York."""
    return LocalClock(TZ, now_fn=lambda: NOW)


@pytest.fixture
def movable_clock():
    """Clock that starts at NOW and can be advanced."""
    return MovableClock()


@pytest.fixture
def memory_db(tmp_path):
    """Create a temporary SQLite database for fast tests.

    Note: We use a temp file instead of :memory: because SQLite
    in-memory databases don't persist between connections, and
    each thread gets its own connection.
    """
    db_path = tmp_path / "memory_test.db"
    db = Database(str(db_path))
    db.init_schema()
    yield db
    db.close()


@pytest.fixture
def sample_problem():
    """Sample problem for testing."""
    return Problem(
        id="two-sum",
        title="Two Sum",
        url="https://leetcode.com/problems/two-sum/",
        topic="arrays-hashing",
        difficulty=Difficulty.EASY,
        notes="Hash map of complements.",
        created_at=NOW - timedelta(days=30),
        updated_at=NOW - timedelta(days=30),
    )


@pytest.fixture
def second_problem():
    """Another problem, different topic and difficulty."""
    return Problem(
        id="number-of-islands",
        title="Number of Islands",
        url="https://leetcode.com/problems/number-of-islands/",
        topic="graphs",
        difficulty=Difficulty.MEDIUM,
        created_at=NOW - timedelta(days=20),
        updated_at=NOW - timedelta(days=20),
    )


@pytest.fixture
def populated_db(memory_db, sample_problem, second_problem):
    """Database with two problems and no review state."""
    memory_db.add_problem(sample_problem)
    memory_db.add_problem(second_problem)
    return memory_db


@pytest.fixture
def engine(populated_db, clock):
    """Review engine over the populated database with a pinned clock."""
    return ReviewEngine(populated_db, clock)


@pytest.fixture
def make_entry():
    """Factory for history entries."""

    def _make(reviewed_at: datetime, quality: int = 4, problem_id: str = "two-sum") -> ReviewHistoryEntry:
        return ReviewHistoryEntry(
            id=uuid.uuid4().hex,
            problem_id=problem_id,
            quality=quality,
            reviewed_at=reviewed_at,
            interval_before=0,
            interval_after=1,
        )

    return _make


@pytest.fixture
def config(tmp_path):
    """Test configuration."""
    return Config(
        database_path=str(tmp_path / "data" / "test.db"),
        timezone="America/New_York",
        log_level="DEBUG",
        export_dir=str(tmp_path / "exports"),
    )
