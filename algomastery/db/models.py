"""Database models for Algo Mastery."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from algomastery.constants import DEFAULT_EASE_FACTOR, DEFAULT_INTERVAL, DEFAULT_REPETITIONS


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ProblemStatus(Enum):
    UNSOLVED = "unsolved"
    ATTEMPTED = "attempted"
    SOLVED = "solved"


@dataclass
class Problem:
    """A practice problem. The review core only ever reads these."""

    id: str = ""
    title: str = ""
    url: str | None = None
    topic: str = "arrays-hashing"
    difficulty: Difficulty = Difficulty.EASY
    status: ProblemStatus = ProblemStatus.UNSOLVED
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ReviewState:
    """SM-2 scheduling state for one enrolled problem.

    next_review is written on every transition and never recomputed on
    read.
    """

    problem_id: str = ""
    easiness_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = DEFAULT_INTERVAL
    repetitions: int = DEFAULT_REPETITIONS
    next_review: datetime | None = None
    last_reviewed: datetime | None = None
    id: int | None = None  # Row id, doubles as enrolment order


@dataclass(frozen=True)
class ReviewHistoryEntry:
    """One rating event. Never modified after it is written."""

    id: str
    problem_id: str
    quality: int
    reviewed_at: datetime
    interval_before: int
    interval_after: int


@dataclass
class DueItem:
    """A due review joined with its problem."""

    problem: Problem
    review: ReviewState


@dataclass
class StreakInfo:
    """Consecutive-day review streaks."""

    current_streak: int = 0
    longest_streak: int = 0
    last_review_date: date | None = None
    has_reviewed_today: bool = False


@dataclass
class DailyStat:
    """Review counts for one local calendar day."""

    date: date
    label: str  # Mon, Tue, ...
    reviewed: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0


@dataclass
class WeeklyStats:
    """Seven daily buckets (oldest first) plus totals."""

    days: list[DailyStat] = field(default_factory=list)
    weekly_total: int = 0
    daily_average: float = 0.0
