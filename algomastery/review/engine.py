"""Review transitions: enrolment, rating and manual re-queueing.

All writes to a problem's review state go through ReviewEngine. Recording
a review updates the state and appends its history entry in a single
transaction, so readers never see one without the other.
"""

import logging
import sqlite3
import uuid
from dataclasses import replace

from algomastery.constants import MIN_EASE_FACTOR, VALID_QUALITIES
from algomastery.db.database import Database
from algomastery.db.models import ReviewHistoryEntry, ReviewState
from algomastery.errors import ReviewNotFoundError, ReviewRecordError, ReviewValidationError
from algomastery.review.dates import LocalClock
from algomastery.review.sm2 import IntervalPreview, calculate_sm2, next_review_start, preview_intervals

logger = logging.getLogger(__name__)


def validate_quality(quality: int) -> int:
    """Reject anything that is not one of the four rating values."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ReviewValidationError(f"Quality must be an integer rating, got {quality!r}")
    if quality not in VALID_QUALITIES:
        raise ReviewValidationError(
            f"Quality must be one of {sorted(VALID_QUALITIES)}, got {quality}"
        )
    return int(quality)


def validate_problem_id(problem_id: str) -> str:
    if not isinstance(problem_id, str) or not problem_id.strip():
        raise ReviewValidationError(f"Problem id must be a non-empty string, got {problem_id!r}")
    return problem_id


def validate_review_state(state: ReviewState) -> ReviewState:
    """Check the stored invariants before scheduling from a state."""
    if state.easiness_factor < MIN_EASE_FACTOR:
        raise ReviewValidationError(
            f"Ease factor {state.easiness_factor} for {state.problem_id} is below {MIN_EASE_FACTOR}"
        )
    if state.interval_days < 0:
        raise ReviewValidationError(f"Negative interval {state.interval_days} for {state.problem_id}")
    if state.repetitions < 0:
        raise ReviewValidationError(f"Negative repetitions {state.repetitions} for {state.problem_id}")
    return state


class ReviewEngine:
    """Applies ratings to review state and keeps the history log."""

    def __init__(self, db: Database, clock: LocalClock | None = None):
        self.db = db
        self.clock = clock or LocalClock()

    def get_review(self, problem_id: str) -> ReviewState | None:
        """Get the current review state for a problem, if enrolled."""
        return self.db.get_review(problem_id)

    def is_in_review(self, problem_id: str) -> bool:
        """Check whether a problem is enrolled in the review system."""
        return self.db.get_review(problem_id) is not None

    def add_to_review(self, problem_id: str) -> ReviewState:
        """Enrol a problem with default SM-2 state, due immediately.

        Enrolment is not a review, so no history is written. Enrolling an
        already enrolled problem leaves it untouched.
        """
        validate_problem_id(problem_id)
        with self.db.transaction() as tx:
            existing = tx.get_review(problem_id)
            if existing is not None:
                logger.debug(f"Problem {problem_id} already in review, keeping its schedule")
                return existing
            state = tx.put_review(ReviewState(problem_id=problem_id, next_review=self.clock.now()))
        logger.info(f"Added problem {problem_id} to review")
        return state

    def add_to_today_queue(self, problem_id: str) -> ReviewState:
        """Force an enrolled problem into today's queue.

        Only the due date moves; ease, interval, repetitions and history
        are left alone.
        """
        validate_problem_id(problem_id)
        with self.db.transaction() as tx:
            existing = tx.get_review(problem_id)
            if existing is None:
                raise ReviewNotFoundError(problem_id)
            state = tx.put_review(replace(existing, next_review=self.clock.start_of_today()))
        logger.info(f"Moved problem {problem_id} into today's queue")
        return state

    def record_review(self, problem_id: str, quality: int) -> ReviewState:
        """Apply a rating and log it.

        Enrols the problem first if needed. Raises ReviewValidationError
        for bad input before anything is read, and ReviewRecordError if
        the store fails; in that case nothing is written.
        """
        validate_problem_id(problem_id)
        quality = validate_quality(quality)

        now = self.clock.now()
        try:
            with self.db.transaction() as tx:
                current = tx.get_review(problem_id)
                if current is None:
                    current = ReviewState(problem_id=problem_id)
                validate_review_state(current)

                result = calculate_sm2(
                    quality,
                    easiness_factor=current.easiness_factor,
                    interval_days=current.interval_days,
                    repetitions=current.repetitions,
                )
                updated = tx.put_review(
                    replace(
                        current,
                        easiness_factor=result.easiness_factor,
                        interval_days=result.interval_days,
                        repetitions=result.repetitions,
                        next_review=next_review_start(self.clock.start_of_today(), result.interval_days),
                        last_reviewed=now,
                    )
                )
                tx.append_history(
                    ReviewHistoryEntry(
                        id=uuid.uuid4().hex,
                        problem_id=problem_id,
                        quality=quality,
                        reviewed_at=now,
                        interval_before=current.interval_days,
                        interval_after=result.interval_days,
                    )
                )
        except sqlite3.Error as exc:
            logger.error(f"Failed to record review for {problem_id}: {exc}")
            raise ReviewRecordError() from exc

        logger.info(
            f"Recorded quality {quality} for {problem_id}: "
            f"interval {current.interval_days} -> {updated.interval_days} days, "
            f"ease {updated.easiness_factor}"
        )
        return updated

    def preview_intervals(self, problem_id: str) -> IntervalPreview:
        """Interval each rating button would give, without saving anything."""
        state = self.db.get_review(problem_id) or ReviewState(problem_id=problem_id)
        return preview_intervals(state.easiness_factor, state.interval_days, state.repetitions)
