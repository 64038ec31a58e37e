"""Today's review queue."""

import logging

from algomastery.db.database import Database
from algomastery.db.models import DueItem
from algomastery.review.dates import LocalClock

logger = logging.getLogger(__name__)


class DueQueue:
    """Builds the list of problems due today, most overdue first."""

    def __init__(self, db: Database, clock: LocalClock | None = None):
        self.db = db
        self.clock = clock or LocalClock()

    def get_due_today(self) -> list[DueItem]:
        """Get every review due by the end of today, joined with its problem.

        Overdue items are included. Ties on the due time keep enrolment
        order. Reviews whose problem has been deleted are skipped.
        """
        states = self.db.get_reviews_due_by(self.clock.end_of_today())
        problems = self.db.get_problems(state.problem_id for state in states)

        due = []
        for state in states:
            problem = problems.get(state.problem_id)
            if problem is None:
                logger.debug(f"Skipping review for deleted problem {state.problem_id}")
                continue
            due.append(DueItem(problem=problem, review=state))
        return due

    def due_count(self) -> int:
        return len(self.get_due_today())
