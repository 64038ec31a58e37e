"""Live dashboard views over the review store."""

from algomastery.db.changefeed import LiveQuery
from algomastery.db.database import PROBLEMS, REVIEW_HISTORY, REVIEWS, Database
from algomastery.db.models import DueItem, StreakInfo, WeeklyStats
from algomastery.review.dates import LocalClock
from algomastery.review.queue import DueQueue
from algomastery.review.stats import StatsAggregator
from algomastery.review.streak import StreakCalculator


class ReviewDashboard:
    """Due queue, streak and weekly stats that refresh on every write."""

    def __init__(self, db: Database, clock: LocalClock | None = None):
        clock = clock or LocalClock()
        self.queue = DueQueue(db, clock)
        self.streaks = StreakCalculator(db, clock)
        self.stats = StatsAggregator(db, clock)

        self.due_today: LiveQuery[list[DueItem]] = LiveQuery(
            db.changes, self.queue.get_due_today, frozenset({REVIEWS, PROBLEMS})
        )
        self.streak: LiveQuery[StreakInfo] = LiveQuery(
            db.changes, self.streaks.get_streak, frozenset({REVIEW_HISTORY})
        )
        self.weekly_stats: LiveQuery[WeeklyStats] = LiveQuery(
            db.changes, self.stats.get_weekly_stats, frozenset({REVIEW_HISTORY})
        )

    @property
    def due_count(self) -> int:
        return len(self.due_today.value)

    def refresh(self) -> None:
        """Recompute every view, e.g. after the day rolls over."""
        for view in (self.due_today, self.streak, self.weekly_stats):
            view.refresh()

    def close(self) -> None:
        for view in (self.due_today, self.streak, self.weekly_stats):
            view.close()
