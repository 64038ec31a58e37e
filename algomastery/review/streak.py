"""Consecutive-day review streaks."""

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from algomastery.db.database import Database
from algomastery.db.models import StreakInfo
from algomastery.review.dates import LocalClock, local_date

ONE_DAY = timedelta(days=1)


def _longest_run(days: list[date]) -> int:
    """Longest run of consecutive days in an ascending list of distinct days."""
    if not days:
        return 0

    longest = run = 1
    for previous, current in zip(days, days[1:]):
        if current - previous == ONE_DAY:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def calculate_streak(review_times: Iterable[datetime], today: date, tz: tzinfo) -> StreakInfo:
    """
    Calculate streak information from review timestamps.

    Multiple reviews on one local day count once. The current streak stays
    alive through today if the last review was yesterday.

    Args:
        review_times: Timestamps of review events, any order
        today: Today's local date
        tz: Learner's timezone, used to bucket timestamps into days

    Returns:
        StreakInfo with current and longest streaks
    """
    days = sorted({local_date(moment, tz) for moment in review_times})
    if not days:
        return StreakInfo()

    reviewed = set(days)
    has_reviewed_today = today in reviewed

    if has_reviewed_today:
        cursor = today
    elif today - ONE_DAY in reviewed:
        cursor = today - ONE_DAY
    else:
        cursor = None

    current = 0
    while cursor is not None and cursor in reviewed:
        current += 1
        cursor -= ONE_DAY

    return StreakInfo(
        current_streak=current,
        longest_streak=max(current, _longest_run(days)),
        last_review_date=days[-1],
        has_reviewed_today=has_reviewed_today,
    )


class StreakCalculator:
    """Reads the history log and reports streaks."""

    def __init__(self, db: Database, clock: LocalClock | None = None):
        self.db = db
        self.clock = clock or LocalClock()

    def get_streak(self) -> StreakInfo:
        return calculate_streak(self.db.get_review_times(), self.clock.today(), self.clock.tz)
