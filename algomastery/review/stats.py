"""Weekly review statistics for the dashboard."""

from datetime import date, timedelta, tzinfo
from typing import Iterable

from algomastery.constants import PASSING_QUALITY, STATS_WINDOW_DAYS, Rating
from algomastery.db.database import Database
from algomastery.db.models import DailyStat, ReviewHistoryEntry, WeeklyStats
from algomastery.review.dates import LocalClock, add_days, day_start, local_date


def _bucket_name(quality: int) -> str:
    if quality < PASSING_QUALITY:
        return "again"
    return Rating(quality).name.lower()


def calculate_weekly_stats(
    entries: Iterable[ReviewHistoryEntry],
    today: date,
    tz: tzinfo,
) -> list[DailyStat]:
    """
    Count reviews per local day for today and the six days before it.

    Always returns seven buckets, oldest first. Entries outside the window
    are ignored.
    """
    first_day = today - timedelta(days=STATS_WINDOW_DAYS - 1)
    stats = {
        day: DailyStat(date=day, label=day.strftime("%a"))
        for day in (first_day + timedelta(days=i) for i in range(STATS_WINDOW_DAYS))
    }

    for entry in entries:
        bucket = stats.get(local_date(entry.reviewed_at, tz))
        if bucket is None:
            continue
        bucket.reviewed += 1
        name = _bucket_name(entry.quality)
        setattr(bucket, name, getattr(bucket, name) + 1)

    return list(stats.values())


def calculate_weekly_total(stats: list[DailyStat]) -> int:
    """Total reviews across the week."""
    return sum(day.reviewed for day in stats)


def calculate_daily_average(stats: list[DailyStat]) -> float:
    """Average reviews per day, always over the full seven days."""
    return round(calculate_weekly_total(stats) / STATS_WINDOW_DAYS, 1)


class StatsAggregator:
    """Builds the rolling seven-day summary from the history log."""

    def __init__(self, db: Database, clock: LocalClock | None = None):
        self.db = db
        self.clock = clock or LocalClock()

    def get_weekly_stats(self) -> WeeklyStats:
        today = self.clock.today()
        window_end = add_days(day_start(today, self.clock.tz), 1)
        window_start = add_days(window_end, -STATS_WINDOW_DAYS)
        entries = self.db.get_history_between(window_start, window_end)

        days = calculate_weekly_stats(entries, today, self.clock.tz)
        return WeeklyStats(
            days=days,
            weekly_total=calculate_weekly_total(days),
            daily_average=calculate_daily_average(days),
        )
