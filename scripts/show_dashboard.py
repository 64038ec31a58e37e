#!/usr/bin/env python3
"""Print streaks, today's queue and the last seven days of reviews."""

from rich.console import Console
from rich.table import Table

from algomastery.config import Config, setup_logging
from algomastery.db.database import Database
from algomastery.review.dashboard import ReviewDashboard
from algomastery.review.dates import LocalClock


console = Console()


def main() -> None:
    config = Config.from_env()
    setup_logging(config.log_level)

    db = Database(config.database_path)
    db.init_schema()
    dashboard = ReviewDashboard(db, LocalClock(config.timezone))

    streak = dashboard.streak.value
    console.rule("[bold blue]Algo Mastery")
    flame = "🔥" if streak.has_reviewed_today else "·"
    console.print(
        f"{flame} Current streak: [bold]{streak.current_streak}[/bold] days   "
        f"Longest: [bold]{streak.longest_streak}[/bold] days"
    )
    if streak.last_review_date:
        console.print(f"Last review: {streak.last_review_date.isoformat()}")
    console.print(f"Due today: [bold]{dashboard.due_count}[/bold]\n")

    stats = dashboard.weekly_stats.value
    table = Table(title="Last 7 days")
    table.add_column("Day")
    table.add_column("Reviewed", justify="right")
    table.add_column("Again", justify="right", style="red")
    table.add_column("Hard", justify="right", style="yellow")
    table.add_column("Good", justify="right", style="green")
    table.add_column("Easy", justify="right", style="cyan")
    for day in stats.days:
        table.add_row(
            f"{day.label} {day.date.isoformat()}",
            str(day.reviewed),
            str(day.again),
            str(day.hard),
            str(day.good),
            str(day.easy),
        )
    console.print(table)
    console.print(f"Total: {stats.weekly_total}   Daily average: {stats.daily_average}")

    dashboard.close()


if __name__ == "__main__":
    main()
