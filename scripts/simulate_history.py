#!/usr/bin/env python3
"""Simulate a few weeks of reviews against a throwaway database.

Exercises the full loop without touching real data:
1. Seed problems and enrol them
2. Replay daily review sessions with a pinned clock
3. Show how intervals and ease evolve per rating
4. Show the streak and weekly stats the dashboard would display

Run: uv run python scripts/simulate_history.py --days 21
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
import random
import tempfile

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
import simple_parsing as sp

from algomastery.catalog import seed_database
from algomastery.constants import Rating
from algomastery.db.database import Database
from algomastery.review.dashboard import ReviewDashboard
from algomastery.review.dates import LocalClock, day_start
from algomastery.review.engine import ReviewEngine
from algomastery.review.queue import DueQueue


@dataclass
class Args:
    """Replay simulated review sessions."""

    days: int = 14  # Number of days to simulate
    skip_every: int = 5  # Skip a session every N days (0 = never)
    seed: int = 7  # Random seed for ratings
    timezone: str = "Europe/Dublin"  # Learner timezone
    verbose: bool = False  # Show every rating


console = Console()

# Weighted so most reviews pass
RATING_WEIGHTS = {Rating.AGAIN: 1, Rating.HARD: 2, Rating.GOOD: 5, Rating.EASY: 2}


def create_temp_db() -> Database:
    temp_dir = tempfile.mkdtemp()
    db = Database(str(Path(temp_dir) / "simulation.db"))
    db.init_schema()
    return db


def main() -> None:
    args = sp.parse(Args)
    rng = random.Random(args.seed)

    console.print(Panel(
        "[bold blue]Review Simulation[/bold blue]\n"
        f"{args.days} days in {args.timezone}",
        title="algomastery",
    ))

    db = create_temp_db()
    moment = {"now": datetime.now()}
    clock = LocalClock(args.timezone, now_fn=lambda: moment["now"])
    start = day_start(clock.today(), clock.tz) - timedelta(days=args.days - 1)
    moment["now"] = start + timedelta(hours=9)

    seed_database(db, clock)
    engine = ReviewEngine(db, clock)
    for problem in db.get_all_problems():
        engine.add_to_review(problem.id)

    queue = DueQueue(db, clock)
    table = Table(title="Daily sessions")
    table.add_column("Date")
    table.add_column("Due", justify="right")
    table.add_column("Reviewed", justify="right")

    for offset in range(args.days):
        moment["now"] = start + timedelta(days=offset, hours=9)
        due = queue.get_due_today()
        if args.skip_every and offset % args.skip_every == args.skip_every - 1:
            table.add_row(clock.today().isoformat(), str(len(due)), "[dim]skipped[/dim]")
            continue

        for item in due:
            rating = rng.choices(list(RATING_WEIGHTS), weights=list(RATING_WEIGHTS.values()))[0]
            state = engine.record_review(item.problem.id, rating)
            if args.verbose:
                console.print(
                    f"  {clock.today()} {item.problem.title}: {rating.name} -> "
                    f"{state.interval_days}d (ease {state.easiness_factor})"
                )
        table.add_row(clock.today().isoformat(), str(len(due)), str(len(due)))

    console.print(table)

    dashboard = ReviewDashboard(db, clock)
    streak = dashboard.streak.value
    stats = dashboard.weekly_stats.value
    console.print(
        f"\nStreak: {streak.current_streak} (longest {streak.longest_streak}), "
        f"reviewed today: {streak.has_reviewed_today}"
    )
    console.print(f"Last 7 days: {stats.weekly_total} reviews, {stats.daily_average}/day")
    console.print(f"Still due today: {dashboard.due_count}")
    dashboard.close()

    console.print(Panel("[bold green]Simulation complete!", title="Done"))


if __name__ == "__main__":
    main()
