#!/usr/bin/env python3
"""Work through today's review queue in the terminal."""

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
import simple_parsing as sp

from algomastery.config import Config, setup_logging
from algomastery.constants import RATING_SHORTCUTS, rating_from_shortcut
from algomastery.db.database import Database
from algomastery.errors import ReviewRecordError
from algomastery.review.dates import LocalClock
from algomastery.review.engine import ReviewEngine
from algomastery.review.queue import DueQueue


@dataclass
class Args:
    """Review problems that are due today."""

    limit: int = 0  # Max problems this session (0 = DAILY_REVIEW_LIMIT)


console = Console()


def _rating_hint(engine: ReviewEngine, problem_id: str) -> str:
    preview = engine.preview_intervals(problem_id)
    parts = []
    for key, rating in RATING_SHORTCUTS.items():
        days = preview.for_rating(rating)
        parts.append(f"[bold]{key}[/bold] {rating.name.title()} ({days}d)")
    return "  ".join(parts)


def main() -> None:
    args = sp.parse(Args)

    config = Config.from_env()
    setup_logging(config.log_level)

    db = Database(config.database_path)
    db.init_schema()
    clock = LocalClock(config.timezone)
    engine = ReviewEngine(db, clock)
    queue = DueQueue(db, clock)

    limit = args.limit or config.daily_review_limit
    due = queue.get_due_today()[:limit]
    if not due:
        console.print(Panel("[bold green]Nothing due today. Nice work!", title="Review"))
        return

    console.rule(f"[bold blue]Review session: {len(due)} due")
    reviewed = 0

    for position, item in enumerate(due, start=1):
        problem = item.problem
        console.print(
            Panel(
                f"[bold]{problem.title}[/bold]\n"
                f"{problem.topic} · {problem.difficulty.value}\n"
                f"{problem.url or ''}",
                title=f"{position}/{len(due)}",
            )
        )

        # Stay on this problem until a rating is stored or the user quits
        while True:
            console.print(_rating_hint(engine, problem.id))
            choice = Prompt.ask("Rating", choices=[*RATING_SHORTCUTS, "q"], show_choices=False)
            if choice == "q":
                console.print(f"[yellow]Stopped after {reviewed} reviews[/yellow]")
                return
            try:
                state = engine.record_review(problem.id, rating_from_shortcut(choice))
            except ReviewRecordError as exc:
                console.print(f"[red]{exc}[/red]")
                continue
            console.print(f"[green]Next review in {state.interval_days} day(s)[/green]\n")
            reviewed += 1
            break

    console.print(Panel(f"[bold green]Reviewed {reviewed} problems", title="Done"))


if __name__ == "__main__":
    main()
