#!/usr/bin/env python3
"""Initialize the database with schema and seed problems."""

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
import simple_parsing as sp

from algomastery.catalog import seed_database
from algomastery.config import Config, setup_logging
from algomastery.db.database import Database
from algomastery.review.dates import LocalClock
from algomastery.review.engine import ReviewEngine


@dataclass
class Args:
    """Create the database and add starter problems."""

    enroll: bool = False  # Also add every problem to the review queue


console = Console()


def main() -> None:
    args = sp.parse(Args)
    console.rule("[bold blue]Initializing Algo Mastery Database")

    # Load config
    config = Config.from_env()
    setup_logging(config.log_level)
    config.ensure_database_dir()

    console.print(f"Database path: {config.database_path}")

    # Initialize database
    db = Database(config.database_path)
    db.init_schema()
    console.print("[green]✓ Schema created[/green]")

    # Seed problems
    clock = LocalClock(config.timezone)
    count = seed_database(db, clock)
    console.print(f"[green]✓ Added {count} problems[/green]")

    if args.enroll:
        engine = ReviewEngine(db, clock)
        enrolled = 0
        for problem in db.get_all_problems():
            if not engine.is_in_review(problem.id):
                engine.add_to_review(problem.id)
                enrolled += 1
        console.print(f"[green]✓ Enrolled {enrolled} problems for review[/green]")
    else:
        console.print("[yellow]No problems enrolled (pass --enroll to queue them)[/yellow]")

    console.print(Panel("[bold green]Database initialized successfully!", title="Done"))


if __name__ == "__main__":
    main()
