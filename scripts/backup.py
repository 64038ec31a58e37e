#!/usr/bin/env python3
"""Export data to, or restore it from, a JSON backup file."""

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
import simple_parsing as sp

from algomastery.backup.export import export_all_data, get_export_filename, get_export_preview, write_json_file
from algomastery.backup.importer import import_data, read_json_file, validate_export
from algomastery.config import Config, setup_logging
from algomastery.db.database import Database
from algomastery.errors import AlgoMasteryError
from algomastery.review.dates import LocalClock


@dataclass
class Args:
    """Back up or restore the review database."""

    action: str = "export"  # "export" or "import"
    path: str = ""  # File to read or write (default: EXPORT_DIR/<dated name>)
    yes: bool = False  # Skip the confirmation before replacing data on import


console = Console()


def run_export(db: Database, config: Config, clock: LocalClock, path: str) -> None:
    preview = get_export_preview(db)
    console.print(
        f"Exporting {preview.problems} problems, {preview.reviews} reviews, "
        f"{preview.review_history} history entries (~{preview.estimated_size})"
    )
    target = Path(path) if path else config.ensure_export_dir() / get_export_filename(clock)
    write_json_file(target, export_all_data(db, clock))
    console.print(Panel(f"[bold green]Saved {target}", title="Export"))


def run_import(db: Database, path: str, assume_yes: bool) -> None:
    if not path:
        console.print("[red]Error: --path is required for import[/red]")
        return

    raw = read_json_file(path)
    validation = validate_export(raw)
    for warning in validation.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")
    if not validation.is_valid:
        for error in validation.errors:
            console.print(f"[red]{error}[/red]")
        return

    stats = validation.stats
    console.print(
        f"Backup v{validation.version}: {stats.problems} problems, {stats.reviews} reviews, "
        f"{stats.review_history} history entries ({stats.estimated_size})"
    )
    if not assume_yes and not Confirm.ask("Replace all existing data?"):
        console.print("[yellow]Import cancelled[/yellow]")
        return

    result = import_data(db, raw)
    console.print(Panel(f"[bold green]Imported {result.review_history} history entries", title="Import"))


def main() -> None:
    args = sp.parse(Args)

    config = Config.from_env()
    setup_logging(config.log_level)

    db = Database(config.database_path)
    db.init_schema()
    clock = LocalClock(config.timezone)

    try:
        if args.action == "export":
            run_export(db, config, clock, args.path)
        elif args.action == "import":
            run_import(db, args.path, args.yes)
        else:
            console.print(f"[red]Unknown action: {args.action}[/red]")
    except AlgoMasteryError as e:
        console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
