"""Data export with checksum generation."""

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from algomastery.backup.schemas import ExportPayload, HistoryRecord, ProblemRecord, ReviewRecord
from algomastery.db.database import PROBLEMS, REVIEW_HISTORY, REVIEWS, Database
from algomastery.review.dates import LocalClock

logger = logging.getLogger(__name__)

# Current export format version
EXPORT_VERSION = "1.0.0"

# App version written into export metadata
APP_VERSION = "0.1.0"


@dataclass
class ExportStats:
    """Preview of what an export will contain."""

    problems: int
    reviews: int
    review_history: int
    estimated_size: str


def generate_checksum(data: dict) -> str:
    """SHA-256 of the canonical JSON form of the exported collections."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def format_bytes(size: int) -> str:
    """Format a byte count for humans."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def build_payload(db: Database) -> dict:
    """Serialize every collection to JSON-compatible data."""
    payload = ExportPayload(
        problems=[ProblemRecord.from_model(p) for p in db.get_all_problems()],
        reviews=[ReviewRecord.from_model(r) for r in db.get_all_reviews()],
        review_history=[HistoryRecord.from_model(h) for h in db.get_history()],
    )
    return payload.model_dump(mode="json", by_alias=True)


def get_export_preview(db: Database) -> ExportStats:
    """Row counts and an estimated file size for the export dialog."""
    counts = db.count_rows()
    size = len(json.dumps(build_payload(db)).encode("utf-8"))
    return ExportStats(
        problems=counts[PROBLEMS],
        reviews=counts[REVIEWS],
        review_history=counts[REVIEW_HISTORY],
        estimated_size=format_bytes(size),
    )


def export_all_data(db: Database, clock: LocalClock | None = None) -> dict:
    """Export all data with version metadata and a checksum."""
    clock = clock or LocalClock()
    data = build_payload(db)
    export = {
        "version": EXPORT_VERSION,
        "exportedAt": clock.now().isoformat(),
        "appVersion": APP_VERSION,
        "checksum": generate_checksum(data),
        "data": data,
    }
    logger.info(
        f"Exported {len(data['problems'])} problems, {len(data['reviews'])} reviews, "
        f"{len(data['reviewHistory'])} history entries"
    )
    return export


def get_export_filename(clock: LocalClock | None = None) -> str:
    """Backup file name stamped with today's date."""
    clock = clock or LocalClock()
    return f"algos-mastery-backup-{clock.today().isoformat()}.json"


def write_json_file(path: str | Path, data: dict) -> Path:
    """Write export data as pretty-printed JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
