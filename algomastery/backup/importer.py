"""Data import with validation and checksum verification."""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from algomastery.backup.export import APP_VERSION, format_bytes, generate_checksum
from algomastery.backup.schemas import ExportPayload
from algomastery.db.database import Database
from algomastery.errors import AlgoMasteryError, ImportValidationError

logger = logging.getLogger(__name__)

COLLECTIONS = ("problems", "reviews", "reviewHistory")


@dataclass
class ImportStats:
    """Record counts per collection."""

    problems: int = 0
    reviews: int = 0
    review_history: int = 0
    estimated_size: str = "0 B"


@dataclass
class ValidationResult:
    """Outcome of checking an export file before import."""

    is_valid: bool
    version: str
    stats: ImportStats = field(default_factory=ImportStats)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def compare_versions(a: str, b: str) -> int:
    """Compare dotted versions: -1 if a < b, 0 if equal, 1 if a > b."""

    def parts(version: str) -> list[int]:
        numbers = []
        for piece in version.split(".")[:3]:
            try:
                numbers.append(int(piece))
            except ValueError:
                numbers.append(0)
        return numbers + [0] * (3 - len(numbers))

    left, right = parts(a), parts(b)
    return (left > right) - (left < right)


def _format_validation_error(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}")
    return messages


def _duplicate_ids(records: list[Any], key: str) -> list[str]:
    seen: set[str] = set()
    duplicates = []
    for record in records:
        value = getattr(record, key)
        if value in seen:
            duplicates.append(str(value))
        seen.add(value)
    return duplicates


def validate_export(export_data: Any) -> ValidationResult:
    """Validate export structure, field shapes and checksum."""
    if not isinstance(export_data, dict):
        return ValidationResult(
            is_valid=False,
            version="unknown",
            errors=["Invalid export data: not an object"],
        )

    errors: list[str] = []
    warnings: list[str] = []
    version = export_data.get("version")

    if not version or not isinstance(version, str):
        errors.append("Missing version field")
        version = "unknown"

    payload = export_data.get("data")
    if not isinstance(payload, dict):
        errors.append("Missing data field")

    if errors:
        return ValidationResult(is_valid=False, version=version, warnings=warnings, errors=errors)

    for name in COLLECTIONS:
        if not isinstance(payload.get(name), list):
            errors.append(f"Invalid {name}: expected array")

    if errors:
        return ValidationResult(is_valid=False, version=version, warnings=warnings, errors=errors)

    checksum = export_data.get("checksum")
    if isinstance(checksum, str) and checksum:
        if checksum != generate_checksum(payload):
            errors.append("Invalid checksum: data may be corrupted or modified")
    else:
        warnings.append("No checksum found: cannot verify data integrity")

    app_version = export_data.get("appVersion")
    if isinstance(app_version, str) and compare_versions(app_version, APP_VERSION) > 0:
        warnings.append(
            f"Export from newer app version ({app_version}). Some features may not import correctly."
        )

    try:
        parsed = ExportPayload.model_validate(payload)
    except ValidationError as exc:
        errors.extend(_format_validation_error(exc))
    else:
        for problem_id in _duplicate_ids(parsed.problems, "id"):
            errors.append(f"Duplicate problem id: {problem_id}")
        for problem_id in _duplicate_ids(parsed.reviews, "problem_id"):
            errors.append(f"Duplicate review for problem: {problem_id}")
        for entry_id in _duplicate_ids(parsed.review_history, "id"):
            errors.append(f"Duplicate history entry id: {entry_id}")

    stats = ImportStats(
        problems=len(payload["problems"]),
        reviews=len(payload["reviews"]),
        review_history=len(payload["reviewHistory"]),
        estimated_size=format_bytes(len(json.dumps(payload).encode("utf-8"))),
    )
    return ValidationResult(
        is_valid=not errors,
        version=version,
        stats=stats,
        warnings=warnings,
        errors=errors,
    )


def import_data(db: Database, export_data: Any) -> ImportStats:
    """Replace all stored data with the contents of an export.

    Nothing is written unless the whole file validates, and the
    replacement happens in a single transaction.
    """
    validation = validate_export(export_data)
    if not validation.is_valid:
        raise ImportValidationError(validation.errors)
    for warning in validation.warnings:
        logger.warning(warning)

    payload = ExportPayload.model_validate(export_data["data"])
    try:
        with db.transaction() as tx:
            tx.clear()
            for problem in payload.problems:
                tx.add_problem(problem.to_model())
            for review in payload.reviews:
                tx.insert_review(review.to_model())
            for entry in payload.review_history:
                tx.append_history(entry.to_model())
    except sqlite3.Error as exc:
        logger.error(f"Import failed: {exc}")
        raise AlgoMasteryError(f"Import failed: {exc}") from exc

    logger.info(
        f"Imported {len(payload.problems)} problems, {len(payload.reviews)} reviews, "
        f"{len(payload.review_history)} history entries"
    )
    return ImportStats(
        problems=len(payload.problems),
        reviews=len(payload.reviews),
        review_history=len(payload.review_history),
        estimated_size=validation.stats.estimated_size,
    )


def read_json_file(path: str | Path) -> Any:
    """Read and parse a JSON backup file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ImportValidationError([f"Failed to read file: {exc}"]) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportValidationError(["Invalid JSON file"]) from exc
