"""Configuration management for Algo Mastery."""

# This module centralizes environment variable loading and configuration,
# including the database path, the user's timezone and logging.

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

DEFAULT_DATABASE_PATH = "data/algomastery.db"

# Upper bound on problems shown in one review session
DEFAULT_DAILY_REVIEW_LIMIT = 50


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Database
    database_path: str = DEFAULT_DATABASE_PATH

    # Timezone used for day boundaries; empty means the system local zone
    timezone: str = ""

    # Logging
    log_level: str = "INFO"

    # Backups
    export_dir: str = "exports"

    # Review sessions
    daily_review_limit: int = DEFAULT_DAILY_REVIEW_LIMIT

    @staticmethod
    def _safe_int(value: str, default: int = 0) -> int:
        """Safely parse an integer, returning default if invalid."""
        try:
            return int(value)
        except (ValueError, TypeError):
            return default

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            database_path=os.environ.get("DATABASE_PATH", DEFAULT_DATABASE_PATH),
            timezone=os.environ.get("TIMEZONE", ""),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            export_dir=os.environ.get("EXPORT_DIR", "exports"),
            daily_review_limit=cls._safe_int(
                os.environ.get("DAILY_REVIEW_LIMIT", str(DEFAULT_DAILY_REVIEW_LIMIT)),
                DEFAULT_DAILY_REVIEW_LIMIT,
            ),
        )

    def ensure_database_dir(self) -> None:
        """Ensure the database directory exists."""
        Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

    def ensure_export_dir(self) -> Path:
        """Ensure the export directory exists and return it."""
        path = Path(self.export_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path


def setup_logging(level: str = "INFO") -> None:
    """Route log records through rich for the console scripts."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
