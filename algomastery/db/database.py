"""SQLite database setup and operations."""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from algomastery.db.changefeed import Change, ChangeFeed
from algomastery.db.models import (
    Difficulty,
    Problem,
    ProblemStatus,
    ReviewHistoryEntry,
    ReviewState,
)


PROBLEMS = "problems"
REVIEWS = "reviews"
REVIEW_HISTORY = "review_history"
ALL_TABLES = (PROBLEMS, REVIEWS, REVIEW_HISTORY)


SCHEMA = """
CREATE TABLE IF NOT EXISTS problems (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    url TEXT,
    topic TEXT NOT NULL,
    difficulty TEXT NOT NULL,
    status TEXT DEFAULT 'unsolved',
    notes TEXT DEFAULT '',
    created_at TIMESTAMP,
    updated_at TIMESTAMP
);

CREATE TABLE IF NOT EXISTS reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    problem_id TEXT NOT NULL UNIQUE,
    easiness_factor REAL DEFAULT 2.5 CHECK (easiness_factor >= 1.3),
    interval_days INTEGER DEFAULT 0 CHECK (interval_days >= 0),
    repetitions INTEGER DEFAULT 0 CHECK (repetitions >= 0),
    next_review TIMESTAMP NOT NULL,
    last_reviewed TIMESTAMP
);

CREATE TABLE IF NOT EXISTS review_history (
    id TEXT PRIMARY KEY,
    problem_id TEXT NOT NULL,
    quality INTEGER NOT NULL CHECK (quality BETWEEN 0 AND 5),
    reviewed_at TIMESTAMP NOT NULL,
    interval_before INTEGER NOT NULL,
    interval_after INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_problems_topic ON problems(topic);
CREATE INDEX IF NOT EXISTS idx_reviews_next_review ON reviews(next_review);
CREATE INDEX IF NOT EXISTS idx_history_problem ON review_history(problem_id);
CREATE INDEX IF NOT EXISTS idx_history_reviewed_at ON review_history(reviewed_at);
"""


def encode_timestamp(value: datetime | None) -> str | None:
    """Store timestamps as fixed-width UTC ISO strings so they sort as text.

    Naive datetimes are rejected; the store cannot know which zone they meant.
    """
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"Timestamp must be timezone-aware, got naive {value.isoformat()}")
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def decode_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_problem(row: sqlite3.Row) -> Problem:
    """Convert a database row to a Problem."""
    return Problem(
        id=row["id"],
        title=row["title"],
        url=row["url"],
        topic=row["topic"],
        difficulty=Difficulty(row["difficulty"]),
        status=ProblemStatus(row["status"]),
        notes=row["notes"] or "",
        created_at=decode_timestamp(row["created_at"]),
        updated_at=decode_timestamp(row["updated_at"]),
    )


def _row_to_review(row: sqlite3.Row) -> ReviewState:
    """Convert a database row to a ReviewState."""
    return ReviewState(
        id=row["id"],
        problem_id=row["problem_id"],
        easiness_factor=row["easiness_factor"],
        interval_days=row["interval_days"],
        repetitions=row["repetitions"],
        next_review=decode_timestamp(row["next_review"]),
        last_reviewed=decode_timestamp(row["last_reviewed"]),
    )


def _row_to_history(row: sqlite3.Row) -> ReviewHistoryEntry:
    """Convert a database row to a ReviewHistoryEntry."""
    return ReviewHistoryEntry(
        id=row["id"],
        problem_id=row["problem_id"],
        quality=row["quality"],
        reviewed_at=decode_timestamp(row["reviewed_at"]),
        interval_before=row["interval_before"],
        interval_after=row["interval_after"],
    )


class Transaction:
    """Write operations sharing one SQLite transaction.

    Obtained from Database.transaction(); everything done through it
    commits together or not at all.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.touched: set[str] = set()

    def get_review(self, problem_id: str) -> ReviewState | None:
        row = self.conn.execute("SELECT * FROM reviews WHERE problem_id = ?", (problem_id,)).fetchone()
        return _row_to_review(row) if row else None

    def put_review(self, state: ReviewState) -> ReviewState:
        """Insert or update the state for a problem; returns it with its row id."""
        self.conn.execute(
            """
            INSERT INTO reviews
            (problem_id, easiness_factor, interval_days, repetitions, next_review, last_reviewed)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(problem_id) DO UPDATE SET
                easiness_factor = excluded.easiness_factor,
                interval_days = excluded.interval_days,
                repetitions = excluded.repetitions,
                next_review = excluded.next_review,
                last_reviewed = excluded.last_reviewed
            """,
            (
                state.problem_id,
                state.easiness_factor,
                state.interval_days,
                state.repetitions,
                encode_timestamp(state.next_review),
                encode_timestamp(state.last_reviewed),
            ),
        )
        self.touched.add(REVIEWS)
        return self.get_review(state.problem_id)

    def insert_review(self, state: ReviewState) -> None:
        """Insert a state keeping its row id (used by import)."""
        self.conn.execute(
            """
            INSERT INTO reviews
            (id, problem_id, easiness_factor, interval_days, repetitions, next_review, last_reviewed)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                state.id,
                state.problem_id,
                state.easiness_factor,
                state.interval_days,
                state.repetitions,
                encode_timestamp(state.next_review),
                encode_timestamp(state.last_reviewed),
            ),
        )
        self.touched.add(REVIEWS)

    def append_history(self, entry: ReviewHistoryEntry) -> None:
        self.conn.execute(
            """
            INSERT INTO review_history
            (id, problem_id, quality, reviewed_at, interval_before, interval_after)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.problem_id,
                entry.quality,
                encode_timestamp(entry.reviewed_at),
                entry.interval_before,
                entry.interval_after,
            ),
        )
        self.touched.add(REVIEW_HISTORY)

    def add_problem(self, problem: Problem) -> None:
        self.conn.execute(
            """
            INSERT INTO problems
            (id, title, url, topic, difficulty, status, notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                problem.id,
                problem.title,
                problem.url,
                problem.topic,
                problem.difficulty.value,
                problem.status.value,
                problem.notes,
                encode_timestamp(problem.created_at),
                encode_timestamp(problem.updated_at),
            ),
        )
        self.touched.add(PROBLEMS)

    def delete_problem(self, problem_id: str) -> bool:
        cursor = self.conn.execute("DELETE FROM problems WHERE id = ?", (problem_id,))
        self.touched.add(PROBLEMS)
        return cursor.rowcount > 0

    def clear(self, tables: Iterable[str] = ALL_TABLES) -> None:
        for table in tables:
            if table not in ALL_TABLES:
                raise ValueError(f"Unknown table: {table}")
            self.conn.execute(f"DELETE FROM {table}")
            self.touched.add(table)


class Database:
    """SQLite database wrapper with thread-local connection pooling.

    Writes go through transaction(), which serialises them behind one
    lock and announces committed changes on ``self.changes``.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._local = threading.local()
        self._write_lock = threading.RLock()
        self.changes = ChangeFeed()
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create a thread-local database connection."""
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self._local.conn = sqlite3.connect(self.db_path)
            self._local.conn.row_factory = sqlite3.Row
        return self._local.conn

    @contextmanager
    def connection(self):
        """Get a database connection (reuses thread-local connection)."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run several writes atomically.

        Subscribers hear about the change only after the commit succeeds.
        """
        with self._write_lock:
            with self.connection() as conn:
                tx = Transaction(conn)
                yield tx
            touched = frozenset(tx.touched)
        if touched:
            self.changes.publish(Change(tables=touched))

    def close(self) -> None:
        """Close the thread-local connection if open."""
        if hasattr(self._local, "conn") and self._local.conn is not None:
            self._local.conn.close()
            self._local.conn = None

    def init_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    # Problem operations
    def add_problem(self, problem: Problem) -> str:
        """Add a problem and return its ID."""
        with self.transaction() as tx:
            tx.add_problem(problem)
        return problem.id

    def get_problem(self, problem_id: str) -> Problem | None:
        """Get a problem by ID."""
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM problems WHERE id = ?", (problem_id,)).fetchone()
            if row:
                return _row_to_problem(row)
            return None

    def get_problems(self, problem_ids: Iterable[str]) -> dict[str, Problem]:
        """Look up several problems at once, keyed by ID. Missing IDs are absent."""
        ids = list(dict.fromkeys(problem_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        with self.connection() as conn:
            rows = conn.execute(f"SELECT * FROM problems WHERE id IN ({placeholders})", ids).fetchall()
            return {row["id"]: _row_to_problem(row) for row in rows}

    def get_all_problems(self) -> list[Problem]:
        """Get all problems, newest first."""
        with self.connection() as conn:
            rows = conn.execute("SELECT * FROM problems ORDER BY created_at DESC, id").fetchall()
            return [_row_to_problem(row) for row in rows]

    def delete_problem(self, problem_id: str) -> bool:
        """Delete a problem. Its review state is left in place."""
        with self.transaction() as tx:
            return tx.delete_problem(problem_id)

    # Review state operations
    def get_review(self, problem_id: str) -> ReviewState | None:
        """Get the review state for a problem."""
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM reviews WHERE problem_id = ?", (problem_id,)).fetchone()
            if row:
                return _row_to_review(row)
            return None

    def get_all_reviews(self) -> list[ReviewState]:
        """Get every review state in enrolment order."""
        with self.connection() as conn:
            rows = conn.execute("SELECT * FROM reviews ORDER BY id").fetchall()
            return [_row_to_review(row) for row in rows]

    def get_reviews_due_by(self, cutoff: datetime) -> list[ReviewState]:
        """Get states whose next review is at or before cutoff.

        Ordered by next review, then enrolment order.
        """
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM reviews
                WHERE next_review <= ?
                ORDER BY next_review, id
                """,
                (encode_timestamp(cutoff),),
            ).fetchall()
            return [_row_to_review(row) for row in rows]

    def save_review(self, state: ReviewState) -> ReviewState:
        """Insert or update a review state."""
        with self.transaction() as tx:
            return tx.put_review(state)

    # Review history operations
    def add_history_entry(self, entry: ReviewHistoryEntry) -> None:
        """Append a history entry."""
        with self.transaction() as tx:
            tx.append_history(entry)

    def get_history(self, problem_id: str | None = None) -> list[ReviewHistoryEntry]:
        """Get review history in chronological order."""
        with self.connection() as conn:
            if problem_id:
                rows = conn.execute(
                    """
                    SELECT * FROM review_history
                    WHERE problem_id = ?
                    ORDER BY reviewed_at, rowid
                    """,
                    (problem_id,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM review_history ORDER BY reviewed_at, rowid").fetchall()
            return [_row_to_history(row) for row in rows]

    def get_history_between(self, start: datetime, end: datetime) -> list[ReviewHistoryEntry]:
        """Get history entries with start <= reviewed_at < end."""
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM review_history
                WHERE reviewed_at >= ? AND reviewed_at < ?
                ORDER BY reviewed_at, rowid
                """,
                (encode_timestamp(start), encode_timestamp(end)),
            ).fetchall()
            return [_row_to_history(row) for row in rows]

    def get_review_times(self) -> list[datetime]:
        """Get every reviewed_at timestamp, oldest first."""
        with self.connection() as conn:
            rows = conn.execute("SELECT reviewed_at FROM review_history ORDER BY reviewed_at").fetchall()
            return [decode_timestamp(row["reviewed_at"]) for row in rows]

    # Bulk operations
    def count_rows(self) -> dict[str, int]:
        """Row counts per table."""
        with self.connection() as conn:
            return {table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] for table in ALL_TABLES}

    def clear_all(self) -> None:
        """Wipe problems, review states and history."""
        with self.transaction() as tx:
            tx.clear()
