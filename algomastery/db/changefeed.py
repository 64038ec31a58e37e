"""Change notifications and live queries.

The database publishes a Change after each committed write. Derived
views (due queue, streak, stats) wrap themselves in a LiveQuery that
recomputes when a table they read from changes.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class Change:
    """Tables touched by one committed write."""

    tables: frozenset[str]

    def touches(self, tables: frozenset[str] | None) -> bool:
        return tables is None or bool(self.tables & tables)


class ChangeFeed:
    """Plain publish/subscribe channel."""

    def __init__(self):
        self._subscribers: list[Callable[[Change], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[Change], None]) -> Unsubscribe:
        """Register a callback; returns a function that removes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: Change) -> None:
        """Deliver a change to every subscriber.

        A failing subscriber is logged and skipped; the write it reacts to
        has already committed.
        """
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(change)
            except Exception:
                logger.exception(f"Change subscriber failed for tables {sorted(change.tables)}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


class LiveQuery(Generic[T]):
    """A derived value kept fresh by a change feed."""

    def __init__(
        self,
        feed: ChangeFeed,
        compute: Callable[[], T],
        tables: frozenset[str] | None = None,
    ):
        self._compute = compute
        self._tables = tables
        self._listeners: list[Callable[[T], None]] = []
        self._value = compute()
        self._unsubscribe = feed.subscribe(self._on_change)

    @property
    def value(self) -> T:
        return self._value

    def refresh(self) -> T:
        """Recompute now and notify listeners."""
        self._value = self._compute()
        for listener in list(self._listeners):
            listener(self._value)
        return self._value

    def subscribe(self, listener: Callable[[T], None]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop following the change feed."""
        self._unsubscribe()
        self._listeners.clear()

    def _on_change(self, change: Change) -> None:
        if change.touches(self._tables):
            self.refresh()
