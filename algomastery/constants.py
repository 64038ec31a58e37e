"""Shared constants for the Algo Mastery application."""

from enum import IntEnum


class Rating(IntEnum):
    """Review ratings on the 0-5 SM-2 quality scale.

    Only four buttons exist, so 1 and 2 are never produced. Anything
    below 3 is a lapse.
    """

    AGAIN = 0
    HARD = 3
    GOOD = 4
    EASY = 5


# As a frozenset for O(1) membership testing
VALID_QUALITIES = frozenset(int(r) for r in Rating)

# Minimum quality that counts as a successful recall
PASSING_QUALITY = 3

# Keyboard shortcuts on the rating surface
RATING_SHORTCUTS = {
    "1": Rating.AGAIN,
    "2": Rating.HARD,
    "3": Rating.GOOD,
    "4": Rating.EASY,
}

# SM-2 defaults for a newly enrolled problem
DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL = 0
DEFAULT_REPETITIONS = 0

MIN_EASE_FACTOR = 1.3
LAPSE_EASE_PENALTY = 0.2

# Rolling window for weekly stats
STATS_WINDOW_DAYS = 7

# Topic slugs in unlock order
TOPIC_SLUGS = (
    "arrays-hashing",
    "two-pointers",
    "sliding-window",
    "stack",
    "binary-search",
    "linked-list",
    "trees",
    "tries",
    "backtracking",
    "heap",
    "graphs",
    "dynamic-programming",
    "greedy",
    "intervals",
    "bit-manipulation",
)


def rating_from_shortcut(key: str) -> Rating:
    """Map a rating key ("1"-"4") to its Rating."""
    try:
        return RATING_SHORTCUTS[key.strip()]
    except KeyError:
        raise ValueError(f"Unknown rating shortcut: {key!r}") from None
