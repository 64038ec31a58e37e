"""SM-2 Spaced Repetition Algorithm.

Based on the SuperMemo SM-2 algorithm by Piotr Wozniak.
https://www.supermemo.com/en/blog/application-of-a-computer-to-improve-the-results-obtained-in-working-with-the-supermemo-method

Ratings come from four buttons (0, 3, 4, 5). A lapse costs a fixed ease
penalty instead of the SM-2 formula so one bad day cannot crater an item.
"""

from dataclasses import dataclass
from datetime import datetime

from algomastery.constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    DEFAULT_REPETITIONS,
    LAPSE_EASE_PENALTY,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    Rating,
)
from algomastery.review.dates import add_days


@dataclass(frozen=True)
class SM2Result:
    """Result of an SM-2 calculation."""

    easiness_factor: float
    interval_days: int
    repetitions: int


@dataclass(frozen=True)
class IntervalPreview:
    """Next interval in days for each rating button."""

    again: int
    hard: int
    good: int
    easy: int

    def for_rating(self, rating: Rating) -> int:
        return getattr(self, rating.name.lower())


def _round_half_up(value: float) -> int:
    # round() would send 2.5 to 2
    return int(value + 0.5)


def calculate_sm2(
    quality: int,
    easiness_factor: float = DEFAULT_EASE_FACTOR,
    interval_days: int = DEFAULT_INTERVAL,
    repetitions: int = DEFAULT_REPETITIONS,
) -> SM2Result:
    """
    Calculate the next review state using the SM-2 algorithm.

    Args:
        quality: Rating quality (0-5):
            5 - Easy
            4 - Good
            3 - Hard
            0 - Again (any value below 3 is treated the same)

        easiness_factor: Current easiness factor (>= 1.3)
        interval_days: Current interval in days
        repetitions: Number of consecutive successful reviews

    Returns:
        SM2Result with the updated values. The same inputs always give
        the same result.
    """
    if quality < PASSING_QUALITY:
        # Lapse - back to daily review
        new_ef = easiness_factor - LAPSE_EASE_PENALTY
        new_interval = 1
        new_repetitions = 0
    else:
        new_repetitions = repetitions + 1
        if new_repetitions == 1:
            new_interval = 1
        elif new_repetitions == 2:
            new_interval = 6
        else:
            new_interval = _round_half_up(interval_days * easiness_factor)

        new_ef = easiness_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))

    new_ef = max(MIN_EASE_FACTOR, round(new_ef, 2))

    return SM2Result(
        easiness_factor=new_ef,
        interval_days=new_interval,
        repetitions=new_repetitions,
    )


def preview_intervals(
    easiness_factor: float = DEFAULT_EASE_FACTOR,
    interval_days: int = DEFAULT_INTERVAL,
    repetitions: int = DEFAULT_REPETITIONS,
) -> IntervalPreview:
    """Preview the interval each rating would produce from a given state."""
    intervals = {
        rating.name.lower(): calculate_sm2(rating, easiness_factor, interval_days, repetitions).interval_days
        for rating in Rating
    }
    return IntervalPreview(**intervals)


def next_review_start(today_start: datetime, interval_days: int) -> datetime:
    """Local midnight of the day a review falls due."""
    return add_days(today_start, interval_days)
