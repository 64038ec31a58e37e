"""Local calendar-day helpers.

Every "today", "due" and "overdue" decision is made on calendar days in
the learner's timezone, never on raw timestamps. Two reviews at 23:59 and
00:01 local time land on different days even when UTC puts them on the
same one.
"""

import logging
import os
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

LOCALTIME_PATH = "/etc/localtime"


def _zone_or_none(key: str) -> ZoneInfo | None:
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def system_timezone() -> tzinfo:
    """The machine's zone with its full DST rules.

    Checks ``TZ`` first, then the ``/etc/localtime`` link or file. Only when
    neither names a zone does it fall back to the current fixed UTC offset.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        zone = _zone_or_none(name)
        if zone is not None:
            return zone
        logger.warning(f"TZ={name!r} is not a known timezone, trying {LOCALTIME_PATH}")

    target = os.path.realpath(LOCALTIME_PATH)
    if "zoneinfo/" in target:
        zone = _zone_or_none(target.split("zoneinfo/", 1)[1])
        if zone is not None:
            return zone
    try:
        with open(LOCALTIME_PATH, "rb") as fh:
            return ZoneInfo.from_file(fh, key="localtime")
    except (OSError, ValueError):
        pass

    logger.warning("Could not determine the system timezone; set TIMEZONE to an IANA name")
    return datetime.now().astimezone().tzinfo


def resolve_timezone(name: str | tzinfo | None) -> tzinfo:
    """Return a tzinfo for an IANA name, falling back to the system zone."""
    if isinstance(name, tzinfo):
        return name
    if name:
        return ZoneInfo(name)
    return system_timezone()


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Express a moment in the local zone. Naive values are taken as local."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """The local calendar day a moment falls on."""
    return to_local(moment, tz).date()


def day_start(day: date, tz: tzinfo) -> datetime:
    """Local midnight of a calendar day."""
    return datetime.combine(day, time.min, tzinfo=tz)


def start_of_day(moment: datetime, tz: tzinfo) -> datetime:
    """Local midnight of the day containing a moment."""
    return day_start(local_date(moment, tz), tz)


def add_days(start: datetime, days: int) -> datetime:
    """Move a local midnight by whole calendar days.

    Works on the wall clock so the result is still midnight after a DST
    change.
    """
    return datetime.combine(start.date() + timedelta(days=days), time.min, tzinfo=start.tzinfo)


class LocalClock:
    """Source of "now" and "today" in the learner's timezone.

    Pass ``now_fn`` to pin the current time, e.g. in tests.
    """

    def __init__(self, timezone: str | tzinfo | None = None, now_fn: Callable[[], datetime] | None = None):
        self.tz = resolve_timezone(timezone)
        self._now_fn = now_fn

    def now(self) -> datetime:
        if self._now_fn is None:
            return datetime.now(self.tz)
        return to_local(self._now_fn(), self.tz)

    def today(self) -> date:
        return self.now().date()

    def start_of_today(self) -> datetime:
        return day_start(self.today(), self.tz)

    def end_of_today(self) -> datetime:
        """Last representable instant of today."""
        return add_days(self.start_of_today(), 1) - timedelta(microseconds=1)
