"""Run window resolution (core domain)."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from core.models import TimeWindow

LOGGER = logging.getLogger(__name__)

DEFAULT_LOOKBACK = timedelta(hours=12)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def resolve_window(
    now: datetime,
    last_execution: Optional[datetime] = None,
    lookback: timedelta = DEFAULT_LOOKBACK,
    logger: Optional[logging.Logger] = None,
) -> TimeWindow:
    """Return the (last_execution, now) window for this run.

    Without a marker the window reaches back a fixed lookback. A marker that
    is not strictly before now cannot bound a window, so it is ignored in
    favour of the lookback.
    """

    log = logger or LOGGER
    if lookback <= timedelta(0):
        raise ValueError(f"Lookback must be positive, got {lookback}")

    end = as_utc(now)
    if last_execution is None:
        return TimeWindow(start=end - lookback, end=end)

    start = as_utc(last_execution)
    if start >= end:
        log.warning(
            "Last execution marker %s is not before now (%s), using a %s lookback",
            start.isoformat(),
            end.isoformat(),
            lookback,
        )
        return TimeWindow(start=end - lookback, end=end)
    return TimeWindow(start=start, end=end)


def partition_prefix(network_name: str, day: date) -> str:
    """Return the date partition prefix submissions are stored under."""

    return "/".join([network_name, "submissions", day.strftime("%Y-%m-%d")])


def window_prefixes(network_name: str, window: TimeWindow) -> list[str]:
    """Return the partition prefix of every UTC date the window touches."""

    day = window.start.date()
    prefixes = []
    while day <= window.end.date():
        prefixes.append(partition_prefix(network_name, day))
        day += timedelta(days=1)
    return prefixes
