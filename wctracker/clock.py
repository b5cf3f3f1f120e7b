"""Tracking window arithmetic.

A window is named after the "logical day" it starts on, where the day boundary
is shifted from midnight by the configured clock start. With the default
04:00 start, 02:30 on the 10th still belongs to the window of the 9th.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from .config import DEFAULT_CLOCK_START, ClockStart

WINDOW_ID_FORMAT = "%Y-%m-%d"


def current_window_id(now: datetime, clock_start: ClockStart = DEFAULT_CLOCK_START) -> str:
    """Return the identifier of the window containing *now*."""
    shifted = now - timedelta(hours=clock_start.hour, minutes=clock_start.minute)
    return shifted.strftime(WINDOW_ID_FORMAT)


def parse_window_id(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, WINDOW_ID_FORMAT).date()
    except ValueError:
        return None


def has_elapsed(
    previous: str | None,
    interval: int,
    now: datetime,
    clock_start: ClockStart = DEFAULT_CLOCK_START,
) -> bool:
    """Return True when the window *previous* has run for *interval* days."""
    started = parse_window_id(previous)
    if started is None:
        return True
    current = parse_window_id(current_window_id(now, clock_start))
    return started + timedelta(days=interval) <= current


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
