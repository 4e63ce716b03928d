"""Calendar-day arithmetic for report windows and schedule weeks.

Everything here works on ``datetime.date`` so month ends, leap days and
daylight-saving changes never skip or repeat a day.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional, Tuple

from .types import DayWindow

_DAY_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEK_DAYS = 7


def parse_day_key(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string, returning ``None`` when malformed."""
    if not value or not _DAY_KEY.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _require_day(value: str) -> date:
    parsed = parse_day_key(value)
    if parsed is None:
        raise ValueError(f"Invalid day '{value}', expected YYYY-MM-DD.")
    return parsed


def enumerate_days(start_day: Optional[str], end_day: Optional[str]) -> List[str]:
    """Inclusive list of day keys; empty for malformed or reversed bounds."""
    start = parse_day_key(start_day)
    end = parse_day_key(end_day)
    if start is None or end is None or start > end:
        return []
    return [
        (start + timedelta(days=offset)).isoformat()
        for offset in range((end - start).days + 1)
    ]


def window_days(window: DayWindow) -> List[str]:
    return enumerate_days(window.start_day, window.end_day)


def shift_day(day: str, delta_days: int) -> str:
    try:
        return (_require_day(day) + timedelta(days=delta_days)).isoformat()
    except OverflowError:
        raise ValueError(f"Shifting {day} by {delta_days} days is out of range.") from None


def start_of_week(day: str) -> str:
    """Monday on or before ``day``."""
    current = _require_day(day)
    return (current - timedelta(days=current.weekday())).isoformat()


def resolve_study_window(anchor_day: str, span_days: int, page: int = 0) -> DayWindow:
    """Window of ``span_days`` days, ``page`` windows back from ``anchor_day``.

    A 7-day span snaps to Monday-aligned weeks; any other span ends on the
    anchor day itself.
    """
    if span_days < 1:
        raise ValueError("span_days must be at least 1.")
    if page < 0:
        raise ValueError("page must be zero or positive.")

    if span_days == WEEK_DAYS:
        window_start = shift_day(start_of_week(anchor_day), -(page * WEEK_DAYS))
        return DayWindow(window_start, shift_day(window_start, WEEK_DAYS - 1))

    window_end = shift_day(anchor_day, -(page * span_days))
    return DayWindow(shift_day(window_end, -(span_days - 1)), window_end)


def week_window(week_start: str) -> DayWindow:
    """Seven-day schedule window beginning on the Monday of ``week_start``."""
    monday = start_of_week(week_start)
    return DayWindow(monday, shift_day(monday, WEEK_DAYS - 1))


def month_range(today: date) -> DayWindow:
    """First and last day of ``today``'s month."""
    first = today.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return DayWindow(first.isoformat(), (next_first - timedelta(days=1)).isoformat())


def window_bounds(window: DayWindow, tz: tzinfo) -> Tuple[datetime, datetime]:
    """``timeMin``/``timeMax`` instants covering the window in local time."""
    start = _require_day(window.start_day)
    end = _require_day(window.end_day)
    if start > end:
        raise ValueError(f"Window start {window.start_day} is after end {window.end_day}.")
    return (
        datetime.combine(start, time(0, 0, 0), tzinfo=tz),
        datetime.combine(end, time(23, 59, 59), tzinfo=tz),
    )
