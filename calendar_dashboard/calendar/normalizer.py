"""Reduce raw Google Calendar events to durations, day keys and tags."""
from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Tuple

from .titles import extract_tag
from .types import NormalizedEvent, RawEvent

NO_TITLE = "(no title)"

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _side_value(raw: RawEvent, side: str) -> Optional[str]:
    data = raw.get(side) or {}
    return data.get("dateTime") or data.get("date") or None


def event_bounds(raw: RawEvent) -> Optional[Tuple[str, str]]:
    """Return the ``(start, end)`` strings, preferring ``dateTime`` over ``date``."""
    start_value = _side_value(raw, "start")
    end_value = _side_value(raw, "end")
    if not start_value or not end_value:
        return None
    return start_value, end_value


def is_all_day(raw: RawEvent) -> bool:
    """An event is all-day when it has a date-only start and no date-time start."""
    start = raw.get("start") or {}
    return bool(start.get("date") and not start.get("dateTime"))


def parse_instant(value: Optional[str], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a provider date or date-time into an aware datetime.

    Date-only values become local midnight. Values without an offset are
    interpreted in ``tz`` (UTC when no zone is given).
    """
    if not value:
        return None
    text = str(value).strip()
    zone = tz or timezone.utc
    try:
        if _DATE_ONLY.match(text):
            day = date.fromisoformat(text)
            return datetime(day.year, day.month, day.day, tzinfo=zone)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def _round_minutes(seconds: float) -> int:
    # Half-up: 30 seconds counts as a minute.
    return int(seconds / 60 + 0.5)


def duration_minutes(raw: RawEvent, tz: Optional[tzinfo] = None) -> int:
    """Wall-clock duration in whole minutes, 0 when the event has no usable span."""
    bounds = event_bounds(raw)
    if bounds is None:
        return 0
    start = parse_instant(bounds[0], tz)
    end = parse_instant(bounds[1], tz)
    if start is None or end is None or end <= start:
        return 0
    return _round_minutes((end - start).total_seconds())


def day_key(raw: RawEvent, tz: Optional[tzinfo] = None) -> Optional[str]:
    """Calendar day (``YYYY-MM-DD``) an event belongs to.

    All-day events use the provider's date verbatim. Timed events use the
    date of their start instant, converted to ``tz`` when one is given and
    otherwise as written by the provider.
    """
    start = raw.get("start") or {}
    if start.get("date") and not start.get("dateTime"):
        return start["date"]
    value = start.get("dateTime")
    if not value:
        return None
    if tz is None:
        parsed = parse_instant(value)
        return value[:10] if parsed is not None else None
    parsed = parse_instant(value, tz)
    if parsed is None:
        return None
    return parsed.astimezone(tz).date().isoformat()


def normalize(
    raw: RawEvent,
    *,
    calendar_id: str = "",
    calendar_name: str = "",
    tz: Optional[tzinfo] = None,
) -> Optional[NormalizedEvent]:
    """Build a NormalizedEvent, or ``None`` when the event is not usable for duration."""
    bounds = event_bounds(raw)
    if bounds is None:
        return None
    minutes = duration_minutes(raw, tz)
    if minutes <= 0:
        return None
    day = day_key(raw, tz)
    if day is None:
        return None

    summary = raw.get("summary")
    return NormalizedEvent(
        id=str(raw.get("id", "")),
        tag=extract_tag(summary),
        title=summary or NO_TITLE,
        minutes=minutes,
        start_value=bounds[0],
        end_value=bounds[1],
        day=day,
        calendar_id=calendar_id,
        calendar_name=calendar_name,
        all_day=is_all_day(raw),
    )
