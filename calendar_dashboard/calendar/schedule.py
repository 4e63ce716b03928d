"""Merged week schedule across one or many calendars."""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .normalizer import NO_TITLE, event_bounds, is_all_day
from .ranges import window_bounds
from .selection import select_targets
from .types import CalendarInfo, DayWindow, DisplayEvent, RawEvent

logger = logging.getLogger(__name__)

DEFAULT_EVENT_BACKGROUND = "#3b82f6"
DARK_TEXT = "#111827"
LIGHT_TEXT = "#ffffff"
_HEX_DIGITS = set("0123456789abcdefABCDEF")


def normalize_hex_color(color: Optional[str]) -> Optional[str]:
    """Return ``#rrggbb`` for ``#rgb``, ``#rrggbb`` or ``#rrggbbaa``; else ``None``.

    The alpha channel of an 8-digit color is dropped.
    """
    value = str(color or "").strip()
    if not value.startswith("#"):
        return None
    digits = value[1:]
    if not digits or not set(digits) <= _HEX_DIGITS:
        return None
    if len(digits) == 3:
        return "#" + "".join(c + c for c in digits).lower()
    if len(digits) in (6, 8):
        return f"#{digits[:6].lower()}"
    return None


def pick_event_text_color(background_color: Optional[str]) -> str:
    """Dark text on light backgrounds (YIQ >= 160), light text otherwise."""
    hex_color = normalize_hex_color(background_color)
    if not hex_color:
        return LIGHT_TEXT
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return DARK_TEXT if yiq >= 160 else LIGHT_TEXT


def _background_for(calendar: CalendarInfo) -> str:
    return normalize_hex_color(calendar.background_color) or DEFAULT_EVENT_BACKGROUND


def merge_schedule(
    per_calendar_events: Mapping[str, Sequence[RawEvent]],
    calendars: Sequence[CalendarInfo],
) -> List[DisplayEvent]:
    """One display list from several calendars' events.

    Events missing a start or end are skipped. Ids are prefixed with the
    calendar id so identical provider ids from different calendars stay
    distinct.
    """
    by_id: Dict[str, CalendarInfo] = {cal.id: cal for cal in calendars}
    merged: List[DisplayEvent] = []

    for calendar_id, raw_events in per_calendar_events.items():
        calendar = by_id.get(calendar_id) or CalendarInfo(id=calendar_id, summary=calendar_id)
        background = _background_for(calendar)
        text_color = pick_event_text_color(background)

        for raw in raw_events:
            bounds = event_bounds(raw)
            if bounds is None:
                continue
            raw_id = str(raw.get("id", ""))
            merged.append(
                DisplayEvent(
                    id=f"{calendar_id}:{raw_id}",
                    raw_event_id=raw_id,
                    calendar_id=calendar_id,
                    calendar_name=calendar.summary or "",
                    title=raw.get("summary") or NO_TITLE,
                    description=raw.get("description") or "",
                    start=bounds[0],
                    end=bounds[1],
                    all_day=is_all_day(raw),
                    background_color=background,
                    text_color=text_color,
                )
            )

    merged.sort(key=lambda event: (event.start, event.id))
    return merged


def build_schedule_view(
    gateway,
    calendars: Sequence[CalendarInfo],
    target: Optional[str],
    window: DayWindow,
    *,
    tz,
) -> List[DisplayEvent]:
    """Fetch and merge events for ``target`` (a calendar id or ``"all"``).

    Raises:
        CalendarNotFound: ``target`` names a calendar that is not listed.
    """
    targets = select_targets(calendars, target)
    time_min, time_max = window_bounds(window, tz)
    per_calendar = {
        calendar.id: gateway.list_all_events(calendar.id, time_min, time_max)
        for calendar in targets
    }
    events = merge_schedule(per_calendar, targets)
    logger.debug(f"Merged {len(events)} events from {len(targets)} calendar(s)")
    return events
