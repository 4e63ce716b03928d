"""Event editor drafts.

A draft holds the fields of the create/edit form. It is immutable: every
edit produces a new draft through ``EventDraft.replace`` or one of the
helpers below, and ``validate_draft`` only reads it. Date-times use the
``YYYY-MM-DDTHH:MM`` form of an HTML ``datetime-local`` input, interpreted
in the draft's timezone.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple
from urllib import parse as urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import DEFAULT_TIMEZONE
from .google_calendar import build_event_body
from .normalizer import parse_instant
from .selection import pick_editable_calendar
from .titles import build_tagged_title, has_tag_prefix, extract_tag, strip_tag_prefix
from .types import CalendarInfo, DisplayEvent

GOOGLE_CALENDAR_WEB = "https://calendar.google.com/calendar/u/0/r"
DEFAULT_DURATION_MINUTES = 60
QUICK_STEP_MINUTES = 30

DraftMode = Literal["create", "edit"]

_LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


@dataclass(frozen=True, slots=True)
class EventDraft:
    mode: DraftMode = "create"
    calendar_id: str = ""
    event_id: str = ""
    tag: str = ""
    title: str = ""
    description: str = ""
    start: str = ""
    end: str = ""
    timezone: str = DEFAULT_TIMEZONE

    def replace(self, **changes: Any) -> "EventDraft":
        return dataclasses.replace(self, **changes)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def summary(self) -> str:
        return build_tagged_title(self.tag, self.title)


def to_local_input(value: Optional[str], tz: tzinfo) -> str:
    """Render a provider date or date-time as a ``datetime-local`` value."""
    if not value:
        return ""
    text = str(value)
    if len(text) == 10:
        return f"{text}T00:00" if parse_instant(text) else ""
    parsed = parse_instant(text, tz)
    if parsed is None:
        return ""
    return parsed.astimezone(tz).strftime(_LOCAL_INPUT_FORMAT)


def _parse_local(value: str, tz: tzinfo) -> Optional[datetime]:
    if not value:
        return None
    return parse_instant(value, tz)


def _add_minutes(value: str, minutes: int, tz: tzinfo) -> str:
    parsed = _parse_local(value, tz)
    if parsed is None:
        return ""
    return (parsed + timedelta(minutes=minutes)).strftime(_LOCAL_INPUT_FORMAT)


def draft_bounds(draft: EventDraft) -> Optional[Tuple[datetime, datetime]]:
    tz = draft.tzinfo
    start = _parse_local(draft.start, tz)
    end = _parse_local(draft.end, tz)
    if start is None or end is None:
        return None
    return start, end


def validate_draft(draft: EventDraft) -> List[str]:
    """Problems that block saving ``draft``; an empty list means it can be sent."""
    errors: List[str] = []
    if not draft.calendar_id:
        errors.append("Select a calendar.")
    try:
        draft.tzinfo
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"Unknown timezone '{draft.timezone}'.")
        return errors
    if not draft.title.strip() or not draft.start or not draft.end:
        errors.append("Title, start and end are required.")
    elif (bounds := draft_bounds(draft)) is None:
        errors.append("Start and end must be valid date-times.")
    elif bounds[1] <= bounds[0]:
        errors.append("End must be after start.")
    if draft.mode == "edit" and not draft.event_id:
        errors.append("Event id is missing.")
    return errors


def build_event_payload(draft: EventDraft) -> Dict[str, Any]:
    """Calendar API body for a valid draft.

    Raises:
        ValueError: the draft does not pass ``validate_draft``.
    """
    errors = validate_draft(draft)
    if errors:
        raise ValueError(" ".join(errors))
    start, end = draft_bounds(draft)
    return build_event_body(
        summary=draft.summary,
        start=start,
        end=end,
        time_zone=draft.timezone,
        description=draft.description,
    )


def draft_from_display_event(event: DisplayEvent, timezone: str = DEFAULT_TIMEZONE) -> EventDraft:
    """Edit draft for a schedule entry, with its tag split off the title."""
    tz = ZoneInfo(timezone)
    start = to_local_input(event.start, tz)
    end = to_local_input(event.end, tz) or _add_minutes(start, DEFAULT_DURATION_MINUTES, tz)
    return EventDraft(
        mode="edit",
        calendar_id=event.calendar_id,
        event_id=event.raw_event_id,
        tag=extract_tag(event.title) if has_tag_prefix(event.title) else "",
        title=strip_tag_prefix(event.title),
        description=event.description,
        start=start,
        end=end,
        timezone=timezone,
    )


def draft_for_slot(
    calendars: Sequence[CalendarInfo],
    start: datetime,
    end: Optional[datetime] = None,
    *,
    preferred_calendar_id: Optional[str] = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> EventDraft:
    """Create draft for a clicked or selected slot; one hour when no end is given."""
    end = end or start + timedelta(minutes=DEFAULT_DURATION_MINUTES)
    return EventDraft(
        mode="create",
        calendar_id=pick_editable_calendar(calendars, preferred_calendar_id) or "",
        start=start.strftime(_LOCAL_INPUT_FORMAT),
        end=end.strftime(_LOCAL_INPUT_FORMAT),
        timezone=timezone,
    )


# ============================================================================
# Quick-entry helpers
# ============================================================================


def round_up_to_step(now: datetime, step_minutes: int = QUICK_STEP_MINUTES) -> datetime:
    """Next ``step_minutes`` boundary at or after ``now`` (seconds dropped)."""
    base = now.replace(second=0, microsecond=0)
    remainder = base.minute % step_minutes
    if remainder == 0:
        return base
    return base + timedelta(minutes=step_minutes - remainder)


def with_start(draft: EventDraft, value: str) -> EventDraft:
    """Set the start; push the end one hour later when it would not follow it."""
    tz = draft.tzinfo
    changes: Dict[str, Any] = {"start": value}
    start = _parse_local(value, tz)
    end = _parse_local(draft.end, tz)
    if not draft.end or (start is not None and end is not None and end <= start):
        changes["end"] = _add_minutes(value, DEFAULT_DURATION_MINUTES, tz)
    return draft.replace(**changes)


def _local_now(draft: EventDraft, now: datetime) -> datetime:
    return now.astimezone(draft.tzinfo) if now.tzinfo is not None else now


def with_duration(draft: EventDraft, minutes: int, now: datetime) -> EventDraft:
    """End = start + ``minutes``; an empty start becomes the next half hour."""
    start = draft.start
    if not start:
        start = round_up_to_step(_local_now(draft, now)).strftime(_LOCAL_INPUT_FORMAT)
    return draft.replace(start=start, end=_add_minutes(start, minutes, draft.tzinfo))


def quick_now_range(draft: EventDraft, now: datetime) -> EventDraft:
    """One hour starting at the next half hour."""
    start = round_up_to_step(_local_now(draft, now)).strftime(_LOCAL_INPUT_FORMAT)
    return draft.replace(
        start=start, end=_add_minutes(start, DEFAULT_DURATION_MINUTES, draft.tzinfo)
    )


# ============================================================================
# Google Calendar web links
# ============================================================================


def week_view_url(value: str | date | datetime) -> str:
    """Google Calendar week view around ``value``."""
    if isinstance(value, str):
        parsed = parse_instant(value)
        if parsed is None:
            raise ValueError(f"Invalid date '{value}'.")
        value = parsed
    return f"{GOOGLE_CALENDAR_WEB}/week/{value.year}/{value.month}/{value.day}"


def _compact_utc(value: datetime) -> str:
    return value.astimezone(ZoneInfo("UTC")).strftime("%Y%m%dT%H%M%SZ")


def template_url(draft: EventDraft) -> str:
    """Prefilled Google Calendar "new event" page for ``draft``."""
    params = {
        "action": "TEMPLATE",
        "text": draft.summary,
        "details": draft.description or "",
        "ctz": draft.timezone,
        "src": draft.calendar_id,
    }
    bounds = draft_bounds(draft)
    if bounds is not None:
        params["dates"] = f"{_compact_utc(bounds[0])}/{_compact_utc(bounds[1])}"
    return f"{GOOGLE_CALENDAR_WEB}/eventedit?{urlparse.urlencode(params)}"
