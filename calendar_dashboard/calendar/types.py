"""Calendar data types."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Event resource exactly as returned by the Google Calendar API.
RawEvent = Dict[str, Any]

DEFAULT_CALENDAR_COLOR = "#4285f4"


@dataclass(slots=True)
class CalendarInfo:
    """Google Calendar metadata."""

    id: str
    summary: str  # Display name
    description: Optional[str] = None
    background_color: str = DEFAULT_CALENDAR_COLOR
    foreground_color: Optional[str] = None
    is_primary: bool = False
    access_role: str = "reader"  # "owner", "writer", "reader", "freeBusyReader"

    @property
    def is_writable(self) -> bool:
        """Check if calendar can be modified."""
        return self.access_role in ("owner", "writer")

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "primary": self.is_primary,
            "accessRole": self.access_role,
            "backgroundColor": self.background_color,
            "isWritable": self.is_writable,
        }


@dataclass(frozen=True, slots=True)
class DayWindow:
    """Inclusive calendar-day range (``YYYY-MM-DD`` bounds)."""

    start_day: str
    end_day: str

    def to_api_dict(self) -> Dict[str, str]:
        return {"startDate": self.start_day, "endDate": self.end_day}


@dataclass(frozen=True, slots=True)
class NormalizedEvent:
    """One provider event reduced to what the reports need."""

    id: str
    tag: str
    title: str
    minutes: int
    start_value: str
    end_value: str
    day: Optional[str]
    calendar_id: str = ""
    calendar_name: str = ""
    all_day: bool = False

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.title,
            "tag": self.tag,
            "minutes": self.minutes,
            "start": self.start_value,
            "end": self.end_value,
            "day": self.day,
            "calendarId": self.calendar_id,
            "calendarName": self.calendar_name,
            "allDay": self.all_day,
        }


@dataclass(frozen=True, slots=True)
class TagTotal:
    tag: str
    minutes: int
    hours: float

    def to_api_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "minutes": self.minutes, "hours": self.hours}


@dataclass(frozen=True, slots=True)
class ReportStats:
    today_minutes: int
    month_minutes: int
    total_minutes: int

    def to_api_dict(self) -> Dict[str, int]:
        return {
            "todayMinutes": self.today_minutes,
            "monthMinutes": self.month_minutes,
            "totalMinutes": self.total_minutes,
        }


@dataclass(slots=True)
class Report:
    """Tag breakdown of one calendar over a day window.

    ``daily_stacked`` rows carry a ``day`` key plus one column per tag, in
    the same order as ``tags``.
    """

    stats: ReportStats
    tags: List[TagTotal] = field(default_factory=list)
    daily_stacked: List[Dict[str, Any]] = field(default_factory=list)
    recent: List[NormalizedEvent] = field(default_factory=list)

    @property
    def tag_names(self) -> List[str]:
        return [item.tag for item in self.tags]

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_api_dict(),
            "tags": [item.to_api_dict() for item in self.tags],
            "dailyStacked": [dict(row) for row in self.daily_stacked],
            "recent": [event.to_api_dict() for event in self.recent],
        }


@dataclass(slots=True)
class StudyReport:
    """A report together with the calendar and window it was built for."""

    calendar: CalendarInfo
    window: DayWindow
    report: Report

    def to_api_dict(self) -> Dict[str, Any]:
        payload = {
            "calendar": {"id": self.calendar.id, "name": self.calendar.summary},
            "range": self.window.to_api_dict(),
        }
        payload.update(self.report.to_api_dict())
        return payload


@dataclass(frozen=True, slots=True)
class CalendarTotal:
    calendar_id: str
    calendar_name: str
    event_count: int
    total_minutes: int
    total_hours: float
    color: str = DEFAULT_CALENDAR_COLOR

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "calendarId": self.calendar_id,
            "calendarName": self.calendar_name,
            "eventCount": self.event_count,
            "totalMinutes": self.total_minutes,
            "totalHours": self.total_hours,
            "color": self.color,
        }


@dataclass(slots=True)
class OverallTotals:
    window: DayWindow
    totals: List[CalendarTotal] = field(default_factory=list)

    @property
    def grand_total_minutes(self) -> int:
        return sum(item.total_minutes for item in self.totals)

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "range": self.window.to_api_dict(),
            "totals": [item.to_api_dict() for item in self.totals],
            "grandTotalMinutes": self.grand_total_minutes,
        }


@dataclass(frozen=True, slots=True)
class DisplayEvent:
    """Merged schedule entry, shaped for a week-view calendar widget."""

    id: str  # "{calendar_id}:{raw_event_id}"
    raw_event_id: str
    calendar_id: str
    calendar_name: str
    title: str
    description: str
    start: str
    end: str
    all_day: bool
    background_color: str
    text_color: str

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "allDay": self.all_day,
            "backgroundColor": self.background_color,
            "borderColor": self.background_color,
            "textColor": self.text_color,
            "extendedProps": {
                "calendarId": self.calendar_id,
                "eventId": self.raw_event_id,
                "calendarName": self.calendar_name,
                "description": self.description,
            },
        }


@dataclass(slots=True)
class EventListResponse:
    """One page of raw events."""

    events: List[RawEvent]
    next_page_token: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.events)
