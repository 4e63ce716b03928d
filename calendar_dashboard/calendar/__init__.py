"""Calendar aggregation and editing for the dashboard.

This module provides:
- Google Calendar list and event operations (gateway)
- Event normalization, day/tag aggregation and report building
- Day-window arithmetic for study pages and schedule weeks
- Merged multi-calendar schedules and event editor drafts

Everything except the gateway is side-effect free and shared by the API and
the CLI.
"""
from __future__ import annotations

from .types import (
    CalendarInfo,
    CalendarTotal,
    DayWindow,
    DisplayEvent,
    EventListResponse,
    NormalizedEvent,
    OverallTotals,
    RawEvent,
    Report,
    ReportStats,
    StudyReport,
    TagTotal,
)

from .google_calendar import (
    CalendarError,
    CalendarAccountConfig,
    GoogleCalendarGateway,
    load_account_from_env,
    list_calendars,
    list_events,
    list_all_events,
    create_event,
    update_event,
    delete_event,
)

from .titles import (
    UNCLASSIFIED_TAG,
    extract_tag,
    strip_tag_prefix,
    build_tagged_title,
)

from .normalizer import (
    normalize,
    duration_minutes,
    day_key,
    event_bounds,
    is_all_day,
)

from .aggregator import Aggregation, aggregate

from .ranges import (
    enumerate_days,
    start_of_week,
    shift_day,
    resolve_study_window,
    week_window,
    month_range,
    window_bounds,
)

from .selection import (
    ALL_CALENDARS,
    CalendarNotFound,
    find_calendar,
    pick_default_study_calendar,
    pick_editable_calendar,
    resolve_study_calendar,
)

from .reports import (
    build_report,
    build_calendar_total,
    build_overall_totals,
    build_study_report,
    format_minutes,
)

from .schedule import (
    merge_schedule,
    pick_event_text_color,
    build_schedule_view,
)

from .editor import (
    EventDraft,
    validate_draft,
    build_event_payload,
    draft_from_display_event,
)


__all__ = [
    # Types
    "CalendarInfo",
    "CalendarTotal",
    "DayWindow",
    "DisplayEvent",
    "EventListResponse",
    "NormalizedEvent",
    "OverallTotals",
    "RawEvent",
    "Report",
    "ReportStats",
    "StudyReport",
    "TagTotal",
    # API Client
    "CalendarError",
    "CalendarAccountConfig",
    "GoogleCalendarGateway",
    "load_account_from_env",
    "list_calendars",
    "list_events",
    "list_all_events",
    "create_event",
    "update_event",
    "delete_event",
    # Titles
    "UNCLASSIFIED_TAG",
    "extract_tag",
    "strip_tag_prefix",
    "build_tagged_title",
    # Normalizer / Aggregator
    "normalize",
    "duration_minutes",
    "day_key",
    "event_bounds",
    "is_all_day",
    "Aggregation",
    "aggregate",
    # Ranges
    "enumerate_days",
    "start_of_week",
    "shift_day",
    "resolve_study_window",
    "week_window",
    "month_range",
    "window_bounds",
    # Selection
    "ALL_CALENDARS",
    "CalendarNotFound",
    "find_calendar",
    "pick_default_study_calendar",
    "pick_editable_calendar",
    "resolve_study_calendar",
    # Reports
    "build_report",
    "build_calendar_total",
    "build_overall_totals",
    "build_study_report",
    "format_minutes",
    # Schedule
    "merge_schedule",
    "pick_event_text_color",
    "build_schedule_view",
    # Editor
    "EventDraft",
    "validate_draft",
    "build_event_payload",
    "draft_from_display_event",
]
