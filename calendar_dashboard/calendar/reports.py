"""Per-calendar totals and the tag breakdown report.

``build_report`` is pure: the only clock it sees is the ``now`` argument,
which feeds the today/month statistics. The ``build_*`` functions that take
a gateway fetch events first and then hand them to the pure builders.
"""
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional, Sequence

from ..config import DEFAULT_STUDY_CALENDAR_NAME
from .aggregator import aggregate
from .normalizer import duration_minutes, normalize
from .ranges import window_bounds, window_days
from .selection import resolve_study_calendar
from .types import (
    CalendarInfo,
    CalendarTotal,
    DayWindow,
    NormalizedEvent,
    OverallTotals,
    RawEvent,
    Report,
    ReportStats,
    StudyReport,
    TagTotal,
)

logger = logging.getLogger(__name__)

RECENT_LIMIT = 20


def minutes_to_hours(minutes: int) -> float:
    return round(minutes / 60, 2)


def format_minutes(minutes: int) -> str:
    """Human label such as ``45分``, ``2時間`` or ``1時間30分``."""
    if minutes < 60:
        return f"{minutes}分"
    hours, rest = divmod(minutes, 60)
    return f"{hours}時間" if rest == 0 else f"{hours}時間{rest}分"


def _local_today(now: datetime, tz: Optional[tzinfo]) -> str:
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return now.date().isoformat()


def build_report(
    raw_events: Iterable[RawEvent],
    window: DayWindow,
    *,
    now: datetime,
    calendar_id: str = "",
    calendar_name: str = "",
    tz: Optional[tzinfo] = None,
) -> Report:
    """Tag breakdown, daily stacked series and recent events for one calendar."""
    normalized: List[NormalizedEvent] = []
    for raw in raw_events:
        event = normalize(raw, calendar_id=calendar_id, calendar_name=calendar_name, tz=tz)
        if event is not None:
            normalized.append(event)

    aggregation = aggregate(normalized)
    tags = aggregation.ordered_tags()

    daily_stacked = []
    for day in window_days(window):
        row = {"day": day}
        for tag in tags:
            # The row date owns the "day" column.
            if tag == "day":
                continue
            row[tag] = minutes_to_hours(aggregation.minutes_for(day, tag))
        daily_stacked.append(row)

    # Today/month cover everything fetched, not only the displayed window.
    today_key = _local_today(now, tz)
    month_prefix = today_key[:7]
    today_minutes = sum(e.minutes for e in normalized if e.start_value.startswith(today_key))
    month_minutes = sum(e.minutes for e in normalized if e.start_value[:7] == month_prefix)

    recent = sorted(normalized, key=lambda e: e.start_value, reverse=True)[:RECENT_LIMIT]

    return Report(
        stats=ReportStats(
            today_minutes=today_minutes,
            month_minutes=month_minutes,
            total_minutes=aggregation.total_minutes,
        ),
        tags=[
            TagTotal(tag=tag, minutes=aggregation.tag_totals[tag],
                     hours=minutes_to_hours(aggregation.tag_totals[tag]))
            for tag in tags
        ],
        daily_stacked=daily_stacked,
        recent=recent,
    )


def build_calendar_total(
    calendar: CalendarInfo,
    raw_events: Sequence[RawEvent],
    tz: Optional[tzinfo] = None,
) -> CalendarTotal:
    """Event count and summed duration of one calendar's events.

    Events without a usable span still count towards ``event_count``.
    """
    total_minutes = sum(duration_minutes(raw, tz) for raw in raw_events)
    return CalendarTotal(
        calendar_id=calendar.id,
        calendar_name=calendar.summary,
        event_count=len(raw_events),
        total_minutes=total_minutes,
        total_hours=minutes_to_hours(total_minutes),
        color=calendar.background_color,
    )


def build_overall_totals(
    gateway,
    calendars: Sequence[CalendarInfo],
    window: DayWindow,
    *,
    tz: tzinfo,
) -> OverallTotals:
    """Totals for every calendar over ``window``, largest first."""
    time_min, time_max = window_bounds(window, tz)
    totals = []
    for calendar in calendars:
        events = gateway.list_all_events(calendar.id, time_min, time_max)
        totals.append(build_calendar_total(calendar, events, tz))
    totals.sort(key=lambda item: -item.total_minutes)
    logger.info(
        f"Built totals for {len(totals)} calendars "
        f"({window.start_day}..{window.end_day})"
    )
    return OverallTotals(window=window, totals=totals)


def build_study_report(
    gateway,
    calendars: Sequence[CalendarInfo],
    window: DayWindow,
    *,
    now: datetime,
    tz: tzinfo,
    calendar_id: Optional[str] = None,
    calendar_name: str = DEFAULT_STUDY_CALENDAR_NAME,
) -> StudyReport:
    """Resolve the study calendar, fetch its events and build the report.

    Raises:
        CalendarNotFound: ``calendar_id`` is not on the list, or the list is empty.
    """
    calendar = resolve_study_calendar(calendars, calendar_id, calendar_name)
    time_min, time_max = window_bounds(window, tz)
    events = gateway.list_all_events(calendar.id, time_min, time_max)
    report = build_report(
        events,
        window,
        now=now,
        calendar_id=calendar.id,
        calendar_name=calendar.summary,
        tz=tz,
    )
    return StudyReport(calendar=calendar, window=window, report=report)
