"""Dashboard Router - calendars, reports, schedule and event editing.

Handles:
- Calendar listing
- Per-calendar totals and the tagged study report
- Merged multi-calendar schedule (week and arbitrary range)
- Event create / update / delete from the editor form
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import (
    calendar_http_error,
    day_param,
    get_current_user,
    get_gateway,
    get_now,
    get_settings,
    load_calendars,
)
from api.models import EventWriteRequest
from calendar_dashboard.calendar import (
    ALL_CALENDARS,
    CalendarError,
    DayWindow,
    EventDraft,
    build_event_payload,
    build_overall_totals,
    build_schedule_view,
    build_study_report,
    month_range,
    resolve_study_window,
    validate_draft,
    week_window,
)
from calendar_dashboard.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helpers
# =============================================================================

def _window(start_day: str, end_day: str) -> DayWindow:
    if start_day > end_day:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate.")
    return DayWindow(start_day, end_day)


def _draft_from_request(request: EventWriteRequest, mode: str) -> EventDraft:
    draft = EventDraft(
        mode=mode,
        calendar_id=request.calendar_id,
        event_id=request.event_id or "",
        tag=request.tag,
        title=request.title,
        description=request.description,
        start=request.start,
        end=request.end,
        timezone=request.timezone,
    )
    errors = validate_draft(draft)
    if errors:
        raise HTTPException(status_code=400, detail={"errors": errors})
    return draft


# =============================================================================
# Calendar Endpoints
# =============================================================================

@router.get("/calendars")
def list_calendars_endpoint(
    gateway=Depends(get_gateway),
    user: str = Depends(get_current_user),
) -> dict:
    """List all calendars accessible by the configured account."""
    calendars = load_calendars(gateway)
    return {
        "calendars": [c.to_api_dict() for c in calendars],
        "count": len(calendars),
    }


@router.get("/summary")
def summary_endpoint(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    gateway=Depends(get_gateway),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
    user: str = Depends(get_current_user),
) -> dict:
    """Per-calendar totals over a day range; defaults to the current month."""
    month = month_range(now.date())
    window = _window(
        day_param(start_date, "startDate", month.start_day),
        day_param(end_date, "endDate", month.end_day),
    )
    calendars = load_calendars(gateway)
    try:
        totals = build_overall_totals(gateway, calendars, window, tz=settings.tzinfo)
    except CalendarError as exc:
        raise calendar_http_error(exc)
    return totals.to_api_dict()


@router.get("/study-report")
def study_report_endpoint(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    span_days: int = Query(7, alias="spanDays", ge=1, le=366),
    page: int = Query(0, ge=0),
    calendar_id: Optional[str] = Query(None, alias="calendarId"),
    calendar_name: Optional[str] = Query(None, alias="calendarName"),
    gateway=Depends(get_gateway),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
    user: str = Depends(get_current_user),
) -> dict:
    """Tagged study report.

    With ``startDate`` the window is taken as given; otherwise it is
    ``spanDays`` long and ``page`` windows back from ``endDate`` (today by
    default).
    """
    anchor = day_param(end_date, "endDate", now.date())
    if start_date:
        window = _window(day_param(start_date, "startDate", now.date()), anchor)
    else:
        try:
            window = resolve_study_window(anchor, span_days, page)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    calendars = load_calendars(gateway)
    try:
        report = build_study_report(
            gateway,
            calendars,
            window,
            now=now,
            tz=settings.tzinfo,
            calendar_id=calendar_id,
            calendar_name=calendar_name or settings.study_calendar_name,
        )
    except CalendarError as exc:
        raise calendar_http_error(exc)
    return report.to_api_dict()


@router.get("/schedule")
def schedule_endpoint(
    week_start: Optional[str] = Query(None, alias="weekStart"),
    calendar_id: str = Query(ALL_CALENDARS, alias="calendarId"),
    gateway=Depends(get_gateway),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
    user: str = Depends(get_current_user),
) -> dict:
    """Merged week schedule for one calendar or all of them."""
    try:
        window = week_window(day_param(week_start, "weekStart", now.date()))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _schedule_response(gateway, calendar_id, window, settings)


@router.get("/events-range")
def events_range_endpoint(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    calendar_id: str = Query(ALL_CALENDARS, alias="calendarId"),
    gateway=Depends(get_gateway),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
    user: str = Depends(get_current_user),
) -> dict:
    """Merged schedule over an arbitrary day range."""
    window = _window(
        day_param(start_date, "startDate", now.date()),
        day_param(end_date, "endDate", now.date()),
    )
    return _schedule_response(gateway, calendar_id, window, settings)


def _schedule_response(gateway, calendar_id: str, window: DayWindow, settings: Settings) -> dict:
    calendars = load_calendars(gateway)
    try:
        events = build_schedule_view(gateway, calendars, calendar_id, window, tz=settings.tzinfo)
    except CalendarError as exc:
        raise calendar_http_error(exc)
    return {
        "range": window.to_api_dict(),
        "events": [e.to_api_dict() for e in events],
        "count": len(events),
    }


# =============================================================================
# Event Editing Endpoints
# =============================================================================

@router.post("/events", status_code=201)
def create_event_endpoint(
    request: EventWriteRequest,
    gateway=Depends(get_gateway),
    user: str = Depends(get_current_user),
) -> dict:
    """Create an event from the editor form."""
    draft = _draft_from_request(request, "create")
    try:
        event = gateway.create_event(draft.calendar_id, build_event_payload(draft))
    except CalendarError as exc:
        raise calendar_http_error(exc)
    logger.info(f"Created event {event.get('id')} in {draft.calendar_id} for {user}")
    return {"event": event}


@router.patch("/events")
def update_event_endpoint(
    request: EventWriteRequest,
    gateway=Depends(get_gateway),
    user: str = Depends(get_current_user),
) -> dict:
    """Update an existing event from the editor form."""
    draft = _draft_from_request(request, "edit")
    try:
        event = gateway.update_event(
            draft.calendar_id, draft.event_id, build_event_payload(draft)
        )
    except CalendarError as exc:
        raise calendar_http_error(exc)
    logger.info(f"Updated event {draft.event_id} in {draft.calendar_id} for {user}")
    return {"event": event}


@router.delete("/events", status_code=204)
def delete_event_endpoint(
    calendar_id: str = Query(..., alias="calendarId"),
    event_id: str = Query(..., alias="eventId"),
    gateway=Depends(get_gateway),
    user: str = Depends(get_current_user),
) -> Response:
    """Delete an event."""
    if not calendar_id or not event_id:
        raise HTTPException(status_code=400, detail="calendarId and eventId are required.")
    try:
        gateway.delete_event(calendar_id, event_id)
    except CalendarError as exc:
        raise calendar_http_error(exc)
    logger.info(f"Deleted event {event_id} from {calendar_id} for {user}")
    return Response(status_code=204)
