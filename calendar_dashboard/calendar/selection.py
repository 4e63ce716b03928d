"""Choosing which calendar a view or an edit targets."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..config import DEFAULT_STUDY_CALENDAR_NAME
from .google_calendar import CalendarError
from .types import CalendarInfo

logger = logging.getLogger(__name__)

ALL_CALENDARS = "all"


class CalendarNotFound(CalendarError):
    """Raised when a requested calendar is not on the calendar list."""


def find_calendar(calendars: Sequence[CalendarInfo], calendar_id: str) -> CalendarInfo:
    for calendar in calendars:
        if calendar.id == calendar_id:
            return calendar
    raise CalendarNotFound(f"Calendar not found: {calendar_id}")


def _primary_or_first(calendars: Sequence[CalendarInfo]) -> Optional[CalendarInfo]:
    if not calendars:
        return None
    return next((cal for cal in calendars if cal.is_primary), calendars[0])


def pick_default_study_calendar(
    calendars: Sequence[CalendarInfo],
    name: str = DEFAULT_STUDY_CALENDAR_NAME,
) -> Optional[CalendarInfo]:
    """Exact name match, then partial name match, then primary, then first."""
    exact = next((cal for cal in calendars if cal.summary == name), None)
    if exact:
        return exact
    partial = next((cal for cal in calendars if name and name in (cal.summary or "")), None)
    if partial:
        return partial
    return _primary_or_first(calendars)


def resolve_study_calendar(
    calendars: Sequence[CalendarInfo],
    calendar_id: Optional[str] = None,
    name: str = DEFAULT_STUDY_CALENDAR_NAME,
) -> CalendarInfo:
    """Calendar for the study report.

    An explicit ``calendar_id`` must exist; the name heuristic only applies
    when no id was given.
    """
    if calendar_id:
        return find_calendar(calendars, calendar_id)
    picked = pick_default_study_calendar(calendars, name)
    if picked is None:
        raise CalendarNotFound("No calendars are available for this account.")
    logger.debug(f"Study calendar defaulted to {picked.id} ({picked.summary})")
    return picked


def pick_editable_calendar(
    calendars: Sequence[CalendarInfo],
    preferred_id: Optional[str] = None,
) -> Optional[str]:
    """Calendar new events go to: the preferred one, else primary, else first."""
    if preferred_id and preferred_id != ALL_CALENDARS:
        return preferred_id
    picked = _primary_or_first(calendars)
    return picked.id if picked else None


def select_targets(
    calendars: Sequence[CalendarInfo],
    target: Optional[str],
) -> list[CalendarInfo]:
    """Every calendar for ``"all"``/``None``, otherwise the one named."""
    if not target or target == ALL_CALENDARS:
        return list(calendars)
    return [find_calendar(calendars, target)]
