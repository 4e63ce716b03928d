"""Google Calendar API client."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib import error as urlerror
from urllib import parse as urlparse
from urllib import request as urlrequest

from .types import (
    DEFAULT_CALENDAR_COLOR,
    CalendarInfo,
    EventListResponse,
    RawEvent,
)

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"

MAX_CALENDARS = 250
MAX_EVENTS_PER_PAGE = 2500


class CalendarError(RuntimeError):
    """Raised when Calendar API operations fail."""


@dataclass(slots=True)
class CalendarAccountConfig:
    """Google Calendar OAuth configuration."""

    name: str
    client_id: str
    client_secret: str
    refresh_token: str


_CREDENTIAL_KEYS = ("CLIENT_ID", "CLIENT_SECRET", "REFRESH_TOKEN")


def load_account_from_env(name: str = "google") -> CalendarAccountConfig:
    """Load Calendar account credentials from environment variables.

    Each of ``{NAME}_CALENDAR_CLIENT_ID``, ``..._CLIENT_SECRET`` and
    ``..._REFRESH_TOKEN`` falls back to the plain ``GOOGLE_*`` variable of
    the same suffix, shared with the sign-in client.

    Args:
        name: Account name, used as the env var prefix.

    Raises:
        CalendarError: a credential is set under neither name.
    """
    prefix = name.upper()
    values = {
        key: os.getenv(f"{prefix}_CALENDAR_{key}") or os.getenv(f"GOOGLE_{key}")
        for key in _CREDENTIAL_KEYS
    }
    missing = [key for key, value in values.items() if not value]
    if missing:
        raise CalendarError(
            f"Missing Calendar env vars for account '{name}': {', '.join(missing)}. "
            f"Set {prefix}_CALENDAR_* or GOOGLE_* env vars."
        )
    return CalendarAccountConfig(
        name=name,
        client_id=values["CLIENT_ID"],
        client_secret=values["CLIENT_SECRET"],
        refresh_token=values["REFRESH_TOKEN"],
    )


def _read_json(req: urlrequest.Request, *, timeout: int, what: str) -> dict:
    """Send ``req`` and decode its JSON body; ``{}`` for an empty reply."""
    try:
        with urlrequest.urlopen(req, timeout=timeout) as resp:
            if resp.status == 204:
                return {}
            raw = resp.read().decode("utf-8")
    except urlerror.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore")
        raise CalendarError(f"Calendar {what} failed ({exc.code}): {detail}") from exc
    except urlerror.URLError as exc:
        raise CalendarError(f"Calendar {what} network error: {exc.reason}") from exc
    return json.loads(raw) if raw else {}


def _fetch_access_token(account: CalendarAccountConfig) -> str:
    """Exchange the account's refresh token for a short-lived access token."""
    form = urlparse.urlencode(
        {
            "grant_type": "refresh_token",
            "refresh_token": account.refresh_token,
            "client_id": account.client_id,
            "client_secret": account.client_secret,
        }
    ).encode("utf-8")
    req = urlrequest.Request(
        TOKEN_URL,
        data=form,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        method="POST",
    )
    token = _read_json(req, timeout=15, what="token request").get("access_token")
    if not token:
        raise CalendarError(f"Token response for account '{account.name}' has no access_token.")
    return str(token)


def _make_request(
    account: CalendarAccountConfig,
    endpoint: str,
    method: str = "GET",
    params: Optional[dict] = None,
    body: Optional[dict] = None,
    access_token: Optional[str] = None,
) -> dict:
    """Call ``endpoint`` under the Calendar v3 base URL with a bearer token.

    A token is fetched when ``access_token`` is not supplied.
    """
    query = f"?{urlparse.urlencode(params)}" if params else ""
    req = urlrequest.Request(
        f"{CALENDAR_API_BASE}{endpoint}{query}",
        data=json.dumps(body).encode("utf-8") if body is not None else None,
        headers={
            "Authorization": f"Bearer {access_token or _fetch_access_token(account)}",
            "Content-Type": "application/json",
        },
        method=method,
    )
    return _read_json(req, timeout=30, what=f"{method} {endpoint}")


def _quote(value: str) -> str:
    return urlparse.quote(value, safe="")


# ============================================================================
# Calendar List Operations
# ============================================================================


def _parse_calendar(item: dict) -> CalendarInfo:
    return CalendarInfo(
        id=item["id"],
        summary=item.get("summary", item["id"]),
        description=item.get("description"),
        background_color=item.get("backgroundColor") or DEFAULT_CALENDAR_COLOR,
        foreground_color=item.get("foregroundColor"),
        is_primary=bool(item.get("primary", False)),
        access_role=item.get("accessRole", "reader"),
    )


def list_calendars(account: CalendarAccountConfig) -> List[CalendarInfo]:
    """List the calendars on the account's calendar list.

    Args:
        account: Calendar account configuration

    Returns:
        CalendarInfo for every listed calendar, in provider order
    """
    response = _make_request(
        account,
        "/users/me/calendarList",
        params={"maxResults": str(MAX_CALENDARS)},
    )
    return [_parse_calendar(item) for item in response.get("items", [])]


# ============================================================================
# Event Operations
# ============================================================================


def list_events(
    account: CalendarAccountConfig,
    calendar_id: str,
    *,
    time_min: datetime,
    time_max: datetime,
    page_token: Optional[str] = None,
    access_token: Optional[str] = None,
) -> EventListResponse:
    """Fetch one page of events, recurring events expanded into instances.

    Args:
        account: Calendar account configuration
        calendar_id: Calendar ID (or "primary")
        time_min: Lower bound for event end time
        time_max: Upper bound for event start time
        page_token: Continuation token from the previous page
        access_token: Reuse a token already fetched for this listing

    Returns:
        EventListResponse with raw events and the next page token
    """
    params = {
        "maxResults": str(MAX_EVENTS_PER_PAGE),
        "singleEvents": "true",
        "orderBy": "startTime",
        "timeMin": time_min.isoformat(),
        "timeMax": time_max.isoformat(),
    }
    if page_token:
        params["pageToken"] = page_token

    response = _make_request(
        account,
        f"/calendars/{_quote(calendar_id)}/events",
        params=params,
        access_token=access_token,
    )

    return EventListResponse(
        events=list(response.get("items", [])),
        next_page_token=response.get("nextPageToken"),
    )


def list_all_events(
    account: CalendarAccountConfig,
    calendar_id: str,
    *,
    time_min: datetime,
    time_max: datetime,
) -> List[RawEvent]:
    """Fetch every page of events for a calendar and time window."""
    access_token = _fetch_access_token(account)
    events: List[RawEvent] = []
    page_token: Optional[str] = None
    pages = 0

    while True:
        page = list_events(
            account,
            calendar_id,
            time_min=time_min,
            time_max=time_max,
            page_token=page_token,
            access_token=access_token,
        )
        events.extend(page.events)
        pages += 1
        page_token = page.next_page_token
        if not page_token:
            break

    logger.debug(f"Fetched {len(events)} events in {pages} page(s) from {calendar_id}")
    return events


# ============================================================================
# Event Write Operations
# ============================================================================


def build_event_body(
    *,
    summary: str,
    start: datetime,
    end: datetime,
    time_zone: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Request body shared by event create and update."""
    return {
        "summary": summary,
        "description": description or "",
        "start": {"dateTime": start.isoformat(), "timeZone": time_zone},
        "end": {"dateTime": end.isoformat(), "timeZone": time_zone},
    }


def create_event(
    account: CalendarAccountConfig,
    calendar_id: str,
    body: Dict[str, Any],
) -> RawEvent:
    """Create a new calendar event.

    Args:
        account: Calendar account configuration
        calendar_id: Calendar ID to create event in
        body: Event resource, see ``build_event_body``

    Returns:
        Created event as returned by the API
    """
    return _make_request(
        account,
        f"/calendars/{_quote(calendar_id)}/events",
        method="POST",
        body=body,
    )


def update_event(
    account: CalendarAccountConfig,
    calendar_id: str,
    event_id: str,
    body: Dict[str, Any],
) -> RawEvent:
    """Patch an existing calendar event with ``body``."""
    return _make_request(
        account,
        f"/calendars/{_quote(calendar_id)}/events/{_quote(event_id)}",
        method="PATCH",
        body=body,
    )


def delete_event(
    account: CalendarAccountConfig,
    calendar_id: str,
    event_id: str,
) -> bool:
    """Delete a calendar event.

    Returns:
        True if deleted successfully
    """
    _make_request(
        account,
        f"/calendars/{_quote(calendar_id)}/events/{_quote(event_id)}",
        method="DELETE",
    )
    return True


class GoogleCalendarGateway:
    """Binds the module functions to one account for the report builders."""

    def __init__(self, account: CalendarAccountConfig) -> None:
        self.account = account

    def list_calendars(self) -> List[CalendarInfo]:
        return list_calendars(self.account)

    def list_all_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> List[RawEvent]:
        return list_all_events(
            self.account, calendar_id, time_min=time_min, time_max=time_max
        )

    def create_event(self, calendar_id: str, body: Dict[str, Any]) -> RawEvent:
        return create_event(self.account, calendar_id, body)

    def update_event(self, calendar_id: str, event_id: str, body: Dict[str, Any]) -> RawEvent:
        return update_event(self.account, calendar_id, event_id, body)

    def delete_event(self, calendar_id: str, event_id: str) -> bool:
        return delete_event(self.account, calendar_id, event_id)
