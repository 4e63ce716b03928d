import io
import json
import os
from datetime import datetime, timezone
from unittest import mock
from urllib import error as urlerror

import pytest

from calendar_dashboard.calendar import google_calendar as gc
from calendar_dashboard.calendar.google_calendar import (
    CalendarAccountConfig,
    CalendarError,
    GoogleCalendarGateway,
    build_event_body,
    load_account_from_env,
)

ACCOUNT = CalendarAccountConfig(
    name="google", client_id="id", client_secret="secret", refresh_token="refresh"
)
TIME_MIN = datetime(2024, 5, 13, tzinfo=timezone.utc)
TIME_MAX = datetime(2024, 5, 19, 23, 59, 59, tzinfo=timezone.utc)


@pytest.fixture
def clean_env(monkeypatch):
    for key in list(os.environ.keys()):
        if key.endswith(("_CALENDAR_CLIENT_ID", "_CALENDAR_CLIENT_SECRET", "_CALENDAR_REFRESH_TOKEN")):
            monkeypatch.delenv(key, raising=False)
    for key in ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REFRESH_TOKEN"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_load_account_from_prefixed_env(clean_env):
    clean_env.setenv("PERSONAL_CALENDAR_CLIENT_ID", "abc")
    clean_env.setenv("PERSONAL_CALENDAR_CLIENT_SECRET", "def")
    clean_env.setenv("PERSONAL_CALENDAR_REFRESH_TOKEN", "ghi")
    account = load_account_from_env("personal")
    assert account.name == "personal"
    assert account.client_id == "abc"
    assert account.refresh_token == "ghi"


def test_load_account_falls_back_to_google_vars(clean_env):
    clean_env.setenv("GOOGLE_CLIENT_ID", "abc")
    clean_env.setenv("GOOGLE_CLIENT_SECRET", "def")
    clean_env.setenv("GOOGLE_REFRESH_TOKEN", "ghi")
    assert load_account_from_env().client_secret == "def"


def test_load_account_missing_fields(clean_env):
    clean_env.setenv("GOOGLE_CLIENT_ID", "abc")
    with pytest.raises(CalendarError, match="CLIENT_SECRET, REFRESH_TOKEN"):
        load_account_from_env()


def test_list_all_events_follows_page_tokens(monkeypatch):
    token_calls = []
    requests = []
    pages = {
        None: {"items": [{"id": "a"}, {"id": "b"}], "nextPageToken": "p2"},
        "p2": {"items": [{"id": "c"}], "nextPageToken": "p3"},
        "p3": {"items": []},
    }

    def fake_token(account):
        token_calls.append(account)
        return "tok"

    def fake_request(account, endpoint, method="GET", params=None, body=None, access_token=None):
        requests.append((endpoint, dict(params), access_token))
        return pages[params.get("pageToken")]

    monkeypatch.setattr(gc, "_fetch_access_token", fake_token)
    monkeypatch.setattr(gc, "_make_request", fake_request)

    events = gc.list_all_events(ACCOUNT, "study@group.calendar.google.com", time_min=TIME_MIN, time_max=TIME_MAX)

    assert [e["id"] for e in events] == ["a", "b", "c"]
    assert len(token_calls) == 1
    assert len(requests) == 3
    endpoint, params, access_token = requests[0]
    assert endpoint == "/calendars/study%40group.calendar.google.com/events"
    assert params["singleEvents"] == "true"
    assert params["orderBy"] == "startTime"
    assert params["maxResults"] == "2500"
    assert params["timeMin"] == TIME_MIN.isoformat()
    assert params["timeMax"] == TIME_MAX.isoformat()
    assert "pageToken" not in params
    assert access_token == "tok"
    assert requests[1][1]["pageToken"] == "p2"


def test_list_calendars_parses_items(monkeypatch):
    def fake_request(account, endpoint, method="GET", params=None, body=None, access_token=None):
        assert endpoint == "/users/me/calendarList"
        assert params == {"maxResults": "250"}
        return {
            "items": [
                {"id": "me@example.com", "summary": "me", "primary": True, "accessRole": "owner",
                 "backgroundColor": "#9fe1e7"},
                {"id": "holidays", "accessRole": "reader"},
            ]
        }

    monkeypatch.setattr(gc, "_make_request", fake_request)
    calendars = gc.list_calendars(ACCOUNT)
    assert calendars[0].is_primary and calendars[0].is_writable
    assert calendars[0].background_color == "#9fe1e7"
    assert calendars[1].summary == "holidays"
    assert calendars[1].background_color == "#4285f4"
    assert not calendars[1].is_writable


def test_write_operations_use_expected_methods(monkeypatch):
    calls = []

    def fake_request(account, endpoint, method="GET", params=None, body=None, access_token=None):
        calls.append((method, endpoint, body))
        return {"id": "ev1"}

    monkeypatch.setattr(gc, "_make_request", fake_request)
    gateway = GoogleCalendarGateway(ACCOUNT)
    body = {"summary": "x"}

    assert gateway.create_event("cal", body) == {"id": "ev1"}
    gateway.update_event("cal", "ev/1", body)
    assert gateway.delete_event("cal", "ev1") is True

    assert calls == [
        ("POST", "/calendars/cal/events", body),
        ("PATCH", "/calendars/cal/events/ev%2F1", body),
        ("DELETE", "/calendars/cal/events/ev1", None),
    ]


def test_build_event_body():
    start = datetime(2024, 5, 14, 9, 0, tzinfo=timezone.utc)
    end = datetime(2024, 5, 14, 10, 0, tzinfo=timezone.utc)
    body = build_event_body(summary="[英語] 単語", start=start, end=end, time_zone="UTC")
    assert body["description"] == ""
    assert body["start"] == {"dateTime": "2024-05-14T09:00:00+00:00", "timeZone": "UTC"}


def _response(payload, status=200):
    resp = mock.MagicMock()
    resp.status = status
    resp.read.return_value = json.dumps(payload).encode("utf-8") if payload is not None else b""
    cm = mock.MagicMock()
    cm.__enter__.return_value = resp
    return cm


def test_make_request_sends_bearer_token():
    with mock.patch.object(gc.urlrequest, "urlopen", return_value=_response({"items": []})) as urlopen:
        result = gc._make_request(ACCOUNT, "/users/me/calendarList", params={"maxResults": "250"},
                                  access_token="tok")
    assert result == {"items": []}
    request = urlopen.call_args[0][0]
    assert request.get_header("Authorization") == "Bearer tok"
    assert request.full_url.endswith("/users/me/calendarList?maxResults=250")


def test_make_request_no_content():
    with mock.patch.object(gc.urlrequest, "urlopen", return_value=_response(None, status=204)):
        assert gc._make_request(ACCOUNT, "/calendars/c/events/e", method="DELETE", access_token="tok") == {}


def test_make_request_http_error_becomes_calendar_error():
    error = urlerror.HTTPError(
        "https://example.invalid", 403, "Forbidden", hdrs=None, fp=io.BytesIO(b"rate limited")
    )
    with mock.patch.object(gc.urlrequest, "urlopen", side_effect=error):
        with pytest.raises(CalendarError, match="403"):
            gc._make_request(ACCOUNT, "/users/me/calendarList", access_token="tok")


def test_token_response_without_access_token():
    with mock.patch.object(gc.urlrequest, "urlopen", return_value=_response({"error": "invalid_grant"})):
        with pytest.raises(CalendarError, match="access_token"):
            gc._fetch_access_token(ACCOUNT)
