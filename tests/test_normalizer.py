from zoneinfo import ZoneInfo

from calendar_dashboard.calendar.normalizer import (
    NO_TITLE,
    day_key,
    duration_minutes,
    event_bounds,
    is_all_day,
    normalize,
    parse_instant,
)
from calendar_dashboard.calendar.titles import UNCLASSIFIED_TAG

from fakes import all_day_event, timed_event

TOKYO = ZoneInfo("Asia/Tokyo")


def test_timed_event_duration():
    event = timed_event("e1", "[英語] a", "2024-05-13T09:00:00+09:00", "2024-05-13T10:30:00+09:00")
    assert duration_minutes(event, TOKYO) == 90


def test_all_day_event_spans_whole_days():
    event = all_day_event("e1", "合宿", "2024-05-01", "2024-05-03")
    assert duration_minutes(event, TOKYO) == 2 * 24 * 60
    assert is_all_day(event)
    assert day_key(event, TOKYO) == "2024-05-01"


def test_date_time_preferred_over_date():
    event = {
        "id": "e1",
        "start": {"date": "2024-05-01", "dateTime": "2024-05-01T10:00:00+09:00"},
        "end": {"date": "2024-05-02", "dateTime": "2024-05-01T11:00:00+09:00"},
    }
    assert event_bounds(event) == ("2024-05-01T10:00:00+09:00", "2024-05-01T11:00:00+09:00")
    assert not is_all_day(event)
    assert duration_minutes(event, TOKYO) == 60


def test_missing_bounds_yield_zero_and_no_event():
    event = {"id": "e1", "summary": "broken", "start": {"dateTime": "2024-05-01T10:00:00Z"}}
    assert event_bounds(event) is None
    assert duration_minutes(event) == 0
    assert normalize(event) is None


def test_zero_and_negative_durations_are_dropped():
    zero = timed_event("z", "x", "2024-05-01T10:00:00Z", "2024-05-01T10:00:00Z")
    negative = timed_event("n", "x", "2024-05-01T10:00:00Z", "2024-05-01T09:00:00Z")
    assert duration_minutes(zero) == 0
    assert duration_minutes(negative) == 0
    assert normalize(zero) is None
    assert normalize(negative) is None


def test_minutes_round_half_up():
    half = timed_event("h", "x", "2024-05-01T10:00:00Z", "2024-05-01T10:00:30Z")
    below = timed_event("b", "x", "2024-05-01T10:00:00Z", "2024-05-01T10:00:29Z")
    assert duration_minutes(half) == 1
    assert duration_minutes(below) == 0


def test_day_key_uses_local_date_when_zone_given():
    event = timed_event("e1", "x", "2024-05-01T23:30:00Z", "2024-05-02T00:30:00Z")
    assert day_key(event, TOKYO) == "2024-05-02"
    assert day_key(event) == "2024-05-01"


def test_day_key_missing_start():
    assert day_key({"id": "e1", "start": {}}) is None


def test_parse_instant_handles_naive_and_malformed_values():
    naive = parse_instant("2024-05-01T09:00", TOKYO)
    assert naive.utcoffset().total_seconds() == 9 * 3600
    assert parse_instant("yesterday") is None
    assert parse_instant("") is None


def test_normalize_fills_title_tag_and_calendar():
    event = timed_event("e1", None, "2024-05-13T09:00:00+09:00", "2024-05-13T09:45:00+09:00")
    normalized = normalize(event, calendar_id="cal", calendar_name="勉強", tz=TOKYO)
    assert normalized.title == NO_TITLE
    assert normalized.tag == UNCLASSIFIED_TAG
    assert normalized.minutes == 45
    assert normalized.day == "2024-05-13"
    assert normalized.calendar_id == "cal"
    assert normalized.calendar_name == "勉強"
    assert normalized.to_api_dict()["start"] == "2024-05-13T09:00:00+09:00"
