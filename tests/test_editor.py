from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from calendar_dashboard.calendar.editor import (
    EventDraft,
    build_event_payload,
    draft_for_slot,
    draft_from_display_event,
    quick_now_range,
    round_up_to_step,
    template_url,
    validate_draft,
    week_view_url,
    with_duration,
    with_start,
)
from calendar_dashboard.calendar.types import CalendarInfo, DisplayEvent

VALID = EventDraft(
    calendar_id="study",
    tag="英語",
    title="単語",
    description="p.10-20",
    start="2024-05-14T09:00",
    end="2024-05-14T10:00",
    timezone="Asia/Tokyo",
)


def _display(title, start, end):
    return DisplayEvent(
        id="study:ev1",
        raw_event_id="ev1",
        calendar_id="study",
        calendar_name="勉強",
        title=title,
        description="memo",
        start=start,
        end=end,
        all_day=len(start) == 10,
        background_color="#000000",
        text_color="#ffffff",
    )


class TestValidation:
    def test_valid_draft_has_no_errors(self):
        assert validate_draft(VALID) == []

    def test_empty_create_draft(self):
        assert validate_draft(EventDraft()) == [
            "Select a calendar.",
            "Title, start and end are required.",
        ]

    def test_blank_title_is_missing(self):
        assert validate_draft(VALID.replace(title="   ")) == ["Title, start and end are required."]

    def test_end_must_follow_start(self):
        assert validate_draft(VALID.replace(end="2024-05-14T09:00")) == ["End must be after start."]
        assert validate_draft(VALID.replace(end="2024-05-14T08:00")) == ["End must be after start."]

    def test_unparseable_times(self):
        assert validate_draft(VALID.replace(start="tomorrow")) == [
            "Start and end must be valid date-times."
        ]

    def test_edit_needs_event_id(self):
        assert validate_draft(VALID.replace(mode="edit")) == ["Event id is missing."]
        assert validate_draft(VALID.replace(mode="edit", event_id="ev1")) == []

    def test_unknown_timezone(self):
        assert validate_draft(VALID.replace(timezone="Mars/Olympus")) == [
            "Unknown timezone 'Mars/Olympus'."
        ]


class TestPayload:
    def test_payload_carries_tagged_summary_and_zone(self):
        payload = build_event_payload(VALID)
        assert payload == {
            "summary": "[英語] 単語",
            "description": "p.10-20",
            "start": {"dateTime": "2024-05-14T09:00:00+09:00", "timeZone": "Asia/Tokyo"},
            "end": {"dateTime": "2024-05-14T10:00:00+09:00", "timeZone": "Asia/Tokyo"},
        }

    def test_payload_without_tag(self):
        assert build_event_payload(VALID.replace(tag=""))["summary"] == "単語"

    def test_invalid_draft_raises(self):
        with pytest.raises(ValueError, match="End must be after start."):
            build_event_payload(VALID.replace(end="2024-05-14T08:00"))


class TestDrafts:
    def test_edit_draft_splits_tag_and_converts_to_local_time(self):
        draft = draft_from_display_event(
            _display("[英語] 単語", "2024-05-14T00:00:00Z", "2024-05-14T01:00:00Z"),
            "Asia/Tokyo",
        )
        assert draft.mode == "edit"
        assert draft.event_id == "ev1"
        assert draft.calendar_id == "study"
        assert draft.tag == "英語"
        assert draft.title == "単語"
        assert draft.description == "memo"
        assert (draft.start, draft.end) == ("2024-05-14T09:00", "2024-05-14T10:00")

    def test_edit_draft_without_tag(self):
        draft = draft_from_display_event(
            _display("Reading", "2024-05-14T09:00:00+09:00", "2024-05-14T10:00:00+09:00"),
            "Asia/Tokyo",
        )
        assert draft.tag == ""
        assert draft.title == "Reading"

    def test_edit_draft_for_all_day_event(self):
        draft = draft_from_display_event(_display("休み", "2024-05-14", "2024-05-15"), "Asia/Tokyo")
        assert draft.start == "2024-05-14T00:00"
        assert draft.end == "2024-05-15T00:00"

    def test_edit_then_save_keeps_tag(self):
        draft = draft_from_display_event(
            _display("[英語] 単語", "2024-05-14T09:00:00+09:00", "2024-05-14T10:00:00+09:00"),
            "Asia/Tokyo",
        )
        assert build_event_payload(draft)["summary"] == "[英語] 単語"

    def test_slot_draft_uses_primary_and_one_hour(self):
        calendars = [
            CalendarInfo(id="holidays", summary="Holidays"),
            CalendarInfo(id="me", summary="me", is_primary=True),
        ]
        draft = draft_for_slot(calendars, datetime(2024, 5, 14, 9, 0), preferred_calendar_id="all")
        assert draft.mode == "create"
        assert draft.calendar_id == "me"
        assert (draft.start, draft.end) == ("2024-05-14T09:00", "2024-05-14T10:00")

    def test_slot_draft_keeps_selected_range_and_calendar(self):
        draft = draft_for_slot(
            [],
            datetime(2024, 5, 14, 9, 0),
            datetime(2024, 5, 14, 9, 30),
            preferred_calendar_id="study",
        )
        assert draft.calendar_id == "study"
        assert draft.end == "2024-05-14T09:30"


class TestQuickHelpers:
    def test_round_up_to_half_hour(self):
        assert round_up_to_step(datetime(2024, 5, 14, 9, 10, 30)) == datetime(2024, 5, 14, 9, 30)
        assert round_up_to_step(datetime(2024, 5, 14, 9, 30)) == datetime(2024, 5, 14, 9, 30)
        assert round_up_to_step(datetime(2024, 5, 14, 23, 45)) == datetime(2024, 5, 15, 0, 0)

    def test_with_start_fills_missing_end(self):
        draft = with_start(EventDraft(), "2024-05-14T09:00")
        assert draft.end == "2024-05-14T10:00"

    def test_with_start_pushes_end_that_no_longer_follows(self):
        draft = with_start(VALID, "2024-05-14T11:00")
        assert (draft.start, draft.end) == ("2024-05-14T11:00", "2024-05-14T12:00")

    def test_with_start_keeps_later_end(self):
        draft = with_start(VALID, "2024-05-14T09:30")
        assert draft.end == "2024-05-14T10:00"

    def test_with_duration_from_existing_start(self):
        draft = with_duration(VALID, 90, datetime(2024, 5, 14, 7, 0))
        assert (draft.start, draft.end) == ("2024-05-14T09:00", "2024-05-14T10:30")

    def test_with_duration_without_start_uses_next_half_hour(self):
        draft = with_duration(EventDraft(), 30, datetime(2024, 5, 14, 9, 10))
        assert (draft.start, draft.end) == ("2024-05-14T09:30", "2024-05-14T10:00")

    def test_quick_now_range_in_draft_zone(self):
        now = datetime(2024, 5, 14, 0, 10, tzinfo=timezone.utc)
        draft = quick_now_range(EventDraft(timezone="Asia/Tokyo"), now)
        assert (draft.start, draft.end) == ("2024-05-14T09:30", "2024-05-14T10:30")

    def test_drafts_are_not_mutated(self):
        with_start(VALID, "2024-05-14T11:00")
        assert VALID.start == "2024-05-14T09:00"


class TestLinks:
    def test_week_view_url(self):
        assert week_view_url("2024-05-04") == "https://calendar.google.com/calendar/u/0/r/week/2024/5/4"

    def test_week_view_url_rejects_garbage(self):
        with pytest.raises(ValueError):
            week_view_url("someday")

    def test_template_url(self):
        url = urlparse(template_url(VALID))
        assert url.path.endswith("/eventedit")
        query = parse_qs(url.query)
        assert query["action"] == ["TEMPLATE"]
        assert query["text"] == ["[英語] 単語"]
        assert query["dates"] == ["20240514T000000Z/20240514T010000Z"]
        assert query["ctz"] == ["Asia/Tokyo"]
        assert query["src"] == ["study"]

    def test_template_url_without_times(self):
        query = parse_qs(urlparse(template_url(EventDraft(title="x"))).query)
        assert "dates" not in query
