#!/usr/bin/env python3
"""Calendar Dashboard CLI."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime

from calendar_dashboard.calendar import (
    ALL_CALENDARS,
    CalendarError,
    GoogleCalendarGateway,
    build_overall_totals,
    build_schedule_view,
    build_study_report,
    format_minutes,
    load_account_from_env,
    month_range,
    resolve_study_window,
    week_window,
)
from calendar_dashboard.calendar.ranges import parse_day_key
from calendar_dashboard.calendar.types import DayWindow
from calendar_dashboard.config import ConfigError, Settings, load_settings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calendar-dashboard",
        description="Study-time reports and merged schedules from Google Calendar.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log gateway and report activity to stderr.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the API-shaped JSON instead of a text summary.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "calendars",
        help="List calendars visible to the configured account.",
    )

    summary_parser = subparsers.add_parser(
        "summary",
        help="Total time per calendar over a day range (default: this month).",
    )
    summary_parser.add_argument("--start", help="First day, YYYY-MM-DD.")
    summary_parser.add_argument("--end", help="Last day, YYYY-MM-DD.")

    study_parser = subparsers.add_parser(
        "study",
        help="Tag breakdown of the study calendar.",
    )
    study_parser.add_argument("--end", help="Anchor day, YYYY-MM-DD (default: today).")
    study_parser.add_argument(
        "--span",
        type=int,
        default=7,
        help="Window length in days; 7 snaps to Monday-aligned weeks.",
    )
    study_parser.add_argument(
        "--page",
        type=int,
        default=0,
        help="How many windows to step back from the anchor day.",
    )
    study_parser.add_argument("--calendar-id", help="Study calendar ID (default: by name).")

    schedule_parser = subparsers.add_parser(
        "schedule",
        help="Merged week schedule.",
    )
    schedule_parser.add_argument("--week", help="Any day in the week, YYYY-MM-DD (default: today).")
    schedule_parser.add_argument(
        "--calendar-id",
        default=ALL_CALENDARS,
        help="Calendar ID, or 'all' to merge every calendar.",
    )

    return parser


def _build_gateway(settings: Settings) -> GoogleCalendarGateway:
    return GoogleCalendarGateway(load_account_from_env(settings.account))


def _require_day(value: str | None, fallback: str) -> str:
    if not value:
        return fallback
    if parse_day_key(value) is None:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD.")
    return value


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_calendars(gateway, settings: Settings, as_json: bool) -> int:
    calendars = gateway.list_calendars()
    if as_json:
        _print_json({"calendars": [c.to_api_dict() for c in calendars]})
        return 0
    for cal in calendars:
        marker = "*" if cal.is_primary else " "
        access = "rw" if cal.is_writable else "ro"
        print(f"{marker} {cal.summary} [{access}] {cal.id}")
    return 0


def _cmd_summary(gateway, settings: Settings, now: datetime, args, as_json: bool) -> int:
    month = month_range(now.date())
    window = DayWindow(
        _require_day(args.start, month.start_day),
        _require_day(args.end, month.end_day),
    )
    totals = build_overall_totals(
        gateway, gateway.list_calendars(), window, tz=settings.tzinfo
    )
    if as_json:
        _print_json(totals.to_api_dict())
        return 0

    print(f"{window.start_day} .. {window.end_day}")
    for item in totals.totals:
        print(
            f"- {item.calendar_name}: {format_minutes(item.total_minutes)} "
            f"({item.event_count} events)"
        )
    print(f"\nTotal: {format_minutes(totals.grand_total_minutes)}")
    return 0


def _cmd_study(gateway, settings: Settings, now: datetime, args, as_json: bool) -> int:
    anchor = _require_day(args.end, now.date().isoformat())
    window = resolve_study_window(anchor, args.span, args.page)
    study = build_study_report(
        gateway,
        gateway.list_calendars(),
        window,
        now=now,
        tz=settings.tzinfo,
        calendar_id=args.calendar_id,
        calendar_name=settings.study_calendar_name,
    )
    if as_json:
        _print_json(study.to_api_dict())
        return 0

    stats = study.report.stats
    print(f"{study.calendar.summary}: {window.start_day} .. {window.end_day}")
    print(
        f"Today {format_minutes(stats.today_minutes)} | "
        f"Month {format_minutes(stats.month_minutes)} | "
        f"Window {format_minutes(stats.total_minutes)}"
    )
    if study.report.tags:
        print("\nBy tag:")
        for item in study.report.tags:
            print(f"  {item.tag}: {format_minutes(item.minutes)}")
    if study.report.recent:
        print("\nRecent:")
        for event in study.report.recent:
            print(f"  {event.start_value}  {event.title}  {format_minutes(event.minutes)}")
    return 0


def _cmd_schedule(gateway, settings: Settings, now: datetime, args, as_json: bool) -> int:
    window = week_window(_require_day(args.week, now.date().isoformat()))
    events = build_schedule_view(
        gateway, gateway.list_calendars(), args.calendar_id, window, tz=settings.tzinfo
    )
    if as_json:
        _print_json(
            {"range": window.to_api_dict(), "events": [e.to_api_dict() for e in events]}
        )
        return 0

    print(f"Week of {window.start_day}")
    if not events:
        print("No events.")
    for event in events:
        when = event.start[:10] if event.all_day else event.start[:16].replace("T", " ")
        print(f"  {when}  {event.title}  ({event.calendar_name})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        gateway = _build_gateway(settings)
    except CalendarError as exc:
        print(f"Calendar account not configured: {exc}", file=sys.stderr)
        return 1

    now = datetime.now(settings.tzinfo)
    try:
        if args.command == "calendars":
            return _cmd_calendars(gateway, settings, args.json)
        if args.command == "summary":
            return _cmd_summary(gateway, settings, now, args, args.json)
        if args.command == "study":
            return _cmd_study(gateway, settings, now, args, args.json)
        if args.command == "schedule":
            return _cmd_schedule(gateway, settings, now, args, args.json)
    except (CalendarError, ValueError) as exc:
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
