"""Shared dependencies and helper functions for API routers.

Usage in routers:
    from api.dependencies import get_current_user, get_gateway, get_settings
"""
from __future__ import annotations

import logging
import os
from datetime import date, datetime
from functools import lru_cache
from typing import List, Optional, Union

from fastapi import Depends, HTTPException

from calendar_dashboard.api.auth import get_current_user  # noqa: F401 - re-export
from calendar_dashboard.calendar import (
    CalendarError,
    CalendarInfo,
    CalendarNotFound,
    GoogleCalendarGateway,
    load_account_from_env,
)
from calendar_dashboard.calendar.ranges import parse_day_key
from calendar_dashboard.config import ConfigError, Settings, load_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    os.getenv("DASH_ALLOWED_FRONTEND", "").strip(),
]


# =============================================================================
# Cached Functions
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    try:
        return load_settings()
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


def get_gateway(settings: Settings = Depends(get_settings)) -> GoogleCalendarGateway:
    """Calendar gateway for the configured account."""
    try:
        return GoogleCalendarGateway(load_account_from_env(settings.account))
    except CalendarError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


def get_now(settings: Settings = Depends(get_settings)) -> datetime:
    """Current local time; overridden in tests to pin today/month stats."""
    return datetime.now(settings.tzinfo)


# =============================================================================
# Request Helpers
# =============================================================================

def calendar_http_error(exc: CalendarError) -> HTTPException:
    """Map gateway and lookup failures to HTTP errors."""
    if isinstance(exc, CalendarNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    logger.warning(f"Calendar API failure: {exc}")
    return HTTPException(status_code=502, detail=str(exc))


def load_calendars(gateway) -> List[CalendarInfo]:
    try:
        return gateway.list_calendars()
    except CalendarError as exc:
        raise calendar_http_error(exc)


def day_param(value: Optional[str], name: str, default: Union[date, str]) -> str:
    """Validate a ``YYYY-MM-DD`` query value, falling back to ``default``."""
    if not value:
        return default if isinstance(default, str) else default.isoformat()
    if parse_day_key(value) is None:
        raise HTTPException(status_code=400, detail=f"{name} must be YYYY-MM-DD.")
    return value
