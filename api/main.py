"""FastAPI service for the Calendar Dashboard."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import ALLOWED_ORIGINS, get_current_user, get_settings
from api.routers import dashboard_router
from calendar_dashboard.config import Settings

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Calendar Dashboard API",
    version="0.1.0",
    description="Study-time reports and merged schedules over Google Calendar.",
)

origins = [origin for origin in ALLOWED_ORIGINS if origin]

if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(dashboard_router, tags=["dashboard"])


def _has_env(*names: str) -> bool:
    return all(os.getenv(name) for name in names)


def _status(configured: bool) -> str:
    return "configured" if configured else "not_configured"


@app.get("/health")
def health_check(settings: Settings = Depends(get_settings)) -> dict:
    """Health check endpoint with service configuration status."""
    prefix = settings.account.upper()
    services = {
        "calendar": _status(
            _has_env(
                f"{prefix}_CALENDAR_CLIENT_ID",
                f"{prefix}_CALENDAR_CLIENT_SECRET",
                f"{prefix}_CALENDAR_REFRESH_TOKEN",
            )
            or _has_env("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REFRESH_TOKEN")
        ),
        "sign_in": _status(_has_env("GOOGLE_CLIENT_ID")),
    }
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "timezone": settings.timezone,
        "services": services,
    }


@app.get("/me")
def me(user: str = Depends(get_current_user)) -> dict:
    """Email of the signed-in user."""
    return {"user": user}
