"""Shared Pydantic models for API routers."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from calendar_dashboard.config import DEFAULT_TIMEZONE


class EventWriteRequest(BaseModel):
    """Request body for creating or updating an event from the editor."""
    calendar_id: str = Field("", alias="calendarId", description="Target calendar ID")
    event_id: Optional[str] = Field(None, alias="eventId", description="Event to update")
    tag: str = Field("", description="Tag placed in front of the title as [tag]")
    title: str = Field("", description="Event title without tag prefix")
    description: str = Field("", description="Event description")
    start: str = Field("", description="Start (YYYY-MM-DDTHH:MM, local)")
    end: str = Field("", description="End (YYYY-MM-DDTHH:MM, local)")
    timezone: str = Field(DEFAULT_TIMEZONE, description="IANA timezone of start/end")

    model_config = ConfigDict(populate_by_name=True)
