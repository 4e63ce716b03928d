"""Configuration helpers for the Calendar Dashboard."""
from __future__ import annotations

from dataclasses import dataclass
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_STUDY_CALENDAR_NAME = "勉強"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration shared by the API and the CLI."""

    timezone: str = DEFAULT_TIMEZONE
    study_calendar_name: str = DEFAULT_STUDY_CALENDAR_NAME
    account: str = "google"
    environment: str = "local"

    @property
    def tzinfo(self) -> ZoneInfo:
        """Local timezone used for day keys and window bounds."""
        return ZoneInfo(self.timezone)


def load_settings(*, dotenv: bool = True) -> Settings:
    """Load settings from environment variables.

    Args:
        dotenv: Read a ``.env`` file into the environment first.

    Returns:
        Settings with the resolved values.

    Raises:
        ConfigError: if the configured timezone is unknown.
    """

    if dotenv:
        load_dotenv()

    timezone_name = os.getenv("DASH_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(
            f"Unknown timezone '{timezone_name}'. Set DASH_TIMEZONE to an IANA name "
            "such as 'Asia/Tokyo'."
        ) from exc

    study_name = (
        os.getenv("DASH_STUDY_CALENDAR_NAME", DEFAULT_STUDY_CALENDAR_NAME).strip()
        or DEFAULT_STUDY_CALENDAR_NAME
    )

    return Settings(
        timezone=timezone_name,
        study_calendar_name=study_name,
        account=os.getenv("DASH_CALENDAR_ACCOUNT", "google").strip() or "google",
        environment=os.getenv("DASH_ENV", "local"),
    )
