"""
Centralized configuration module for application-wide settings.

Values are read from environment variables once at import time so every
service sees the same scheduling policy. Tests override them through
monkeypatch or by passing explicit arguments to the services.
"""

import logging
import os
from datetime import time
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer '{raw}' for {name}; using default {default}",
            extra={"context": {"variable": name}},
        )
        return default


def _env_time(name: str, default: str) -> time:
    raw = os.getenv(name, default)
    try:
        hour, minute = (int(part) for part in raw.split(":"))
        return time(hour, minute)
    except (TypeError, ValueError):
        logger.warning(
            f"Invalid time '{raw}' for {name}; using default {default}",
            extra={"context": {"variable": name}},
        )
        hour, minute = (int(part) for part in default.split(":"))
        return time(hour, minute)


# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: zone used to turn a calendar date plus a wall-clock time
        into an instant. Defaults to UTC when TZ is unset or invalid.
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


# ===========================
# Scheduling Policy
# ===========================

SLOT_INTERVAL_MINUTES = _env_int("SLOT_INTERVAL_MINUTES", 60)
LEGACY_APPOINTMENT_MINUTES = _env_int("LEGACY_APPOINTMENT_MINUTES", 60)

DEFAULT_WORKING_HOURS_START = _env_time("DEFAULT_WORKING_HOURS_START", "08:00")
DEFAULT_WORKING_HOURS_END = _env_time("DEFAULT_WORKING_HOURS_END", "17:00")

MIN_WORKING_MINUTES = 60
MAX_WORKING_MINUTES = 960

BOOKING_HORIZON_DAYS = _env_int("BOOKING_HORIZON_DAYS", 92)


# ===========================
# Background Jobs
# ===========================

SWEEP_INTERVAL_MINUTES = _env_int("SWEEP_INTERVAL_MINUTES", 5)


def get_scheduler_enabled() -> bool:
    """
    Whether APScheduler jobs should be started by the app factory.

    Always False while TESTING is set so the test suite never spawns
    background threads.
    """
    if _env_flag("TESTING", "false"):
        return False
    return _env_flag("SCHEDULER_ENABLED", "true")


# ===========================
# Logging
# ===========================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _env_flag("LOG_JSON", "false")
LOG_TO_FILE = _env_flag("LOG_TO_FILE", "true")


def log_scheduling_config():
    """Log the active scheduling configuration at startup."""
    logger.info(
        "Scheduling configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "slot_interval_minutes": SLOT_INTERVAL_MINUTES,
                "legacy_appointment_minutes": LEGACY_APPOINTMENT_MINUTES,
                "default_hours": f"{DEFAULT_WORKING_HOURS_START:%H:%M}-"
                f"{DEFAULT_WORKING_HOURS_END:%H:%M}",
                "booking_horizon_days": BOOKING_HORIZON_DAYS,
                "sweep_interval_minutes": SWEEP_INTERVAL_MINUTES,
            }
        },
    )
