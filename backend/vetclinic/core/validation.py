"""
Common validation utilities for controllers and services.

Parsers accept both already-typed values and the wire formats used by the
JSON API (``HH:MM`` times, ``YYYY-MM-DD`` dates, ISO-8601 instants) and
raise ``ValidationError`` naming the offending field.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

from vetclinic.core.config import APP_TZ
from vetclinic.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def require_field(data: Mapping[str, Any], field_name: str) -> Any:
    """Return ``data[field_name]`` or raise if it is missing or blank."""
    value = data.get(field_name)
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise ValidationError(f"{field_name} is required", field_name)
    return value


def parse_time_of_day(value: Any, field_name: str = "time") -> time:
    """Parse an ``HH:MM`` wall-clock time."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    if isinstance(value, str):
        try:
            hour_str, minute_str = value.strip().split(":")[:2]
            return time(int(hour_str), int(minute_str))
        except ValueError:
            pass

    logger.warning(f"Validation error: {field_name}: invalid time {value!r}")
    raise ValidationError(f"{field_name} must use HH:MM format", field_name)


def parse_calendar_date(value: Any, field_name: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
        except ValueError:
            pass

    logger.warning(f"Validation error: {field_name}: invalid date {value!r}")
    raise ValidationError(f"{field_name} must use YYYY-MM-DD format", field_name)


def parse_instant(value: Any, field_name: str = "date_time") -> datetime:
    """
    Parse an ISO-8601 instant.

    Naive values are read as wall-clock time in the application timezone.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Validation error: {field_name}: invalid instant {value!r}")
            raise ValidationError(f"{field_name} must be an ISO-8601 timestamp", field_name)
    else:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp", field_name)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=APP_TZ)
    return parsed


def optional_text(data: Mapping[str, Any], field_name: str) -> str:
    value: Optional[Any] = data.get(field_name)
    if value is None:
        return ""
    return str(value).strip()
