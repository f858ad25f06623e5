"""Conversions between domain values and JSON-safe record fields."""

from datetime import date, datetime, time
from typing import Any, Optional

from vetclinic.core.validation import parse_calendar_date, parse_instant, parse_time_of_day


def dump_value(value: Any) -> Any:
    # datetime is a date subclass, so it must be checked first
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


def load_date(value: Any) -> Optional[date]:
    return parse_calendar_date(value) if value else None


def load_time(value: Any) -> Optional[time]:
    return parse_time_of_day(value) if value else None


def load_instant(value: Any) -> Optional[datetime]:
    return parse_instant(value) if value else None
