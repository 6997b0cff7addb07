from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_ORG_TIMEZONE
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def parse_year_month(value: str) -> tuple[date, date]:
    """Parse YYYY-MM into the first and last day of that month."""
    try:
        first = datetime.strptime(value, "%Y-%m").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid month: {value!r}") from exc
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def parse_clock_time(value: Any) -> Optional[time]:
    """Normalize a time-of-day coming from the UI or from MySQL.

    Accepts:
    - None or "" (no time entered)
    - datetime.time
    - datetime.timedelta (MySQL TIME via mysql-connector)
    - "HH:MM" / "HH:MM:SS" strings
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parts = text.split(":")
        if len(parts) < 2:
            raise ValidationError(f"Invalid time: {value!r}")
        try:
            hours = int(parts[0])
            minutes = int(parts[1])
            seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
            return time(hour=hours, minute=minutes, second=seconds)
        except ValueError as exc:
            raise ValidationError(f"Invalid time: {value!r}") from exc

    raise TypeError(f"Unsupported time value type: {type(value)!r}")


def format_clock_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def org_timezone(tz_name: str = DEFAULT_ORG_TIMEZONE) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", tz_name)
        return ZoneInfo("UTC")


def today_in(tz_name: str = DEFAULT_ORG_TIMEZONE) -> date:
    """Organization-local calendar day."""
    return datetime.now(org_timezone(tz_name)).date()
