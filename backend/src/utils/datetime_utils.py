"""
Datetime utilities for consistent timezone handling across the application.

This module provides utilities to ensure all datetime operations use timezone-aware
datetimes consistently. Business logic (weekday, minute-of-day, same-day checks)
always runs on the wall clock of the configured clinic timezone (CLINIC_TIMEZONE).

Weekdays are numbered 0=Sunday ... 6=Saturday throughout the scheduling code.
"""

import logging
import re
from datetime import datetime, timezone, timedelta, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from core.config import CLINIC_TIMEZONE
from core.constants import MINUTES_PER_DAY

logger = logging.getLogger(__name__)

_CLOCK_TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")
_DATE_ONLY_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

Number = Union[int, float]


class InvalidTimeFormatError(ValueError):
    """Raised when a clock-time string is not a zero-padded HH:MM value."""
    pass


def _load_clinic_timezone(name: str) -> tzinfo:
    """Resolve the configured timezone name; UTC needs no tz database."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


CLINIC_TZ = _load_clinic_timezone(CLINIC_TIMEZONE)


def clinic_now() -> datetime:
    """
    Get current datetime in the clinic timezone.

    Returns:
        Current timezone-aware datetime
    """
    return datetime.now(CLINIC_TZ)


def ensure_clinic_tz(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the clinic timezone.

    Naive values are treated as clinic wall-clock time (this is how SQLite
    hands stored instants back); aware values are converted.

    Args:
        dt: Datetime to normalize

    Returns:
        Timezone-aware datetime in the clinic timezone, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=CLINIC_TZ)
    return dt.astimezone(CLINIC_TZ)


def parse_datetime_string_to_clinic(dt_str: str) -> datetime:
    """
    Parse an ISO format datetime string and convert to the clinic timezone.

    Handles:
    - ISO format with offset (e.g., "2026-10-22T10:00:00-04:00")
    - ISO format with Z (UTC) (e.g., "2026-10-22T14:00:00Z")
    - ISO format without offset (interpreted as clinic time)

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    if not dt_str or not dt_str.strip():
        raise ValueError("Datetime string cannot be empty")
    try:
        dt = datetime.fromisoformat(dt_str.strip().replace('Z', '+00:00'))
    except ValueError as e:
        raise ValueError(f"Invalid datetime string format: {dt_str}") from e
    return ensure_clinic_tz(dt)  # type: ignore[return-value]


def parse_datetime_to_clinic(v: Union[str, datetime]) -> datetime:
    """
    Parse datetime from string or return datetime object, ensuring clinic timezone.

    Args:
        v: Either an ISO datetime string or a datetime object

    Returns:
        Datetime object in the clinic timezone

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(v, str):
        return parse_datetime_string_to_clinic(v)
    if isinstance(v, datetime):
        return ensure_clinic_tz(v)  # type: ignore[return-value]
    raise ValueError(f"Cannot parse datetime from {type(v).__name__}")


def parse_date_string(date_str: str) -> datetime:
    """
    Parse a list-filter boundary.

    "YYYY-MM-DD" means local midnight of that day in the clinic timezone;
    anything else must be a full ISO datetime.

    Raises:
        ValueError: If the string is neither a date nor an ISO datetime
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")

    date_str = date_str.strip()
    if _DATE_ONLY_PATTERN.fullmatch(date_str):
        try:
            day = datetime.strptime(date_str, '%Y-%m-%d')
        except ValueError as e:
            raise ValueError(f"Invalid date (expected YYYY-MM-DD): {date_str}") from e
        return day.replace(tzinfo=CLINIC_TZ)
    return parse_datetime_string_to_clinic(date_str)


def parse_clock_time(value: str) -> int:
    """
    Parse a zero-padded "HH:MM" clock time into minutes since midnight.

    >>> parse_clock_time("09:30")
    570

    Raises:
        InvalidTimeFormatError: For any other shape ("24:00", "9:00", "1:1", "")
    """
    match = _CLOCK_TIME_PATTERN.fullmatch(value or "")
    if not match:
        raise InvalidTimeFormatError(f"Invalid HH:MM time: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def parse_clock_end_time(value: str) -> int:
    """Like parse_clock_time, but also accepts "24:00" (end of day) as 1440."""
    if value == "24:00":
        return MINUTES_PER_DAY
    return parse_clock_time(value)


def format_clock_time(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM" (1440 renders as "24:00")."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_of(instant: datetime) -> int:
    """Local weekday of an instant, 0=Sunday ... 6=Saturday."""
    local = ensure_clinic_tz(instant)
    assert local is not None
    return local.isoweekday() % 7


def minute_of_day(instant: datetime) -> int:
    """Local minute of day (0..1439) of an instant."""
    local = ensure_clinic_tz(instant)
    assert local is not None
    return local.hour * 60 + local.minute


def same_local_day(a: datetime, b: datetime) -> bool:
    """True if both instants fall on the same clinic-local calendar day."""
    local_a = ensure_clinic_tz(a)
    local_b = ensure_clinic_tz(b)
    assert local_a is not None and local_b is not None
    return local_a.date() == local_b.date()


def local_day_bounds(instant: datetime) -> tuple[datetime, datetime]:
    """Clinic-local [midnight, next midnight) around an instant."""
    local = ensure_clinic_tz(instant)
    assert local is not None
    day_start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return day_start, day_start + timedelta(days=1)


def intervals_overlap(
    start_a: Union[datetime, Number],
    end_a: Union[datetime, Number],
    start_b: Union[datetime, Number],
    end_b: Union[datetime, Number],
) -> bool:
    """
    Half-open interval overlap: [start_a, end_a) vs [start_b, end_b).

    Touching intervals (end_a == start_b or start_a == end_b) do not overlap.
    Works for datetimes and for minute-of-day integers alike.
    """
    return start_a < end_b and start_b < end_a  # type: ignore[operator]


def format_datetime(dt: datetime) -> str:
    """
    Format datetime for user-facing messages in the clinic timezone.

    Formats datetime as: "Thu 2026-10-22 10:00"
    """
    local_datetime = ensure_clinic_tz(dt)
    if local_datetime is None:
        raise ValueError("Cannot format None datetime")
    return local_datetime.strftime('%a %Y-%m-%d %H:%M')
