"""
Timezone utilities for the attendance service.

Attendance windows are defined in the workplace's local wall-clock time, while
instants are persisted in UTC. These helpers convert between the two.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def from_utc_to_local(utc_dt: datetime, tz: str) -> datetime:
    """
    Convert UTC datetime to local datetime in the specified timezone.

    Args:
        utc_dt: UTC datetime (should be timezone-aware)
        tz: IANA timezone string (e.g., 'Asia/Manila')

    Returns:
        datetime: Local datetime in the specified timezone
    """
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)

    target_tz = ZoneInfo(tz)
    return utc_dt.astimezone(target_tz)


def get_current_time_in_tz(tz: str) -> datetime:
    """
    Get current time in the specified timezone.

    Args:
        tz: IANA timezone string

    Returns:
        datetime: Current time in the specified timezone
    """
    utc_now = datetime.now(timezone.utc)
    return from_utc_to_local(utc_now, tz)


def local_date_key(dt: datetime) -> str:
    """ISO calendar date (YYYY-MM-DD) of a local datetime, used as the day key."""
    return dt.date().isoformat()


def coerce_date_key(day: Optional[date | str], fallback: datetime) -> str:
    # Accept a date, an ISO string, or nothing (today in the local zone)
    if day is None:
        return local_date_key(fallback)
    if isinstance(day, str):
        return date.fromisoformat(day).isoformat()
    return day.isoformat()


def validate_timezone(tz: str) -> bool:
    """
    Validate if the timezone string is a valid IANA timezone.

    Args:
        tz: IANA timezone string to validate

    Returns:
        bool: True if valid, False otherwise
    """
    try:
        ZoneInfo(tz)
        return True
    except Exception:
        return False


def get_default_timezone() -> str:
    """
    Get the default timezone for workplaces that do not configure one.

    Returns:
        str: Default timezone (Philippines)
    """
    return "Asia/Manila"

