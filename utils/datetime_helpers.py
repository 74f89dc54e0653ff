from datetime import datetime, time, timezone
from typing import Optional, Union

def format_utc_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime object to an ISO 8601 string with 'Z' suffix.

    If the datetime is naive, it is assumed to be in UTC and is made aware.
    If it is timezone-aware, it is converted to UTC.

    Args:
        dt: A datetime object or None

    Returns:
        An ISO 8601 formatted string with 'Z' suffix, or None if the input is None.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    iso_string = dt.isoformat()

    if iso_string.endswith('+00:00'):
        return iso_string.replace('+00:00', 'Z')

    return iso_string


def decimal_hour(value: Union[datetime, time]) -> float:
    """
    Wall-clock hour and minute as a decimal hour (14:30 -> 14.5).

    Seconds are ignored so that every instant inside a minute lands on the
    same side of a policy threshold.
    """
    return value.hour + value.minute / 60


def parse_hhmm(value: str) -> time:
    """Parse an 'HH:MM' string into a time, raising ValueError when malformed."""
    hours, _, minutes = value.strip().partition(":")
    if not hours or not minutes:
        raise ValueError(f"Expected HH:MM, got '{value}'")
    return time(int(hours), int(minutes))


def format_clock_time(dt: datetime) -> str:
    # Human-facing clock string stored alongside the ISO instant
    return dt.strftime("%I:%M:%S %p").lstrip("0")
