"""
Attendance time-window rules.

Everything here is a pure function of the local wall-clock time and an
``AttendancePolicy``; timers and ticking belong to the caller.

Timeline with the default policy::

    14:00  nominal clock-in start (still closed)
    14:20  clock-in opens
    14:30  clock-ins from here on are late
    15:30  clock-in window expires
    18:30  clock-out opens (countdown reaches zero)
    18:40  attendance day closed, nothing permitted
"""

from datetime import datetime, time
from typing import Optional

from core.config import AttendancePolicy
from models.attendance import AttendanceRecord, ClockInWindow
from utils.datetime_helpers import decimal_hour

DEFAULT_POLICY = AttendancePolicy()


def is_clock_in_available(now: datetime, policy: AttendancePolicy = DEFAULT_POLICY) -> ClockInWindow:
    hour = decimal_hour(now)

    if hour < decimal_hour(policy.clock_in_start):
        return ClockInWindow(available=False)

    # Nominal start reached but the gate has not opened yet
    if hour < decimal_hour(policy.clock_in_opens):
        return ClockInWindow(available=False)

    if hour < decimal_hour(policy.clock_in_end):
        return ClockInWindow(
            available=True,
            is_late=hour >= decimal_hour(policy.work_start),
        )

    return ClockInWindow(available=False, is_expired=True)


def can_clock_in(
    record: Optional[AttendanceRecord],
    now: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
) -> bool:
    if record is not None and record.is_clocked_in:
        return False

    hour = decimal_hour(now)
    if hour >= decimal_hour(policy.work_end) or hour >= decimal_hour(policy.extended_clock_out):
        return False

    return is_clock_in_available(now, policy).available


def is_clock_out_available(
    record: Optional[AttendanceRecord],
    now: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
) -> bool:
    if record is None or not record.is_clocked_in or record.is_clocked_out:
        return False

    hour = decimal_hour(now)
    return decimal_hour(policy.work_end) <= hour < decimal_hour(policy.extended_clock_out)


def millis_until(target: time, now: datetime) -> int:
    """Milliseconds from ``now`` until wall-clock ``target`` on the same day, never negative."""
    target_dt = now.replace(
        hour=target.hour, minute=target.minute, second=0, microsecond=0
    )
    remaining = (target_dt - now).total_seconds() * 1000
    return max(0, int(remaining))


def clock_out_countdown_ms(
    record: Optional[AttendanceRecord],
    now: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
) -> int:
    # Only counts down while clocked in and before clock-out opens
    if record is None or not record.is_clocked_in or record.is_clocked_out:
        return 0
    if decimal_hour(now) >= decimal_hour(policy.work_end):
        return 0
    return millis_until(policy.work_end, now)


def format_countdown(ms: int) -> str:
    total_seconds = max(0, ms // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def clock_in_block_reason(
    record: Optional[AttendanceRecord],
    now: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
) -> Optional[str]:
    """Inline explanation for a disabled clock-in action, or None when allowed."""
    hour = decimal_hour(now)

    if hour >= decimal_hour(policy.extended_clock_out):
        return "Attendance is closed for today."
    if record is not None and record.is_clocked_in:
        return "Already clocked in today."
    if hour >= decimal_hour(policy.work_end):
        return "Clock-in is no longer available today."

    window = is_clock_in_available(now, policy)
    if window.is_expired:
        return f"Clock-in window closed at {policy.clock_in_end:%H:%M}."
    if not window.available:
        return f"Clock-in opens at {policy.clock_in_opens:%H:%M}."
    return None


def clock_out_block_reason(
    record: Optional[AttendanceRecord],
    now: datetime,
    policy: AttendancePolicy = DEFAULT_POLICY,
) -> Optional[str]:
    """Inline explanation for a disabled clock-out action, or None when allowed."""
    hour = decimal_hour(now)

    if hour >= decimal_hour(policy.extended_clock_out):
        return "Attendance is closed for today."
    if record is None or not record.is_clocked_in:
        return "Cannot clock out before clocking in."
    if record.is_clocked_out:
        return "Already clocked out today."
    if hour < decimal_hour(policy.work_end):
        return f"Clock-out opens at {policy.work_end:%H:%M}."
    return None
