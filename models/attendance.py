from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from utils.datetime_helpers import format_utc_datetime


# Defines the Structure of Data for a Clock In/Out Call
class PunchRequest(BaseModel):
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    # Kiosk mode: punch on behalf of a specific employee
    employee_id: str | None = None
    notes: str | None = None


# Enum Limiting Punch Type to Just Two Vals
class PunchType(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


class AttendanceStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# One Employee's Attendance for One Calendar Day
# Aliases keep the blob readable by the legacy device format
class AttendanceRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    clock_in_time: Optional[str] = Field(default=None, alias="clockIn")
    clock_in_instant: Optional[datetime] = Field(default=None, alias="clockInISO")
    clock_out_time: Optional[str] = Field(default=None, alias="clockOut")

    @model_validator(mode="after")
    def check_clock_out_follows_clock_in(self) -> "AttendanceRecord":
        if self.clock_out_time is not None and self.clock_in_time is None:
            raise ValueError("clock-out recorded without a clock-in")
        return self

    @property
    def is_clocked_in(self) -> bool:
        return self.clock_in_time is not None

    @property
    def is_clocked_out(self) -> bool:
        return self.clock_out_time is not None

    @property
    def status(self) -> AttendanceStatus:
        if self.is_clocked_in and self.is_clocked_out:
            return AttendanceStatus.COMPLETED
        if self.is_clocked_in:
            return AttendanceStatus.IN_PROGRESS
        return AttendanceStatus.NOT_STARTED

    @field_serializer("clock_in_instant")
    def serialize_clock_in_instant(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure the instant is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


class ClockInWindow(BaseModel):
    available: bool
    is_late: bool = False
    is_expired: bool = False
