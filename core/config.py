import os
from datetime import time

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from utils.datetime_helpers import parse_hhmm
from utils.timezone_helpers import get_default_timezone, validate_timezone

# Load environment variables from .env file, if it exists
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "t", "yes")


def _env_time(name: str, default: str) -> time:
    return parse_hhmm(os.getenv(name, default))


# Attendance Thresholds (Local Wall-Clock Time)
class AttendancePolicy(BaseModel):
    clock_in_start: time = time(14, 0)
    # Clock-in actually opens 20 minutes after the nominal start
    clock_in_opens: time = time(14, 20)
    # Lateness boundary
    work_start: time = time(14, 30)
    # Hard cutoff for new clock-ins
    clock_in_end: time = time(15, 30)
    # Clock-out opens; no clock-in past this point either
    work_end: time = time(18, 30)
    # Absolute end of the attendance day
    extended_clock_out: time = time(18, 40)


class Settings(BaseModel):
    api_base_url: str = "http://localhost:8080/api"
    database_url: str = "sqlite:///./field_ops.db"
    timezone: str = Field(default_factory=get_default_timezone)
    assignment_cache_seconds: float = 5 * 60
    backend_timeout_seconds: float = 15.0
    sync_attendance_to_backend: bool = True
    # Kiosk devices punch on behalf of whichever employee is selected
    allow_kiosk_punches: bool = True
    allowed_origins: list[str] = []
    policy: AttendancePolicy = AttendancePolicy()


def load_settings() -> Settings:
    """Build settings from the process environment (and .env, if present)."""
    tz = os.getenv("APP_TIMEZONE", get_default_timezone())
    if not validate_timezone(tz):
        raise ValueError(f"APP_TIMEZONE '{tz}' is not a valid IANA timezone")

    policy = AttendancePolicy(
        clock_in_start=_env_time("CLOCK_IN_START", "14:00"),
        clock_in_opens=_env_time("CLOCK_IN_OPENS", "14:20"),
        work_start=_env_time("WORK_START_TIME", "14:30"),
        clock_in_end=_env_time("CLOCK_IN_END", "15:30"),
        work_end=_env_time("WORK_END_TIME", "18:30"),
        extended_clock_out=_env_time("EXTENDED_CLOCK_OUT_TIME", "18:40"),
    )

    # Always allow both dev and production UI origins
    origins = [
        os.getenv("DEV_DOMAIN", "http://localhost:8081"),
        os.getenv("PRODUCTION_DOMAIN"),
        "http://localhost:19006",  # Expo web fallback
    ]

    return Settings(
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:8080/api"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./field_ops.db"),
        timezone=tz,
        assignment_cache_seconds=float(os.getenv("ASSIGNMENT_CACHE_SECONDS", "300")),
        backend_timeout_seconds=float(os.getenv("BACKEND_TIMEOUT_SECONDS", "15")),
        sync_attendance_to_backend=_env_bool("SYNC_ATTENDANCE_TO_BACKEND", "true"),
        allow_kiosk_punches=_env_bool("ALLOW_KIOSK_PUNCHES", "true"),
        allowed_origins=sorted(set(o for o in origins if o)),
        policy=policy,
    )
