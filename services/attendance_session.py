import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError

from models.attendance import AttendanceRecord, AttendanceStatus
from utils.datetime_helpers import format_clock_time
from utils.storage import ATTENDANCE_RECORDS_KEY, KeyValueStore
from utils.timezone_helpers import coerce_date_key, local_date_key

logger = logging.getLogger(__name__)

# date (YYYY-MM-DD) -> employee_id -> record
AttendanceBook = dict[str, dict[str, AttendanceRecord]]


class AttendanceSessionStore:
    """
    Per-employee, per-day clock-in/out state kept in the local store.

    The whole mapping lives in memory and is written back after every
    mutation (read-modify-write of the full blob). There is no locking; the
    service runs as a single instance per device.
    """

    def __init__(self, storage: KeyValueStore, clock: Callable[[], datetime]):
        self.storage = storage
        self.clock = clock
        self._records: AttendanceBook = {}

    def load(self) -> None:
        raw = self.storage.get(ATTENDANCE_RECORDS_KEY) or {}
        records: AttendanceBook = {}

        if not isinstance(raw, dict):
            logger.warning(f"[ATTENDANCE] Ignoring malformed attendance blob of type {type(raw).__name__}")
            raw = {}

        for day, employees in raw.items():
            if not isinstance(employees, dict):
                logger.warning(f"[ATTENDANCE] Skipping malformed day {day}")
                continue
            for employee_id, entry in employees.items():
                try:
                    records.setdefault(day, {})[employee_id] = AttendanceRecord.model_validate(entry)
                except ValidationError as e:
                    logger.warning(f"[ATTENDANCE] Skipping invalid record {day}/{employee_id}: {e}")

        self._records = records
        logger.info(f"[ATTENDANCE] Loaded attendance records for {len(records)} day(s)")

    def _save(self, records: AttendanceBook) -> None:
        # Memory only changes once the store has accepted the new mapping
        blob = {
            day: {
                employee_id: record.model_dump(by_alias=True, exclude_none=True, mode="json")
                for employee_id, record in employees.items()
            }
            for day, employees in records.items()
        }
        self.storage.set(ATTENDANCE_RECORDS_KEY, blob)
        self._records = records

    def _with_record(self, key: str, employee_id: str, record: AttendanceRecord) -> AttendanceBook:
        records = {day: dict(employees) for day, employees in self._records.items()}
        records.setdefault(key, {})[employee_id] = record
        return records

    def get_record(self, employee_id: str, day: Optional[date | str] = None) -> Optional[AttendanceRecord]:
        key = coerce_date_key(day, self.clock())
        return self._records.get(key, {}).get(employee_id)

    def record_clock_in(self, employee_id: str, day: Optional[date | str] = None) -> AttendanceRecord:
        now = self.clock()
        key = coerce_date_key(day, now)

        existing = self._records.get(key, {}).get(employee_id)
        if existing is not None and existing.is_clocked_in:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot clock in twice on the same day.",
            )

        record = AttendanceRecord(
            clock_in_time=format_clock_time(now),
            clock_in_instant=now,
        )
        self._save(self._with_record(key, employee_id, record))

        logger.info(f"[ATTENDANCE] {employee_id} clocked in on {key} at {record.clock_in_time}")
        return record

    def record_clock_out(self, employee_id: str, day: Optional[date | str] = None) -> AttendanceRecord:
        now = self.clock()
        key = coerce_date_key(day, now)

        existing = self._records.get(key, {}).get(employee_id)
        if existing is None or not existing.is_clocked_in:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot clock out before clocking in.",
            )
        if existing.is_clocked_out:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot clock out twice on the same day.",
            )

        record = existing.model_copy(update={"clock_out_time": format_clock_time(now)})
        self._save(self._with_record(key, employee_id, record))

        logger.info(f"[ATTENDANCE] {employee_id} clocked out on {key} at {record.clock_out_time}")
        return record

    def get_today_status(self, employee_id: str) -> AttendanceStatus:
        record = self._records.get(local_date_key(self.clock()), {}).get(employee_id)
        if record is None:
            return AttendanceStatus.NOT_STARTED
        return record.status
