#!/usr/bin/env python3
"""
Attendance session state: one clock-in and one clock-out per employee per day,
persisted to the local store after every change.
"""
import pytest
from fastapi import HTTPException

from conftest import FakeClock, manila
from models.attendance import AttendanceStatus
from services.attendance_session import AttendanceSessionStore
from utils.storage import ATTENDANCE_RECORDS_KEY


@pytest.fixture
def store(storage):
    sessions = AttendanceSessionStore(storage, FakeClock(manila(14, 25)))
    sessions.load()
    return sessions


def test_status_progression(store):
    assert store.get_today_status("42") == AttendanceStatus.NOT_STARTED

    store.record_clock_in("42")
    assert store.get_today_status("42") == AttendanceStatus.IN_PROGRESS

    store.clock.now = manila(18, 35)
    store.record_clock_out("42")
    assert store.get_today_status("42") == AttendanceStatus.COMPLETED


def test_second_clock_in_is_rejected_and_first_is_kept(store):
    first = store.record_clock_in("42")

    store.clock.now = manila(14, 40)
    with pytest.raises(HTTPException) as exc_info:
        store.record_clock_in("42")

    assert exc_info.value.status_code == 409
    assert store.get_record("42") == first
    assert store.get_record("42").clock_in_instant == manila(14, 25)


def test_clock_out_requires_clock_in(store):
    with pytest.raises(HTTPException) as exc_info:
        store.record_clock_out("42")

    assert exc_info.value.status_code == 409
    assert store.get_record("42") is None


def test_second_clock_out_is_rejected(store):
    store.record_clock_in("42")
    store.clock.now = manila(18, 31)
    store.record_clock_out("42")

    store.clock.now = manila(18, 33)
    with pytest.raises(HTTPException):
        store.record_clock_out("42")

    assert store.get_record("42").clock_out_time == "6:31:00 PM"


def test_employees_and_days_are_independent(store):
    store.record_clock_in("42")
    store.record_clock_in("43")
    store.record_clock_in("42", day="2026-10-18")

    assert store.get_today_status("43") == AttendanceStatus.IN_PROGRESS
    assert store.get_record("42", day="2026-10-18").is_clocked_in
    assert store.get_record("44") is None


def test_records_survive_reload(storage, store):
    store.record_clock_in("42")
    store.clock.now = manila(18, 35)
    store.record_clock_out("42")

    reloaded = AttendanceSessionStore(storage, FakeClock(manila(19, 0)))
    reloaded.load()

    record = reloaded.get_record("42")
    assert record.clock_in_time == "2:25:00 PM"
    assert record.clock_out_time == "6:35:00 PM"
    assert reloaded.get_today_status("42") == AttendanceStatus.COMPLETED


def test_blob_uses_device_keys(storage, store):
    store.record_clock_in("42")

    blob = storage.get(ATTENDANCE_RECORDS_KEY)
    entry = blob["2026-10-19"]["42"]
    assert entry["clockIn"] == "2:25:00 PM"
    assert entry["clockInISO"] == "2026-10-19T06:25:00Z"
    assert "clockOut" not in entry


def test_load_skips_clock_out_without_clock_in(storage):
    storage.set(
        ATTENDANCE_RECORDS_KEY,
        {
            "2026-10-19": {
                "42": {"clockIn": "2:25:00 PM", "clockInISO": "2026-10-19T06:25:00Z"},
                "43": {"clockOut": "6:35:00 PM"},
            }
        },
    )
    sessions = AttendanceSessionStore(storage, FakeClock(manila(15, 0)))
    sessions.load()

    assert sessions.get_today_status("42") == AttendanceStatus.IN_PROGRESS
    assert sessions.get_record("43") is None


class LockedOnceStore:
    """Wraps a store and fails the next write, like a locked SQLite file."""

    def __init__(self, inner):
        self.inner = inner
        self.fail_next_write = True

    def get(self, key):
        return self.inner.get(key)

    def set(self, key, value):
        if self.fail_next_write:
            self.fail_next_write = False
            raise RuntimeError("database is locked")
        self.inner.set(key, value)

    def remove(self, key):
        self.inner.remove(key)


def test_failed_clock_in_write_leaves_no_trace_and_can_be_retried(storage):
    locked = LockedOnceStore(storage)
    sessions = AttendanceSessionStore(locked, FakeClock(manila(14, 25)))
    sessions.load()

    with pytest.raises(RuntimeError):
        sessions.record_clock_in("42")

    assert sessions.get_record("42") is None
    assert storage.get(ATTENDANCE_RECORDS_KEY) is None

    record = sessions.record_clock_in("42")
    assert record.clock_in_time == "2:25:00 PM"
    assert storage.get(ATTENDANCE_RECORDS_KEY)["2026-10-19"]["42"]["clockIn"] == "2:25:00 PM"


def test_failed_clock_out_write_keeps_session_open(storage):
    sessions = AttendanceSessionStore(storage, FakeClock(manila(14, 25)))
    sessions.load()
    sessions.record_clock_in("42")

    locked = LockedOnceStore(storage)
    sessions.storage = locked
    sessions.clock.now = manila(18, 35)

    with pytest.raises(RuntimeError):
        sessions.record_clock_out("42")

    assert sessions.get_today_status("42") == AttendanceStatus.IN_PROGRESS
    assert "clockOut" not in storage.get(ATTENDANCE_RECORDS_KEY)["2026-10-19"]["42"]

    assert sessions.record_clock_out("42").clock_out_time == "6:35:00 PM"
    assert sessions.get_today_status("42") == AttendanceStatus.COMPLETED


@pytest.mark.parametrize(
    "blob",
    [
        ["not", "a", "mapping"],
        "corrupted",
        {"2026-10-18": "corrupted", "2026-10-19": {"42": {"clockIn": "2:25:00 PM"}}},
        {"2026-10-19": {"42": {"clockIn": "2:25:00 PM"}, "43": "corrupted"}},
    ],
)
def test_load_tolerates_malformed_blob(storage, blob):
    storage.set(ATTENDANCE_RECORDS_KEY, blob)
    sessions = AttendanceSessionStore(storage, FakeClock(manila(15, 0)))

    sessions.load()

    assert sessions.get_record("43") is None
    assert sessions.get_record("42", day="2026-10-18") is None


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
