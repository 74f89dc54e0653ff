"""Shared fakes for the test modules: an in-memory store, a scripted backend and fake clocks."""

from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from core.config import Settings
from db.session import build_engine, init_db
from services import build_services
from utils.storage import SQLModelKeyValueStore

MANILA = ZoneInfo("Asia/Manila")
BASE_URL = "http://backend.test/api"

WORKPLACE_PAYLOAD = {
    "id": 7,
    "name": "Calamba Depot",
    "latitude": "14.2753",
    "longitude": "121.1298",
    "radius": 100,
    "description": "Main gate",
    "is_active": True,
}

ASSIGNMENT_PAYLOAD = {
    "id": 1,
    "user_id": 42,
    "workplace_location_id": 7,
    "assigned_by": {"id": 3, "first_name": "Maria", "last_name": "Santos"},
    "workplace_location": WORKPLACE_PAYLOAD,
    "created_at": "2026-10-01T08:00:00Z",
    "updated_at": "2026-10-01T08:00:00Z",
}


def manila(hour: int, minute: int, second: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, second, tzinfo=MANILA)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeTimer:
    def __init__(self, value: float = 1000.0):
        self.value = value

    def __call__(self) -> float:
        return self.value


class FakeBackend:
    """
    Scripted backend for httpx.MockTransport.

    Routes map (METHOD, path-without-/api) to a (status, json) tuple or to an
    exception instance that is raised as a transport failure.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, json=None, error: Exception = None):
        self.routes[(method, path)] = error if error is not None else (status, json)

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for r in self.calls
            if r.method == method and r.url.path.removeprefix("/api") == path
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))

        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        if isinstance(route, Exception):
            raise route

        status, body = route
        return httpx.Response(status, json=body if body is not None else {})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def storage():
    engine = build_engine("sqlite://")
    init_db(engine)
    return SQLModelKeyValueStore(engine)


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.on("GET", "/workplace-locations", json={"data": [WORKPLACE_PAYLOAD]})
    fake.on("GET", "/employee-assignments/my-assignment", json={"assignment": ASSIGNMENT_PAYLOAD})
    fake.on("GET", "/auth/user", json={"id": 42, "username": "jdelacruz", "first_name": "Juan", "last_name": "Dela Cruz"})
    fake.on("POST", "/attendance/check-in", json={"data": {"id": 1}})
    fake.on("POST", "/attendance/check-out", json={"data": {"id": 1}})
    return fake


@pytest.fixture
def clock():
    return FakeClock(manila(14, 25))


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def services(storage, backend, clock, timer):
    settings = Settings(api_base_url=BASE_URL, timezone="Asia/Manila")
    return build_services(
        settings,
        storage=storage,
        transport=backend.transport,
        clock=clock,
        timer=timer,
    )
