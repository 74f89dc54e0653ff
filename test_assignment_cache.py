#!/usr/bin/env python3
"""
Quick test to verify the assignment cache: one backend call per five minutes,
forced refreshes, and stale values served when the backend is down.
"""
import asyncio

import httpx
import pytest

from conftest import ASSIGNMENT_PAYLOAD, BASE_URL, WORKPLACE_PAYLOAD, FakeTimer
from services.api_client import BackendClient
from services.assignment_service import AssignmentService

MY_ASSIGNMENT = "/employee-assignments/my-assignment"


@pytest.fixture
def resolver(storage, backend, timer):
    client = BackendClient(BASE_URL, storage, transport=backend.transport)
    return AssignmentService(client, cache_seconds=300, timer=timer)


def test_two_calls_within_ttl_hit_backend_once(resolver, backend, timer):
    first = asyncio.run(resolver.get_my_assignment())
    timer.value += 299
    second = asyncio.run(resolver.get_my_assignment())

    assert backend.count("GET", MY_ASSIGNMENT) == 1
    assert first == second
    assert first.employee_id == "42"
    assert first.assigned_by == "Maria Santos"
    assert first.workplace_location.radius_meters == 100
    assert first.workplace_location.latitude == pytest.approx(14.2753)


def test_call_after_ttl_refetches(resolver, backend, timer):
    asyncio.run(resolver.get_my_assignment())
    timer.value += 300
    asyncio.run(resolver.get_my_assignment())

    assert backend.count("GET", MY_ASSIGNMENT) == 2


def test_force_refresh_always_refetches(resolver, backend):
    asyncio.run(resolver.get_my_assignment())
    asyncio.run(resolver.get_my_assignment(force_refresh=True))

    assert backend.count("GET", MY_ASSIGNMENT) == 2


def test_stale_value_served_when_backend_fails(resolver, backend, timer):
    cached = asyncio.run(resolver.get_my_assignment())

    backend.on("GET", MY_ASSIGNMENT, error=httpx.ConnectError("network down"))
    timer.value += 3600

    assert asyncio.run(resolver.get_my_assignment()) == cached
    backend.on("GET", MY_ASSIGNMENT, status=500, json={"message": "Server Error"})
    assert asyncio.run(resolver.get_my_assignment(force_refresh=True)) == cached


def test_failure_without_history_returns_none(resolver, backend):
    backend.on("GET", MY_ASSIGNMENT, status=503, json={"message": "down"})

    assert asyncio.run(resolver.get_my_assignment()) is None
    assert asyncio.run(resolver.has_assignment()) is False


def test_null_assignment_is_a_successful_answer(resolver, backend):
    asyncio.run(resolver.get_my_assignment())
    backend.on("GET", MY_ASSIGNMENT, json={"assignment": None})

    assert asyncio.run(resolver.get_my_assignment(force_refresh=True)) is None
    assert asyncio.run(resolver.get_my_workplace_location()) is None


def test_clear_cache_forces_next_fetch(resolver, backend):
    asyncio.run(resolver.get_my_assignment())
    resolver.clear_cache()
    asyncio.run(resolver.get_my_assignment())

    assert backend.count("GET", MY_ASSIGNMENT) == 2


def test_assigned_by_plain_id(resolver, backend):
    backend.on("GET", MY_ASSIGNMENT, json={"assignment": {**ASSIGNMENT_PAYLOAD, "assigned_by": 3}})

    assert asyncio.run(resolver.get_my_assignment()).assigned_by == "3"


def test_employee_workplace_location_lookup(resolver, backend):
    backend.on(
        "GET",
        "/users/55",
        json={"id": 55, "currentAssignment": {"workplace_location": WORKPLACE_PAYLOAD}},
    )
    backend.on("GET", "/users/56", json={"user": {"id": 56, "current_assignment": None}})

    location = asyncio.run(resolver.get_employee_workplace_location("55"))
    assert location.id == "7"
    assert location.address == "Main gate"

    assert asyncio.run(resolver.get_employee_workplace_location("56")) is None
    # Unknown user -> 404 -> None
    assert asyncio.run(resolver.get_employee_workplace_location("99")) is None


def test_separate_resolvers_do_not_share_cache(storage, backend):
    client = BackendClient(BASE_URL, storage, transport=backend.transport)
    first = AssignmentService(client, timer=FakeTimer())
    second = AssignmentService(client, timer=FakeTimer())

    asyncio.run(first.get_my_assignment())
    asyncio.run(second.get_my_assignment())

    assert backend.count("GET", MY_ASSIGNMENT) == 2


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
