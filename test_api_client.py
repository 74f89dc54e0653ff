#!/usr/bin/env python3
"""
Backend client behaviour: bearer token handling, 422 passthrough and error mapping.
"""
import asyncio
from datetime import datetime

import httpx
import pytest

from conftest import BASE_URL, MANILA
from models.field_requests import (
    IncidentPriority,
    IncidentReportCreate,
    PasswordResetRequestCreate,
    ValidationErrorResponse,
)
from services.api_client import BackendClient, BackendError
from utils.storage import AUTH_TOKEN_KEY


@pytest.fixture
def client(storage, backend):
    return BackendClient(BASE_URL, storage, transport=backend.transport)


def test_login_stores_token_and_sends_bearer(client, backend, storage):
    backend.on("POST", "/auth/login", json={"token": "tok-123", "user": {"id": 42}})

    result = asyncio.run(client.login("jdelacruz", "secret"))
    asyncio.run(client.get_current_user())

    assert result["token"] == "tok-123"
    assert storage.get(AUTH_TOKEN_KEY) == "tok-123"

    login_call, user_call = backend.calls
    assert b'"app_type":"mobile"' in login_call.content.replace(b" ", b"")
    assert "authorization" not in login_call.headers
    assert user_call.headers["authorization"] == "Bearer tok-123"


def test_validation_error_is_returned_not_raised(client, backend):
    backend.on(
        "POST",
        "/auth/login",
        status=422,
        json={"message": "The given data was invalid.", "errors": {"username": ["Required."]}},
    )

    result = asyncio.run(client.login("", ""))

    assert isinstance(result, ValidationErrorResponse)
    assert result.errors == {"username": ["Required."]}
    assert client.token is None


def test_http_error_raises_with_backend_message(client, backend):
    backend.on("GET", "/auth/user", status=401, json={"message": "Unauthenticated."})

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.get_current_user())

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Unauthenticated."


def test_http_error_without_message(client, backend):
    backend.on("GET", "/inventory-items/low-stock/items", status=500)

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.get_low_stock_items())

    assert exc_info.value.message == "HTTP error! status: 500"


def test_transport_failure_has_no_status(client, backend):
    backend.on("GET", "/workplace-locations", error=httpx.ConnectError("refused"))

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(client.get_workplace_locations())

    assert exc_info.value.status_code is None


def test_logout_clears_token_even_when_backend_fails(client, backend, storage):
    client.set_token("tok-123")
    backend.on("POST", "/auth/logout", status=500, json={"message": "boom"})

    with pytest.raises(BackendError):
        asyncio.run(client.logout())

    assert storage.get(AUTH_TOKEN_KEY) is None


def test_unset_query_params_are_dropped(client, backend):
    backend.on("GET", "/attendance/records/my-records", json={"data": []})

    asyncio.run(client.get_my_attendance_records(date_from="2026-10-01"))

    request = backend.calls[-1]
    assert request.url.params["date_from"] == "2026-10-01"
    assert "date_to" not in request.url.params


def test_incident_report_payload(client, backend):
    backend.on("POST", "/incident-reports", json={"data": {"id": 5}})
    report = IncidentReportCreate(
        incident_type="equipment",
        description="Hydraulic fluid leaking near bay 3",
        priority=IncidentPriority.HIGH,
        location_description="Bay 3",
        incident_date=datetime(2026, 10, 19, 15, 0, tzinfo=MANILA),
    )

    result = asyncio.run(client.create_incident_report(report))

    assert result == {"data": {"id": 5}}
    assert b'"priority":"high"' in backend.calls[-1].content.replace(b" ", b"")


def test_password_reset_goes_to_backend(client, backend):
    backend.on("POST", "/password-resets", json={"message": "Request submitted"})

    result = asyncio.run(
        client.submit_password_reset_request(PasswordResetRequestCreate(reason="Forgot password"))
    )

    assert result["message"] == "Request submitted"
    assert backend.count("POST", "/password-resets") == 1


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
