import logging
from typing import Any, Optional, Union

import httpx

from models.field_requests import (
    IncidentReportCreate,
    InventoryRequestCreate,
    PasswordResetRequestCreate,
    ReassignmentRequestCreate,
    StockStatus,
    ValidationErrorResponse,
)
from utils.storage import AUTH_TOKEN_KEY, KeyValueStore

logger = logging.getLogger(__name__)

ApiResult = Union[dict[str, Any], ValidationErrorResponse]


class BackendError(Exception):
    """Backend call failed: transport error (status_code None) or non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendClient:
    """
    Thin async wrapper over the field-operations REST backend.

    The bearer token lives in the local store under ``auth_token`` and is
    attached to every call. Validation failures (HTTP 422) are returned as a
    ``ValidationErrorResponse`` so the UI can show them field by field; every
    other failure raises ``BackendError``.
    """

    def __init__(
        self,
        base_url: str,
        storage: KeyValueStore,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.storage = storage
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Token Handling ---

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(AUTH_TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self.storage.set(AUTH_TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.storage.remove(AUTH_TOKEN_KEY)

    def _auth_headers(self) -> dict[str, str]:
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    # --- Core Request ---

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Any = None,
    ) -> ApiResult:
        # Drop unset query params so they never reach the URL
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method,
                endpoint,
                json=json,
                params=params or None,
                data=data,
                files=files,
                headers=self._auth_headers(),
            )
        except httpx.HTTPError as e:
            logger.error(f"[BACKEND] {method} {endpoint} failed: {e}")
            raise BackendError(f"Network error calling {endpoint}: {e}") from e

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.status_code == 422:
            logger.warning(f"[BACKEND] {method} {endpoint} validation error")
            return ValidationErrorResponse(
                message=body.get("message") or "Validation error",
                errors=body.get("errors") or {},
            )

        if response.is_error:
            message = body.get("message") or f"HTTP error! status: {response.status_code}"
            logger.error(f"[BACKEND] {method} {endpoint} -> {response.status_code}: {message}")
            raise BackendError(message, status_code=response.status_code)

        return body

    # --- Authentication ---

    async def login(self, username: str, password: str) -> ApiResult:
        result = await self.request(
            "POST",
            "/auth/login",
            json={"username": username, "password": password, "app_type": "mobile"},
        )
        if isinstance(result, dict) and result.get("token"):
            self.set_token(result["token"])
        return result

    async def logout(self) -> None:
        try:
            await self.request("POST", "/auth/logout")
        finally:
            self.clear_token()

    async def get_current_user(self) -> ApiResult:
        return await self.request("GET", "/auth/user")

    async def get_user(self, user_id: str) -> ApiResult:
        return await self.request("GET", f"/users/{user_id}")

    # --- Workplace Locations & Assignments ---

    async def get_workplace_locations(self) -> ApiResult:
        return await self.request("GET", "/workplace-locations")

    async def get_workplace_location(self, location_id: str) -> ApiResult:
        return await self.request("GET", f"/workplace-locations/{location_id}")

    async def get_my_assignment(self) -> ApiResult:
        return await self.request("GET", "/employee-assignments/my-assignment")

    async def request_reassignment(self, workplace_location_id: str, reason: str) -> ApiResult:
        return await self.request(
            "POST",
            "/employee-assignments/request-reassignment",
            json={"workplace_location_id": workplace_location_id, "reason": reason},
        )

    # --- Attendance ---

    async def check_in(
        self,
        workplace_location_id: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> ApiResult:
        return await self.request(
            "POST",
            "/attendance/check-in",
            json={
                "workplace_location_id": workplace_location_id,
                "latitude": latitude,
                "longitude": longitude,
                "notes": notes,
            },
        )

    async def check_out(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> ApiResult:
        return await self.request(
            "POST",
            "/attendance/check-out",
            json={"latitude": latitude, "longitude": longitude, "notes": notes},
        )

    async def get_my_attendance_records(
        self, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> ApiResult:
        return await self.request(
            "GET",
            "/attendance/records/my-records",
            params={"date_from": date_from, "date_to": date_to},
        )

    # Team leader endpoints
    async def get_attendance_validations(
        self, date: Optional[str] = None, status: Optional[str] = None
    ) -> ApiResult:
        return await self.request(
            "GET", "/attendance/validations", params={"date": date, "status": status}
        )

    async def approve_attendance_validation(self, validation_id: str, notes: Optional[str] = None) -> ApiResult:
        return await self.request(
            "POST", f"/attendance/validations/{validation_id}/approve", json={"notes": notes}
        )

    async def reject_attendance_validation(self, validation_id: str, notes: Optional[str] = None) -> ApiResult:
        return await self.request(
            "POST", f"/attendance/validations/{validation_id}/reject", json={"notes": notes}
        )

    async def get_team_attendance_records(
        self, date: Optional[str] = None, user_id: Optional[str] = None
    ) -> ApiResult:
        return await self.request(
            "GET", "/attendance/records", params={"date": date, "user_id": user_id}
        )

    # --- Incident Reports ---

    async def create_incident_report(self, report: IncidentReportCreate) -> ApiResult:
        return await self.request("POST", "/incident-reports", json=report.model_dump(mode="json"))

    async def upload_incident_media(
        self,
        incident_id: str,
        files: list[tuple[str, bytes, str]],
        descriptions: Optional[list[str]] = None,
    ) -> ApiResult:
        """Upload (filename, content, content_type) tuples as multipart ``files[]``."""
        multipart = [("files[]", (name, content, content_type)) for name, content, content_type in files]
        form = {
            f"descriptions[{index}]": text
            for index, text in enumerate(descriptions or [])
            if text
        }
        return await self.request(
            "POST",
            f"/incident-reports/{incident_id}/upload-media",
            data=form or None,
            files=multipart,
        )

    async def get_my_incident_reports(self) -> ApiResult:
        return await self.request("GET", "/incident-reports", params={"reported_by": "me"})

    # --- Inventory ---

    async def get_inventory_items(
        self,
        search: Optional[str] = None,
        stock_status: Optional[StockStatus] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> ApiResult:
        return await self.request(
            "GET",
            "/inventory-items",
            params={
                "search": search or None,
                "stock_status": stock_status.value if stock_status else None,
                "per_page": per_page,
                "page": page,
            },
        )

    async def get_inventory_item(self, item_id: str) -> ApiResult:
        return await self.request("GET", f"/inventory-items/{item_id}")

    async def get_low_stock_items(self) -> ApiResult:
        return await self.request("GET", "/inventory-items/low-stock/items")

    async def submit_inventory_request(self, request: InventoryRequestCreate) -> ApiResult:
        return await self.request("POST", "/inventory-requests", json=request.model_dump(mode="json"))

    async def get_my_inventory_requests(self) -> ApiResult:
        return await self.request("GET", "/inventory-requests/my-requests")

    async def get_inventory_request(self, request_id: str) -> ApiResult:
        return await self.request("GET", f"/inventory-requests/{request_id}")

    # --- Reassignment Requests ---

    async def submit_reassignment_request(self, request: ReassignmentRequestCreate) -> ApiResult:
        return await self.request("POST", "/reassignment-requests", json=request.model_dump())

    async def get_reassignment_requests(self) -> ApiResult:
        return await self.request("GET", "/reassignment-requests")

    async def get_my_reassignment_requests(self) -> ApiResult:
        return await self.request("GET", "/reassignment-requests/my-requests")

    async def get_reassignment_request(self, request_id: str) -> ApiResult:
        return await self.request("GET", f"/reassignment-requests/{request_id}")

    async def approve_reassignment_request(self, request_id: str, admin_notes: Optional[str] = None) -> ApiResult:
        return await self.request(
            "PUT", f"/reassignment-requests/{request_id}/approve", json={"admin_notes": admin_notes}
        )

    async def reject_reassignment_request(self, request_id: str, admin_notes: str) -> ApiResult:
        return await self.request(
            "PUT", f"/reassignment-requests/{request_id}/reject", json={"admin_notes": admin_notes}
        )

    # --- Password Resets ---

    async def submit_password_reset_request(self, request: PasswordResetRequestCreate) -> ApiResult:
        return await self.request("POST", "/password-resets", json=request.model_dump())

    async def get_password_reset_requests(self) -> ApiResult:
        return await self.request("GET", "/password-resets")
