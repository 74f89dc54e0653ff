from typing import Annotated, List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from api.responses import backend_http_exception, validation_error_response
from core.deps import CurrentUser, Services
from models.field_requests import (
    IncidentReportCreate,
    InventoryRequestCreate,
    PasswordResetRequest,
    PasswordResetRequestCreate,
    ReassignmentDecision,
    ReassignmentRequest,
    ReassignmentRequestCreate,
    StockStatus,
    ValidationErrorResponse,
)
from services.api_client import BackendError

router = APIRouter()


# Pass a Backend Result Through, Mapping 422s and Failures for the UI
async def _forward(call):
    try:
        result = await call
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result


# --- Incident Reports ---

@router.post("/incident-reports")
async def create_incident_report(report: IncidentReportCreate, services: Services, user: CurrentUser):
    return await _forward(services.client.create_incident_report(report))


@router.post("/incident-reports/{incident_id}/media")
async def upload_incident_media(
    incident_id: str,
    services: Services,
    user: CurrentUser,
    files: Annotated[List[UploadFile], File(description="Photos or videos of the incident")],
    descriptions: Annotated[Optional[List[str]], Form()] = None,
):
    payload = [
        (upload.filename or "upload", await upload.read(), upload.content_type or "application/octet-stream")
        for upload in files
    ]
    return await _forward(services.client.upload_incident_media(incident_id, payload, descriptions))


@router.get("/incident-reports/mine")
async def my_incident_reports(services: Services, user: CurrentUser):
    return await _forward(services.client.get_my_incident_reports())


# --- Inventory ---

@router.get("/inventory-items")
async def list_inventory_items(
    services: Services,
    user: CurrentUser,
    search: Optional[str] = None,
    stock_status: Optional[StockStatus] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
):
    return await _forward(
        services.client.get_inventory_items(search, stock_status, per_page, page)
    )


@router.get("/inventory-items/low-stock")
async def low_stock_items(services: Services, user: CurrentUser):
    return await _forward(services.client.get_low_stock_items())


@router.get("/inventory-items/{item_id}")
async def get_inventory_item(item_id: str, services: Services, user: CurrentUser):
    return await _forward(services.client.get_inventory_item(item_id))


@router.post("/inventory-requests")
async def submit_inventory_request(request: InventoryRequestCreate, services: Services, user: CurrentUser):
    return await _forward(services.client.submit_inventory_request(request))


@router.get("/inventory-requests/mine")
async def my_inventory_requests(services: Services, user: CurrentUser):
    return await _forward(services.client.get_my_inventory_requests())


@router.get("/inventory-requests/{request_id}")
async def get_inventory_request(request_id: str, services: Services, user: CurrentUser):
    return await _forward(services.client.get_inventory_request(request_id))


# --- Reassignment Requests ---

@router.post("/reassignment-requests", response_model=ReassignmentRequest)
async def submit_reassignment_request(
    request: ReassignmentRequestCreate, services: Services, user: CurrentUser
):
    try:
        result = await services.field_requests.submit_reassignment_request(request)
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result


@router.get("/reassignment-requests", response_model=List[ReassignmentRequest])
async def list_reassignment_requests(services: Services, user: CurrentUser, mine: bool = False):
    return await services.field_requests.get_reassignment_requests(mine=mine)


@router.get("/reassignment-requests/{request_id}", response_model=ReassignmentRequest)
async def get_reassignment_request(request_id: str, services: Services, user: CurrentUser):
    try:
        return await services.field_requests.get_reassignment_request(request_id)
    except BackendError as e:
        raise backend_http_exception(e)


@router.put("/reassignment-requests/{request_id}/approve", response_model=ReassignmentRequest)
async def approve_reassignment_request(
    request_id: str, decision: ReassignmentDecision, services: Services, user: CurrentUser
):
    try:
        result = await services.field_requests.decide_reassignment_request(
            request_id, approve=True, admin_notes=decision.admin_notes
        )
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result


@router.put("/reassignment-requests/{request_id}/reject", response_model=ReassignmentRequest)
async def reject_reassignment_request(
    request_id: str, decision: ReassignmentDecision, services: Services, user: CurrentUser
):
    try:
        result = await services.field_requests.decide_reassignment_request(
            request_id, approve=False, admin_notes=decision.admin_notes
        )
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result


# --- Password Resets ---

@router.post("/password-resets", response_model=PasswordResetRequest)
async def submit_password_reset(
    request: PasswordResetRequestCreate, services: Services, user: CurrentUser
):
    try:
        result = await services.field_requests.submit_password_reset_request(request)
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result


@router.get("/password-resets", response_model=List[PasswordResetRequest])
async def list_password_resets(services: Services, user: CurrentUser):
    return await services.field_requests.get_password_reset_requests()


# --- Attendance Records & Team Leader Validations ---

@router.get("/attendance/my-records")
async def my_attendance_records(
    services: Services,
    user: CurrentUser,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
):
    return await _forward(services.client.get_my_attendance_records(date_from, date_to))


@router.get("/attendance/team-records")
async def team_attendance_records(
    services: Services,
    user: CurrentUser,
    date: Optional[str] = None,
    user_id: Optional[str] = None,
):
    return await _forward(services.client.get_team_attendance_records(date, user_id))


@router.get("/attendance/validations")
async def attendance_validations(
    services: Services,
    user: CurrentUser,
    date: Optional[str] = None,
    status: Optional[str] = None,
):
    return await _forward(services.client.get_attendance_validations(date, status))


@router.post("/attendance/validations/{validation_id}/approve")
async def approve_attendance_validation(
    validation_id: str, services: Services, user: CurrentUser, notes: Optional[str] = None
):
    return await _forward(services.client.approve_attendance_validation(validation_id, notes))


@router.post("/attendance/validations/{validation_id}/reject")
async def reject_attendance_validation(
    validation_id: str, services: Services, user: CurrentUser, notes: Optional[str] = None
):
    return await _forward(services.client.reject_attendance_validation(validation_id, notes))
