from fastapi import APIRouter

from api.responses import backend_http_exception, validation_error_response
from core.deps import CurrentUser, Services
from models.field_requests import ReassignmentRequestCreate, ValidationErrorResponse
from services.api_client import BackendError

router = APIRouter()


# My Current Workplace Assignment (cached for a few minutes)
@router.get("/me")
async def my_assignment(services: Services, user: CurrentUser, force_refresh: bool = False):
    assignment = await services.assignments.get_my_assignment(force_refresh=force_refresh)

    if assignment is None:
        return {"status": "success", "data": None, "message": "No location assigned."}

    return {"status": "success", "data": assignment}


@router.delete("/cache")
def clear_assignment_cache(services: Services, user: CurrentUser):
    services.assignments.clear_cache()
    return {"status": "success"}


# Ask to Be Moved to Another Workplace
@router.post("/request-reassignment")
async def request_reassignment(
    payload: ReassignmentRequestCreate, services: Services, user: CurrentUser
):
    try:
        result = await services.client.request_reassignment(
            payload.requested_location_id, payload.reason
        )
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)
    return result
