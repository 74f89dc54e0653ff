import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from models.field_requests import (
    PasswordResetRequest,
    PasswordResetRequestCreate,
    ReassignmentRequest,
    ReassignmentRequestCreate,
    ValidationErrorResponse,
)
from services.api_client import ApiResult, BackendClient, BackendError

logger = logging.getLogger(__name__)


def _unwrap_list(result: ApiResult) -> list[dict[str, Any]]:
    # Paginated listings come back as {"data": {"data": [...]}}
    if isinstance(result, ValidationErrorResponse):
        return []
    data = result.get("data")
    if isinstance(data, dict):
        data = data.get("data")
    return data if isinstance(data, list) else []


class FieldRequestService:
    """
    Reassignment and password-reset requests.

    Submissions and decisions propagate backend failures to the caller;
    listings degrade to an empty list so the screens stay usable.
    """

    def __init__(self, client: BackendClient):
        self.client = client

    # --- Reassignment ---

    async def submit_reassignment_request(
        self, request: ReassignmentRequestCreate
    ) -> Union[ReassignmentRequest, ValidationErrorResponse]:
        result = await self.client.submit_reassignment_request(request)
        if isinstance(result, ValidationErrorResponse):
            return result
        return ReassignmentRequest.model_validate(result.get("data"))

    async def get_reassignment_requests(self, mine: bool = False) -> list[ReassignmentRequest]:
        try:
            if mine:
                result = await self.client.get_my_reassignment_requests()
            else:
                result = await self.client.get_reassignment_requests()
            return [ReassignmentRequest.model_validate(row) for row in _unwrap_list(result)]
        except (BackendError, ValidationError) as e:
            logger.error(f"[REQUESTS] Error getting reassignment requests: {e}")
            return []

    async def get_reassignment_request(self, request_id: str) -> ReassignmentRequest:
        result = await self.client.get_reassignment_request(request_id)
        if isinstance(result, ValidationErrorResponse):
            raise BackendError(result.message, status_code=422)
        return ReassignmentRequest.model_validate(result.get("data"))

    async def decide_reassignment_request(
        self, request_id: str, approve: bool, admin_notes: Optional[str] = None
    ) -> Union[ReassignmentRequest, ValidationErrorResponse]:
        if approve:
            result = await self.client.approve_reassignment_request(request_id, admin_notes)
        else:
            result = await self.client.reject_reassignment_request(request_id, admin_notes or "")
        if isinstance(result, ValidationErrorResponse):
            return result
        return ReassignmentRequest.model_validate(result.get("data"))

    # --- Password Reset ---

    async def submit_password_reset_request(
        self, request: PasswordResetRequestCreate
    ) -> Union[PasswordResetRequest, ValidationErrorResponse]:
        result = await self.client.submit_password_reset_request(request)
        if isinstance(result, ValidationErrorResponse):
            return result
        return PasswordResetRequest.model_validate(result.get("data"))

    async def get_password_reset_requests(self) -> list[PasswordResetRequest]:
        try:
            result = await self.client.get_password_reset_requests()
            return [PasswordResetRequest.model_validate(row) for row in _unwrap_list(result)]
        except (BackendError, ValidationError) as e:
            logger.error(f"[REQUESTS] Error getting password reset requests: {e}")
            return []
