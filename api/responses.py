from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from models.field_requests import ValidationErrorResponse
from services.api_client import BackendError


def validation_error_response(result: ValidationErrorResponse) -> JSONResponse:
    # Forward backend field errors untouched so the UI can show them per field
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=result.model_dump(),
    )


def backend_http_exception(error: BackendError) -> HTTPException:
    """Map a backend failure on a write path to a gateway error for the UI."""
    if error.status_code in (
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
        status.HTTP_404_NOT_FOUND,
    ):
        return HTTPException(status_code=error.status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
