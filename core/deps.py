import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError

from models.field_requests import AuthUser, ValidationErrorResponse
from services import ServiceRegistry
from services.api_client import BackendError
from utils.storage import USER_PROFILE_KEY

logger = logging.getLogger(__name__)

# Standard credentials exception
CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Not signed in. Log in to continue.",
    headers={"WWW-Authenticate": "Bearer"},
)


# Services Built at Startup (see main.lifespan)
def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


Services = Annotated[ServiceRegistry, Depends(get_services)]


# Signed-In Employee, From the Cached Profile or the Backend
async def get_current_user(services: Services) -> AuthUser:

    # 1) Must Hold a Backend Token
    if not services.client.token:
        raise CREDENTIALS_EXCEPTION

    # 2) Cached Profile From a Previous Call
    cached = services.storage.get(USER_PROFILE_KEY)
    if cached:
        try:
            return AuthUser.model_validate(cached)
        except ValidationError:
            services.storage.remove(USER_PROFILE_KEY)

    # 3) Ask the Backend Who We Are
    try:
        result = await services.client.get_current_user()
    except BackendError as e:
        if e.status_code == status.HTTP_401_UNAUTHORIZED:
            services.client.clear_token()
            raise CREDENTIALS_EXCEPTION
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not fetch user profile.",
        )

    if isinstance(result, ValidationErrorResponse):
        raise CREDENTIALS_EXCEPTION

    # Laravel may return the user bare or wrapped in "user"
    payload = result.get("user") or result
    try:
        user = AuthUser.model_validate(payload)
    except ValidationError as e:
        logger.error(f"[AUTH] Unexpected user payload: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Backend returned an invalid user profile.",
        )

    services.storage.set(USER_PROFILE_KEY, user.model_dump())
    return user


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
