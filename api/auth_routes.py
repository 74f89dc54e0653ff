import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import ValidationError

from api.responses import backend_http_exception, validation_error_response
from core.deps import CurrentUser, Services
from models.field_requests import AuthUser, LoginRequest, ValidationErrorResponse
from services.api_client import BackendError
from utils.storage import USER_PROFILE_KEY

logger = logging.getLogger(__name__)

router = APIRouter()


# Log In Against the Backend; Token Lands in the Local Store
@router.post("/login")
async def login(payload: LoginRequest, services: Services):
    try:
        result = await services.client.login(payload.username, payload.password)
    except BackendError as e:
        raise backend_http_exception(e)

    if isinstance(result, ValidationErrorResponse):
        return validation_error_response(result)

    if not result.get("token"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.get("message") or "Login failed.",
        )

    # New session: drop anything cached for the previous user
    services.storage.remove(USER_PROFILE_KEY)
    services.assignments.clear_cache()

    # An unusable profile is not cached; get_current_user fetches it on demand
    user = result.get("user")
    if user:
        try:
            profile = AuthUser.model_validate(user)
        except ValidationError as e:
            logger.warning(f"[AUTH] Login returned an unexpected user payload: {e}")
        else:
            services.storage.set(USER_PROFILE_KEY, profile.model_dump())
            logger.info(f"[AUTH] Signed in as {profile.display_name}")

    return {"status": "success", "user": user}


@router.post("/logout")
async def logout(services: Services):
    try:
        await services.client.logout()
    except BackendError as e:
        # Token is already cleared locally; the backend session will expire
        logger.warning(f"[AUTH] Backend logout failed: {e}")
    finally:
        services.storage.remove(USER_PROFILE_KEY)
        services.assignments.clear_cache()

    return {"status": "success"}


@router.get("/user", response_model=AuthUser)
async def current_user(user: CurrentUser):
    return user
