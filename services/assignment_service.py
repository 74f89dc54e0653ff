import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from models.field_requests import ValidationErrorResponse
from models.workplace import EmployeeAssignment, WorkplaceLocation
from services.api_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

ASSIGNMENT_CACHE_SECONDS = 5 * 60


class AssignmentService:
    """
    Resolves the workplace assigned to the signed-in employee.

    The backend owns assignments; this keeps a read-only copy for
    ``cache_seconds``. A failed refresh serves the last good value, stale or
    not, and only returns ``None`` when nothing was ever fetched.
    """

    def __init__(
        self,
        client: BackendClient,
        cache_seconds: float = ASSIGNMENT_CACHE_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.cache_seconds = cache_seconds
        self._timer = timer
        self._cached_assignment: Optional[EmployeeAssignment] = None
        self._last_fetch_time: Optional[float] = None

    def _is_fresh(self, now: float) -> bool:
        return (
            self._cached_assignment is not None
            and self._last_fetch_time is not None
            and (now - self._last_fetch_time) < self.cache_seconds
        )

    async def get_my_assignment(self, force_refresh: bool = False) -> Optional[EmployeeAssignment]:
        now = self._timer()

        # Fast path: fresh cache, no network
        if not force_refresh and self._is_fresh(now):
            return self._cached_assignment

        try:
            response = await self.client.get_my_assignment()
            if isinstance(response, ValidationErrorResponse):
                raise BackendError(response.message, status_code=422)

            payload = response.get("assignment")
            assignment = EmployeeAssignment.from_api(payload) if payload else None
        except (BackendError, ValidationError) as e:
            logger.error(f"[ASSIGNMENT] Failed to fetch assignment: {e}")
            # Serve whatever we have, even if stale
            return self._cached_assignment

        self._cached_assignment = assignment
        self._last_fetch_time = now
        return assignment

    async def get_my_workplace_location(self, force_refresh: bool = False) -> Optional[WorkplaceLocation]:
        assignment = await self.get_my_assignment(force_refresh)
        if assignment is None:
            return None
        return assignment.workplace_location

    async def get_employee_workplace_location(self, employee_id: str) -> Optional[WorkplaceLocation]:
        """Workplace currently assigned to another employee (kiosk / team-leader use)."""
        try:
            response = await self.client.get_user(employee_id)
            if isinstance(response, ValidationErrorResponse):
                return None

            # The user may come back bare or wrapped, in snake or camel case
            user = response.get("user") or response
            current = user.get("current_assignment") or user.get("currentAssignment")
            if not current or not current.get("workplace_location"):
                return None

            return WorkplaceLocation.from_api(current["workplace_location"])
        except (BackendError, ValidationError, AttributeError) as e:
            logger.error(f"[ASSIGNMENT] Failed to fetch assignment for {employee_id}: {e}")
            return None

    def clear_cache(self) -> None:
        self._cached_assignment = None
        self._last_fetch_time = None

    async def has_assignment(self) -> bool:
        return await self.get_my_assignment() is not None
