import logging
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import HTTPException, status

from core.config import AttendancePolicy
from models.attendance import PunchRequest, PunchType
from models.field_requests import ValidationErrorResponse
from models.workplace import GeofenceCheckResult
from services import attendance_policy
from services.api_client import BackendClient, BackendError
from services.attendance_session import AttendanceSessionStore
from services.geofence_service import (
    PERMISSION_DENIED,
    GeofenceService,
    RequestLocationProvider,
)
from utils.geofence import format_distance

logger = logging.getLogger(__name__)


class PunchService:
    """Geofence check, then time-window gate, then record the punch."""

    def __init__(
        self,
        geofence: GeofenceService,
        sessions: AttendanceSessionStore,
        client: BackendClient,
        clock: Callable[[], datetime],
        policy: AttendancePolicy,
        sync_to_backend: bool = True,
    ):
        self.geofence = geofence
        self.sessions = sessions
        self.client = client
        self.clock = clock
        self.policy = policy
        self.sync_to_backend = sync_to_backend

    async def check_location(
        self, data: PunchRequest, employee_id: Optional[str] = None
    ) -> GeofenceCheckResult:
        provider = RequestLocationProvider(data.latitude, data.longitude)
        return await self.geofence.check_workplace_radius(provider, employee_id)

    def _require_inside_geofence(self, result: GeofenceCheckResult) -> None:
        if result.error == PERMISSION_DENIED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Location permission denied. Location is required to punch.",
            )
        if result.error:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

        if not result.is_within_radius:
            location = result.assigned_location
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"You must be within {location.radius_meters}m of {location.name} to punch. "
                    f"Current distance: {format_distance(result.distance_meters)}."
                ),
            )

    async def validate_and_save(
        self,
        employee_id: str,
        punch_type: PunchType,
        data: PunchRequest,
        lookup_employee_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Run a clock-in or clock-out for ``employee_id``.

        ``lookup_employee_id`` resolves the geofence from that employee's
        assignment (kiosk mode); otherwise the signed-in user's assignment is
        used. Raises HTTPException when the punch is not permitted.
        """
        # 1) Geofence
        geofence_result = await self.check_location(data, lookup_employee_id)
        self._require_inside_geofence(geofence_result)

        # 2) Time Window + Punch Order
        now = self.clock()
        record = self.sessions.get_record(employee_id)
        is_late = False

        if punch_type == PunchType.CLOCK_IN:
            if record is not None and record.is_clocked_in:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Cannot clock in twice on the same day.",
                )
            reason = attendance_policy.clock_in_block_reason(record, now, self.policy)
            if reason:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)
            is_late = attendance_policy.is_clock_in_available(now, self.policy).is_late
        else:
            if record is None or not record.is_clocked_in:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Cannot clock out before clocking in.",
                )
            if record.is_clocked_out:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Cannot clock out twice on the same day.",
                )
            reason = attendance_policy.clock_out_block_reason(record, now, self.policy)
            if reason:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)

        # 3) Record Locally
        if punch_type == PunchType.CLOCK_IN:
            saved = self.sessions.record_clock_in(employee_id)
        else:
            saved = self.sessions.record_clock_out(employee_id)

        # 4) Forward to Backend (best effort)
        synced = await self._sync(punch_type, geofence_result, data)

        response = {
            "status": "success",
            "data": saved.model_dump(mode="json"),
            "punch_type": punch_type.value,
            "is_late": is_late,
            "distance_meters": geofence_result.distance_meters,
            "workplace_location_id": geofence_result.assigned_location.id,
            "synced": synced,
        }
        if is_late:
            response["message"] = "Clock-in recorded as late."
        return response

    async def _sync(
        self, punch_type: PunchType, geofence_result: GeofenceCheckResult, data: PunchRequest
    ) -> bool:
        if not self.sync_to_backend:
            return False

        try:
            if punch_type == PunchType.CLOCK_IN:
                result = await self.client.check_in(
                    geofence_result.assigned_location.id,
                    latitude=data.latitude,
                    longitude=data.longitude,
                    notes=data.notes,
                )
            else:
                result = await self.client.check_out(
                    latitude=data.latitude,
                    longitude=data.longitude,
                    notes=data.notes,
                )
        except BackendError as e:
            logger.error(f"[PUNCH] Backend {punch_type.value} sync failed: {e}")
            return False

        if isinstance(result, ValidationErrorResponse):
            logger.warning(f"[PUNCH] Backend rejected {punch_type.value}: {result.message} {result.errors}")
            return False
        return True

    def today(self, employee_id: str) -> dict[str, Any]:
        """Snapshot driving UI enablement: status, allowed actions, countdown."""
        now = self.clock()
        record = self.sessions.get_record(employee_id)
        window = attendance_policy.is_clock_in_available(now, self.policy)
        countdown_ms = attendance_policy.clock_out_countdown_ms(record, now, self.policy)

        return {
            "employee_id": employee_id,
            "date": now.date().isoformat(),
            "status": self.sessions.get_today_status(employee_id).value,
            "record": record.model_dump(mode="json") if record else None,
            "clock_in_window": window.model_dump(),
            "can_clock_in": attendance_policy.can_clock_in(record, now, self.policy),
            "can_clock_out": attendance_policy.is_clock_out_available(record, now, self.policy),
            "clock_in_blocked_reason": attendance_policy.clock_in_block_reason(record, now, self.policy),
            "clock_out_blocked_reason": attendance_policy.clock_out_block_reason(record, now, self.policy),
            "clock_out_countdown_ms": countdown_ms,
            "clock_out_countdown": attendance_policy.format_countdown(countdown_ms),
        }
