from typing import Optional

from fastapi import APIRouter, HTTPException, status

from core.deps import CurrentUser, Services
from models.attendance import PunchRequest, PunchType
from models.field_requests import AuthUser
from models.workplace import GeofenceCheckResult
from services import ServiceRegistry, attendance_policy

# Defines API Endpoints
router = APIRouter()


def _kiosk_employee_id(data: PunchRequest, user: AuthUser, services: ServiceRegistry) -> Optional[str]:
    """
    Employee selected on a kiosk, or None for a self-service punch.

    Any signed-in device may punch for another employee while kiosk punches
    are enabled (ALLOW_KIOSK_PUNCHES); otherwise only for itself.
    """
    if not data.employee_id or data.employee_id == user.id:
        return None

    if not services.settings.allow_kiosk_punches:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Punching for another employee is disabled on this device.",
        )
    return data.employee_id


# Geofence Check Without Punching (drives the "Refresh Location" card)
@router.post("/geofence-check", response_model=GeofenceCheckResult)
async def geofence_check(data: PunchRequest, services: Services, user: CurrentUser):
    return await services.punches.check_location(data, _kiosk_employee_id(data, user, services))


# Clock In Endpoint
@router.post("/clock-in")
async def clock_in(data: PunchRequest, services: Services, user: CurrentUser):
    # Kiosk punches are recorded under the selected employee
    kiosk_employee_id = _kiosk_employee_id(data, user, services)

    return await services.punches.validate_and_save(
        employee_id=kiosk_employee_id or user.id,
        punch_type=PunchType.CLOCK_IN,
        data=data,
        lookup_employee_id=kiosk_employee_id,
    )


# Clock Out Endpoint
@router.post("/clock-out")
async def clock_out(data: PunchRequest, services: Services, user: CurrentUser):
    kiosk_employee_id = _kiosk_employee_id(data, user, services)

    return await services.punches.validate_and_save(
        employee_id=kiosk_employee_id or user.id,
        punch_type=PunchType.CLOCK_OUT,
        data=data,
        lookup_employee_id=kiosk_employee_id,
    )


# Get Today's Attendance Status
@router.get("/today")
def get_today(services: Services, user: CurrentUser, employee_id: str | None = None):
    """
    Status, allowed actions and clock-out countdown for today.

    The UI polls this on its own tick; the countdown reaches zero at clock-out time.
    """
    return {"status": "success", "data": services.punches.today(employee_id or user.id)}


# Current Clock-In Window, Independent of Any Employee
@router.get("/window")
def get_window(services: Services):
    now = services.clock()
    window = attendance_policy.is_clock_in_available(now, services.settings.policy)
    return {
        "now": now.isoformat(),
        "available": window.available,
        "is_late": window.is_late,
        "is_expired": window.is_expired,
        "policy": services.settings.policy.model_dump(mode="json"),
    }
