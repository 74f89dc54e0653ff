import logging
from typing import Optional, Protocol

from models.workplace import Coordinates, GeofenceCheckResult
from services.assignment_service import AssignmentService
from utils.geofence import haversine_dist

logger = logging.getLogger(__name__)

NO_LOCATION_ASSIGNED = "No location assigned"
PERMISSION_DENIED = "Location permission denied"
LOCATION_FAILED = "Failed to get location"


class LocationProvider(Protocol):
    """Source of the device's position (foreground permission + one high-accuracy fix)."""

    async def request_permission(self) -> bool: ...

    async def get_current_position(self) -> Coordinates: ...


class RequestLocationProvider:
    """
    Position reported by the device in the request payload.

    A device that could not (or would not) share its location sends no
    coordinates, which is treated as a denied permission.
    """

    def __init__(self, latitude: Optional[float], longitude: Optional[float]):
        self.latitude = latitude
        self.longitude = longitude

    async def request_permission(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    async def get_current_position(self) -> Coordinates:
        if self.latitude is None or self.longitude is None:
            raise ValueError("Location required to punch.")
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class GeofenceService:
    def __init__(self, assignments: AssignmentService):
        self.assignments = assignments

    async def check_workplace_radius(
        self,
        location_provider: LocationProvider,
        employee_id: Optional[str] = None,
    ) -> GeofenceCheckResult:
        """
        Check whether the device is inside the radius of the assigned workplace.

        Never raises: every failure comes back as a result with ``error`` set
        and ``is_within_radius`` false.
        """
        try:
            # 1) Resolve the assigned workplace
            if employee_id:
                assigned_location = await self.assignments.get_employee_workplace_location(employee_id)
            else:
                assigned_location = await self.assignments.get_my_workplace_location()

            if assigned_location is None:
                return GeofenceCheckResult(error=NO_LOCATION_ASSIGNED)

            # 2) Location permission
            if not await location_provider.request_permission():
                return GeofenceCheckResult(
                    assigned_location=assigned_location,
                    error=PERMISSION_DENIED,
                )

            # 3) Current device position
            current = await location_provider.get_current_position()

            # 4) Distance from the workplace center
            distance = haversine_dist(
                current.latitude,
                current.longitude,
                assigned_location.latitude,
                assigned_location.longitude,
            )

            # 5) Membership uses the exact distance; 6) the reported one is rounded
            return GeofenceCheckResult(
                is_within_radius=distance <= assigned_location.radius_meters,
                distance_meters=float(round(distance)),
                assigned_location=assigned_location,
                current_location=current,
            )
        except Exception as e:
            logger.error(f"[GEOFENCE] Error checking location: {e}")
            return GeofenceCheckResult(error=LOCATION_FAILED)
