from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Defines the Structure of Data for Comparing an Employee Clock In/Out to Expected Location


# Workplace w/ Circular Geofence
class WorkplaceLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique workplace identifier")
    name: str = Field(..., description="Human-friendly workplace name")
    latitude: float = Field(..., ge=-90, le=90, description="Latitude of workplace center")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude of workplace center")
    radius_meters: int = Field(..., ge=0, description="Allowed clock-in radius in meters")
    address: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "WorkplaceLocation":
        """Parse a backend workplace-location object into the domain type."""
        return WorkplaceLocationPayload.model_validate(payload).to_domain()


# Backend Shape: ids may be ints, coordinates arrive as numeric strings
class WorkplaceLocationPayload(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float
    radius: int
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("radius", mode="before")
    @classmethod
    def truncate_radius(cls, value: Any) -> int:
        # Backend sends "100", 100 or 100.0; fractional meters are dropped
        return int(float(value))

    def to_domain(self) -> WorkplaceLocation:
        return WorkplaceLocation(
            id=self.id,
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            radius_meters=self.radius,
            address=self.description,
            is_active=self.is_active,
        )


class AssignedByUser(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)


# Employee -> Workplace Assignment (read-only copy of the backend's record)
class EmployeeAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: str
    workplace_location: Optional[WorkplaceLocation] = None
    assigned_by: str
    assigned_at: datetime

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "EmployeeAssignment":
        return EmployeeAssignmentPayload.model_validate(payload).to_domain()


class EmployeeAssignmentPayload(BaseModel):
    id: Optional[str] = None
    user_id: str
    workplace_location_id: Optional[str] = None
    assigned_by: Union[AssignedByUser, str]
    workplace_location: Optional[WorkplaceLocationPayload] = None
    created_at: datetime

    @field_validator("id", "user_id", "workplace_location_id", mode="before")
    @classmethod
    def stringify_ids(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("assigned_by", mode="before")
    @classmethod
    def normalize_assigned_by(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def to_domain(self) -> EmployeeAssignment:
        if isinstance(self.assigned_by, AssignedByUser):
            full_name = f"{self.assigned_by.first_name} {self.assigned_by.last_name}".strip()
            assigned_by = full_name or self.assigned_by.id
        else:
            assigned_by = self.assigned_by

        return EmployeeAssignment(
            employee_id=self.user_id,
            workplace_location=(
                self.workplace_location.to_domain() if self.workplace_location else None
            ),
            assigned_by=assigned_by,
            assigned_at=self.created_at,
        )


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# Outcome of a Single Geofence Check; recomputed every time, never stored
class GeofenceCheckResult(BaseModel):
    is_within_radius: bool = False
    distance_meters: float = Field(default=0, ge=0)
    assigned_location: Optional[WorkplaceLocation] = None
    current_location: Optional[Coordinates] = None
    error: Optional[str] = None
