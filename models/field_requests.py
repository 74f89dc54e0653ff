from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# Payloads Exchanged With the Backend for Field Requests


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthUser(BaseModel):
    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.username or self.id


# 422 Responses Come Back as Data, Not Exceptions
class ValidationErrorResponse(BaseModel):
    message: str = "Validation error"
    errors: dict[str, list[str]] = {}


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class IncidentPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentReportCreate(BaseModel):
    incident_type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: IncidentPriority = IncidentPriority.MEDIUM
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    location_description: Optional[str] = None
    incident_date: datetime


class InventoryRequestItem(BaseModel):
    inventory_item_id: str
    quantity: int = Field(..., gt=0)


class InventoryRequestCreate(BaseModel):
    items: list[InventoryRequestItem] = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    request_date: date


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class ReassignmentRequestCreate(BaseModel):
    requested_location_id: str
    reason: str = Field(..., min_length=1)


class ReassignmentDecision(BaseModel):
    admin_notes: Optional[str] = None


class ReassignmentRequest(BaseModel):
    id: str
    user_id: str
    current_location_id: Optional[str] = None
    requested_location_id: str
    status: RequestStatus
    reason: str
    admin_notes: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    @field_validator(
        "id", "user_id", "current_location_id", "requested_location_id", "processed_by",
        mode="before",
    )
    @classmethod
    def stringify_ids(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class PasswordResetRequestCreate(BaseModel):
    reason: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    id: str
    user_id: str
    status: RequestStatus
    reason: str
    admin_notes: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("id", "user_id", "processed_by", mode="before")
    @classmethod
    def stringify_ids(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)
