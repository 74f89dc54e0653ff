from .attendance import AttendanceRecord, AttendanceStatus, ClockInWindow, PunchRequest, PunchType
from .field_requests import AuthUser, ValidationErrorResponse
from .kv_entry import KeyValueEntry
from .workplace import Coordinates, EmployeeAssignment, GeofenceCheckResult, WorkplaceLocation
