from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import httpx

from core.config import Settings
from db.session import build_engine, init_db
from services.api_client import BackendClient
from services.assignment_service import AssignmentService
from services.attendance_session import AttendanceSessionStore
from services.geofence_service import GeofenceService
from services.punch_service import PunchService
from services.request_service import FieldRequestService
from services.workplace_directory import WorkplaceDirectory
from utils.storage import KeyValueStore, SQLModelKeyValueStore
from utils.timezone_helpers import get_current_time_in_tz


# Everything a request handler needs, constructed once per application
@dataclass
class ServiceRegistry:
    settings: Settings
    storage: KeyValueStore
    client: BackendClient
    workplaces: WorkplaceDirectory
    assignments: AssignmentService
    geofence: GeofenceService
    sessions: AttendanceSessionStore
    punches: PunchService
    field_requests: FieldRequestService
    clock: Callable[[], datetime]

    async def startup(self) -> None:
        self.sessions.load()
        await self.workplaces.fetch_all()

    async def shutdown(self) -> None:
        await self.client.aclose()


def build_services(
    settings: Settings,
    storage: Optional[KeyValueStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Callable[[], datetime]] = None,
    timer: Optional[Callable[[], float]] = None,
) -> ServiceRegistry:
    """Wire the services together; tests inject storage, transport, clock and timer."""
    if storage is None:
        engine = build_engine(settings.database_url)
        init_db(engine)
        storage = SQLModelKeyValueStore(engine)

    if clock is None:
        def clock() -> datetime:
            return get_current_time_in_tz(settings.timezone)

    client = BackendClient(
        settings.api_base_url,
        storage,
        timeout=settings.backend_timeout_seconds,
        transport=transport,
    )
    workplaces = WorkplaceDirectory(client)

    assignment_kwargs = {"cache_seconds": settings.assignment_cache_seconds}
    if timer is not None:
        assignment_kwargs["timer"] = timer
    assignments = AssignmentService(client, **assignment_kwargs)

    geofence = GeofenceService(assignments)
    sessions = AttendanceSessionStore(storage, clock)
    punches = PunchService(
        geofence,
        sessions,
        client,
        clock=clock,
        policy=settings.policy,
        sync_to_backend=settings.sync_attendance_to_backend,
    )

    return ServiceRegistry(
        settings=settings,
        storage=storage,
        client=client,
        workplaces=workplaces,
        assignments=assignments,
        geofence=geofence,
        sessions=sessions,
        punches=punches,
        field_requests=FieldRequestService(client),
        clock=clock,
    )
