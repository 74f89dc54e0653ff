import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.assignment_routes import router as assignment_router
from api.auth_routes import router as auth_router
from api.request_routes import router as request_router
from api.time_routes import router as time_router
from api.workplace_routes import router as workplace_router
from core.config import load_settings
from services import ServiceRegistry, build_services

# This file is the control center of the whole application

# Configure logging
logging.basicConfig(
    level=os.getenv("APP_LOG_LEVEL", "info").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceRegistry] = None) -> FastAPI:
    """Build the application; tests pass a pre-wired ServiceRegistry."""

    # When We Start, Load Local Attendance and the Workplace Directory
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        registry = services or build_services(load_settings())
        app.state.services = registry

        await registry.startup()
        yield
        await registry.shutdown()

    app = FastAPI(title="Field Ops Attendance", lifespan=lifespan)

    allowed_origins = (services.settings if services else load_settings()).allowed_origins
    logger.info(f"CORS: Allowing origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Connects Routes to the Main App
    app.include_router(auth_router, prefix="/auth", tags=["Auth"])
    app.include_router(time_router, prefix="/time", tags=["Time", "Geofence"])
    app.include_router(workplace_router, prefix="/workplaces", tags=["Workplaces", "Geofence"])
    app.include_router(assignment_router, prefix="/assignments", tags=["Assignments"])
    app.include_router(request_router, prefix="/requests", tags=["Field Requests"])

    return app


app = create_app()
