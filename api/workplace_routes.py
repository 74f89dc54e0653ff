from typing import List

from fastapi import APIRouter, HTTPException

from core.deps import CurrentUser, Services
from models.workplace import WorkplaceLocation
from utils.geofence import haversine_dist

router = APIRouter()


# --- API Endpoints ---

@router.get("/", response_model=List[WorkplaceLocation])
def list_workplaces(services: Services):
    return services.workplaces.get_all()


@router.get("/active", response_model=List[WorkplaceLocation])
def list_active_workplaces(services: Services):
    return services.workplaces.get_active()


# Re-fetch the whole list from the backend (falls back to the built-in defaults)
@router.post("/refresh", response_model=List[WorkplaceLocation])
async def refresh_workplaces(services: Services, user: CurrentUser):
    return await services.workplaces.fetch_all()


@router.get("/nearest")
def nearest_workplace(latitude: float, longitude: float, services: Services):
    """
    Closest active workplace to a point, with its distance and whether the
    point falls inside its radius.
    """
    active = services.workplaces.get_active()
    if not active:
        raise HTTPException(status_code=404, detail="No active workplace locations.")

    distances = [
        (haversine_dist(latitude, longitude, w.latitude, w.longitude), w) for w in active
    ]
    distance, workplace = min(distances, key=lambda pair: pair[0])

    return {
        "workplace": workplace,
        "distance_meters": round(distance),
        "is_within_radius": distance <= workplace.radius_meters,
    }


@router.get("/{location_id}", response_model=WorkplaceLocation)
async def get_workplace(location_id: str, services: Services):
    # Not in the loaded list: ask the backend before giving up
    workplace = services.workplaces.get(location_id) or await services.workplaces.fetch_one(location_id)

    if not workplace:
        raise HTTPException(status_code=404, detail=f"Workplace with ID {location_id} not found.")

    return workplace
