import logging
from typing import Optional

from pydantic import ValidationError

from models.workplace import WorkplaceLocation
from services.api_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

# Fallback workplaces used until (or whenever) the backend list is unavailable
DEFAULT_WORKPLACE_LOCATIONS: tuple[WorkplaceLocation, ...] = (
    WorkplaceLocation(
        id="location-1",
        name="Workplace Location 1",
        latitude=14.2753056,  # 14°16'31.1"N
        longitude=121.1297778,  # 121°07'47.2"E
        radius_meters=100,
        is_active=True,
    ),
    WorkplaceLocation(
        id="location-2",
        name="Workplace Location 2",
        latitude=14.2595278,  # 14°15'34.3"N
        longitude=121.1337500,  # 121°08'01.5"E
        radius_meters=100,
        is_active=True,
    ),
    WorkplaceLocation(
        id="location-3",
        name="Workplace Location 3",
        latitude=14.2773056,  # 14°16'38.3"N
        longitude=121.1234722,  # 121°07'24.5"E
        radius_meters=100,
        is_active=True,
    ),
)


class WorkplaceDirectory:
    """
    Known workplace locations, refreshed wholesale from the backend.

    A fetch either replaces the whole list or leaves it untouched; there is no
    merging of partial results.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._locations: list[WorkplaceLocation] = list(DEFAULT_WORKPLACE_LOCATIONS)

    async def fetch_all(self) -> list[WorkplaceLocation]:
        try:
            response = await self.client.get_workplace_locations()
            rows = response.get("data") if isinstance(response, dict) else None

            if isinstance(rows, list):
                locations = [WorkplaceLocation.from_api(row) for row in rows]
                self._locations = locations
                logger.info(f"[WORKPLACE] Loaded {len(locations)} workplace locations")
                return list(locations)

            logger.warning("[WORKPLACE] Backend returned no location list; using defaults")
        except (BackendError, ValidationError) as e:
            logger.error(f"[WORKPLACE] Failed to fetch workplace locations: {e}")

        return list(DEFAULT_WORKPLACE_LOCATIONS)

    def get_all(self) -> list[WorkplaceLocation]:
        return list(self._locations)

    def get_active(self) -> list[WorkplaceLocation]:
        return [location for location in self._locations if location.is_active]

    def get(self, location_id: str) -> Optional[WorkplaceLocation]:
        for location in self._locations:
            if location.id == location_id:
                return location
        return None

    async def fetch_one(self, location_id: str) -> Optional[WorkplaceLocation]:
        """Look a single location up on the backend; the known list is left as is."""
        try:
            response = await self.client.get_workplace_location(location_id)
            row = response.get("data") if isinstance(response, dict) else None
            if not isinstance(row, dict):
                return None
            return WorkplaceLocation.from_api(row)
        except (BackendError, ValidationError) as e:
            logger.error(f"[WORKPLACE] Failed to fetch workplace location {location_id}: {e}")
            return None
