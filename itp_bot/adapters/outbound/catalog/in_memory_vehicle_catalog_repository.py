"""In-memory vehicle catalog repository adapter."""

from typing import Iterable, Optional

from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.domain.entities.vehicle import Vehicle, normalize_maker


class InMemoryVehicleCatalogRepository(VehicleCatalogRepository):
    """In-memory catalog that keeps vehicles in insertion order."""

    def __init__(self, vehicles: Optional[Iterable[Vehicle]] = None) -> None:
        """
        Initialize in-memory catalog.

        Args:
            vehicles: Optional initial fleet, stored in the given order
        """
        self._vehicles: list[Vehicle] = []
        self._by_id: dict[str, Vehicle] = {}
        for vehicle in vehicles or []:
            self._store(vehicle)

    def _store(self, vehicle: Vehicle) -> None:
        if vehicle.id in self._by_id:
            raise ValueError(f"Duplicate vehicle id: {vehicle.id}")
        self._vehicles.append(vehicle)
        self._by_id[vehicle.id] = vehicle

    async def search(self, maker: str, year: Optional[int] = None) -> list[Vehicle]:
        """
        Search vehicles by maker and optional exact year.

        Args:
            maker: Maker name (normalised again here, so callers may pass raw text)
            year: Exact model year, or None for every year

        Returns:
            Matching vehicles in insertion order
        """
        normalized_maker = normalize_maker(maker)
        return [
            vehicle
            for vehicle in self._vehicles
            if vehicle.maker == normalized_maker and (year is None or vehicle.year == year)
        ]

    async def get_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        """
        Get a vehicle by id.

        Args:
            vehicle_id: Opaque vehicle identifier

        Returns:
            Vehicle, or None if not found
        """
        return self._by_id.get(vehicle_id)

    async def count(self) -> int:
        """Count the stored vehicles."""
        return len(self._vehicles)

    async def add(self, vehicle: Vehicle) -> None:
        """
        Add a vehicle to the catalog.

        Args:
            vehicle: Vehicle to store

        Raises:
            ValueError: If a vehicle with the same id already exists
        """
        self._store(vehicle)
