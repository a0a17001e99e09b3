"""Seed catalog use case."""

from typing import Callable

from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.domain.entities.vehicle import Vehicle


class SeedCatalog:
    """Use case for inserting the mock fleet into the catalog."""

    def __init__(
        self,
        catalog_repository: VehicleCatalogRepository,
        fleet_loader: Callable[[], list[Vehicle]],
    ) -> None:
        """
        Initialize seed use case.

        Args:
            catalog_repository: Catalog receiving the vehicles
            fleet_loader: Callable returning the fleet to insert, with fresh ids
        """
        self._catalog_repository = catalog_repository
        self._fleet_loader = fleet_loader

    async def execute(self) -> list[Vehicle]:
        """
        Insert the fleet into an empty catalog.

        A catalog that already holds vehicles (e.g. seeded on startup) is left
        as is, so the fleet is never listed twice.

        Returns:
            The inserted vehicles, empty when the catalog was already populated
        """
        if await self._catalog_repository.count() > 0:
            return []

        inserted = []
        for vehicle in self._fleet_loader():
            await self._catalog_repository.add(vehicle)
            inserted.append(vehicle)
        return inserted
