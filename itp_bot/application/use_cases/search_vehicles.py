"""Search vehicles use case."""

from typing import Optional

from itp_bot.application.errors import InvalidInputError
from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.domain.entities.vehicle import Vehicle, normalize_maker


class SearchVehicles:
    """Use case for searching the catalog by maker and optional year."""

    def __init__(self, catalog_repository: VehicleCatalogRepository) -> None:
        self._catalog_repository = catalog_repository

    async def execute(self, maker: str, year: Optional[int] = None) -> list[Vehicle]:
        """
        Search vehicles.

        Args:
            maker: Maker name in any case, surrounding whitespace ignored
            year: Exact model year, or None for every year

        Returns:
            Matching vehicles in insertion order; empty list when nothing matches

        Raises:
            InvalidInputError: If the maker is blank
        """
        normalized_maker = normalize_maker(maker)
        if not normalized_maker:
            raise InvalidInputError("Maker is required")
        return await self._catalog_repository.search(normalized_maker, year)
