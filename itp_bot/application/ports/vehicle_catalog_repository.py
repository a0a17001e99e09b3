"""Vehicle catalog repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from itp_bot.domain.entities.vehicle import Vehicle


class VehicleCatalogRepository(ABC):
    """Port interface for the vehicle catalog."""

    @abstractmethod
    async def search(self, maker: str, year: Optional[int] = None) -> list[Vehicle]:
        """
        Search vehicles by maker and optional exact year.

        Args:
            maker: Maker name, already normalised (lower-cased, trimmed)
            year: Exact model year, or None for every year

        Returns:
            Matching vehicles in insertion order (empty list when none match)
        """
        pass

    @abstractmethod
    async def get_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        """
        Get a vehicle by id.

        Args:
            vehicle_id: Opaque vehicle identifier

        Returns:
            Vehicle, or None if not found
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """
        Count the vehicles in the catalog.

        Returns:
            Number of stored vehicles
        """
        pass

    @abstractmethod
    async def add(self, vehicle: Vehicle) -> None:
        """
        Add a vehicle to the catalog.

        Args:
            vehicle: Vehicle to store
        """
        pass
