"""Vehicle DTOs."""

from decimal import Decimal

from pydantic import ConfigDict

from itp_bot.application.dtos.base import DTO
from itp_bot.domain.entities.vehicle import FuelType, Vehicle


class VehicleSummary(DTO):
    """Vehicle as exposed over HTTP."""

    id: str
    maker: str
    model: str
    year: int
    fiscal_power: Decimal
    fiscal_value: Decimal
    fuel_type: FuelType

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "8f14e45fceea167a5a36dedd4bea2543",
                "maker": "toyota",
                "model": "Corolla",
                "year": 2020,
                "fiscal_power": "11.5",
                "fiscal_value": "18000",
                "fuel_type": "gasoline",
            }
        },
    )

    @classmethod
    def from_entity(cls, vehicle: Vehicle) -> "VehicleSummary":
        """Build the DTO from a catalog vehicle."""
        return cls(
            id=vehicle.id,
            maker=vehicle.maker,
            model=vehicle.model,
            year=vehicle.year,
            fiscal_power=vehicle.fiscal_power,
            fiscal_value=vehicle.fiscal_value,
            fuel_type=vehicle.fuel_type,
        )


class SeedResult(DTO):
    """Result of seeding the catalog with the mock fleet."""

    count: int
    vehicles: list[VehicleSummary]
