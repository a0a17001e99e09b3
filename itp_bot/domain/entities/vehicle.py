"""Vehicle entity."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from itp_bot.domain.value_objects.tax_rate import to_decimal


class FuelType(str, Enum):
    """Fuel types known to the catalog."""

    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


def normalize_maker(maker: str) -> str:
    """Normalise a maker name the way the catalog stores it."""
    return maker.lower().strip()


@dataclass(frozen=True)
class Vehicle:
    """A vehicle model with its administrative fiscal data. Immutable once seeded."""

    id: str
    maker: str
    model: str
    year: int
    fiscal_power: Decimal  # CV fiscales, may be fractional or zero for electric
    fiscal_value: Decimal  # Valor fiscal in euros
    fuel_type: FuelType

    def __post_init__(self) -> None:
        """Normalise maker and numeric fields, validate value ranges."""
        object.__setattr__(self, "maker", normalize_maker(self.maker))
        object.__setattr__(self, "fiscal_power", to_decimal(self.fiscal_power))
        object.__setattr__(self, "fiscal_value", to_decimal(self.fiscal_value))
        object.__setattr__(self, "fuel_type", FuelType(self.fuel_type))
        if self.fiscal_value < 0:
            raise ValueError("Fiscal value cannot be negative")
        if self.fiscal_power < 0:
            raise ValueError("Fiscal power cannot be negative")

    @property
    def display_name(self) -> str:
        """Maker in capitals followed by the model, e.g. 'TOYOTA Corolla'."""
        return f"{self.maker.upper()} {self.model}"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "maker": self.maker,
            "model": self.model,
            "year": self.year,
            "fiscal_power": str(self.fiscal_power),
            "fiscal_value": str(self.fiscal_value),
            "fuel_type": self.fuel_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vehicle":
        """Deserialise from the dictionary produced by to_dict."""
        return cls(
            id=str(data["id"]),
            maker=data["maker"],
            model=data["model"],
            year=int(data["year"]),
            fiscal_power=to_decimal(data["fiscal_power"]),
            fiscal_value=to_decimal(data["fiscal_value"]),
            fuel_type=FuelType(data["fuel_type"]),
        )
