"""Transfer tax DTOs."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict

from itp_bot.application.dtos.base import DTO
from itp_bot.application.dtos.vehicle import VehicleSummary


class TransferRecord(DTO):
    """Audit entry for one computed transfer tax. Never mutated."""

    vehicle_id: str
    region: str
    applied_rate: Decimal
    computed_tax: Decimal
    is_resident: bool = False
    created_at: datetime


class TransferResult(DTO):
    """Outcome of a transfer tax calculation."""

    vehicle: VehicleSummary
    region: str
    tax_rate: str  # Formatted percentage, e.g. "4%"
    applied_rate: Decimal
    calculated_tax: Decimal
    fiscal_value: Decimal
    notes: Optional[list[str]] = None  # None when no special rule applied; dropped from HTTP output

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "vehicle": {
                    "id": "8f14e45fceea167a5a36dedd4bea2543",
                    "maker": "toyota",
                    "model": "Corolla",
                    "year": 2020,
                    "fiscal_power": "11.5",
                    "fiscal_value": "18000",
                    "fuel_type": "gasoline",
                },
                "region": "Madrid",
                "tax_rate": "4%",
                "applied_rate": "0.04",
                "calculated_tax": "720.00",
                "fiscal_value": "18000",
            }
        },
    )


class CalculateTransferRequest(DTO):
    """HTTP payload for a transfer tax calculation."""

    vehicle_id: Optional[str] = None
    region: Optional[str] = None
    is_resident: bool = False
