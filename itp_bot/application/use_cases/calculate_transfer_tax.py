"""Calculate transfer tax use case."""

from datetime import datetime, timezone
from typing import Optional

from itp_bot.application.dtos.transfer import TransferRecord, TransferResult
from itp_bot.application.dtos.vehicle import VehicleSummary
from itp_bot.application.errors import VehicleNotFoundError
from itp_bot.application.ports.transfer_record_repository import TransferRecordRepository
from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.domain.services.tax_rate_table import resolve_rate


class CalculateTransferTax:
    """Use case for computing the ITP of a vehicle transfer."""

    DEFAULT_REGION = "Madrid"

    def __init__(
        self,
        catalog_repository: VehicleCatalogRepository,
        transfer_record_repository: TransferRecordRepository,
        default_region: Optional[str] = None,
    ) -> None:
        """
        Initialize calculation use case.

        Args:
            catalog_repository: Catalog used to resolve the vehicle id
            transfer_record_repository: Audit log receiving one record per calculation
            default_region: Region used when the caller supplies none (Madrid by default)
        """
        self._catalog_repository = catalog_repository
        self._transfer_record_repository = transfer_record_repository
        self._default_region = default_region or self.DEFAULT_REGION

    async def execute(
        self,
        vehicle_id: str,
        region: Optional[str] = None,
        is_resident: bool = False,
    ) -> TransferResult:
        """
        Calculate the transfer tax and record it.

        Args:
            vehicle_id: Catalog id of the vehicle
            region: Autonomous community; defaults to the configured default region
            is_resident: Buyer residency (only affects Ceuta and Melilla)

        Returns:
            Transfer result with rate, tax and the notes of any special rule

        Raises:
            VehicleNotFoundError: If the vehicle id does not exist
        """
        vehicle = await self._catalog_repository.get_by_id(vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundError(vehicle_id)

        region = region or self._default_region
        resolution = resolve_rate(region, vehicle.fiscal_power, is_resident)
        calculated_tax = resolution.rate.apply_to(vehicle.fiscal_value)

        await self._transfer_record_repository.append(
            TransferRecord(
                vehicle_id=vehicle.id,
                region=region,
                applied_rate=resolution.rate.fraction,
                computed_tax=calculated_tax,
                is_resident=is_resident,
                created_at=datetime.now(timezone.utc),
            )
        )

        return TransferResult(
            vehicle=VehicleSummary.from_entity(vehicle),
            region=region,
            tax_rate=resolution.rate.as_percentage(),
            applied_rate=resolution.rate.fraction,
            calculated_tax=calculated_tax,
            fiscal_value=vehicle.fiscal_value,
            notes=list(resolution.notes) if resolution.notes else None,
        )
