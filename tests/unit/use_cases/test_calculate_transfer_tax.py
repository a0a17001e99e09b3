"""Unit tests for CalculateTransferTax."""

from decimal import Decimal

import pytest

from itp_bot.adapters.outbound.catalog.in_memory_vehicle_catalog_repository import (
    InMemoryVehicleCatalogRepository,
)
from itp_bot.adapters.outbound.transfer_record import InMemoryTransferRecordRepository
from itp_bot.application.errors import VehicleNotFoundError
from itp_bot.application.use_cases.calculate_transfer_tax import CalculateTransferTax
from itp_bot.domain.entities.vehicle import FuelType, Vehicle

CAPTUR = Vehicle(
    id="captur",
    maker="renault",
    model="Captur",
    year=2020,
    fiscal_power=Decimal("11.1"),
    fiscal_value=Decimal("18000"),
    fuel_type=FuelType.GASOLINE,
)
POWERFUL = Vehicle(
    id="powerful",
    maker="audi",
    model="A4",
    year=2020,
    fiscal_power=Decimal("18"),
    fiscal_value=Decimal("38000"),
    fuel_type=FuelType.DIESEL,
)


@pytest.fixture
def records():
    """Create an empty transfer audit log."""
    return InMemoryTransferRecordRepository()


@pytest.fixture
def use_case(records):
    """Create use case over a two-vehicle catalog."""
    catalog = InMemoryVehicleCatalogRepository([CAPTUR, POWERFUL])
    return CalculateTransferTax(catalog, records)


@pytest.mark.asyncio
async def test_madrid_tax_for_18000_euro_vehicle(use_case):
    """Test that 18000 EUR in Madrid is 720.00 at 4%."""
    result = await use_case.execute("captur", "Madrid", False)

    assert result.calculated_tax == Decimal("720.00")
    assert result.tax_rate == "4%"
    assert result.applied_rate == Decimal("0.04")
    assert result.fiscal_value == Decimal("18000")
    assert result.region == "Madrid"
    assert result.vehicle.model == "Captur"
    assert result.notes is None


@pytest.mark.asyncio
async def test_region_defaults_to_madrid(use_case):
    """Test default region when none is given."""
    result = await use_case.execute("captur")

    assert result.region == "Madrid"
    assert result.calculated_tax == Decimal("720.00")


@pytest.mark.asyncio
async def test_configured_default_region(records):
    """Test that the default region can be configured."""
    catalog = InMemoryVehicleCatalogRepository([CAPTUR])
    use_case = CalculateTransferTax(catalog, records, default_region="Galicia")

    result = await use_case.execute("captur")

    assert result.region == "Galicia"
    assert result.calculated_tax == Decimal("540.00")


@pytest.mark.asyncio
async def test_high_power_surcharge_notes(use_case):
    """Test 18 CV in Andalucía is taxed at 8% with a note."""
    result = await use_case.execute("powerful", "Andalucía", False)

    assert result.tax_rate == "8%"
    assert result.calculated_tax == Decimal("3040.00")
    assert result.notes is not None
    assert len(result.notes) == 1


@pytest.mark.asyncio
async def test_ceuta_resident_discount(use_case):
    """Test 2% for Ceuta residents."""
    result = await use_case.execute("captur", "Ceuta", True)

    assert result.tax_rate == "2%"
    assert result.calculated_tax == Decimal("360.00")


@pytest.mark.asyncio
async def test_unknown_vehicle_raises_not_found(use_case, records):
    """Test that unknown ids raise and record nothing."""
    with pytest.raises(VehicleNotFoundError) as exc_info:
        await use_case.execute("missing", "Madrid", False)

    assert exc_info.value.vehicle_id == "missing"
    assert await records.list() == []


@pytest.mark.asyncio
async def test_calculation_is_deterministic_and_recorded(use_case, records):
    """Test same inputs give the same tax and every call is audited."""
    first = await use_case.execute("captur", "Canarias", False)
    second = await use_case.execute("captur", "Canarias", False)

    assert first.calculated_tax == second.calculated_tax == Decimal("990.00")
    assert first.tax_rate == "5.5%"

    logged = await records.list()
    assert len(logged) == 2
    assert logged[0].vehicle_id == "captur"
    assert logged[0].region == "Canarias"
    assert logged[0].applied_rate == Decimal("0.055")
    assert logged[0].computed_tax == Decimal("990.00")
    assert logged[0].is_resident is False
