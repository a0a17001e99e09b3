"""Unit tests for HandleChatTurnUseCase."""

import asyncio
import logging
from decimal import Decimal
from typing import Optional
from unittest.mock import AsyncMock

import pytest

from itp_bot.adapters.outbound.catalog.csv_fleet_loader import load_fleet
from itp_bot.adapters.outbound.catalog.in_memory_vehicle_catalog_repository import (
    InMemoryVehicleCatalogRepository,
)
from itp_bot.adapters.outbound.session_repository import InMemorySessionRepository
from itp_bot.adapters.outbound.transfer_record import InMemoryTransferRecordRepository
from itp_bot.application.dtos.chat import ChatRequest
from itp_bot.application.errors import UpstreamFailureError
from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.application.use_cases.calculate_transfer_tax import CalculateTransferTax
from itp_bot.application.use_cases.handle_chat_turn_use_case import HandleChatTurnUseCase
from itp_bot.application.use_cases.search_vehicles import SearchVehicles
from itp_bot.domain.entities.conversation_session import (
    AwaitingRegion,
    AwaitingResidency,
    ConversationSession,
)
from itp_bot.domain.entities.vehicle import Vehicle


class FailingCatalogRepository(VehicleCatalogRepository):
    """Catalog whose every call fails."""

    async def search(self, maker: str, year: Optional[int] = None) -> list[Vehicle]:
        """Fail search."""
        raise RuntimeError("catalog unavailable")

    async def get_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        """Fail lookup."""
        raise RuntimeError("catalog unavailable")

    async def count(self) -> int:
        """Fail count."""
        raise RuntimeError("catalog unavailable")

    async def add(self, vehicle: Vehicle) -> None:
        """Fail insert."""
        raise RuntimeError("catalog unavailable")


def _build_use_case(catalog=None, sessions=None, records=None, logger=None):
    catalog = catalog or InMemoryVehicleCatalogRepository(load_fleet())
    sessions = sessions or InMemorySessionRepository()
    records = records or InMemoryTransferRecordRepository()
    return HandleChatTurnUseCase(
        sessions,
        SearchVehicles(catalog),
        CalculateTransferTax(catalog, records),
        logger=logger,
    )


@pytest.fixture
def sessions():
    """Create an empty session store."""
    return InMemorySessionRepository()


@pytest.fixture
def records():
    """Create an empty transfer audit log."""
    return InMemoryTransferRecordRepository()


@pytest.fixture
def use_case(sessions, records):
    """Create use case over the bundled fleet."""
    return _build_use_case(sessions=sessions, records=records)


async def _send(use_case, message, session_id="+34600111222"):
    return await use_case.execute(ChatRequest(session_id=session_id, message=message))


@pytest.mark.asyncio
async def test_first_message_is_taken_as_maker(use_case, sessions):
    """Test welcome step stores the maker and asks for the year."""
    response = await _send(use_case, "Toyota")

    assert response.next_action == "ask_year"
    assert "*TOYOTA*" in response.reply
    assert response.suggested_questions == ["2020", "2019", "saltar"]
    assert response.debug["step"] == "year"
    assert response.debug["maker"] == "toyota"

    session = await sessions.get("+34600111222")
    assert session.step_label == "year"


@pytest.mark.asyncio
async def test_toyota_2020_lists_seeded_models(use_case, sessions):
    """Test maker Toyota and year 2020 offer exactly the seeded 2020 models."""
    await _send(use_case, "Toyota")
    response = await _send(use_case, "2020")

    assert response.next_action == "ask_model_selection"
    assert response.debug["step"] == "model_selection"
    assert response.debug["candidates"] == 2
    assert "1. *Corolla* (2020)" in response.reply
    assert "2. *C-HR* (2020)" in response.reply
    assert response.suggested_questions == ["1", "2"]


@pytest.mark.asyncio
async def test_single_match_with_skipped_year_goes_to_region(use_case, sessions):
    """Test that one match is auto-selected and the year comes from the car."""
    await _send(use_case, "Tesla")
    response = await _send(use_case, "saltar")

    assert response.next_action == "ask_region"
    assert "*TESLA Model 3* (2022)" in response.reply

    session = await sessions.get("+34600111222")
    assert isinstance(session.step, AwaitingRegion)
    assert session.step.year == 2022


@pytest.mark.asyncio
async def test_invalid_year_reprompts_and_keeps_step(use_case, sessions):
    """Test that "abc" at the year step leaves the session at year."""
    await _send(use_case, "Toyota")
    before = (await sessions.get("+34600111222")).to_dict()

    response = await _send(use_case, "abc")

    assert response.next_action == "ask_year"
    assert "año válido" in response.reply
    after = (await sessions.get("+34600111222")).to_dict()
    assert after["step"] == "year"
    assert after == before


@pytest.mark.asyncio
async def test_zero_results_returns_to_maker(use_case, sessions):
    """Test that an empty search recreates the session at the maker step."""
    await _send(use_case, "Lada")
    response = await _send(use_case, "2001")

    assert response.next_action == "ask_maker"
    assert "No encontré coches *lada* del año 2001" in response.reply

    session = await sessions.get("+34600111222")
    assert session.step_label == "maker"


@pytest.mark.asyncio
async def test_skipped_year_lists_all_years(use_case):
    """Test that saltar searches every year of the maker."""
    await _send(use_case, "toyota")
    response = await _send(use_case, "skip")

    assert response.debug["candidates"] == 4
    assert response.debug["year"] is None


@pytest.mark.asyncio
async def test_invalid_selection_reprompts(use_case, sessions):
    """Test out-of-range model selection."""
    await _send(use_case, "Toyota")
    await _send(use_case, "2020")

    response = await _send(use_case, "5")

    assert response.next_action == "ask_model_selection"
    assert response.reply == "❌ Por favor, escribe un número del 1 al 2"
    assert (await sessions.get("+34600111222")).step_label == "model_selection"


@pytest.mark.asyncio
async def test_full_flow_madrid(use_case, sessions, records):
    """Test selection, region and result; the session is closed afterwards."""
    await _send(use_case, "Toyota")
    await _send(use_case, "2020")
    region_prompt = await _send(use_case, "1")

    assert region_prompt.next_action == "ask_region"
    assert "*TOYOTA Corolla* (2020)" in region_prompt.reply
    assert "11,5 CV fiscales" in region_prompt.reply

    response = await _send(use_case, "madrid")

    assert response.next_action == "completed"
    assert "*720€*" in response.reply
    assert "Tipo impositivo: *4%*" in response.reply
    assert response.debug == {"step": None}
    assert await sessions.get("+34600111222") is None
    assert len(await records.list()) == 1


@pytest.mark.asyncio
async def test_invalid_region_reprompts_with_list(use_case, sessions):
    """Test unrecognised region."""
    await _send(use_case, "Tesla")
    await _send(use_case, "2022")

    response = await _send(use_case, "narnia")

    assert response.next_action == "ask_region"
    assert "19. Cantabria" in response.reply
    assert (await sessions.get("+34600111222")).step_label == "region"


@pytest.mark.asyncio
async def test_ceuta_asks_residency_then_applies_discount(use_case, sessions):
    """Test resident check for Ceuta."""
    await _send(use_case, "Tesla")
    await _send(use_case, "saltar")
    question = await _send(use_case, "11")

    assert question.next_action == "ask_residency"
    assert question.suggested_questions == ["si", "no"]
    session = await sessions.get("+34600111222")
    assert isinstance(session.step, AwaitingResidency)
    assert session.step.region == "Ceuta"

    response = await _send(use_case, "sí")

    assert response.next_action == "completed"
    assert "Tipo impositivo: *2%*" in response.reply
    assert "*780€*" in response.reply
    assert "Descuento del 50%" in response.reply


@pytest.mark.asyncio
async def test_melilla_non_resident_pays_base_rate(use_case):
    """Test that any non-affirmative answer means no discount."""
    await _send(use_case, "Tesla")
    await _send(use_case, "saltar")
    await _send(use_case, "melilla")

    response = await _send(use_case, "no")

    assert "Tipo impositivo: *4%*" in response.reply
    assert "*1.560€*" in response.reply


@pytest.mark.asyncio
async def test_high_power_surcharge_in_conversation(use_case):
    """Test the surcharge note in the final reply."""
    await _send(use_case, "audi")
    await _send(use_case, "2020")

    response = await _send(use_case, "andalucía")

    assert response.next_action == "completed"
    assert "Tipo impositivo: *8%*" in response.reply
    assert "Recargo por alta potencia" in response.reply


@pytest.mark.asyncio
async def test_reset_command_deletes_session(use_case, sessions):
    """Test reset at any step."""
    await _send(use_case, "Toyota")

    response = await _send(use_case, "  INICIO ")

    assert response.next_action == "ask_maker"
    assert "CALCULADORA DE TRANSFERENCIA DE COCHES" in response.reply
    assert await sessions.get("+34600111222") is None


@pytest.mark.asyncio
async def test_help_and_rates_leave_session_untouched(use_case, sessions):
    """Test informational commands."""
    await _send(use_case, "Toyota")
    before = (await sessions.get("+34600111222")).to_dict()

    help_response = await _send(use_case, "ayuda")
    rates_response = await _send(use_case, "tasas")

    assert help_response.next_action == "show_help"
    assert "COMANDOS DISPONIBLES" in help_response.reply
    assert rates_response.next_action == "show_rates"
    assert "• *Galicia*: 3%" in rates_response.reply
    assert (await sessions.get("+34600111222")).to_dict() == before


@pytest.mark.asyncio
async def test_empty_maker_reprompts(use_case, sessions):
    """Test that blank input does not advance."""
    response = await _send(use_case, "   ")

    assert response.next_action == "ask_maker"
    assert await sessions.get("+34600111222") is None


@pytest.mark.asyncio
async def test_unrecognized_stored_step_restarts_at_maker(use_case, sessions):
    """Test recovery from a step label this version does not know."""
    await sessions.save(
        "+34600111222",
        ConversationSession.from_dict({"session_id": "+34600111222", "step": "financing"}),
    )

    response = await _send(use_case, "hola")

    assert response.next_action == "ask_maker"
    assert (await sessions.get("+34600111222")).step_label == "maker"


@pytest.mark.asyncio
async def test_search_failure_keeps_session_for_retry(sessions):
    """Test that a catalog failure is answered and the step is unchanged."""
    use_case = _build_use_case(catalog=FailingCatalogRepository(), sessions=sessions)
    await _send(use_case, "Toyota")

    response = await _send(use_case, "2020")

    assert response.next_action == "ask_year"
    assert "Error al buscar coches" in response.reply
    assert (await sessions.get("+34600111222")).step_label == "year"


@pytest.mark.asyncio
async def test_calculation_failure_keeps_session_for_retry(sessions):
    """Test that a calculation failure keeps the region step."""
    catalog = InMemoryVehicleCatalogRepository(load_fleet())
    records = InMemoryTransferRecordRepository()
    records.append = AsyncMock(side_effect=RuntimeError("audit log down"))
    use_case = _build_use_case(catalog=catalog, sessions=sessions, records=records)
    await _send(use_case, "Tesla")
    await _send(use_case, "2022")

    response = await _send(use_case, "Madrid")

    assert response.next_action == "ask_region"
    assert "Error al calcular el impuesto" in response.reply
    assert (await sessions.get("+34600111222")).step_label == "region"


@pytest.mark.asyncio
async def test_missing_vehicle_gets_generic_failure(use_case, sessions):
    """Test a stored vehicle id that no longer exists."""
    await sessions.save(
        "+34600111222",
        ConversationSession(
            session_id="+34600111222",
            step=AwaitingRegion(maker="seat", year=2018, selected_car_id="gone"),
        ),
    )

    response = await _send(use_case, "Galicia")

    assert response.next_action == "ask_region"
    assert "Error al calcular el impuesto" in response.reply


@pytest.mark.asyncio
async def test_session_store_failure_is_answered():
    """Test that a failing session store never raises out of the turn."""
    sessions = AsyncMock()
    sessions.get.side_effect = RuntimeError("store down")
    use_case = _build_use_case(sessions=sessions)

    response = await _send(use_case, "Toyota")

    assert response.next_action == "retry"
    assert "Ha ocurrido un error" in response.reply


@pytest.mark.asyncio
async def test_sessions_are_independent(use_case):
    """Test that two users do not share state."""
    await _send(use_case, "Toyota", session_id="user_a")
    response_b = await _send(use_case, "Seat", session_id="user_b")
    response_a = await _send(use_case, "2020", session_id="user_a")

    assert response_b.debug["maker"] == "seat"
    assert response_a.debug["maker"] == "toyota"


@pytest.mark.asyncio
async def test_concurrent_turns_on_one_session_do_not_crash(use_case):
    """Test last-write-wins concurrency on the same session."""
    await _send(use_case, "Toyota")

    responses = await asyncio.gather(*[_send(use_case, "2020") for _ in range(5)])

    assert all(response.next_action == "ask_model_selection" for response in responses)


@pytest.mark.asyncio
async def test_logger_receives_flow_step_changes(sessions):
    """Test that the injected logger sees step transitions."""
    calls = []

    def fake_logger(session_id, turn_id, component, **kwargs):
        calls.append((component, kwargs))

    catalog = InMemoryVehicleCatalogRepository(load_fleet())
    use_case = HandleChatTurnUseCase(
        sessions,
        SearchVehicles(catalog),
        CalculateTransferTax(catalog, InMemoryTransferRecordRepository()),
        logger=fake_logger,
    )

    await use_case.execute(ChatRequest(session_id="s", message="Toyota"), turn_id="t1")

    assert ("flow", {"step_before": "welcome", "step_after": "year"}) in calls


def test_fiscal_values_used_in_expectations():
    """Guard the fleet values the conversation tests rely on."""
    fleet = {(car.maker, car.model): car for car in load_fleet()}

    assert fleet[("tesla", "Model 3")].fiscal_value == Decimal("39000")
    assert fleet[("audi", "A4")].fiscal_power == Decimal("18.0")


def _recording_logger(calls):
    def fake_logger(session_id, turn_id, component, **kwargs):
        calls.append((component, kwargs))

    return fake_logger


@pytest.mark.asyncio
async def test_logger_receives_catalog_search(sessions):
    """Test that the catalog search is reported with its filters and result count."""
    calls = []
    use_case = _build_use_case(sessions=sessions, logger=_recording_logger(calls))
    await _send(use_case, "Toyota")

    await _send(use_case, "2020")

    assert ("catalog", {"maker": "toyota", "year": 2020, "results_count": 2}) in calls


@pytest.mark.asyncio
async def test_search_failure_is_reported_as_upstream_failure(sessions):
    """Test that a failing catalog surfaces as a vehicle search failure."""
    calls = []
    use_case = _build_use_case(
        catalog=FailingCatalogRepository(), sessions=sessions, logger=_recording_logger(calls)
    )
    await _send(use_case, "Toyota")

    await _send(use_case, "2020")

    failures = [kwargs for component, kwargs in calls if "error" in kwargs]
    assert failures == [
        {
            "level": logging.ERROR,
            "maker": "toyota",
            "year": 2020,
            "operation": "vehicle search",
            "error": "vehicle search failed: catalog unavailable",
        }
    ]


@pytest.mark.asyncio
async def test_calculation_failure_is_reported_as_upstream_failure(sessions):
    """Test that a failing audit log surfaces as a tax calculation failure."""
    calls = []
    records = InMemoryTransferRecordRepository()
    records.append = AsyncMock(side_effect=RuntimeError("audit log down"))
    use_case = _build_use_case(
        sessions=sessions, records=records, logger=_recording_logger(calls)
    )
    await _send(use_case, "Tesla")
    await _send(use_case, "2022")

    await _send(use_case, "Madrid")

    component, kwargs = next(call for call in calls if "error" in call[1])
    assert component == "tax"
    assert kwargs["level"] == logging.ERROR
    assert kwargs["operation"] == "tax calculation"
    assert kwargs["region"] == "Madrid"
    assert kwargs["error"] == "tax calculation failed: audit log down"


@pytest.mark.asyncio
async def test_upstream_failure_keeps_original_cause():
    """Test that the wrapped error chains the catalog exception."""
    use_case = _build_use_case(catalog=FailingCatalogRepository())

    with pytest.raises(UpstreamFailureError) as exc_info:
        await use_case._search("toyota", 2020)

    assert exc_info.value.operation == "vehicle search"
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert exc_info.value.__cause__ is exc_info.value.cause


@pytest.mark.asyncio
async def test_missing_vehicle_is_not_wrapped(sessions):
    """Test that an unknown vehicle is reported as a warning, not an upstream failure."""
    calls = []
    use_case = _build_use_case(sessions=sessions, logger=_recording_logger(calls))
    await sessions.save(
        "+34600111222",
        ConversationSession(
            session_id="+34600111222",
            step=AwaitingRegion(maker="seat", year=2018, selected_car_id="gone"),
        ),
    )

    await _send(use_case, "Galicia")

    component, kwargs = next(call for call in calls if "error" in call[1])
    assert component == "tax"
    assert kwargs["level"] == logging.WARNING
    assert "operation" not in kwargs
