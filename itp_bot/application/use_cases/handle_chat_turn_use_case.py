"""Handle chat turn use case with a session-driven state machine."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from itp_bot.application.dtos.chat import ChatRequest, ChatResponse
from itp_bot.application.dtos.transfer import TransferResult
from itp_bot.application.errors import (
    InvalidInputError,
    UpstreamFailureError,
    VehicleNotFoundError,
)
from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.application.use_cases.calculate_transfer_tax import CalculateTransferTax
from itp_bot.application.use_cases.input_parsing import (
    Command,
    detect_command,
    is_affirmative,
    match_region,
    normalize_text,
    parse_selection,
    parse_year,
)
from itp_bot.application.use_cases.search_vehicles import SearchVehicles
from itp_bot.application.use_cases.user_messages_es import UserMessagesES
from itp_bot.domain.entities.conversation_session import (
    MAX_CANDIDATES,
    AwaitingMaker,
    AwaitingRegion,
    AwaitingResidency,
    AwaitingYear,
    ConversationSession,
    SelectingModel,
)
from itp_bot.domain.entities.vehicle import Vehicle
from itp_bot.domain.services.tax_rate_table import has_resident_discount


class _Persistence(Enum):
    """What to do with the session once a turn is decided."""

    KEEP = "keep"  # Nothing written; re-prompts and soft failures
    SAVE = "save"
    DELETE = "delete"
    RECREATE = "recreate"  # Delete, then save a fresh session


@dataclass
class _Turn:
    reply: str
    next_action: str
    suggested_questions: list[str] = field(default_factory=list)
    persistence: _Persistence = _Persistence.KEEP


class HandleChatTurnUseCase:
    """Use case for handling chat turns of the transfer tax conversation."""

    def __init__(
        self,
        session_repository: SessionRepository,
        search_vehicles: SearchVehicles,
        calculate_transfer_tax: CalculateTransferTax,
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize handle chat turn use case.

        Args:
            session_repository: Keyed store for conversation sessions
            search_vehicles: Vehicle search use case
            calculate_transfer_tax: Tax calculation use case
            logger: Optional logger function (session_id, turn_id, component, level, **kwargs)
        """
        self._session_repository = session_repository
        self._search_vehicles = search_vehicles
        self._calculate_transfer_tax = calculate_transfer_tax
        self._logger = logger

    def _log(self, session_id: str, turn_id: str, component: str, **kwargs: Any) -> None:
        """Log event if logger is available."""
        if self._logger:
            self._logger(session_id, turn_id, component, **kwargs)

    async def execute(self, request: ChatRequest, turn_id: Optional[str] = None) -> ChatResponse:
        """
        Execute one conversation turn.

        Never raises: every failure becomes a reply to the user.

        Args:
            request: Chat request DTO
            turn_id: Optional turn identifier for logging

        Returns:
            Chat response DTO
        """
        turn_id = turn_id or "unknown"
        session_id = request.session_id
        text = normalize_text(request.message)

        command = detect_command(text)
        if command is not None:
            self._log(session_id, turn_id, "use_case", command=command.value)
            return await self._handle_command(command, session_id, turn_id)

        try:
            session = await self._session_repository.get(session_id)
        except Exception as err:
            self._log(
                session_id, turn_id, "use_case", level=logging.ERROR, session_load_error=str(err)
            )
            return self._response(
                session_id, _Turn(UserMessagesES.SESSION_ERROR, "retry"), session=None
            )

        if session is None:
            session = ConversationSession(session_id=session_id)
        step_before = session.step_label

        turn = await self._dispatch(session, text, turn_id)

        try:
            await self._persist(session, turn.persistence)
        except Exception as err:
            self._log(
                session_id, turn_id, "use_case", level=logging.ERROR, session_save_error=str(err)
            )
            return self._response(
                session_id, _Turn(UserMessagesES.SESSION_ERROR, "retry"), session=None
            )

        closed = turn.persistence == _Persistence.DELETE
        step_after = None if closed else session.step_label
        if step_before != step_after:
            self._log(session_id, turn_id, "flow", step_before=step_before, step_after=step_after)

        return self._response(session_id, turn, session=None if closed else session)

    async def _dispatch(self, session: ConversationSession, text: str, turn_id: str) -> _Turn:
        """Route the input to the handler of the current step."""
        step = session.step
        if isinstance(step, AwaitingMaker):
            return self._handle_maker(session, text)
        if isinstance(step, AwaitingYear):
            return await self._handle_year(session, step, text, turn_id)
        if isinstance(step, SelectingModel):
            return self._handle_model_selection(session, step, text)
        if isinstance(step, AwaitingRegion):
            return await self._handle_region(session, step, text, turn_id)
        if isinstance(step, AwaitingResidency):
            return await self._handle_residency(session, step, text, turn_id)

        # UnrecognizedStep or anything else: restart at the maker question
        self._log(
            session.session_id,
            turn_id,
            "use_case",
            level=logging.WARNING,
            unrecognized_step=session.step_label,
        )
        session.advance(AwaitingMaker(returning=True))
        return _Turn(
            UserMessagesES.ASK_MAKER,
            "ask_maker",
            UserMessagesES.SUGGESTED_MAKER,
            _Persistence.SAVE,
        )

    async def _handle_command(
        self, command: Command, session_id: str, turn_id: str
    ) -> ChatResponse:
        """Answer a global command. Only reset touches the session."""
        if command == Command.RESET:
            try:
                await self._session_repository.delete(session_id)
            except Exception as err:
                self._log(
                    session_id,
                    turn_id,
                    "use_case",
                    level=logging.ERROR,
                    session_delete_error=str(err),
                )
                return self._response(
                    session_id, _Turn(UserMessagesES.SESSION_ERROR, "retry"), session=None
                )
            self._log(session_id, turn_id, "use_case", action="reset")
            turn = _Turn(UserMessagesES.WELCOME, "ask_maker", UserMessagesES.SUGGESTED_MAKER)
        elif command == Command.HELP:
            turn = _Turn(UserMessagesES.HELP, "show_help", UserMessagesES.SUGGESTED_HELP)
        else:
            turn = _Turn(UserMessagesES.rates(), "show_rates", UserMessagesES.SUGGESTED_HELP)
        return self._response(session_id, turn, session=None)

    def _handle_maker(self, session: ConversationSession, text: str) -> _Turn:
        if not text:
            return _Turn(UserMessagesES.ASK_MAKER, "ask_maker", UserMessagesES.SUGGESTED_MAKER)

        session.advance(AwaitingYear(maker=text))
        return _Turn(
            UserMessagesES.ask_year(text),
            "ask_year",
            UserMessagesES.SUGGESTED_YEAR,
            _Persistence.SAVE,
        )

    async def _handle_year(
        self, session: ConversationSession, step: AwaitingYear, text: str, turn_id: str
    ) -> _Turn:
        try:
            year = parse_year(text)
        except InvalidInputError:
            return _Turn(UserMessagesES.INVALID_YEAR, "ask_year", UserMessagesES.SUGGESTED_YEAR)

        try:
            cars = await self._search(step.maker, year)
        except UpstreamFailureError as err:
            self._log(
                session.session_id,
                turn_id,
                "catalog",
                level=logging.ERROR,
                maker=step.maker,
                year=year,
                operation=err.operation,
                error=str(err),
            )
            return _Turn(UserMessagesES.SEARCH_ERROR, "ask_year", UserMessagesES.SUGGESTED_YEAR)

        self._log(
            session.session_id,
            turn_id,
            "catalog",
            maker=step.maker,
            year=year,
            results_count=len(cars),
        )

        if not cars:
            session.advance(AwaitingMaker(returning=True))
            return _Turn(
                UserMessagesES.no_results(step.maker, year),
                "ask_maker",
                UserMessagesES.SUGGESTED_MAKER,
                _Persistence.RECREATE,
            )

        if len(cars) == 1:
            car = cars[0]
            session.advance(
                AwaitingRegion(maker=step.maker, year=year or car.year, selected_car_id=car.id)
            )
            return _Turn(
                UserMessagesES.vehicle_ask_region(car),
                "ask_region",
                UserMessagesES.SUGGESTED_REGION,
                _Persistence.SAVE,
            )

        candidates = tuple(cars[:MAX_CANDIDATES])
        session.advance(SelectingModel(maker=step.maker, year=year, cars=candidates))
        return _Turn(
            UserMessagesES.model_list(step.maker, year, candidates, total=len(cars)),
            "ask_model_selection",
            UserMessagesES.suggested_models(len(candidates)),
            _Persistence.SAVE,
        )

    def _handle_model_selection(
        self, session: ConversationSession, step: SelectingModel, text: str
    ) -> _Turn:
        try:
            index = parse_selection(text, len(step.cars))
        except InvalidInputError:
            return _Turn(
                UserMessagesES.invalid_selection(len(step.cars)),
                "ask_model_selection",
                UserMessagesES.suggested_models(len(step.cars)),
            )

        car = step.cars[index]
        session.advance(AwaitingRegion(maker=step.maker, year=car.year, selected_car_id=car.id))
        return _Turn(
            UserMessagesES.vehicle_ask_region(car),
            "ask_region",
            UserMessagesES.SUGGESTED_REGION,
            _Persistence.SAVE,
        )

    async def _handle_region(
        self, session: ConversationSession, step: AwaitingRegion, text: str, turn_id: str
    ) -> _Turn:
        region = match_region(text)
        if region is None:
            return _Turn(
                UserMessagesES.invalid_region(), "ask_region", UserMessagesES.SUGGESTED_REGION
            )

        if has_resident_discount(region):
            session.advance(
                AwaitingResidency(
                    maker=step.maker,
                    year=step.year,
                    selected_car_id=step.selected_car_id,
                    region=region,
                )
            )
            return _Turn(
                UserMessagesES.ask_residency(region),
                "ask_residency",
                UserMessagesES.SUGGESTED_RESIDENCY,
                _Persistence.SAVE,
            )

        return await self._complete(session, step.selected_car_id, region, False, turn_id)

    async def _handle_residency(
        self, session: ConversationSession, step: AwaitingResidency, text: str, turn_id: str
    ) -> _Turn:
        return await self._complete(
            session, step.selected_car_id, step.region, is_affirmative(text), turn_id
        )

    async def _complete(
        self,
        session: ConversationSession,
        vehicle_id: str,
        region: str,
        is_resident: bool,
        turn_id: str,
    ) -> _Turn:
        """Calculate the tax and close the session; on failure keep it for a retry."""
        retry_action = (
            "ask_residency" if isinstance(session.step, AwaitingResidency) else "ask_region"
        )
        tax_inputs = {"vehicle_id": vehicle_id, "region": region, "is_resident": is_resident}
        try:
            result = await self._calculate(vehicle_id, region, is_resident)
        except VehicleNotFoundError as err:
            self._log(
                session.session_id,
                turn_id,
                "tax",
                level=logging.WARNING,
                error=str(err),
                **tax_inputs,
            )
            return _Turn(UserMessagesES.CALCULATION_ERROR, retry_action)
        except UpstreamFailureError as err:
            self._log(
                session.session_id,
                turn_id,
                "tax",
                level=logging.ERROR,
                operation=err.operation,
                error=str(err),
                **tax_inputs,
            )
            return _Turn(UserMessagesES.CALCULATION_ERROR, retry_action)

        self._log(
            session.session_id,
            turn_id,
            "tax",
            applied_rate=result.tax_rate,
            calculated_tax=str(result.calculated_tax),
            **tax_inputs,
        )
        return _Turn(
            UserMessagesES.result(result),
            "completed",
            UserMessagesES.SUGGESTED_COMPLETE,
            _Persistence.DELETE,
        )

    async def _search(self, maker: str, year: Optional[int]) -> list[Vehicle]:
        try:
            return await self._search_vehicles.execute(maker, year)
        except Exception as err:
            raise UpstreamFailureError("vehicle search", err) from err

    async def _calculate(self, vehicle_id: str, region: str, is_resident: bool) -> TransferResult:
        try:
            return await self._calculate_transfer_tax.execute(vehicle_id, region, is_resident)
        except VehicleNotFoundError:
            raise
        except Exception as err:
            raise UpstreamFailureError("tax calculation", err) from err

    async def _persist(self, session: ConversationSession, persistence: _Persistence) -> None:
        if persistence == _Persistence.SAVE:
            await self._session_repository.save(session.session_id, session)
        elif persistence == _Persistence.DELETE:
            await self._session_repository.delete(session.session_id)
        elif persistence == _Persistence.RECREATE:
            await self._session_repository.delete(session.session_id)
            fresh = ConversationSession(session_id=session.session_id, step=session.step)
            await self._session_repository.save(session.session_id, fresh)

    def _response(
        self,
        session_id: str,
        turn: _Turn,
        session: Optional[ConversationSession],
    ) -> ChatResponse:
        debug: dict[str, Any] = {"step": None}
        if session is not None:
            step = session.step
            debug = {
                "step": session.step_label,
                "maker": getattr(step, "maker", None),
                "year": getattr(step, "year", None),
                "candidates": len(step.cars) if isinstance(step, SelectingModel) else None,
                "selected_car_id": getattr(step, "selected_car_id", None),
                "region": getattr(step, "region", None),
            }
        return ChatResponse(
            session_id=session_id,
            reply=turn.reply,
            next_action=turn.next_action,
            suggested_questions=turn.suggested_questions,
            debug=debug,
        )
