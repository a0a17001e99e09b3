"""HTTP routes."""

from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Form, HTTPException, Request, Response, status

from itp_bot.adapters.inbound.http.twilio_utils import (
    generate_twiml_response,
    validate_twilio_signature,
)
from itp_bot.application.dtos.chat import ChatRequest, ChatResponse
from itp_bot.application.dtos.transfer import CalculateTransferRequest, TransferResult
from itp_bot.application.dtos.vehicle import SeedResult, VehicleSummary
from itp_bot.application.errors import InvalidInputError, VehicleNotFoundError
from itp_bot.domain.services.tax_rate_table import HIGH_POWER_THRESHOLD_CV, REGIONS
from itp_bot.infrastructure.config.settings import settings
from itp_bot.infrastructure.logging.logger import log_turn, logger
from itp_bot.infrastructure.wiring.container import container

router = APIRouter()


def _require_debug_mode() -> None:
    if not settings.debug_mode:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Debug endpoint is disabled",
        )


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """
    Health check endpoint for liveness/readiness.

    Returns:
        Health status
    """
    return {"status": "ok"}


@router.post("/chat", status_code=status.HTTP_200_OK, response_model=ChatResponse)
async def chat(request: ChatRequest) -> ChatResponse:
    """
    Handle a conversation turn with the transfer tax assistant.

    Args:
        request: Chat request containing session_id, message, channel, and optional metadata

    Returns:
        Chat response with reply, next_action, suggested_questions, and debug info
    """
    turn_id = str(uuid4())

    log_turn(
        session_id=request.session_id,
        turn_id=turn_id,
        component="http",
        message_length=len(request.message),
        channel=request.channel,
    )

    response = await container.handle_chat_turn.execute(request, turn_id=turn_id)

    if settings.debug_mode and response.debug is not None:
        response.debug["turn_id"] = turn_id

    log_turn(
        session_id=request.session_id,
        turn_id=turn_id,
        component="http",
        next_action=response.next_action,
        reply_length=len(response.reply),
    )

    return response


@router.post("/channels/whatsapp/webhook")
async def whatsapp_webhook(
    request: Request,
    From: str = Form(...),
    Body: str = Form(""),
    ProfileName: Optional[str] = Form(None),
    MessageSid: Optional[str] = Form(None),
) -> Response:
    """
    Handle WhatsApp webhook requests from Twilio.

    The sender number is the session id. The reply goes back as TwiML, or through
    the Twilio Messages API (with an empty TwiML body) when TWILIO_SEND_VIA_API is set.
    A repeated MessageSid is answered with the stored TwiML and does not run a turn.

    Args:
        request: FastAPI request object (for signature validation)
        From: Sender, e.g. "whatsapp:+34600111222"
        Body: Message text
        ProfileName: Optional WhatsApp profile name
        MessageSid: Optional Twilio message SID

    Returns:
        TwiML XML response
    """
    form = await request.form()
    form_data = {key: str(value) for key, value in form.items()}
    if not validate_twilio_signature(request, str(request.url), form_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid Twilio signature",
        )

    idempotency_store = container.idempotency_store
    ttl_seconds = settings.twilio_idempotency_ttl_seconds
    if MessageSid and idempotency_store is not None:
        if not await idempotency_store.claim(MessageSid, ttl_seconds):
            logger.info("Skipping repeated Twilio delivery of %s from %s", MessageSid, From)
            stored = await idempotency_store.get_response(MessageSid)
            return Response(
                content=stored or generate_twiml_response(),
                media_type="application/xml",
                status_code=status.HTTP_200_OK,
            )
    elif idempotency_store is not None:
        logger.warning("MessageSid missing in Twilio webhook request, retries cannot be detected")

    turn_id = str(uuid4())

    metadata = {}
    if ProfileName:
        metadata["profile_name"] = ProfileName
    if MessageSid:
        metadata["message_sid"] = MessageSid

    chat_request = ChatRequest(
        session_id=From,
        message=Body,
        channel="whatsapp",
        metadata=metadata if metadata else None,
    )

    log_turn(
        session_id=chat_request.session_id,
        turn_id=turn_id,
        component="whatsapp_webhook",
        message_length=len(chat_request.message),
        channel=chat_request.channel,
    )

    chat_response = await container.handle_chat_turn.execute(chat_request, turn_id=turn_id)

    log_turn(
        session_id=chat_request.session_id,
        turn_id=turn_id,
        component="whatsapp_webhook",
        next_action=chat_response.next_action,
        reply_length=len(chat_response.reply),
    )

    channel_client = container.channel_client
    if channel_client is not None:
        delivered = await channel_client.send(From, chat_response.reply)
        if not delivered:
            logger.warning("WhatsApp reply to %s could not be delivered", From)
        twiml = generate_twiml_response()
    else:
        twiml = generate_twiml_response(chat_response.reply)

    if MessageSid and idempotency_store is not None:
        await idempotency_store.store_response(MessageSid, twiml, ttl_seconds)

    return Response(
        content=twiml,
        media_type="application/xml",
        status_code=status.HTTP_200_OK,
    )


@router.get("/api/vehicles/search", status_code=status.HTTP_200_OK)
async def search_vehicles(maker: Optional[str] = None, year: Optional[int] = None) -> dict:
    """
    Search the catalog by maker and optional exact year.

    Raises:
        HTTPException: 400 if the maker is missing
    """
    try:
        vehicles = await container.search_vehicles.execute(maker or "", year)
    except InvalidInputError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    return {
        "vehicles": [VehicleSummary.from_entity(vehicle) for vehicle in vehicles],
        "count": len(vehicles),
    }


@router.post("/api/vehicles/seed", status_code=status.HTTP_200_OK, response_model=SeedResult)
async def seed_vehicles() -> SeedResult:
    """Insert the mock fleet into the catalog. A populated catalog is left untouched."""
    inserted = await container.seed_catalog.execute()
    if inserted:
        logger.info("Seeded %d vehicles", len(inserted))
    else:
        logger.info("Catalog already populated, seed skipped")
    return SeedResult(
        count=len(inserted),
        vehicles=[VehicleSummary.from_entity(vehicle) for vehicle in inserted],
    )


@router.post(
    "/api/transfers/calculate",
    status_code=status.HTTP_200_OK,
    response_model=TransferResult,
    response_model_exclude_none=True,
)
async def calculate_transfer(request: CalculateTransferRequest) -> TransferResult:
    """
    Calculate the transfer tax for a catalog vehicle.

    Raises:
        HTTPException: 400 without vehicle_id, 404 if the vehicle does not exist
    """
    if not request.vehicle_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="vehicle_id is required",
        )

    try:
        return await container.calculate_transfer_tax.execute(
            request.vehicle_id,
            request.region,
            request.is_resident,
        )
    except VehicleNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err


@router.get("/api/rates", status_code=status.HTTP_200_OK)
async def get_rates() -> dict:
    """Regional rate table, in conversation numbering order."""
    return {
        "regions": [
            {
                "number": number,
                "name": rule.name,
                "rate": str(rule.base_rate.fraction),
                "rate_percentage": rule.base_rate.as_percentage(),
                "high_power_surcharge": rule.high_power_surcharge,
                "resident_discount": rule.resident_discount,
                "notes": rule.annotations(),
            }
            for number, rule in enumerate(REGIONS, start=1)
        ],
        "high_power_threshold_cv": str(HIGH_POWER_THRESHOLD_CV),
    }


@router.get("/debug/session/{session_id}", status_code=status.HTTP_200_OK)
async def get_session_debug(session_id: str) -> dict:
    """
    Get debug information for a session (only enabled if DEBUG_MODE=true).

    Raises:
        HTTPException: 404 if DEBUG_MODE is disabled
    """
    _require_debug_mode()

    session = await container.session_repository.get(session_id)
    if session is None:
        return {"session_id": session_id, "state": None}
    return {"session_id": session_id, "state": session.to_dict()}


@router.post("/debug/session/{session_id}/reset", status_code=status.HTTP_200_OK)
async def reset_session(session_id: str) -> dict:
    """
    Reset conversation state for a session (only enabled if DEBUG_MODE=true).

    Raises:
        HTTPException: 404 if DEBUG_MODE is disabled
    """
    _require_debug_mode()

    await container.session_repository.delete(session_id)

    return {
        "session_id": session_id,
        "message": "Session reset successfully",
        "status": "reset",
    }


@router.get("/debug/transfers", status_code=status.HTTP_200_OK)
async def get_transfers_debug() -> dict:
    """
    Get every recorded transfer calculation (only enabled if DEBUG_MODE=true).

    Raises:
        HTTPException: 404 if DEBUG_MODE is disabled
    """
    _require_debug_mode()

    records = await container.transfer_record_repository.list()

    return {
        "transfers": [
            {
                "vehicle_id": record.vehicle_id,
                "region": record.region,
                "applied_rate": str(record.applied_rate),
                "computed_tax": str(record.computed_tax),
                "is_resident": record.is_resident,
                "created_at": record.created_at.isoformat(),
            }
            for record in records
        ],
        "count": len(records),
    }
