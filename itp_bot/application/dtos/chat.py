"""Chat DTOs."""

from typing import Any, Optional

from pydantic import ConfigDict

from itp_bot.application.dtos.base import DTO


class ChatRequest(DTO):
    """Chat request DTO."""

    session_id: str
    message: str
    channel: str = "api"
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "session_id": "whatsapp:+34600111222",
                "message": "Toyota",
                "channel": "api",
            }
        },
    )


class ChatResponse(DTO):
    """Chat response DTO."""

    session_id: str
    reply: str
    next_action: str
    suggested_questions: list[str]
    debug: Optional[dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "session_id": "whatsapp:+34600111222",
                "reply": "✅ Marca: *TOYOTA*\n\n¿De qué año es el vehículo?",
                "next_action": "ask_year",
                "suggested_questions": ["2020", "2019", "saltar"],
                "debug": {"step": "year", "maker": "toyota"},
            }
        },
    )
