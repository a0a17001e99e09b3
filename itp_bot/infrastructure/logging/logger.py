"""Key=value event logging for conversation turns."""

import logging
from typing import Any, Optional

_logger = logging.getLogger("itp_transfer_bot")
_logger.setLevel(logging.INFO)

if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    _logger.addHandler(handler)


def log_turn(
    session_id: str,
    turn_id: str,
    component: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Write one turn event as `key='value' | key='value'`.

    Args:
        session_id: Session identifier (the sender number on WhatsApp)
        turn_id: Turn identifier, one per inbound message
        component: Emitting component ('http', 'whatsapp_webhook', 'use_case', ...)
        level: Log level
        **kwargs: Event fields, appended after the identifiers in call order
    """
    fields: dict[str, Any] = {
        "session_id": session_id,
        "turn_id": turn_id,
        "component": component,
        **kwargs,
    }
    _logger.log(level, " | ".join(f"{key}={value!r}" for key, value in fields.items()))


def log_flow_step(
    session_id: str,
    turn_id: str,
    step_before: Optional[str] = None,
    step_after: Optional[str] = None,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log a conversation step transition.

    A step_after of None means the session was closed.
    """
    log_turn(
        session_id,
        turn_id,
        "flow",
        level=level,
        flow_step_before=step_before,
        flow_step_after=step_after,
        **kwargs,
    )


def log_catalog_search(
    session_id: str,
    turn_id: str,
    maker: str,
    year: Optional[int] = None,
    results_count: Optional[int] = None,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log a catalog search made during a turn.

    Args:
        session_id: Session identifier
        turn_id: Turn identifier
        maker: Normalised maker searched for
        year: Exact year filter, None when skipped
        results_count: Number of matches; left out when the search failed
        level: Log level
        **kwargs: Additional fields (e.g. error)
    """
    fields: dict[str, Any] = {"catalog_filters": {"maker": maker, "year": year}}
    if results_count is not None:
        fields["catalog_results_count"] = results_count
    fields.update(kwargs)

    log_turn(session_id, turn_id, "catalog", level=level, **fields)


def log_tax_calculation(
    session_id: str,
    turn_id: str,
    vehicle_id: str,
    region: str,
    is_resident: bool = False,
    applied_rate: Optional[str] = None,
    calculated_tax: Optional[str] = None,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log the inputs of a transfer tax calculation and, when it succeeded, its outcome."""
    fields: dict[str, Any] = {
        "tax_inputs": {"vehicle_id": vehicle_id, "region": region, "is_resident": is_resident},
    }
    if applied_rate is not None:
        fields["applied_rate"] = applied_rate
    if calculated_tax is not None:
        fields["calculated_tax"] = calculated_tax
    fields.update(kwargs)

    log_turn(session_id, turn_id, "tax", level=level, **fields)


_EVENT_HELPERS = {
    "flow": log_flow_step,
    "catalog": log_catalog_search,
    "tax": log_tax_calculation,
}


def log_chat_event(
    session_id: str,
    turn_id: str,
    component: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Logger callable for the chat use case.

    Components with a helper in _EVENT_HELPERS go through it so their fields
    keep one shape. Any other component is written as is.
    """
    helper = _EVENT_HELPERS.get(component)
    if helper is None:
        log_turn(session_id, turn_id, component, level=level, **kwargs)
    else:
        helper(session_id, turn_id, level=level, **kwargs)


logger = _logger
