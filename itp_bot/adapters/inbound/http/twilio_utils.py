"""Twilio utility functions for webhook handling."""

import base64
import hashlib
import hmac
from typing import Mapping, Optional

from fastapi import HTTPException, Request, status

from itp_bot.infrastructure.config.settings import settings


def compute_twilio_signature(auth_token: str, url: str, params: Mapping[str, str]) -> str:
    """
    Compute the X-Twilio-Signature value for a request.

    Twilio signs the full URL followed by every POST parameter, sorted by name,
    with each name and value concatenated without separators.

    Args:
        auth_token: Twilio account auth token
        url: Full URL of the webhook endpoint
        params: Form parameters of the request

    Returns:
        Base64-encoded HMAC-SHA1 signature
    """
    payload = url + "".join(f"{key}{params[key]}" for key in sorted(params))
    digest = hmac.new(
        auth_token.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("utf-8")


def validate_twilio_signature(request: Request, url: str, form_data: Mapping[str, str]) -> bool:
    """
    Validate Twilio webhook signature.

    Args:
        request: FastAPI request object
        url: Full URL of the webhook endpoint
        form_data: Form data dictionary from the request

    Returns:
        True if signature is valid (or validation is disabled), False otherwise

    Raises:
        HTTPException: 500 if validation is enabled without an auth token,
            403 if the signature header is missing
    """
    if not settings.twilio_validate_signature:
        return True

    if not settings.twilio_auth_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Twilio signature validation enabled but TWILIO_AUTH_TOKEN not configured",
        )

    signature = request.headers.get("X-Twilio-Signature")
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Missing X-Twilio-Signature header",
        )

    expected = compute_twilio_signature(settings.twilio_auth_token, url, form_data)
    return hmac.compare_digest(expected, signature)


def _escape_xml(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def generate_twiml_response(message: Optional[str] = None) -> str:
    """
    Generate TwiML XML response for a WhatsApp message.

    Args:
        message: Reply text; None produces an empty response (no message sent)

    Returns:
        TwiML XML string
    """
    header = '<?xml version="1.0" encoding="UTF-8"?>'
    if message is None:
        return f"{header}<Response></Response>"
    return f"{header}<Response><Message>{_escape_xml(message)}</Message></Response>"
