"""Twilio WhatsApp channel client adapter."""

from typing import Optional

import httpx

from itp_bot.application.ports.channel_client import ChannelClient
from itp_bot.infrastructure.logging.logger import logger


class TwilioWhatsAppChannelClient(ChannelClient):
    """Sends replies through the Twilio Messages REST API."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize Twilio channel client.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            from_number: Sender WhatsApp number (with or without the "whatsapp:" prefix)
            base_url: Twilio REST API base URL
            timeout_seconds: HTTP timeout per request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not account_sid or not auth_token or not from_number:
            raise ValueError("Twilio account SID, auth token and WhatsApp number are required")
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = self._as_whatsapp_address(from_number)
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @staticmethod
    def _as_whatsapp_address(number: str) -> str:
        return number if number.startswith("whatsapp:") else f"whatsapp:{number}"

    async def send(self, recipient_id: str, text: str) -> bool:
        """
        Send a WhatsApp text message.

        Args:
            recipient_id: User phone number, as received in the webhook "From" field
            text: Message body

        Returns:
            True on success, False on failure
        """
        url = f"{self._base_url}/Accounts/{self._account_sid}/Messages.json"
        payload = {
            "From": self._from_number,
            "To": self._as_whatsapp_address(recipient_id),
            "Body": text,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    url, data=payload, auth=(self._account_sid, self._auth_token)
                )
                response.raise_for_status()
                return True
        except httpx.HTTPError:
            logger.exception(f"Failed to send WhatsApp message to {recipient_id}")
            return False
