"""Idempotency store port."""

from abc import ABC, abstractmethod
from typing import Optional


class IdempotencyStore(ABC):
    """Port interface for remembering already handled inbound messages."""

    @abstractmethod
    async def claim(self, key: str, ttl_seconds: int) -> bool:
        """
        Atomically mark a key as being handled.

        Args:
            key: Unique identifier of the inbound message (Twilio MessageSid)
            ttl_seconds: How long the key is remembered

        Returns:
            True if this call claimed the key, False if it was already claimed
        """
        pass

    @abstractmethod
    async def get_response(self, key: str) -> Optional[str]:
        """
        Get the response stored for a claimed key.

        Returns:
            Stored response, or None if none was stored yet
        """
        pass

    @abstractmethod
    async def store_response(self, key: str, response: str, ttl_seconds: int) -> None:
        """
        Store the response sent for a key.

        Args:
            key: Unique identifier of the inbound message
            response: Response body (TwiML XML)
            ttl_seconds: How long the response is kept
        """
        pass
