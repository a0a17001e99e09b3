"""In-memory idempotency store adapter."""

import time
from typing import Optional

from itp_bot.application.ports.idempotency_store import IdempotencyStore


class InMemoryIdempotencyStore(IdempotencyStore):
    """Process-local idempotency store. Keys expire after their TTL."""

    def __init__(self) -> None:
        """Initialize empty store."""
        self._claims: dict[str, float] = {}
        self._responses: dict[str, tuple[float, str]] = {}

    def _purge_expired(self) -> None:
        now = time.monotonic()
        self._claims = {key: until for key, until in self._claims.items() if until > now}
        self._responses = {
            key: entry for key, entry in self._responses.items() if entry[0] > now
        }

    async def claim(self, key: str, ttl_seconds: int) -> bool:
        """
        Claim a key unless it is already claimed and not expired.

        Args:
            key: Twilio MessageSid
            ttl_seconds: Time-to-live in seconds

        Returns:
            True if claimed now, False for a repeated key
        """
        self._purge_expired()
        if key in self._claims:
            return False
        self._claims[key] = time.monotonic() + ttl_seconds
        return True

    async def get_response(self, key: str) -> Optional[str]:
        """Get the stored response, or None."""
        self._purge_expired()
        entry = self._responses.get(key)
        return entry[1] if entry else None

    async def store_response(self, key: str, response: str, ttl_seconds: int) -> None:
        """Store a response with TTL."""
        self._responses[key] = (time.monotonic() + ttl_seconds, response)
