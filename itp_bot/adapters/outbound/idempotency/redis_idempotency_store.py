"""Redis idempotency store adapter."""

from typing import Optional

from redis import asyncio as aioredis

from itp_bot.application.ports.idempotency_store import IdempotencyStore


class RedisIdempotencyStore(IdempotencyStore):
    """Redis adapter for the idempotency store, shared by every worker."""

    KEY_PREFIX = "itp:twilio:processed:"
    RESPONSE_KEY_PREFIX = "itp:twilio:response:"

    def __init__(self, redis_url: str) -> None:
        """
        Initialize Redis idempotency store.

        Args:
            redis_url: Redis connection URL
        """
        self._redis_url = redis_url
        self._client: Optional[aioredis.Redis] = None

    async def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def claim(self, key: str, ttl_seconds: int) -> bool:
        """
        Claim a key with SET NX EX. Only one concurrent caller gets True.

        Args:
            key: Twilio MessageSid
            ttl_seconds: Time-to-live in seconds

        Returns:
            True if claimed now, False for a repeated key
        """
        client = await self._get_client()
        claimed = await client.set(f"{self.KEY_PREFIX}{key}", "1", nx=True, ex=ttl_seconds)
        return bool(claimed)

    async def get_response(self, key: str) -> Optional[str]:
        """
        Get stored response for a key.

        Args:
            key: Twilio MessageSid

        Returns:
            Stored TwiML, or None if not found
        """
        client = await self._get_client()
        return await client.get(f"{self.RESPONSE_KEY_PREFIX}{key}")

    async def store_response(self, key: str, response: str, ttl_seconds: int) -> None:
        """
        Store response for a key with a TTL.

        Args:
            key: Twilio MessageSid
            response: TwiML XML
            ttl_seconds: Time-to-live in seconds
        """
        client = await self._get_client()
        await client.setex(f"{self.RESPONSE_KEY_PREFIX}{key}", ttl_seconds, response)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
