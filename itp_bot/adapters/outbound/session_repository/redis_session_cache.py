"""Redis cache adapter for conversation sessions."""

import json
from typing import Optional

from redis import asyncio as aioredis

from itp_bot.domain.entities.conversation_session import ConversationSession
from itp_bot.infrastructure.logging.logger import logger


class RedisSessionCache:
    """Redis cache for conversation sessions (cache-aside)."""

    KEY_PREFIX = "itp:session:"

    def __init__(self, redis_url: str, ttl_seconds: int) -> None:
        """
        Initialize Redis session cache.

        Args:
            redis_url: Redis connection URL
            ttl_seconds: Time-to-live in seconds for cached sessions
        """
        self._redis_url = redis_url
        self._ttl_seconds = ttl_seconds
        self._client: Optional[aioredis.Redis] = None

    async def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    def _make_key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get a session from the cache.

        Read errors are logged and treated as a cache miss.

        Args:
            session_id: Session identifier

        Returns:
            Conversation session, or None if not cached
        """
        try:
            client = await self._get_client()
            cached = await client.get(self._make_key(session_id))
            if cached is None:
                return None
            return ConversationSession.from_dict(json.loads(cached))
        except Exception as e:
            logger.warning(f"Error reading session {session_id} from cache: {str(e)}")
            return None

    async def set(self, session_id: str, session: ConversationSession) -> None:
        """
        Store a session with TTL. Write errors are logged, not raised.

        Args:
            session_id: Session identifier
            session: Conversation session to cache
        """
        try:
            client = await self._get_client()
            payload = json.dumps(session.to_dict(), sort_keys=True)
            await client.setex(self._make_key(session_id), self._ttl_seconds, payload)
        except Exception as e:
            logger.warning(f"Error writing session {session_id} to cache: {str(e)}")

    async def delete(self, session_id: str) -> None:
        """
        Delete a cached session. Errors are logged, not raised.

        Args:
            session_id: Session identifier
        """
        try:
            client = await self._get_client()
            await client.delete(self._make_key(session_id))
        except Exception as e:
            logger.warning(f"Error deleting session {session_id} from cache: {str(e)}")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
