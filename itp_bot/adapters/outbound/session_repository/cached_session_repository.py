"""Session repository with a Redis cache in front of a primary store."""

from typing import Optional

from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.domain.entities.conversation_session import ConversationSession
from itp_bot.infrastructure.logging.logger import log_turn

from .redis_session_cache import RedisSessionCache


class CachedSessionRepository(SessionRepository):
    """Cache-aside session repository: the primary store is the source of truth."""

    def __init__(self, primary_repository: SessionRepository, cache: RedisSessionCache) -> None:
        """
        Initialize cached repository.

        Args:
            primary_repository: Primary repository (Postgres)
            cache: Redis cache
        """
        self._primary = primary_repository
        self._cache = cache

    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get a session, checking the cache first.

        Args:
            session_id: Session identifier

        Returns:
            Conversation session, or None if not found
        """
        cached = await self._cache.get(session_id)
        log_turn(
            session_id=session_id,
            turn_id="cache",
            component="session_cache",
            session_cache_hit=cached is not None,
        )
        if cached is not None:
            return cached

        session = await self._primary.get(session_id)
        if session is not None:
            await self._cache.set(session_id, session)
        return session

    async def save(self, session_id: str, session: ConversationSession) -> None:
        """Save to the primary store, then refresh the cache."""
        await self._primary.save(session_id, session)
        await self._cache.set(session_id, session)

    async def delete(self, session_id: str) -> None:
        """Delete from the primary store, then from the cache."""
        await self._primary.delete(session_id)
        await self._cache.delete(session_id)
