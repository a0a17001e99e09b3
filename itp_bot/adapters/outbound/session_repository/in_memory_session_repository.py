"""In-memory session repository adapter."""

from datetime import datetime, timezone
from typing import Optional

from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.domain.entities.conversation_session import ConversationSession
from itp_bot.infrastructure.config.settings import settings


class InMemorySessionRepository(SessionRepository):
    """In-memory implementation of the session store with TTL cleanup."""

    def __init__(self, ttl_seconds: Optional[int] = None) -> None:
        """
        Initialize in-memory repository.

        Args:
            ttl_seconds: Time-to-live in seconds for idle sessions
                (defaults to settings.session_ttl_seconds)
        """
        self._storage: dict[str, ConversationSession] = {}
        self._ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    def _is_expired(self, session: ConversationSession, now: datetime) -> bool:
        return (now - session.updated_at).total_seconds() > self._ttl_seconds

    def _purge_expired(self) -> None:
        """Remove expired sessions from storage."""
        now = datetime.now(timezone.utc)
        expired = [key for key, session in self._storage.items() if self._is_expired(session, now)]
        for key in expired:
            del self._storage[key]

    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get the session for a key.

        Args:
            session_id: Session identifier

        Returns:
            Conversation session, or None if not found or expired
        """
        self._purge_expired()
        return self._storage.get(session_id)

    async def save(self, session_id: str, session: ConversationSession) -> None:
        """
        Save a session.

        Args:
            session_id: Session identifier
            session: Conversation session to store
        """
        self._purge_expired()
        if session_id in self._storage:
            session.touch()
        self._storage[session_id] = session

    async def delete(self, session_id: str) -> None:
        """
        Delete a session.

        Args:
            session_id: Session identifier
        """
        self._storage.pop(session_id, None)
