"""Session repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from itp_bot.domain.entities.conversation_session import ConversationSession


class SessionRepository(ABC):
    """Port interface for conversation session storage."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[ConversationSession]:
        """
        Get the session for a key.

        Args:
            session_id: Session identifier

        Returns:
            Conversation session, or None if absent
        """
        pass

    @abstractmethod
    async def save(self, session_id: str, session: ConversationSession) -> None:
        """
        Save a session (last write wins).

        Args:
            session_id: Session identifier
            session: Conversation session to store
        """
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """
        Delete a session. Deleting an absent key is not an error.

        Args:
            session_id: Session identifier
        """
        pass
