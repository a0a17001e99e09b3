"""Messaging channel client port."""

from abc import ABC, abstractmethod


class ChannelClient(ABC):
    """Port interface for delivering replies to a user."""

    @abstractmethod
    async def send(self, recipient_id: str, text: str) -> bool:
        """
        Send a text message.

        Args:
            recipient_id: Channel address of the user (e.g. "whatsapp:+34600111222")
            text: Message body

        Returns:
            True on success, False on failure (failures are logged, not raised)
        """
        pass
