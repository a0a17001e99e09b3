"""Transfer record repository port."""

from abc import ABC, abstractmethod

from itp_bot.application.dtos.transfer import TransferRecord


class TransferRecordRepository(ABC):
    """Port interface for the append-only transfer audit log."""

    @abstractmethod
    async def append(self, record: TransferRecord) -> None:
        """
        Append a transfer record.

        Args:
            record: Record to append
        """
        pass

    @abstractmethod
    async def list(self) -> list[TransferRecord]:
        """
        List all records, oldest first.

        Returns:
            List of transfer records (used for debug/audit)
        """
        pass
