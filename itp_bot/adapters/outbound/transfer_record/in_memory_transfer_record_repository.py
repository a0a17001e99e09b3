"""In-memory transfer record repository adapter."""

from itp_bot.application.dtos.transfer import TransferRecord
from itp_bot.application.ports.transfer_record_repository import TransferRecordRepository


class InMemoryTransferRecordRepository(TransferRecordRepository):
    """In-memory append-only transfer log."""

    def __init__(self) -> None:
        """Initialize in-memory repository."""
        self._records: list[TransferRecord] = []

    async def append(self, record: TransferRecord) -> None:
        """
        Append a transfer record.

        Args:
            record: Record to append
        """
        self._records.append(record)

    async def list(self) -> list[TransferRecord]:
        """
        List all records, oldest first.

        Returns:
            Copy of the stored records
        """
        return list(self._records)
