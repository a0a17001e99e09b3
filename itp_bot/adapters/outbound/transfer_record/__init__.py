"""Transfer record repository adapters."""

from itp_bot.adapters.outbound.transfer_record.in_memory_transfer_record_repository import (
    InMemoryTransferRecordRepository,
)
from itp_bot.adapters.outbound.transfer_record.postgres_transfer_record_repository import (
    PostgresTransferRecordRepository,
)

__all__ = [
    "InMemoryTransferRecordRepository",
    "PostgresTransferRecordRepository",
]
