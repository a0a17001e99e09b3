"""SQLAlchemy ORM models for transfer records."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String

# Shared declarative base so one metadata covers every table
from itp_bot.adapters.outbound.session_repository.models import Base


class TransferRecordModel(Base):
    """SQLAlchemy model for the append-only transfer_records table."""

    __tablename__ = "transfer_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(String, nullable=False, index=True)
    region = Column(String, nullable=False)
    applied_rate = Column(Numeric(6, 5), nullable=False)
    computed_tax = Column(Numeric(12, 2), nullable=False)
    is_resident = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
