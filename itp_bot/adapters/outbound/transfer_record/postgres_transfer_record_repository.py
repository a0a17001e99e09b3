"""Postgres-backed transfer record repository adapter."""

from datetime import timezone
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from itp_bot.application.dtos.transfer import TransferRecord
from itp_bot.application.ports.transfer_record_repository import TransferRecordRepository
from itp_bot.infrastructure.db import get_db_session
from itp_bot.infrastructure.logging.logger import logger

from .models import TransferRecordModel


class PostgresTransferRecordRepository(TransferRecordRepository):
    """Postgres implementation of the transfer log. Rows are only ever inserted."""

    def _model_to_dto(self, model: TransferRecordModel) -> TransferRecord:
        """
        Convert TransferRecordModel to TransferRecord DTO.

        Args:
            model: SQLAlchemy model instance

        Returns:
            TransferRecord DTO
        """
        # SQLite returns naive datetimes
        created_at = model.created_at
        if created_at and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return TransferRecord(
            vehicle_id=model.vehicle_id,
            region=model.region,
            applied_rate=Decimal(str(model.applied_rate)),
            computed_tax=Decimal(str(model.computed_tax)),
            is_resident=bool(model.is_resident),
            created_at=created_at,
        )

    async def append(self, record: TransferRecord) -> None:
        """
        Insert a transfer record.

        Args:
            record: Record to append
        """
        db: Session = get_db_session()
        try:
            db.add(
                TransferRecordModel(
                    vehicle_id=record.vehicle_id,
                    region=record.region,
                    applied_rate=record.applied_rate,
                    computed_tax=record.computed_tax,
                    is_resident=record.is_resident,
                    created_at=record.created_at,
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Database error while recording transfer for vehicle {record.vehicle_id}: {str(e)}"
            )
            raise
        finally:
            db.close()

    async def list(self) -> list[TransferRecord]:
        """
        List all records, oldest first.

        Returns:
            List of transfer records
        """
        db: Session = get_db_session()
        try:
            models = db.query(TransferRecordModel).order_by(TransferRecordModel.id).all()
            return [self._model_to_dto(model) for model in models]
        except SQLAlchemyError as e:
            logger.error(f"Database error while listing transfer records: {str(e)}")
            return []
        finally:
            db.close()
