"""Dependency injection container."""

from typing import Optional

from itp_bot.application.ports.channel_client import ChannelClient
from itp_bot.application.ports.idempotency_store import IdempotencyStore
from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.application.ports.transfer_record_repository import TransferRecordRepository
from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.application.use_cases.calculate_transfer_tax import CalculateTransferTax
from itp_bot.application.use_cases.handle_chat_turn_use_case import HandleChatTurnUseCase
from itp_bot.application.use_cases.search_vehicles import SearchVehicles
from itp_bot.application.use_cases.seed_catalog import SeedCatalog
from itp_bot.infrastructure.config.settings import settings
from itp_bot.infrastructure.wiring.dependencies import (
    create_channel_client,
    create_handle_chat_turn_use_case,
    create_idempotency_store,
    create_session_repository,
    create_transfer_record_repository,
    create_vehicle_catalog_repository,
    load_configured_fleet,
)


class Container:
    """Dependency injection container. Every use case shares the same repositories."""

    def __init__(self) -> None:
        """Initialize container with dependencies."""
        self._session_repository: SessionRepository = create_session_repository()
        self._catalog_repository: VehicleCatalogRepository = create_vehicle_catalog_repository()
        self._transfer_record_repository: TransferRecordRepository = (
            create_transfer_record_repository()
        )
        self._channel_client: Optional[ChannelClient] = create_channel_client()
        self._idempotency_store: Optional[IdempotencyStore] = create_idempotency_store()

        self._search_vehicles = SearchVehicles(self._catalog_repository)
        self._seed_catalog = SeedCatalog(self._catalog_repository, load_configured_fleet)
        self._calculate_transfer_tax = CalculateTransferTax(
            self._catalog_repository,
            self._transfer_record_repository,
            default_region=settings.default_region,
        )
        self._handle_chat_turn = create_handle_chat_turn_use_case(
            self._session_repository,
            self._search_vehicles,
            self._calculate_transfer_tax,
        )

    @property
    def session_repository(self) -> SessionRepository:
        """Get session repository."""
        return self._session_repository

    @property
    def transfer_record_repository(self) -> TransferRecordRepository:
        """Get transfer record repository."""
        return self._transfer_record_repository

    @property
    def channel_client(self) -> Optional[ChannelClient]:
        """Get channel client (None when replies are returned as TwiML)."""
        return self._channel_client

    @property
    def idempotency_store(self) -> Optional[IdempotencyStore]:
        """Get webhook idempotency store (None when deduplication is disabled)."""
        return self._idempotency_store

    @property
    def search_vehicles(self) -> SearchVehicles:
        """Get search use case."""
        return self._search_vehicles

    @property
    def seed_catalog(self) -> SeedCatalog:
        """Get seed use case."""
        return self._seed_catalog

    @property
    def calculate_transfer_tax(self) -> CalculateTransferTax:
        """Get calculation use case."""
        return self._calculate_transfer_tax

    @property
    def handle_chat_turn(self) -> HandleChatTurnUseCase:
        """Get chat turn use case."""
        return self._handle_chat_turn


# Global container instance
container = Container()
