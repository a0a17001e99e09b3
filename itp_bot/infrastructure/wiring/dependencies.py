"""Dependency injection factory functions."""

from typing import Optional

from itp_bot.adapters.outbound.catalog.csv_fleet_loader import load_fleet
from itp_bot.adapters.outbound.catalog.in_memory_vehicle_catalog_repository import (
    InMemoryVehicleCatalogRepository,
)
from itp_bot.adapters.outbound.channel.twilio_whatsapp_channel_client import (
    TwilioWhatsAppChannelClient,
)
from itp_bot.adapters.outbound.idempotency.in_memory_idempotency_store import (
    InMemoryIdempotencyStore,
)
from itp_bot.adapters.outbound.idempotency.redis_idempotency_store import RedisIdempotencyStore
from itp_bot.adapters.outbound.session_repository import (
    CachedSessionRepository,
    InMemorySessionRepository,
    PostgresSessionRepository,
    RedisSessionCache,
)
from itp_bot.adapters.outbound.transfer_record import (
    InMemoryTransferRecordRepository,
    PostgresTransferRecordRepository,
)
from itp_bot.application.ports.channel_client import ChannelClient
from itp_bot.application.ports.idempotency_store import IdempotencyStore
from itp_bot.application.ports.session_repository import SessionRepository
from itp_bot.application.ports.transfer_record_repository import TransferRecordRepository
from itp_bot.application.ports.vehicle_catalog_repository import VehicleCatalogRepository
from itp_bot.application.use_cases.calculate_transfer_tax import CalculateTransferTax
from itp_bot.application.use_cases.handle_chat_turn_use_case import HandleChatTurnUseCase
from itp_bot.application.use_cases.search_vehicles import SearchVehicles
from itp_bot.infrastructure.config.settings import settings
from itp_bot.infrastructure.logging.logger import log_chat_event


def create_session_repository() -> SessionRepository:
    """
    Factory function to create the session repository.

    Returns:
        SessionRepository instance
    """
    if settings.session_repository == "postgres":
        if not settings.database_url:
            raise ValueError("DATABASE_URL is required when SESSION_REPOSITORY=postgres")
        repository: SessionRepository = PostgresSessionRepository()
        if settings.session_cache_enabled and settings.redis_url:
            cache = RedisSessionCache(settings.redis_url, settings.session_ttl_seconds)
            repository = CachedSessionRepository(repository, cache)
        return repository
    return InMemorySessionRepository(ttl_seconds=settings.session_ttl_seconds)


def create_transfer_record_repository() -> TransferRecordRepository:
    """
    Factory function to create the transfer record repository.

    Returns:
        TransferRecordRepository instance
    """
    if settings.transfer_repository == "postgres":
        if not settings.database_url:
            raise ValueError("DATABASE_URL is required when TRANSFER_REPOSITORY=postgres")
        return PostgresTransferRecordRepository()
    return InMemoryTransferRecordRepository()


def load_configured_fleet():
    """Load the mock fleet from the configured CSV path."""
    return load_fleet(settings.catalog_csv_path or None)


def create_vehicle_catalog_repository() -> VehicleCatalogRepository:
    """
    Factory function to create the vehicle catalog.

    Returns:
        VehicleCatalogRepository instance, pre-loaded with the fleet when configured
    """
    if settings.catalog_seed_on_startup:
        return InMemoryVehicleCatalogRepository(load_configured_fleet())
    return InMemoryVehicleCatalogRepository()


def create_channel_client() -> Optional[ChannelClient]:
    """
    Factory function to create the outbound channel client.

    Returns:
        ChannelClient when replies go through the Twilio API, None for TwiML replies
    """
    if not settings.twilio_send_via_api:
        return None
    return TwilioWhatsAppChannelClient(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_whatsapp_number,
        base_url=settings.twilio_api_base_url,
        timeout_seconds=settings.twilio_timeout_seconds,
    )


def create_idempotency_store() -> Optional[IdempotencyStore]:
    """
    Factory function to create the webhook idempotency store.

    Returns:
        IdempotencyStore instance, or None when deduplication is disabled
    """
    if not settings.twilio_idempotency_enabled:
        return None
    if settings.idempotency_store == "redis":
        if not settings.redis_url:
            raise ValueError("REDIS_URL is required when IDEMPOTENCY_STORE=redis")
        return RedisIdempotencyStore(settings.redis_url)
    return InMemoryIdempotencyStore()

def create_handle_chat_turn_use_case(
    session_repository: SessionRepository,
    search_vehicles: SearchVehicles,
    calculate_transfer_tax: CalculateTransferTax,
) -> HandleChatTurnUseCase:
    """
    Factory function to create HandleChatTurnUseCase with dependencies.

    Returns:
        HandleChatTurnUseCase instance
    """
    return HandleChatTurnUseCase(
        session_repository,
        search_vehicles,
        calculate_transfer_tax,
        logger=log_chat_event,
    )
