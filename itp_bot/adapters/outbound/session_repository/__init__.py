"""Session repository outbound adapters."""

from itp_bot.adapters.outbound.session_repository.cached_session_repository import (
    CachedSessionRepository,
)
from itp_bot.adapters.outbound.session_repository.in_memory_session_repository import (
    InMemorySessionRepository,
)
from itp_bot.adapters.outbound.session_repository.postgres_session_repository import (
    PostgresSessionRepository,
)
from itp_bot.adapters.outbound.session_repository.redis_session_cache import RedisSessionCache

__all__ = [
    "CachedSessionRepository",
    "InMemorySessionRepository",
    "PostgresSessionRepository",
    "RedisSessionCache",
]
