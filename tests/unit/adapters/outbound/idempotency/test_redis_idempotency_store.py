"""Unit tests for Redis idempotency store adapter."""

from unittest.mock import AsyncMock, patch

import pytest

from itp_bot.adapters.outbound.idempotency.redis_idempotency_store import RedisIdempotencyStore

FROM_URL = "itp_bot.adapters.outbound.idempotency.redis_idempotency_store.aioredis.from_url"


@pytest.fixture
def mock_redis_client():
    """Create a mock Redis client."""
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def redis_store():
    """Create Redis idempotency store with test URL."""
    return RedisIdempotencyStore("redis://localhost:6379/0")


@pytest.mark.asyncio
async def test_claim_uses_set_nx_with_ttl(redis_store, mock_redis_client):
    """Test claim is a single SET NX EX."""
    with patch(FROM_URL, return_value=mock_redis_client):
        result = await redis_store.claim("SM1234567890", ttl_seconds=3600)

    assert result is True
    mock_redis_client.set.assert_called_once_with(
        "itp:twilio:processed:SM1234567890", "1", nx=True, ex=3600
    )


@pytest.mark.asyncio
async def test_claim_returns_false_for_repeated_key(redis_store, mock_redis_client):
    """Test an existing key is not claimed again."""
    mock_redis_client.set = AsyncMock(return_value=None)

    with patch(FROM_URL, return_value=mock_redis_client):
        result = await redis_store.claim("SM1234567890", ttl_seconds=3600)

    assert result is False


@pytest.mark.asyncio
async def test_store_and_get_response(redis_store, mock_redis_client):
    """Test the stored TwiML uses its own key and TTL."""
    mock_redis_client.get = AsyncMock(return_value="<Response></Response>")

    with patch(FROM_URL, return_value=mock_redis_client):
        await redis_store.store_response("SM1", "<Response></Response>", ttl_seconds=60)
        stored = await redis_store.get_response("SM1")

    mock_redis_client.setex.assert_called_once_with(
        "itp:twilio:response:SM1", 60, "<Response></Response>"
    )
    mock_redis_client.get.assert_called_once_with("itp:twilio:response:SM1")
    assert stored == "<Response></Response>"


@pytest.mark.asyncio
async def test_close_releases_client(redis_store, mock_redis_client):
    """Test close drops the client."""
    with patch(FROM_URL, return_value=mock_redis_client):
        await redis_store.claim("SM1", ttl_seconds=60)
        await redis_store.close()

    mock_redis_client.aclose.assert_called_once()
    assert redis_store._client is None
