"""
Rental Service — Redis connection

Redis only backs the Idempotency-Key store, so the client is created on first
use; with IDEMPOTENCY_ENABLED=false the service never connects.
"""
import redis.asyncio as aioredis

from rental_service.core.config import get_settings

_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _client
    if _client is None:
        settings = get_settings()
        _client = aioredis.Redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
            socket_timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
