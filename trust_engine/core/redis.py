"""
Redis connection for request-scoped work (report rate limits, metrics counters).

Nothing the engine stores in Redis is authoritative; callers treat an
unavailable Redis as "no limit" and "no metrics".
"""

from collections.abc import AsyncGenerator

import redis.asyncio as redis

from trust_engine.config import settings


async def get_redis() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """Dependency yielding an async redis client, closed after the request."""
    client = redis.from_url(
        str(settings.REDIS_URL),
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        yield client
    finally:
        await client.aclose()
