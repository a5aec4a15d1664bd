"""Report submission rate limiting using Redis."""

import redis.asyncio as redis

from trust_engine.config import settings
from trust_engine.core.exceptions import RateLimitExceededError
from trust_engine.core.logging import get_logger

logger = get_logger(__name__)


async def check_report_rate_limit(reporter_id: int, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
    """
    Enforce the per-reporter submission limit.

    Limit: REPORT_RATE_LIMIT reports per REPORT_RATE_WINDOW_SECONDS.

    Gracefully degrades if Redis is unavailable (allows the request).

    Args:
        reporter_id: ID of the reporting user
        redis_client: Redis client instance

    Raises:
        RateLimitExceededError: 429 if the limit is exceeded
    """
    try:
        key = f"report_rate:{reporter_id}"

        count_raw = await redis_client.get(key)
        count = int(count_raw) if count_raw else 0

        if count >= settings.REPORT_RATE_LIMIT:
            logger.warning(
                "report_rate_limit_exceeded",
                reporter_id=reporter_id,
                count=count,
                limit=settings.REPORT_RATE_LIMIT,
            )
            raise RateLimitExceededError(
                "Too many reports submitted. Please try again later."
            )

        pipe = redis_client.pipeline()
        pipe.incr(key)
        if count == 0:
            # First report in this window - start the window
            pipe.expire(key, settings.REPORT_RATE_WINDOW_SECONDS)
        await pipe.execute()

        logger.debug(
            "report_rate_check",
            reporter_id=reporter_id,
            count=count + 1,
            limit=settings.REPORT_RATE_LIMIT,
        )
    except RateLimitExceededError:
        raise
    except Exception:
        logger.warning("report_rate_limit_redis_error", reporter_id=reporter_id, exc_info=True)
