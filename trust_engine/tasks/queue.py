"""
Enqueueing arq jobs from the API.

Every helper here is fire-and-forget: a Redis outage is logged and the
caller carries on, because a missed notification must never undo or block
a moderation decision that has already committed.
"""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings

from trust_engine.config import settings
from trust_engine.core.logging import get_logger

logger = get_logger(__name__)

# Created lazily, closed by the application lifespan
_pool: ArqRedis | None = None


async def get_queue() -> ArqRedis:
    """Return the shared arq pool, connecting on first use."""
    global _pool
    if _pool is None:
        _pool = await create_pool(RedisSettings.from_dsn(settings.ARQ_REDIS_URL))
        logger.info("arq_pool_created", redis_url=settings.ARQ_REDIS_URL)
    return _pool


async def enqueue_job(function_name: str, *args: Any, **kwargs: Any) -> str | None:
    """
    Queue `function_name` for the worker.

    Returns:
        The job ID, or None if nothing was queued (duplicate job ID or
        Redis unavailable)
    """
    try:
        pool = await get_queue()
        job = await pool.enqueue_job(function_name, *args, **kwargs)
    except Exception as e:
        logger.error(
            "job_enqueue_error",
            function=function_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    if job is None:
        logger.warning("job_enqueue_skipped", function=function_name, kwargs=kwargs)
        return None

    logger.debug("job_enqueued", function=function_name, job_id=job.job_id)
    return job.job_id


async def enqueue_report_resolved(report_id: int) -> str | None:
    """Tell the reporter how their report was resolved."""
    return await enqueue_job(
        "notify_report_resolved", report_id=report_id, _job_id=f"report-resolved:{report_id}"
    )


async def enqueue_appeal_reviewed(appeal_id: int) -> str | None:
    """Tell the appellant about the decision."""
    return await enqueue_job(
        "notify_appeal_reviewed", appeal_id=appeal_id, _job_id=f"appeal-reviewed:{appeal_id}"
    )


async def enqueue_sanction_notices(
    *, warning_id: int | None = None, suspension_id: int | None = None
) -> None:
    """Tell a sanctioned user about a new warning and/or suspension."""
    if warning_id is not None:
        await enqueue_job(
            "notify_user_warned", warning_id=warning_id, _job_id=f"user-warned:{warning_id}"
        )
    if suspension_id is not None:
        await enqueue_job(
            "notify_user_suspended",
            suspension_id=suspension_id,
            _job_id=f"user-suspended:{suspension_id}",
        )


async def close_queue() -> None:
    """Close the arq pool (application shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("arq_pool_closed")
