"""Suspension expiry job for the arq worker."""

from typing import Any

from trust_engine.core.database import get_async_session
from trust_engine.core.logging import bind_context, get_logger
from trust_engine.services.sanctions import expire_suspensions

logger = get_logger(__name__)


async def expire_suspensions_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Run one suspension sweep pass.

    Registered as a regular job (for manual enqueueing) and, when
    SUSPENSION_SWEEP_MODE is "worker", as a cron job. Per-row failures are
    counted in the result rather than failing the job.
    """
    bind_context(task="expire_suspensions")

    async with get_async_session() as db:
        result = await expire_suspensions(db)

    if result["errors"]:
        logger.warning("suspension_sweep_had_errors", **result)
    return result
