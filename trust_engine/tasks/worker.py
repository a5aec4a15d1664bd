"""
ARQ worker configuration and job definitions.

Run worker with: arq trust_engine.tasks.worker.WorkerSettings
"""

from typing import Any

from arq import cron
from arq.connections import RedisSettings
from arq.cron import CronJob
from arq.worker import func

from trust_engine.config import settings
from trust_engine.core.logging import configure_logging, get_logger
from trust_engine.tasks.notification_jobs import (
    notify_appeal_reviewed,
    notify_report_resolved,
    notify_user_suspended,
    notify_user_warned,
)
from trust_engine.tasks.sanction_jobs import expire_suspensions_job

logger = get_logger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup - configure logging."""
    configure_logging()
    logger.info(
        "arq_worker_starting",
        redis_url=settings.ARQ_REDIS_URL,
        sweep_mode=settings.SUSPENSION_SWEEP_MODE,
    )


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown."""
    logger.info("arq_worker_shutdown")


def sweep_schedule(interval_seconds: int) -> dict[str, Any]:
    """
    Cron fields that fire roughly every `interval_seconds`.

    Cron can only express divisors of a minute or an hour, so the interval
    is rounded down to whole seconds (under a minute) or whole minutes.
    """
    if interval_seconds < 60:
        return {"second": set(range(0, 60, max(interval_seconds, 1)))}
    minutes = min(interval_seconds // 60, 60)
    return {"minute": set(range(0, 60, minutes)), "second": 0}


def build_cron_jobs(mode: str, interval_seconds: int) -> list[CronJob]:
    if mode != "worker":
        return []
    return [
        cron(
            expire_suspensions_job,
            name="expire_suspensions_cron",
            run_at_startup=True,
            **sweep_schedule(interval_seconds),
        )
    ]


class WorkerSettings:
    """ARQ worker configuration."""

    redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)

    max_jobs = 10
    job_timeout = 300  # 5 minutes max per job
    keep_result = settings.ARQ_KEEP_RESULT

    on_startup = startup
    on_shutdown = shutdown

    functions = [
        func(notify_report_resolved, max_tries=settings.ARQ_MAX_TRIES),
        func(notify_appeal_reviewed, max_tries=settings.ARQ_MAX_TRIES),
        func(notify_user_warned, max_tries=settings.ARQ_MAX_TRIES),
        func(notify_user_suspended, max_tries=settings.ARQ_MAX_TRIES),
        func(expire_suspensions_job, max_tries=settings.ARQ_MAX_TRIES),
    ]

    cron_jobs = build_cron_jobs(
        settings.SUSPENSION_SWEEP_MODE, settings.SUSPENSION_SWEEP_INTERVAL_SECONDS
    )
