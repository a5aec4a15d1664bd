"""
Best-effort moderation counters in Redis.

Counters are plain INCRs under `metrics:`; dashboards read them directly.
A failed increment is logged and dropped.
"""

import redis.asyncio as redis

from trust_engine.config import ModerationAction, TargetKind
from trust_engine.core.logging import get_logger

logger = get_logger(__name__)

REPORTS_SUBMITTED_KEY = "metrics:reports_submitted"
ACTIONS_TAKEN_KEY = "metrics:actions_taken"


async def _incr(redis_client: redis.Redis, base_key: str, label: str) -> None:  # type: ignore[type-arg]
    try:
        pipe = redis_client.pipeline()
        pipe.incr(base_key)
        pipe.incr(f"{base_key}:{label}")
        await pipe.execute()
    except Exception as e:
        logger.warning("metrics_increment_failed", key=base_key, label=label, error=str(e))


async def record_report_submitted(
    redis_client: redis.Redis | None,  # type: ignore[type-arg]
    target_kind: TargetKind,
) -> None:
    if redis_client is None:
        return
    await _incr(redis_client, REPORTS_SUBMITTED_KEY, TargetKind(target_kind).value)


async def record_action_taken(
    redis_client: redis.Redis | None,  # type: ignore[type-arg]
    action: ModerationAction,
) -> None:
    if redis_client is None:
        return
    await _incr(redis_client, ACTIONS_TAKEN_KEY, ModerationAction(action).value)
