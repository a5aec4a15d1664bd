"""
Moderation log: writing entries and browsing them.

Entries are append-only. `record_action` adds and flushes in the caller's
transaction so the entry commits (or rolls back) together with the change
it describes.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import ModerationAction, TargetKind
from trust_engine.core.logging import get_logger
from trust_engine.models.moderation_log import ModerationLogs

logger = get_logger(__name__)


async def record_action(
    db: AsyncSession,
    *,
    moderator_id: int | None,
    target_kind: TargetKind,
    target_id: int,
    action: ModerationAction,
    reason: str,
    notes: str | None = None,
    details: dict[str, Any] | None = None,
) -> ModerationLogs:
    """Append a moderation log entry. moderator_id is None for system actions."""
    entry = ModerationLogs(
        moderator_id=moderator_id,
        target_kind=target_kind,
        target_id=target_id,
        action=action,
        reason=reason[:500],
        notes=notes,
        details=details,
    )
    db.add(entry)
    await db.flush()

    logger.info(
        "moderation_action_logged",
        log_id=entry.log_id,
        action=ModerationAction(action).value,
        target_kind=TargetKind(target_kind).value,
        target_id=target_id,
        moderator_id=moderator_id,
    )
    return entry


async def list_logs(
    db: AsyncSession,
    *,
    target_kind: TargetKind | None = None,
    target_id: int | None = None,
    moderator_id: int | None = None,
    action: ModerationAction | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[int, list[ModerationLogs]]:
    """Filtered log entries, newest first, with the total match count."""
    filters = []
    if target_kind is not None:
        filters.append(ModerationLogs.target_kind == target_kind)
    if target_id is not None:
        filters.append(ModerationLogs.target_id == target_id)
    if moderator_id is not None:
        filters.append(ModerationLogs.moderator_id == moderator_id)
    if action is not None:
        filters.append(ModerationLogs.action == action)

    count_query = select(func.count()).select_from(ModerationLogs).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    query = (
        select(ModerationLogs)
        .where(*filters)
        .order_by(
            ModerationLogs.created_at.desc(),  # type: ignore[attr-defined]
            ModerationLogs.log_id.desc(),  # type: ignore[union-attr]
        )
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(query)
    return total, list(result.scalars().all())
