"""Listing and clearing content flags."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import FlagType, TargetKind
from trust_engine.core.database import utcnow
from trust_engine.core.exceptions import FlagNotFoundError
from trust_engine.core.logging import get_logger
from trust_engine.models.content_flag import ContentFlags

logger = get_logger(__name__)


async def list_flags(
    db: AsyncSession,
    *,
    resolved: bool = False,
    flag_type: FlagType | None = None,
    content_kind: TargetKind | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[int, list[ContentFlags]]:
    """Flags, newest first."""
    filters = [ContentFlags.resolved == resolved]
    if flag_type is not None:
        filters.append(ContentFlags.flag_type == flag_type)
    if content_kind is not None:
        filters.append(ContentFlags.content_kind == content_kind)

    total = (
        await db.execute(select(func.count()).select_from(ContentFlags).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(ContentFlags)
        .where(*filters)
        .order_by(ContentFlags.created_at.desc(), ContentFlags.flag_id.desc())  # type: ignore[attr-defined, union-attr]
        .offset(offset)
        .limit(limit)
    )
    return total, list(result.scalars().all())


async def resolve_flag(db: AsyncSession, flag_id: int, moderator_id: int) -> ContentFlags:
    """
    Mark a flag resolved. Resolving a resolved flag returns it unchanged.

    Raises:
        FlagNotFoundError: no such flag
    """
    result = await db.execute(
        update(ContentFlags)
        .where(
            ContentFlags.flag_id == flag_id,  # type: ignore[arg-type]
            ContentFlags.resolved == False,  # type: ignore[arg-type]  # noqa: E712
        )
        .values(resolved=True, open_slot=None, resolved_by=moderator_id, resolved_at=utcnow())
    )
    if result.rowcount == 1:  # type: ignore[attr-defined]
        await db.commit()
        logger.info("content_flag_resolved", flag_id=flag_id, moderator_id=moderator_id)

    flag = (
        await db.execute(
            select(ContentFlags)
            .where(ContentFlags.flag_id == flag_id)  # type: ignore[arg-type]
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if flag is None:
        raise FlagNotFoundError(f"Content flag {flag_id} not found")
    return flag
