"""
Executes a moderator's decision against the reported target.

An action has up to two parts: a content effect (hide or delete) and a user
sanction (warning, suspension or ban) against the responsible user. Each
part runs in its own savepoint. A part that fails, or cannot be applied
because the target or its owner is gone, is recorded in the result instead
of raised, so the caller can still resolve the report and log exactly what
happened.

Effect outcomes:
- succeeded: applied
- failed: raised while applying (rolled back to the savepoint)
- unresolved: the target, or the user responsible for it, could not be found
- not_applicable: the target kind has no content to hide or delete
- skipped: the action has no such part
"""

from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import (
    ModerationAction,
    SuspensionType,
    TargetKind,
    WarningSeverity,
    settings,
)
from trust_engine.core.database import utcnow
from trust_engine.core.logging import get_logger
from trust_engine.services import sanctions
from trust_engine.services.target_resolver import TargetDescriptor, resolve_target, target_spec

logger = get_logger(__name__)

SUCCEEDED = "succeeded"
FAILED = "failed"
UNRESOLVED = "unresolved"
NOT_APPLICABLE = "not_applicable"
SKIPPED = "skipped"

CONTENT_ACTIONS = frozenset({ModerationAction.CONTENT_HIDDEN, ModerationAction.CONTENT_DELETED})
SANCTION_ACTIONS = frozenset(
    {
        ModerationAction.USER_WARNED,
        ModerationAction.USER_SUSPENDED,
        ModerationAction.USER_BANNED,
    }
)


@dataclass
class DispatchResult:
    """What an executed action actually did."""

    action: ModerationAction
    content: str = SKIPPED
    user_sanction: str = SKIPPED
    responsible_user_id: int | None = None
    warning_id: int | None = None
    suspension_id: int | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return any(effect in (FAILED, UNRESOLVED) for effect in (self.content, self.user_sanction))

    def as_metadata(self) -> dict[str, object]:
        metadata: dict[str, object] = {
            "content": self.content,
            "user_sanction": self.user_sanction,
            "responsible_user_id": self.responsible_user_id,
        }
        if self.warning_id is not None:
            metadata["warning_id"] = self.warning_id
        if self.suspension_id is not None:
            metadata["suspension_id"] = self.suspension_id
        if self.errors:
            metadata["errors"] = self.errors
        return metadata


async def hide_content(db: AsyncSession, kind: TargetKind, target_id: int) -> None:
    spec = target_spec(kind)
    id_col = getattr(spec.model, spec.id_column)
    await db.execute(update(spec.model).where(id_col == target_id).values(is_hidden=True))


async def delete_content(db: AsyncSession, kind: TargetKind, target_id: int) -> None:
    spec = target_spec(kind)
    id_col = getattr(spec.model, spec.id_column)
    await db.execute(delete(spec.model).where(id_col == target_id))


async def _apply_content_effect(
    db: AsyncSession,
    action: ModerationAction,
    target: TargetDescriptor | None,
    result: DispatchResult,
) -> None:
    if target is None:
        result.content = UNRESOLVED
        return
    if not target.supports_content_effects:
        result.content = NOT_APPLICABLE
        return

    try:
        async with db.begin_nested():
            if action == ModerationAction.CONTENT_HIDDEN:
                await hide_content(db, target.kind, target.target_id)
            else:
                await delete_content(db, target.kind, target.target_id)
        result.content = SUCCEEDED
    except Exception as e:
        result.content = FAILED
        result.errors.append(f"content: {type(e).__name__}: {e}")
        logger.error(
            "content_effect_failed",
            action=action.value,
            target_kind=target.kind.value,
            target_id=target.target_id,
            error=str(e),
            error_type=type(e).__name__,
        )


async def _apply_user_sanction(
    db: AsyncSession,
    action: ModerationAction,
    target: TargetDescriptor | None,
    moderator_id: int | None,
    reason: str,
    duration_days: int | None,
    result: DispatchResult,
) -> None:
    owner_id = target.owner_id if target is not None else None
    result.responsible_user_id = owner_id
    if owner_id is None:
        result.user_sanction = UNRESOLVED
        logger.warning(
            "responsible_user_unresolved",
            action=action.value,
            target_kind=target.kind.value if target else None,
            target_id=target.target_id if target else None,
        )
        return

    try:
        async with db.begin_nested():
            if action == ModerationAction.USER_WARNED:
                issued = await sanctions.create_warning(
                    db,
                    user_id=owner_id,
                    moderator_id=moderator_id,
                    severity=WarningSeverity.MODERATE,
                    reason=reason,
                )
                result.warning_id = issued.warning.warning_id
            elif action == ModerationAction.USER_SUSPENDED:
                days = duration_days or settings.DEFAULT_SUSPENSION_DAYS
                suspension = await sanctions.create_suspension(
                    db,
                    user_id=owner_id,
                    moderator_id=moderator_id,
                    suspension_type=SuspensionType.TEMPORARY,
                    reason=reason,
                    ends_at=utcnow() + timedelta(days=days),
                )
                result.suspension_id = suspension.suspension_id
            else:
                suspension = await sanctions.create_suspension(
                    db,
                    user_id=owner_id,
                    moderator_id=moderator_id,
                    suspension_type=SuspensionType.PERMANENT,
                    reason=reason,
                )
                result.suspension_id = suspension.suspension_id
        result.user_sanction = SUCCEEDED
    except Exception as e:
        result.user_sanction = FAILED
        result.errors.append(f"user_sanction: {type(e).__name__}: {e}")
        logger.error(
            "user_sanction_failed",
            action=action.value,
            user_id=owner_id,
            error=str(e),
            error_type=type(e).__name__,
        )


async def execute(
    db: AsyncSession,
    *,
    action: ModerationAction,
    target_kind: TargetKind,
    target_id: int,
    moderator_id: int | None,
    reason: str,
    duration_days: int | None = None,
) -> DispatchResult:
    """
    Apply `action` to the target.

    Does not write the moderation log entry and does not commit; the
    caller records the returned result in its own log entry.
    """
    action = ModerationAction(action)
    result = DispatchResult(action=action)
    if action == ModerationAction.NO_ACTION:
        return result

    target = await resolve_target(db, target_kind, target_id)

    if action in CONTENT_ACTIONS:
        await _apply_content_effect(db, action, target, result)
    elif action in SANCTION_ACTIONS:
        await _apply_user_sanction(
            db, action, target, moderator_id, reason, duration_days, result
        )

    logger.info(
        "moderation_action_dispatched",
        action=action.value,
        target_kind=TargetKind(target_kind).value,
        target_id=target_id,
        content=result.content,
        user_sanction=result.user_sanction,
        degraded=result.degraded,
    )
    return result
