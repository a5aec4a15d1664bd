"""
Sanction lifecycle: warnings, suspensions, lifts and expiry.

Suspension state machine: a row is created active and moves to inactive
exactly once, by an explicit lift or by the sweep after `ends_at`. Both
paths deactivate with `UPDATE ... WHERE is_active`, so whichever runs
second finds nothing to do and writes no log entry.

`users.is_suspended` is a cached projection of the active TEMPORARY and
PERMANENT rows. It is recomputed from those rows after every change and
never set directly. Every path that changes a user's suspensions locks the
user row first (`lock_user`), and the recompute reads the rows with a
locking read, so a recompute always sees the other writers' committed rows
rather than a stale snapshot.

Functions here do not commit, except `expire_suspensions`, which commits
once per page so a long sweep never holds locks across the whole table.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import (
    FULL_RESTRICTION_TYPES,
    ModerationAction,
    SuspensionType,
    TargetKind,
    WarningSeverity,
    settings,
)
from trust_engine.core.database import utcnow
from trust_engine.core.exceptions import (
    SuspensionNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from trust_engine.core.logging import get_logger
from trust_engine.models.user import Users
from trust_engine.models.user_suspension import UserSuspensions
from trust_engine.models.user_warning import UserWarnings
from trust_engine.services.audit_log import record_action

logger = get_logger(__name__)

# Restrictions that block each capability
BLOCKS_POSTING = (*FULL_RESTRICTION_TYPES, SuspensionType.POSTING_RESTRICTED)
BLOCKS_COMMENTING = (*FULL_RESTRICTION_TYPES, SuspensionType.COMMENTING_RESTRICTED)


async def get_user(db: AsyncSession, user_id: int) -> Users:
    user = await db.get(Users, user_id)
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


def user_lock_query(user_id: int) -> Select:
    return (
        select(Users.user_id)
        .where(Users.user_id == user_id)  # type: ignore[arg-type]
        .with_for_update()
    )


def active_full_restrictions_query(user_id: int) -> Select:
    # Locking read: sees rows committed after this transaction's snapshot
    return (
        select(UserSuspensions.suspension_id)
        .where(
            UserSuspensions.user_id == user_id,  # type: ignore[arg-type]
            UserSuspensions.is_active == True,  # type: ignore[arg-type]  # noqa: E712
            UserSuspensions.type.in_(FULL_RESTRICTION_TYPES),  # type: ignore[attr-defined]
        )
        .with_for_update()
    )


async def lock_user(db: AsyncSession, user_id: int) -> None:
    """
    Take the row lock that serialises suspension changes for one user.

    Raises:
        UserNotFoundError: the user does not exist
    """
    if (await db.execute(user_lock_query(user_id))).first() is None:
        raise UserNotFoundError(f"User {user_id} not found")


async def refresh_user_suspension_flag(db: AsyncSession, user_id: int) -> bool:
    """Recompute users.is_suspended from the active full-restriction rows."""
    await lock_user(db, user_id)
    rows = (await db.execute(active_full_restrictions_query(user_id))).all()
    is_suspended = len(rows) > 0

    await db.execute(
        update(Users)
        .where(Users.user_id == user_id)  # type: ignore[arg-type]
        .values(is_suspended=is_suspended)
    )
    return is_suspended


# ===== Warnings =====


@dataclass
class IssuedWarning:
    warning: UserWarnings
    suspension: UserSuspensions | None = None


async def create_warning(
    db: AsyncSession,
    *,
    user_id: int,
    moderator_id: int | None,
    severity: WarningSeverity,
    reason: str,
    notes: str | None = None,
) -> IssuedWarning:
    """
    Store a warning. A FINAL warning also suspends the user for the
    default duration.
    """
    await get_user(db, user_id)

    warning = UserWarnings(
        user_id=user_id,
        moderator_id=moderator_id,
        severity=severity,
        reason=reason[:500],
        notes=notes,
    )
    db.add(warning)
    await db.flush()

    suspension = None
    if severity == WarningSeverity.FINAL:
        suspension = await create_suspension(
            db,
            user_id=user_id,
            moderator_id=moderator_id,
            suspension_type=SuspensionType.TEMPORARY,
            reason=f"Final warning: {reason}",
        )

    logger.info(
        "user_warned",
        user_id=user_id,
        warning_id=warning.warning_id,
        severity=WarningSeverity(severity).value,
        reason=reason,
        suspension_id=suspension.suspension_id if suspension else None,
    )
    return IssuedWarning(warning=warning, suspension=suspension)


async def list_warnings(db: AsyncSession, user_id: int) -> tuple[int, list[UserWarnings]]:
    """A user's warnings, newest first, with the count."""
    await get_user(db, user_id)
    result = await db.execute(
        select(UserWarnings)
        .where(UserWarnings.user_id == user_id)  # type: ignore[arg-type]
        .order_by(UserWarnings.created_at.desc(), UserWarnings.warning_id.desc())  # type: ignore[attr-defined, union-attr]
    )
    warnings = list(result.scalars().all())
    return len(warnings), warnings


# ===== Suspensions =====


def _resolve_ends_at(
    suspension_type: SuspensionType,
    ends_at: datetime | None,
    duration_days: int | None,
    now: datetime,
) -> datetime | None:
    if suspension_type == SuspensionType.PERMANENT:
        if ends_at is not None or duration_days is not None:
            raise ValidationError("PERMANENT suspensions cannot have an end date")
        return None

    if ends_at is None and duration_days is not None:
        ends_at = now + timedelta(days=duration_days)
    if ends_at is None and suspension_type == SuspensionType.TEMPORARY:
        ends_at = now + timedelta(days=settings.DEFAULT_SUSPENSION_DAYS)
    if ends_at is not None and ends_at <= now:
        raise ValidationError("Suspension end must be in the future")
    return ends_at


async def create_suspension(
    db: AsyncSession,
    *,
    user_id: int,
    moderator_id: int | None,
    suspension_type: SuspensionType,
    reason: str,
    ends_at: datetime | None = None,
    duration_days: int | None = None,
) -> UserSuspensions:
    """
    Create an active suspension and refresh the user's blanket flag.

    TEMPORARY without an explicit end runs for DEFAULT_SUSPENSION_DAYS.
    Existing suspensions are left as they are.

    Raises:
        UserNotFoundError: the user does not exist
        ValidationError: the end date is invalid for the type
    """
    await lock_user(db, user_id)

    now = utcnow()
    suspension = UserSuspensions(
        user_id=user_id,
        moderator_id=moderator_id,
        type=suspension_type,
        reason=reason[:500],
        starts_at=now,
        ends_at=_resolve_ends_at(suspension_type, ends_at, duration_days, now),
        is_active=True,
    )
    db.add(suspension)
    await db.flush()

    is_suspended = await refresh_user_suspension_flag(db, user_id)

    logger.info(
        "user_suspended",
        user_id=user_id,
        suspension_id=suspension.suspension_id,
        suspension_type=SuspensionType(suspension_type).value,
        ends_at=suspension.ends_at.isoformat() if suspension.ends_at else None,
        reason=reason,
        is_suspended=is_suspended,
    )
    return suspension


async def list_suspensions(
    db: AsyncSession, user_id: int, active_only: bool = False
) -> list[UserSuspensions]:
    """A user's suspensions, newest first."""
    await get_user(db, user_id)
    query = select(UserSuspensions).where(UserSuspensions.user_id == user_id)  # type: ignore[arg-type]
    if active_only:
        query = query.where(UserSuspensions.is_active == True)  # type: ignore[arg-type]  # noqa: E712
    query = query.order_by(
        UserSuspensions.created_at.desc(),  # type: ignore[attr-defined]
        UserSuspensions.suspension_id.desc(),  # type: ignore[union-attr]
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def _deactivate(
    db: AsyncSession, suspension_id: int, *, now: datetime, lifted_by: int | None
) -> bool:
    """Flip one row to inactive. False if it was already inactive."""
    result = await db.execute(
        update(UserSuspensions)
        .where(
            UserSuspensions.suspension_id == suspension_id,  # type: ignore[arg-type]
            UserSuspensions.is_active == True,  # type: ignore[arg-type]  # noqa: E712
        )
        .values(is_active=False, deactivated_at=now, lifted_by=lifted_by)
    )
    return result.rowcount == 1  # type: ignore[attr-defined]


async def _reload_suspension(db: AsyncSession, suspension_id: int) -> UserSuspensions | None:
    result = await db.execute(
        select(UserSuspensions)
        .where(UserSuspensions.suspension_id == suspension_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@dataclass
class LiftResult:
    user_id: int
    lifted_ids: list[int]
    is_suspended: bool


async def lift_suspension(
    db: AsyncSession,
    suspension_id: int,
    *,
    moderator_id: int | None,
    reason: str | None = None,
) -> LiftResult:
    """
    Lift one suspension. Lifting an inactive suspension is a no-op.

    Raises:
        SuspensionNotFoundError: no such suspension
    """
    suspension = await _reload_suspension(db, suspension_id)
    if suspension is None:
        raise SuspensionNotFoundError(f"Suspension {suspension_id} not found")
    await lock_user(db, suspension.user_id)

    lifted = await _lift_rows(db, suspension.user_id, [suspension_id], moderator_id, reason)
    is_suspended = await refresh_user_suspension_flag(db, suspension.user_id)
    return LiftResult(user_id=suspension.user_id, lifted_ids=lifted, is_suspended=is_suspended)


async def lift_user_suspensions(
    db: AsyncSession,
    user_id: int,
    *,
    moderator_id: int | None,
    reason: str | None = None,
) -> LiftResult:
    """
    Lift every active suspension on a user.

    Raises:
        UserNotFoundError: no such user
    """
    await lock_user(db, user_id)
    active = await list_suspensions(db, user_id, active_only=True)
    lifted = await _lift_rows(
        db, user_id, [s.suspension_id for s in active if s.suspension_id], moderator_id, reason
    )
    is_suspended = await refresh_user_suspension_flag(db, user_id)
    return LiftResult(user_id=user_id, lifted_ids=lifted, is_suspended=is_suspended)


async def _lift_rows(
    db: AsyncSession,
    user_id: int,
    suspension_ids: list[int],
    moderator_id: int | None,
    reason: str | None,
) -> list[int]:
    now = utcnow()
    lifted: list[int] = []
    for suspension_id in suspension_ids:
        if not await _deactivate(db, suspension_id, now=now, lifted_by=moderator_id):
            continue
        lifted.append(suspension_id)
        await record_action(
            db,
            moderator_id=moderator_id,
            target_kind=TargetKind.USER,
            target_id=user_id,
            action=ModerationAction.SUSPENSION_LIFTED,
            reason=reason or "Suspension lifted",
            details={"suspension_id": suspension_id},
        )
        logger.info(
            "suspension_lifted",
            suspension_id=suspension_id,
            user_id=user_id,
            lifted_by=moderator_id,
        )
    return lifted


async def expire_suspensions(
    db: AsyncSession,
    *,
    batch_size: int | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Deactivate TEMPORARY suspensions whose end has passed.

    Rows are read in pages of `batch_size` (keyed on suspension_id, so a row
    that errors is not picked up again in the same pass). Each row is
    handled in its own savepoint; the page commits before the next is read.
    PERMANENT rows are never selected.

    Returns:
        dict with counts: {"processed": int, "expired": int, "errors": int}
    """
    batch_size = batch_size or settings.SUSPENSION_SWEEP_BATCH_SIZE
    now = now or utcnow()
    results = {"processed": 0, "expired": 0, "errors": 0}

    last_id = 0
    while True:
        page_query = (
            select(UserSuspensions.suspension_id, UserSuspensions.user_id, UserSuspensions.ends_at)
            .where(
                UserSuspensions.is_active == True,  # type: ignore[arg-type]  # noqa: E712
                UserSuspensions.type == SuspensionType.TEMPORARY,  # type: ignore[arg-type]
                UserSuspensions.ends_at <= now,  # type: ignore[operator, arg-type]
                UserSuspensions.suspension_id > last_id,  # type: ignore[operator, arg-type]
            )
            .order_by(UserSuspensions.suspension_id)
            .limit(batch_size)
        )
        rows = (await db.execute(page_query)).all()
        if not rows:
            break

        for suspension_id, user_id, ends_at in rows:
            last_id = suspension_id
            results["processed"] += 1
            try:
                async with db.begin_nested():  # Savepoint for each suspension
                    await lock_user(db, user_id)
                    if not await _deactivate(db, suspension_id, now=now, lifted_by=None):
                        # Lifted since the page was read
                        continue
                    await record_action(
                        db,
                        moderator_id=None,
                        target_kind=TargetKind.USER,
                        target_id=user_id,
                        action=ModerationAction.SUSPENSION_EXPIRED,
                        reason="Suspension period ended",
                        details={
                            "suspension_id": suspension_id,
                            "ends_at": ends_at.isoformat() if ends_at else None,
                            "automatic": True,
                        },
                    )
                    await refresh_user_suspension_flag(db, user_id)
                results["expired"] += 1
            except Exception as e:
                results["errors"] += 1
                logger.error(
                    "suspension_expiry_failed",
                    suspension_id=suspension_id,
                    user_id=user_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        await db.commit()
        if len(rows) < batch_size:
            break

    logger.info("suspension_sweep_complete", **results)
    return results


# ===== Effective status =====


@dataclass
class SuspensionStatus:
    user_id: int
    is_suspended: bool
    can_post: bool
    can_comment: bool
    suspension: UserSuspensions | None


async def get_suspension_status(
    db: AsyncSession, user_id: int, now: datetime | None = None
) -> SuspensionStatus:
    """
    What the user may currently do.

    TEMPORARY rows whose end has passed count as expired even if the sweep
    has not reached them yet. The reported suspension is the most recent
    full restriction in effect, or else the most recent partial one.
    """
    await get_user(db, user_id)
    now = now or utcnow()

    result = await db.execute(
        select(UserSuspensions)
        .where(
            UserSuspensions.user_id == user_id,  # type: ignore[arg-type]
            UserSuspensions.is_active == True,  # type: ignore[arg-type]  # noqa: E712
            or_(
                UserSuspensions.ends_at.is_(None),  # type: ignore[union-attr]
                UserSuspensions.ends_at > now,  # type: ignore[operator, arg-type]
            ),
        )
        .order_by(
            UserSuspensions.created_at.desc(),  # type: ignore[attr-defined]
            UserSuspensions.suspension_id.desc(),  # type: ignore[union-attr]
        )
    )
    in_effect = list(result.scalars().all())

    full = [s for s in in_effect if s.type in FULL_RESTRICTION_TYPES]
    current = full[0] if full else (in_effect[0] if in_effect else None)

    return SuspensionStatus(
        user_id=user_id,
        is_suspended=bool(full),
        can_post=not any(s.type in BLOCKS_POSTING for s in in_effect),
        can_comment=not any(s.type in BLOCKS_COMMENTING for s in in_effect),
        suspension=current,
    )
