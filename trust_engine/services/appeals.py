"""
Suspension appeals.

A user may appeal each of their active suspensions once, and may file at
most APPEAL_LIMIT_PER_WINDOW appeals per APPEAL_WINDOW_DAYS. Review is a
compare-and-set on the PENDING status: an approved appeal lifts the
suspension through the sanction lifecycle, and every decision is logged.
"""

from datetime import timedelta

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import AppealStatus, ModerationAction, TargetKind, settings
from trust_engine.core.database import utcnow
from trust_engine.core.exceptions import (
    AppealAlreadyReviewedError,
    AppealAlreadySubmittedError,
    AppealNotFoundError,
    RateLimitExceededError,
    SuspensionNotFoundError,
    ValidationError,
)
from trust_engine.core.logging import get_logger
from trust_engine.models.appeal import Appeals
from trust_engine.models.user_suspension import UserSuspensions
from trust_engine.services import sanctions
from trust_engine.services.audit_log import record_action

logger = get_logger(__name__)


async def submit_appeal(
    db: AsyncSession,
    *,
    user_id: int,
    suspension_id: int,
    reason: str,
    additional_info: str | None = None,
) -> Appeals:
    """
    File an appeal against one of the user's own active suspensions.

    Commits on success.

    Raises:
        SuspensionNotFoundError: no such suspension for this user
        ValidationError: the suspension is no longer active
        AppealAlreadySubmittedError: it has already been appealed
        RateLimitExceededError: too many appeals in the window
    """
    suspension = await db.get(UserSuspensions, suspension_id, populate_existing=True)
    if suspension is None or suspension.user_id != user_id:
        raise SuspensionNotFoundError(f"Suspension {suspension_id} not found")
    if not suspension.is_active:
        raise ValidationError("Only active suspensions can be appealed")

    existing = await db.execute(
        select(Appeals.appeal_id).where(Appeals.suspension_id == suspension_id)  # type: ignore[arg-type]
    )
    if existing.first() is not None:
        raise AppealAlreadySubmittedError()

    now = utcnow()
    window_start = now - timedelta(days=settings.APPEAL_WINDOW_DAYS)
    recent = (
        await db.execute(
            select(func.count())
            .select_from(Appeals)
            .where(
                Appeals.user_id == user_id,  # type: ignore[arg-type]
                Appeals.created_at >= window_start,  # type: ignore[operator, arg-type]
            )
        )
    ).scalar_one()
    if recent >= settings.APPEAL_LIMIT_PER_WINDOW:
        logger.warning(
            "appeal_rate_limit_exceeded",
            user_id=user_id,
            count=recent,
            limit=settings.APPEAL_LIMIT_PER_WINDOW,
        )
        raise RateLimitExceededError(
            f"You can submit at most {settings.APPEAL_LIMIT_PER_WINDOW} appeals "
            f"every {settings.APPEAL_WINDOW_DAYS} days"
        )

    appeal = Appeals(
        user_id=user_id,
        suspension_id=suspension_id,
        reason=reason,
        additional_info=additional_info,
        status=AppealStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    try:
        async with db.begin_nested():
            db.add(appeal)
    except IntegrityError as e:
        raise AppealAlreadySubmittedError() from e

    suspension.appealed = True
    suspension.appealed_at = now
    await db.commit()

    logger.info(
        "appeal_submitted",
        appeal_id=appeal.appeal_id,
        user_id=user_id,
        suspension_id=suspension_id,
    )
    return appeal


async def list_user_appeals(
    db: AsyncSession, user_id: int, *, offset: int = 0, limit: int = 20
) -> tuple[int, list[Appeals]]:
    """The user's own appeals, newest first."""
    where = Appeals.user_id == user_id  # type: ignore[arg-type]
    total = (await db.execute(select(func.count()).select_from(Appeals).where(where))).scalar_one()
    result = await db.execute(
        select(Appeals)
        .where(where)
        .order_by(Appeals.created_at.desc(), Appeals.appeal_id.desc())  # type: ignore[attr-defined, union-attr]
        .offset(offset)
        .limit(limit)
    )
    return total, list(result.scalars().all())


async def list_appeals(
    db: AsyncSession,
    *,
    status: AppealStatus | None = AppealStatus.PENDING,
    offset: int = 0,
    limit: int = 20,
) -> tuple[int, list[Appeals]]:
    """Moderator appeal queue, oldest first."""
    filters = [] if status is None else [Appeals.status == status]
    total = (
        await db.execute(select(func.count()).select_from(Appeals).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Appeals)
        .where(*filters)
        .order_by(Appeals.created_at.asc(), Appeals.appeal_id.asc())  # type: ignore[attr-defined, union-attr]
        .offset(offset)
        .limit(limit)
    )
    return total, list(result.scalars().all())


async def get_appeal(db: AsyncSession, appeal_id: int) -> Appeals:
    result = await db.execute(
        select(Appeals)
        .where(Appeals.appeal_id == appeal_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    appeal = result.scalar_one_or_none()
    if appeal is None:
        raise AppealNotFoundError(f"Appeal {appeal_id} not found")
    return appeal


async def review_appeal(
    db: AsyncSession,
    *,
    appeal_id: int,
    moderator_id: int,
    decision: AppealStatus,
    review_notes: str | None = None,
) -> Appeals:
    """
    Approve or deny a pending appeal.

    Approval lifts the appealed suspension (logging SUSPENSION_LIFTED) and
    logs APPEAL_APPROVED; denial logs APPEAL_DENIED. Commits on success.

    Raises:
        ValidationError: decision is not APPROVED or DENIED
        AppealNotFoundError: no such appeal
        AppealAlreadyReviewedError: the appeal was already decided
    """
    if decision not in (AppealStatus.APPROVED, AppealStatus.DENIED):
        raise ValidationError("Appeal decision must be APPROVED or DENIED")

    now = utcnow()
    result = await db.execute(
        update(Appeals)
        .where(
            Appeals.appeal_id == appeal_id,  # type: ignore[arg-type]
            Appeals.status == AppealStatus.PENDING,  # type: ignore[arg-type]
        )
        .values(
            status=decision,
            review_notes=review_notes,
            reviewed_by=moderator_id,
            reviewed_at=now,
            updated_at=now,
        )
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        await get_appeal(db, appeal_id)
        raise AppealAlreadyReviewedError()

    appeal = await get_appeal(db, appeal_id)
    suspension = await db.get(UserSuspensions, appeal.suspension_id)
    user_id = suspension.user_id if suspension else appeal.user_id

    if decision == AppealStatus.APPROVED:
        await sanctions.lift_suspension(
            db,
            appeal.suspension_id,
            moderator_id=moderator_id,
            reason=f"Appeal #{appeal_id} approved",
        )
        action = ModerationAction.APPEAL_APPROVED
    else:
        action = ModerationAction.APPEAL_DENIED

    await record_action(
        db,
        moderator_id=moderator_id,
        target_kind=TargetKind.USER,
        target_id=user_id,
        action=action,
        reason=f"Appeal #{appeal_id} {decision.value.lower()}",
        notes=review_notes,
        details={"appeal_id": appeal_id, "suspension_id": appeal.suspension_id},
    )
    await db.commit()

    logger.info(
        "appeal_reviewed",
        appeal_id=appeal_id,
        moderator_id=moderator_id,
        decision=decision.value,
        review_notes=review_notes,
    )
    return appeal
