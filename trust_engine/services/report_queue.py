"""
Report intake and the moderation queue.

Owns report status transitions:

    PENDING --claim--> IN_REVIEW --resolve--> RESOLVED
    PENDING ------------resolve-------------> RESOLVED

Both transitions are single compare-and-set UPDATEs. Resolve flips the
status, runs the action dispatcher and writes the log entry in one
transaction; if anything outside the dispatcher's savepoints fails, the
whole resolution rolls back and the report stays open.

Queue order: priority descending, then oldest first, then report_id.
"""

from dataclasses import dataclass

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import (
    OPEN_REPORT_STATUSES,
    PRIORITY_ORDER,
    ModerationAction,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
)
from trust_engine.core.database import utcnow
from trust_engine.core.exceptions import (
    AlreadyResolvedError,
    ConflictError,
    ReportNotFoundError,
)
from trust_engine.core.logging import get_logger
from trust_engine.models.moderation_log import ModerationLogs
from trust_engine.models.report import OPEN_SLOT, Reports
from trust_engine.services import action_dispatcher, brigading, priority
from trust_engine.services.audit_log import record_action
from trust_engine.services.duplicate_guard import check_and_reserve
from trust_engine.services.signals import ReportSignals
from trust_engine.services.target_resolver import require_target

logger = get_logger(__name__)

# URGENT=3 ... LOW=0, for ORDER BY
PRIORITY_RANK = case({p: p.rank for p in PRIORITY_ORDER}, value=Reports.priority)


# ===== Intake =====


async def enqueue(db: AsyncSession, report: Reports) -> Reports:
    """Store a new report as PENDING, subject to the duplicate guard."""
    report.status = ReportStatus.PENDING
    report.open_slot = OPEN_SLOT
    return await check_and_reserve(db, report)


async def submit_report(
    db: AsyncSession,
    *,
    reporter_id: int,
    target_kind: TargetKind,
    target_id: int,
    reason: ReportReason,
    description: str | None = None,
    signals: ReportSignals | None = None,
) -> Reports:
    """
    Accept a report: validate the target, score it and queue it.

    Commits on success.

    Raises:
        TargetNotFoundError: the target does not exist
        DuplicateReportError: the reporter already has an open report on it
    """
    signals = signals or ReportSignals()

    await require_target(db, target_kind, target_id)

    tier = priority.score(
        reason,
        target_kind,
        geo_weight=signals.geographic_weight,
        ai_urgency=signals.ai_urgency,
    )
    report = Reports(
        reporter_id=reporter_id,
        target_kind=target_kind,
        target_id=target_id,
        reason=reason,
        description=description,
        priority=tier,
        geographic_weight=signals.geographic_weight,
        ai_urgency=signals.ai_urgency,
    )
    report = await enqueue(db, report)

    if target_kind == TargetKind.CANDIDATE:
        try:
            async with db.begin_nested():
                await brigading.check_candidate_brigading(db, target_id, now=report.created_at)
        except Exception as e:
            logger.error(
                "brigading_check_failed",
                candidate_id=target_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    await db.commit()

    logger.info(
        "report_submitted",
        report_id=report.report_id,
        reporter_id=reporter_id,
        target_kind=TargetKind(target_kind).value,
        target_id=target_id,
        reason=ReportReason(reason).value,
        description=description,
        priority=tier.value,
    )
    if tier == ReportPriority.URGENT:
        logger.warning(
            "urgent_report_submitted",
            report_id=report.report_id,
            target_kind=TargetKind(target_kind).value,
            target_id=target_id,
            reason=ReportReason(reason).value,
        )
    return report


# ===== Reading =====


async def list_queue(
    db: AsyncSession,
    *,
    status: ReportStatus | None = None,
    priority_filter: ReportPriority | None = None,
    target_kind: TargetKind | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[int, list[Reports]]:
    """
    Reports for moderators, highest priority first and oldest first within
    a tier. Without a status filter only open reports are listed.
    """
    filters = []
    if status is None:
        filters.append(Reports.status.in_(OPEN_REPORT_STATUSES))  # type: ignore[attr-defined]
    else:
        filters.append(Reports.status == status)
    if priority_filter is not None:
        filters.append(Reports.priority == priority_filter)
    if target_kind is not None:
        filters.append(Reports.target_kind == target_kind)

    count_query = select(func.count()).select_from(Reports).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    query = (
        select(Reports)
        .where(*filters)
        .order_by(
            PRIORITY_RANK.desc(),
            Reports.created_at.asc(),  # type: ignore[attr-defined]
            Reports.report_id.asc(),  # type: ignore[union-attr]
        )
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(query)
    return total, list(result.scalars().all())


async def list_reporter_reports(
    db: AsyncSession, reporter_id: int, *, offset: int = 0, limit: int = 20
) -> tuple[int, list[Reports]]:
    """A reporter's own reports, newest first."""
    where = Reports.reporter_id == reporter_id  # type: ignore[arg-type]
    total = (await db.execute(select(func.count()).select_from(Reports).where(where))).scalar_one()
    result = await db.execute(
        select(Reports)
        .where(where)
        .order_by(Reports.created_at.desc(), Reports.report_id.desc())  # type: ignore[attr-defined, union-attr]
        .offset(offset)
        .limit(limit)
    )
    return total, list(result.scalars().all())


async def get_report(db: AsyncSession, report_id: int) -> Reports:
    """Fresh copy of a report. Raises ReportNotFoundError."""
    result = await db.execute(
        select(Reports)
        .where(Reports.report_id == report_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if report is None:
        raise ReportNotFoundError(f"Report {report_id} not found")
    return report


# ===== Transitions =====


async def claim_report(db: AsyncSession, report_id: int, moderator_id: int) -> Reports:
    """
    Move a PENDING report to IN_REVIEW for this moderator.

    Claiming a report you already hold is a no-op. A claimed report can
    still be resolved by any moderator.

    Raises:
        ReportNotFoundError: no such report
        ConflictError: resolved, or claimed by someone else
    """
    now = utcnow()
    result = await db.execute(
        update(Reports)
        .where(
            Reports.report_id == report_id,  # type: ignore[arg-type]
            Reports.status == ReportStatus.PENDING,  # type: ignore[arg-type]
        )
        .values(
            status=ReportStatus.IN_REVIEW,
            claimed_by=moderator_id,
            claimed_at=now,
            updated_at=now,
        )
    )
    if result.rowcount == 1:  # type: ignore[attr-defined]
        await db.commit()
        logger.info("report_claimed", report_id=report_id, moderator_id=moderator_id)
        return await get_report(db, report_id)

    report = await get_report(db, report_id)
    if report.status == ReportStatus.RESOLVED:
        raise ConflictError(f"Report {report_id} is already resolved")
    if report.claimed_by != moderator_id:
        raise ConflictError(f"Report {report_id} is already claimed by another moderator")
    return report


@dataclass
class ResolveResult:
    report: Reports
    dispatch: action_dispatcher.DispatchResult
    log_entry: ModerationLogs

    @property
    def degraded(self) -> bool:
        return self.dispatch.degraded


async def resolve_report(
    db: AsyncSession,
    *,
    report_id: int,
    moderator_id: int,
    action: ModerationAction,
    notes: str | None = None,
    duration_days: int | None = None,
) -> ResolveResult:
    """
    Resolve a report and execute the moderator's decision.

    The status flip is an UPDATE conditioned on the report not being
    RESOLVED yet, so of two concurrent calls only one gets past it. The
    other sees zero affected rows and gets AlreadyResolvedError without
    anything being executed or logged.

    Commits on success; rolls back and re-raises if the resolution itself
    fails.

    Raises:
        ReportNotFoundError: no such report
        AlreadyResolvedError: the report was already resolved
    """
    action = ModerationAction(action)
    now = utcnow()

    try:
        result = await db.execute(
            update(Reports)
            .where(
                Reports.report_id == report_id,  # type: ignore[arg-type]
                Reports.status != ReportStatus.RESOLVED,  # type: ignore[arg-type]
            )
            .values(
                status=ReportStatus.RESOLVED,
                open_slot=None,
                moderator_id=moderator_id,
                moderated_at=now,
                updated_at=now,
                moderator_notes=notes,
                action_taken=action,
            )
        )
        if result.rowcount == 0:  # type: ignore[attr-defined]
            await get_report(db, report_id)
            raise AlreadyResolvedError(report_id)

        report = await get_report(db, report_id)
        reason_line = f"Report #{report_id} ({report.reason.value})"

        dispatch = await action_dispatcher.execute(
            db,
            action=action,
            target_kind=report.target_kind,
            target_id=report.target_id,
            moderator_id=moderator_id,
            reason=notes or reason_line,
            duration_days=duration_days,
        )

        log_entry = await record_action(
            db,
            moderator_id=moderator_id,
            target_kind=report.target_kind,
            target_id=report.target_id,
            action=action,
            reason=reason_line,
            notes=notes,
            details={
                "report_id": report_id,
                "original_reason": report.reason.value,
                "priority": report.priority.value,
                "effects": dispatch.as_metadata(),
                "degraded": dispatch.degraded,
            },
        )

        await db.commit()
    except (AlreadyResolvedError, ReportNotFoundError):
        # Nothing was written
        raise
    except Exception:
        await db.rollback()
        logger.error("report_resolution_failed", report_id=report_id, exc_info=True)
        raise

    logger.info(
        "report_resolved",
        report_id=report_id,
        moderator_id=moderator_id,
        action=action.value,
        degraded=dispatch.degraded,
        notes=notes,
        log_id=log_entry.log_id,
    )
    return ResolveResult(report=report, dispatch=dispatch, log_entry=log_entry)
