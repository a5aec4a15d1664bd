"""
One open report per reporter and target.

The pre-check gives a clean error in the common case. The actual guarantee
is the unique index on (reporter_id, target_kind, target_id, open_slot):
two concurrent submissions can both pass the pre-check, but only one insert
survives, and the loser's IntegrityError becomes the same conflict.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import OPEN_REPORT_STATUSES, TargetKind
from trust_engine.core.exceptions import DuplicateReportError
from trust_engine.core.logging import get_logger
from trust_engine.models.report import Reports

logger = get_logger(__name__)


async def find_open_report(
    db: AsyncSession, reporter_id: int, kind: TargetKind, target_id: int
) -> Reports | None:
    """Return the reporter's PENDING/IN_REVIEW report on this target, if any."""
    result = await db.execute(
        select(Reports).where(
            Reports.reporter_id == reporter_id,  # type: ignore[arg-type]
            Reports.target_kind == kind,  # type: ignore[arg-type]
            Reports.target_id == target_id,  # type: ignore[arg-type]
            Reports.status.in_(OPEN_REPORT_STATUSES),  # type: ignore[attr-defined]
        )
    )
    return result.scalars().first()


async def check_and_reserve(db: AsyncSession, report: Reports) -> Reports:
    """
    Insert `report` unless the reporter already has an open one on the target.

    The insert runs in a savepoint so a lost race only rolls back this row,
    not the caller's transaction.

    Raises:
        DuplicateReportError: an open report already exists (or won the race)
    """
    existing = await find_open_report(db, report.reporter_id, report.target_kind, report.target_id)
    if existing is not None:
        logger.info(
            "duplicate_report_rejected",
            reporter_id=report.reporter_id,
            target_kind=report.target_kind,
            target_id=report.target_id,
            existing_report_id=existing.report_id,
        )
        raise DuplicateReportError()

    try:
        async with db.begin_nested():
            db.add(report)
    except IntegrityError as e:
        logger.info(
            "duplicate_report_race_lost",
            reporter_id=report.reporter_id,
            target_kind=report.target_kind,
            target_id=report.target_id,
        )
        raise DuplicateReportError() from e

    return report
