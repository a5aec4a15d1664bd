"""
Brigading detection for candidate reports.

After a CANDIDATE report is accepted, the recent reports against that
candidate are inspected. Either of two patterns raises a
POTENTIAL_BRIGADING flag for manual review:

- more than BRIGADING_MAX_REPORTS_PER_HOUR reports within one clock hour
- more than BRIGADING_LOW_WEIGHT_RATIO of the reports carrying a geographic
  weight below BRIGADING_LOW_WEIGHT_THRESHOLD (reporters from outside the
  candidate's constituency)

Only one unresolved flag per candidate is kept open at a time; the unique
`open_slot` index on content_flags settles concurrent submissions.
"""

from collections import Counter
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import FlagSource, FlagType, TargetKind, settings
from trust_engine.core.database import utcnow
from trust_engine.core.logging import get_logger
from trust_engine.models.content_flag import ContentFlags
from trust_engine.models.report import Reports

logger = get_logger(__name__)


def analyze_pattern(
    reports: list[tuple[datetime, float | None]],
) -> tuple[int, float]:
    """
    Summarize (created_at, geographic_weight) pairs.

    Reports without a weight are counted as in-district.

    Returns:
        (max reports in any clock hour, share of low-weight reports)
    """
    if not reports:
        return 0, 0.0

    per_hour = Counter(
        created_at.replace(minute=0, second=0, microsecond=0) for created_at, _ in reports
    )
    low_weight = sum(
        1
        for _, weight in reports
        if weight is not None and weight < settings.BRIGADING_LOW_WEIGHT_THRESHOLD
    )
    return max(per_hour.values()), low_weight / len(reports)


def is_suspicious(max_per_hour: int, low_weight_ratio: float) -> bool:
    return (
        max_per_hour > settings.BRIGADING_MAX_REPORTS_PER_HOUR
        or low_weight_ratio > settings.BRIGADING_LOW_WEIGHT_RATIO
    )


async def find_open_flag(db: AsyncSession, candidate_id: int) -> int | None:
    result = await db.execute(
        select(ContentFlags.flag_id).where(
            ContentFlags.content_kind == TargetKind.CANDIDATE,  # type: ignore[arg-type]
            ContentFlags.content_id == candidate_id,  # type: ignore[arg-type]
            ContentFlags.flag_type == FlagType.POTENTIAL_BRIGADING,  # type: ignore[arg-type]
            ContentFlags.resolved == False,  # type: ignore[arg-type]  # noqa: E712
        )
    )
    return result.scalars().first()


async def check_candidate_brigading(
    db: AsyncSession, candidate_id: int, now: datetime | None = None
) -> ContentFlags | None:
    """
    Inspect recent reports against a candidate and flag a suspicious pattern.

    Returns:
        The new flag, or None if nothing was flagged (or a flag is already open).
    """
    now = now or utcnow()
    since = now - timedelta(hours=settings.BRIGADING_WINDOW_HOURS)

    result = await db.execute(
        select(Reports.created_at, Reports.geographic_weight).where(
            Reports.target_kind == TargetKind.CANDIDATE,  # type: ignore[arg-type]
            Reports.target_id == candidate_id,  # type: ignore[arg-type]
            Reports.created_at >= since,  # type: ignore[operator, arg-type]
        )
    )
    recent = [(row.created_at, row.geographic_weight) for row in result]

    max_per_hour, low_weight_ratio = analyze_pattern(recent)
    if not is_suspicious(max_per_hour, low_weight_ratio):
        return None

    if await find_open_flag(db, candidate_id) is not None:
        return None

    flag = ContentFlags(
        content_kind=TargetKind.CANDIDATE,
        content_id=candidate_id,
        flag_type=FlagType.POTENTIAL_BRIGADING,
        confidence=min(max_per_hour * 0.1, 1.0),
        source=FlagSource.AUTOMATED,
        details={
            "reason": (
                f"Suspicious reporting pattern detected: {max_per_hour} reports/hour, "
                f"{round(low_weight_ratio * 100)}% out-of-district"
            ),
            "max_reports_per_hour": max_per_hour,
            "low_weight_ratio": low_weight_ratio,
            "report_count": len(recent),
            "detected_at": now.isoformat(),
        },
    )
    try:
        async with db.begin_nested():
            db.add(flag)
    except IntegrityError:
        logger.info("brigading_flag_already_open", candidate_id=candidate_id)
        return None

    logger.warning(
        "potential_brigading_flagged",
        candidate_id=candidate_id,
        flag_id=flag.flag_id,
        max_reports_per_hour=max_per_hour,
        low_weight_ratio=low_weight_ratio,
    )
    return flag
