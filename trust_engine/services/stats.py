"""Queue health counters for the moderation dashboard."""

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import ReportPriority, ReportStatus
from trust_engine.core.database import utcnow
from trust_engine.models.content_flag import ContentFlags
from trust_engine.models.report import Reports
from trust_engine.models.user import Users


@dataclass
class StatsSnapshot:
    pending_count: int
    urgent_pending_count: int
    resolved_last_24h: int
    active_flag_count: int
    suspended_user_count: int
    total_report_count: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


async def snapshot(db: AsyncSession, now: datetime | None = None) -> StatsSnapshot:
    """
    Read the dashboard counters.

    Each count is its own query; the numbers are close to, not exactly, a
    single point in time.
    """
    now = now or utcnow()

    async def count(model, *where) -> int:  # type: ignore[no-untyped-def]
        query = select(func.count()).select_from(model).where(*where)
        return int((await db.execute(query)).scalar_one())

    return StatsSnapshot(
        pending_count=await count(Reports, Reports.status == ReportStatus.PENDING),
        urgent_pending_count=await count(
            Reports,
            Reports.status == ReportStatus.PENDING,
            Reports.priority == ReportPriority.URGENT,
        ),
        resolved_last_24h=await count(
            Reports,
            Reports.status == ReportStatus.RESOLVED,
            Reports.moderated_at >= now - timedelta(hours=24),  # type: ignore[operator]
        ),
        active_flag_count=await count(ContentFlags, ContentFlags.resolved == False),  # noqa: E712
        suspended_user_count=await count(Users, Users.is_suspended == True),  # noqa: E712
        total_report_count=await count(Reports),
    )
