"""
Moderator dashboard endpoints: queue, stats, audit log, content flags,
sweep trigger and health.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.api.dependencies import (
    FlagFilterParams,
    LogFilterParams,
    PaginationParams,
    QueueFilterParams,
)
from trust_engine.config import settings
from trust_engine.core.auth import AdminUser, ModeratorUser
from trust_engine.core.database import get_db
from trust_engine.core.logging import get_logger
from trust_engine.schemas.moderation import (
    ContentFlagListResponse,
    ContentFlagResponse,
    ModerationHealthResponse,
    ModerationLogListResponse,
    ModerationLogResponse,
    StatsResponse,
    SweepResponse,
)
from trust_engine.schemas.report import ReportListResponse, ReportResponse
from trust_engine.services import audit_log, content_flags, report_queue, stats
from trust_engine.services.sanctions import expire_suspensions
from trust_engine.services.sweeper import get_sweeper

logger = get_logger(__name__)

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/queue", response_model=ReportListResponse)
async def list_queue(
    _moderator: ModeratorUser,
    filters: Annotated[QueueFilterParams, Depends()],
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportListResponse:
    """
    The moderation queue: highest priority first, oldest first within a
    priority. Lists open (PENDING and IN_REVIEW) reports unless a status
    is given.
    """
    total, reports = await report_queue.list_queue(
        db,
        status=filters.status,
        priority_filter=filters.priority,
        target_kind=filters.target_kind,
        offset=pagination.offset,
        limit=pagination.per_page,
    )
    return ReportListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[ReportResponse.model_validate(r) for r in reports],
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    _moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> StatsResponse:
    """Queue health counters."""
    snap = await stats.snapshot(db)
    return StatsResponse(**snap.as_dict())


@router.get("/logs", response_model=ModerationLogListResponse)
async def list_logs(
    _moderator: ModeratorUser,
    filters: Annotated[LogFilterParams, Depends()],
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ModerationLogListResponse:
    """Moderation log entries, newest first."""
    total, entries = await audit_log.list_logs(
        db,
        target_kind=filters.target_kind,
        target_id=filters.target_id,
        moderator_id=filters.moderator_id,
        action=filters.action,
        offset=pagination.offset,
        limit=pagination.per_page,
    )
    return ModerationLogListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[ModerationLogResponse.model_validate(e) for e in entries],
    )


@router.get("/flags", response_model=ContentFlagListResponse)
async def list_flags(
    _moderator: ModeratorUser,
    filters: Annotated[FlagFilterParams, Depends()],
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ContentFlagListResponse:
    """Content flags, newest first (open ones unless resolved=true)."""
    total, flags = await content_flags.list_flags(
        db,
        resolved=filters.resolved,
        flag_type=filters.flag_type,
        content_kind=filters.content_kind,
        offset=pagination.offset,
        limit=pagination.per_page,
    )
    return ContentFlagListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[ContentFlagResponse.model_validate(f) for f in flags],
    )


@router.post("/flags/{flag_id}/resolve", response_model=ContentFlagResponse)
async def resolve_flag(
    flag_id: Annotated[int, Path(ge=1)],
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ContentFlagResponse:
    """Clear a content flag. Idempotent."""
    assert moderator.user_id is not None
    flag = await content_flags.resolve_flag(db, flag_id, moderator.user_id)
    return ContentFlagResponse.model_validate(flag)


@router.post("/suspensions/sweep", response_model=SweepResponse)
async def run_sweep(
    admin: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SweepResponse:
    """Run one suspension expiry pass now. Admins only."""
    logger.info("manual_sweep_requested", admin_id=admin.user_id)
    result = await expire_suspensions(db)
    return SweepResponse(**result)


@router.get("/health", response_model=ModerationHealthResponse)
async def moderation_health() -> ModerationHealthResponse:
    """Sweep ownership and the last pass this process ran."""
    sweeper = get_sweeper()
    last_sweep = None
    if sweeper is not None and sweeper.last_result is not None:
        last_sweep = SweepResponse(**sweeper.last_result)
    return ModerationHealthResponse(
        status="ok",
        sweep_mode=settings.SUSPENSION_SWEEP_MODE,
        sweep_running=sweeper.running if sweeper else False,
        last_sweep_at=sweeper.last_run_at if sweeper else None,
        last_sweep=last_sweep,
    )
