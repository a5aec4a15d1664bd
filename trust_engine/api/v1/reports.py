"""
Report endpoints.

Reporters submit reports and read their own; moderators read, claim and
resolve them.
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.api.dependencies import PaginationParams
from trust_engine.core.auth import CurrentUser, ModeratorUser
from trust_engine.core.database import get_db
from trust_engine.core.exceptions import AlreadyResolvedError
from trust_engine.core.logging import get_logger
from trust_engine.core.redis import get_redis
from trust_engine.models.user import Users
from trust_engine.schemas.common import UserSummary
from trust_engine.schemas.report import (
    ActionEffects,
    MyReportListResponse,
    MyReportResponse,
    ReportCreate,
    ReportDetailResponse,
    ReportResolveRequest,
    ReportResolveResponse,
    ReportResponse,
    ReportSubmitResponse,
)
from trust_engine.services import metrics, report_queue
from trust_engine.services.rate_limit import check_report_rate_limit
from trust_engine.services.signals import SignalProvider, get_signal_provider
from trust_engine.services.target_resolver import resolve_target
from trust_engine.tasks.queue import enqueue_report_resolved, enqueue_sanction_notices

logger = get_logger(__name__)

router = APIRouter(prefix="/moderation/reports", tags=["reports"])


@router.post("", response_model=ReportSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report_data: ReportCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    redis_client: Annotated[redis.Redis, Depends(get_redis)],  # type: ignore[type-arg]
    signal_provider: Annotated[SignalProvider, Depends(get_signal_provider)],
) -> ReportSubmitResponse:
    """
    Report a post, comment, user, message or candidate.

    One open report per target: re-reporting is allowed once the earlier
    report is resolved.

    Returns:
        201 with the queued report's priority and review estimate
        404 if the target does not exist
        409 if you already have an open report on it
        429 if you are submitting too quickly
    """
    assert current_user.user_id is not None
    await check_report_rate_limit(current_user.user_id, redis_client)

    signals = await signal_provider.signals_for(
        report_data.target_kind, report_data.target_id, report_data.reason
    )
    report = await report_queue.submit_report(
        db,
        reporter_id=current_user.user_id,
        target_kind=report_data.target_kind,
        target_id=report_data.target_id,
        reason=report_data.reason,
        description=report_data.description,
        signals=signals,
    )

    await metrics.record_report_submitted(redis_client, report.target_kind)

    assert report.report_id is not None
    return ReportSubmitResponse(
        report_id=report.report_id,
        status=report.status,
        priority=report.priority,
        created_at=report.created_at,
    )


@router.get("/mine", response_model=MyReportListResponse)
async def list_my_reports(
    current_user: CurrentUser,
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MyReportListResponse:
    """Your own reports, newest first."""
    assert current_user.user_id is not None
    total, reports = await report_queue.list_reporter_reports(
        db, current_user.user_id, offset=pagination.offset, limit=pagination.per_page
    )
    return MyReportListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[MyReportResponse.model_validate(r) for r in reports],
    )


@router.get("/{report_id}", response_model=ReportDetailResponse)
async def get_report(
    report_id: Annotated[int, Path(ge=1)],
    _moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportDetailResponse:
    """Report detail with reporter and responsible user. Moderators only."""
    report = await report_queue.get_report(db, report_id)
    reporter = await db.get(Users, report.reporter_id)
    target = await resolve_target(db, report.target_kind, report.target_id)

    responsible = None
    if target is not None and target.owner_id is not None:
        responsible = await db.get(Users, target.owner_id)

    detail = ReportDetailResponse.model_validate(report)
    detail.reporter = UserSummary.model_validate(reporter) if reporter else None
    detail.target_exists = target is not None
    detail.responsible_user = UserSummary.model_validate(responsible) if responsible else None
    return detail


@router.post("/{report_id}/claim", response_model=ReportResponse)
async def claim_report(
    report_id: Annotated[int, Path(ge=1)],
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportResponse:
    """
    Take a PENDING report into review.

    Returns 409 if it is resolved or another moderator holds it.
    """
    assert moderator.user_id is not None
    report = await report_queue.claim_report(db, report_id, moderator.user_id)
    return ReportResponse.model_validate(report)


@router.post("/{report_id}/resolve", response_model=ReportResolveResponse)
async def resolve_report(
    report_id: Annotated[int, Path(ge=1)],
    decision: ReportResolveRequest,
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    redis_client: Annotated[redis.Redis, Depends(get_redis)],  # type: ignore[type-arg]
) -> ReportResolveResponse:
    """
    Resolve a report and execute the chosen action.

    Safe to retry: a report that is already resolved returns 200 with
    outcome "already_resolved" and nothing runs a second time. If part of
    the action could not be applied the report is still resolved and the
    response is marked degraded, with per-effect results.

    Returns:
        200 resolved / already_resolved
        404 if the report does not exist
    """
    assert moderator.user_id is not None
    try:
        result = await report_queue.resolve_report(
            db,
            report_id=report_id,
            moderator_id=moderator.user_id,
            action=decision.action,
            notes=decision.notes,
            duration_days=decision.duration_days,
        )
    except AlreadyResolvedError:
        logger.info(
            "report_resolve_duplicate",
            report_id=report_id,
            moderator_id=moderator.user_id,
        )
        current = await report_queue.get_report(db, report_id)
        return ReportResolveResponse(
            report_id=report_id,
            outcome="already_resolved",
            action_taken=current.action_taken,
            report=ReportResponse.model_validate(current),
        )

    # All best-effort; the resolution has already committed
    await enqueue_report_resolved(report_id)
    await enqueue_sanction_notices(
        warning_id=result.dispatch.warning_id, suspension_id=result.dispatch.suspension_id
    )
    await metrics.record_action_taken(redis_client, decision.action)

    dispatch = result.dispatch
    return ReportResolveResponse(
        report_id=report_id,
        outcome="resolved",
        degraded=dispatch.degraded,
        action_taken=decision.action,
        effects=ActionEffects(
            content=dispatch.content,
            user_sanction=dispatch.user_sanction,
            responsible_user_id=dispatch.responsible_user_id,
            warning_id=dispatch.warning_id,
            suspension_id=dispatch.suspension_id,
        ),
        log_id=result.log_entry.log_id,
        report=ReportResponse.model_validate(result.report),
    )
