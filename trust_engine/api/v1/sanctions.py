"""
Manual sanction endpoints: warnings, suspensions, lifts and account status.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.config import ModerationAction, SuspensionType, TargetKind
from trust_engine.core.auth import CurrentUser, ModeratorUser
from trust_engine.core.database import get_db
from trust_engine.schemas.moderation import (
    SuspensionCreate,
    SuspensionLiftRequest,
    SuspensionLiftResponse,
    SuspensionListResponse,
    SuspensionResponse,
    SuspensionStatusResponse,
    WarningCreate,
    WarningIssuedResponse,
    WarningListResponse,
    WarningResponse,
)
from trust_engine.services import sanctions
from trust_engine.services.audit_log import record_action
from trust_engine.tasks.queue import enqueue_sanction_notices

router = APIRouter(prefix="/moderation", tags=["sanctions"])


@router.post(
    "/users/{user_id}/warnings",
    response_model=WarningIssuedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def warn_user(
    user_id: Annotated[int, Path(ge=1)],
    warning_data: WarningCreate,
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WarningIssuedResponse:
    """
    Warn a user. A FINAL warning also suspends them for the default duration.
    """
    issued = await sanctions.create_warning(
        db,
        user_id=user_id,
        moderator_id=moderator.user_id,
        severity=warning_data.severity,
        reason=warning_data.reason,
        notes=warning_data.notes,
    )
    details: dict[str, Any] = {"severity": warning_data.severity.value}
    if issued.suspension is not None:
        details["suspension_id"] = issued.suspension.suspension_id
    await record_action(
        db,
        moderator_id=moderator.user_id,
        target_kind=TargetKind.USER,
        target_id=user_id,
        action=ModerationAction.USER_WARNED,
        reason=warning_data.reason,
        notes=warning_data.notes,
        details=details,
    )
    await db.commit()
    await enqueue_sanction_notices(
        warning_id=issued.warning.warning_id,
        suspension_id=issued.suspension.suspension_id if issued.suspension else None,
    )

    response = WarningIssuedResponse.model_validate(issued.warning)
    response.suspension_id = issued.suspension.suspension_id if issued.suspension else None
    return response


@router.get("/users/{user_id}/warnings", response_model=WarningListResponse)
async def list_user_warnings(
    user_id: Annotated[int, Path(ge=1)],
    _moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WarningListResponse:
    """A user's warnings, newest first."""
    total, warnings = await sanctions.list_warnings(db, user_id)
    return WarningListResponse(
        user_id=user_id,
        total=total,
        items=[WarningResponse.model_validate(w) for w in warnings],
    )


@router.post(
    "/users/{user_id}/suspensions",
    response_model=SuspensionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def suspend_user(
    user_id: Annotated[int, Path(ge=1)],
    suspension_data: SuspensionCreate,
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SuspensionResponse:
    """
    Suspend or restrict a user.

    TEMPORARY without ends_at/duration_days runs for the default duration;
    PERMANENT is a ban.
    """
    suspension = await sanctions.create_suspension(
        db,
        user_id=user_id,
        moderator_id=moderator.user_id,
        suspension_type=suspension_data.type,
        reason=suspension_data.reason,
        ends_at=suspension_data.ends_at,
        duration_days=suspension_data.duration_days,
    )
    action = (
        ModerationAction.USER_BANNED
        if suspension_data.type == SuspensionType.PERMANENT
        else ModerationAction.USER_SUSPENDED
    )
    await record_action(
        db,
        moderator_id=moderator.user_id,
        target_kind=TargetKind.USER,
        target_id=user_id,
        action=action,
        reason=suspension_data.reason,
        details={
            "suspension_id": suspension.suspension_id,
            "type": suspension_data.type.value,
            "ends_at": suspension.ends_at.isoformat() if suspension.ends_at else None,
        },
    )
    await db.commit()
    await db.refresh(suspension)
    await enqueue_sanction_notices(suspension_id=suspension.suspension_id)
    return SuspensionResponse.model_validate(suspension)


@router.get("/users/{user_id}/suspensions", response_model=SuspensionListResponse)
async def list_user_suspensions(
    user_id: Annotated[int, Path(ge=1)],
    _moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    active_only: Annotated[bool, Query(description="Only active suspensions")] = False,
) -> SuspensionListResponse:
    """A user's suspension history, newest first."""
    suspensions = await sanctions.list_suspensions(db, user_id, active_only=active_only)
    return SuspensionListResponse(
        user_id=user_id,
        total=len(suspensions),
        items=[SuspensionResponse.model_validate(s) for s in suspensions],
    )


@router.post("/suspensions/{suspension_id}/lift", response_model=SuspensionLiftResponse)
async def lift_suspension(
    suspension_id: Annotated[int, Path(ge=1)],
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    lift_data: SuspensionLiftRequest | None = None,
) -> SuspensionLiftResponse:
    """Lift one suspension. Lifting an inactive suspension changes nothing."""
    result = await sanctions.lift_suspension(
        db,
        suspension_id,
        moderator_id=moderator.user_id,
        reason=lift_data.reason if lift_data else None,
    )
    await db.commit()
    return SuspensionLiftResponse(
        user_id=result.user_id,
        lifted=len(result.lifted_ids),
        suspension_ids=result.lifted_ids,
        is_suspended=result.is_suspended,
    )


@router.post("/users/{user_id}/suspensions/lift", response_model=SuspensionLiftResponse)
async def lift_user_suspensions(
    user_id: Annotated[int, Path(ge=1)],
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    lift_data: SuspensionLiftRequest | None = None,
) -> SuspensionLiftResponse:
    """Lift every active suspension on a user."""
    result = await sanctions.lift_user_suspensions(
        db,
        user_id,
        moderator_id=moderator.user_id,
        reason=lift_data.reason if lift_data else None,
    )
    await db.commit()
    return SuspensionLiftResponse(
        user_id=result.user_id,
        lifted=len(result.lifted_ids),
        suspension_ids=result.lifted_ids,
        is_suspended=result.is_suspended,
    )


@router.get("/users/{user_id}/status", response_model=SuspensionStatusResponse)
async def get_user_status(
    user_id: Annotated[int, Path(ge=1)],
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SuspensionStatusResponse:
    """
    What the user can currently do. Users may check themselves; moderators
    may check anyone.
    """
    if current_user.user_id != user_id and not (current_user.is_moderator or current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view your own status",
        )

    result = await sanctions.get_suspension_status(db, user_id)
    return SuspensionStatusResponse(
        user_id=result.user_id,
        is_suspended=result.is_suspended,
        can_post=result.can_post,
        can_comment=result.can_comment,
        suspension=SuspensionResponse.model_validate(result.suspension)
        if result.suspension
        else None,
    )
