"""
Suspension appeal endpoints.

Users appeal their own suspensions; moderators work the appeal queue.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.api.dependencies import AppealFilterParams, PaginationParams
from trust_engine.core.auth import CurrentUser, ModeratorUser
from trust_engine.core.database import get_db
from trust_engine.schemas.appeal import (
    AppealCreate,
    AppealListResponse,
    AppealResponse,
    AppealReviewRequest,
)
from trust_engine.services import appeals
from trust_engine.tasks.queue import enqueue_appeal_reviewed

router = APIRouter(prefix="/moderation/appeals", tags=["appeals"])


@router.post("", response_model=AppealResponse, status_code=status.HTTP_201_CREATED)
async def submit_appeal(
    appeal_data: AppealCreate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppealResponse:
    """
    Appeal one of your active suspensions.

    Returns:
        201 with the pending appeal
        404 if the suspension is not yours or does not exist
        409 if it has already been appealed
        400 if it is no longer active
        429 if you have appealed too often recently
    """
    assert current_user.user_id is not None
    appeal = await appeals.submit_appeal(
        db,
        user_id=current_user.user_id,
        suspension_id=appeal_data.suspension_id,
        reason=appeal_data.reason,
        additional_info=appeal_data.additional_info,
    )
    return AppealResponse.model_validate(appeal)


@router.get("/mine", response_model=AppealListResponse)
async def list_my_appeals(
    current_user: CurrentUser,
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppealListResponse:
    """Your own appeals, newest first."""
    assert current_user.user_id is not None
    total, items = await appeals.list_user_appeals(
        db, current_user.user_id, offset=pagination.offset, limit=pagination.per_page
    )
    return AppealListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[AppealResponse.model_validate(a) for a in items],
    )


@router.get("", response_model=AppealListResponse)
async def list_appeals(
    _moderator: ModeratorUser,
    filters: Annotated[AppealFilterParams, Depends()],
    pagination: Annotated[PaginationParams, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppealListResponse:
    """Appeal queue, oldest first. Defaults to PENDING appeals."""
    total, items = await appeals.list_appeals(
        db, status=filters.status, offset=pagination.offset, limit=pagination.per_page
    )
    return AppealListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        items=[AppealResponse.model_validate(a) for a in items],
    )


@router.get("/{appeal_id}", response_model=AppealResponse)
async def get_appeal(
    appeal_id: Annotated[int, Path(ge=1)],
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppealResponse:
    """
    One appeal. Visible to the user who filed it and to moderators.

    Returns:
        403 if the appeal belongs to someone else
        404 if it does not exist
    """
    appeal = await appeals.get_appeal(db, appeal_id)
    if appeal.user_id != current_user.user_id and not (
        current_user.is_moderator or current_user.is_admin
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view your own appeals",
        )
    return AppealResponse.model_validate(appeal)


@router.post("/{appeal_id}/review", response_model=AppealResponse)
async def review_appeal(
    appeal_id: Annotated[int, Path(ge=1)],
    review: AppealReviewRequest,
    moderator: ModeratorUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AppealResponse:
    """
    Approve or deny a pending appeal. Approval lifts the suspension.

    Returns 409 if the appeal was already decided.
    """
    assert moderator.user_id is not None
    appeal = await appeals.review_appeal(
        db,
        appeal_id=appeal_id,
        moderator_id=moderator.user_id,
        decision=review.status,
        review_notes=review.review_notes,
    )
    await enqueue_appeal_reviewed(appeal_id)
    return AppealResponse.model_validate(appeal)
