"""
Pydantic schemas for suspension appeals.
"""

from pydantic import BaseModel, Field, field_validator

from trust_engine.config import AppealStatus
from trust_engine.schemas.base import UTCDatetime, UTCDatetimeOptional


class AppealCreate(BaseModel):
    """Schema for appealing one of the caller's suspensions."""

    suspension_id: int = Field(..., ge=1)
    reason: str = Field(..., min_length=10, max_length=2000, description="Why the suspension should be lifted")
    additional_info: str | None = Field(None, max_length=5000)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("reason must be at least 10 characters")
        return v

    @field_validator("additional_info")
    @classmethod
    def strip_additional_info(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class AppealReviewRequest(BaseModel):
    """Schema for a moderator's appeal decision."""

    status: AppealStatus = Field(..., description="APPROVED or DENIED")
    review_notes: str | None = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def validate_decision(cls, v: AppealStatus) -> AppealStatus:
        if v == AppealStatus.PENDING:
            raise ValueError("status must be APPROVED or DENIED")
        return v


class AppealResponse(BaseModel):
    """Response schema for an appeal."""

    appeal_id: int
    user_id: int
    suspension_id: int
    reason: str
    additional_info: str | None = None
    status: AppealStatus
    review_notes: str | None = None
    reviewed_by: int | None = None
    reviewed_at: UTCDatetimeOptional = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class AppealListResponse(BaseModel):
    """Response schema for listing appeals."""

    total: int
    page: int
    per_page: int
    items: list[AppealResponse]
