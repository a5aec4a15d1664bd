"""
Pydantic schemas for report intake and the moderation queue.

These schemas handle:
- Reporter submissions and the reporter's own report history
- Moderator queue listing, detail and claim
- Report resolution (including the idempotent already-resolved outcome)
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from trust_engine.config import (
    REPORT_ACTIONS,
    AiUrgency,
    ModerationAction,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
    settings,
)
from trust_engine.models.report import ReportBase
from trust_engine.schemas.base import UTCDatetime, UTCDatetimeOptional
from trust_engine.schemas.common import UserSummary

# Review window quoted to reporters on submission
ESTIMATED_REVIEW_TIME = "24-48 hours"


# ===== Submission Schemas =====


class ReportCreate(BaseModel):
    """Schema for submitting a new report."""

    target_kind: TargetKind = Field(..., description="POST, COMMENT, USER, MESSAGE or CANDIDATE")
    target_id: int = Field(..., ge=1, description="ID of the reported entity")
    reason: ReportReason = Field(..., description="Reason code")
    description: str | None = Field(
        None,
        max_length=settings.REPORT_DESCRIPTION_MAX_LENGTH,
        description="Optional explanation",
    )

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: str | None) -> str | None:
        """Trim whitespace; an all-blank description is treated as absent."""
        if v is None:
            return v
        return v.strip() or None


class ReportSubmitResponse(BaseModel):
    """Response returned to the reporter after a successful submission."""

    report_id: int
    status: ReportStatus
    priority: ReportPriority
    created_at: UTCDatetime
    estimated_review_time: str = ESTIMATED_REVIEW_TIME


class MyReportResponse(ReportBase):
    """
    A reporter's view of their own report.

    Moderator identity, notes and scoring signals are withheld.
    """

    report_id: int
    action_taken: ModerationAction | None = None
    created_at: UTCDatetime
    moderated_at: UTCDatetimeOptional = None

    model_config = {"from_attributes": True}


class MyReportListResponse(BaseModel):
    """Response schema for the reporter's own reports."""

    total: int
    page: int
    per_page: int
    items: list[MyReportResponse]


# ===== Moderator Schemas =====


class ReportResponse(ReportBase):
    """Moderator view of a report."""

    report_id: int
    reporter_id: int
    geographic_weight: float | None = None
    ai_urgency: AiUrgency | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime
    claimed_by: int | None = None
    claimed_at: UTCDatetimeOptional = None
    moderator_id: int | None = None
    moderated_at: UTCDatetimeOptional = None
    moderator_notes: str | None = None
    action_taken: ModerationAction | None = None

    model_config = {"from_attributes": True}


class ReportDetailResponse(ReportResponse):
    """Report with the reporter and the responsible user attached."""

    reporter: UserSummary | None = None
    target_exists: bool = True
    responsible_user: UserSummary | None = None


class ReportListResponse(BaseModel):
    """Response schema for listing the moderation queue."""

    total: int
    page: int
    per_page: int
    items: list[ReportResponse]


class ReportResolveRequest(BaseModel):
    """Schema for a moderator's decision on a report."""

    action: ModerationAction = Field(..., description="Action to execute")
    notes: str | None = Field(
        None,
        max_length=settings.MODERATOR_NOTES_MAX_LENGTH,
        description="Moderator notes (also used as the sanction reason)",
    )
    duration_days: int | None = Field(
        None,
        ge=1,
        le=365,
        description=f"Suspension length for USER_SUSPENDED (default: {settings.DEFAULT_SUSPENSION_DAYS})",
    )

    @field_validator("notes")
    @classmethod
    def sanitize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None

    @model_validator(mode="after")
    def validate_action(self) -> "ReportResolveRequest":
        """Only report actions are allowed, and duration only applies to suspensions."""
        if self.action not in REPORT_ACTIONS:
            raise ValueError(f"{self.action.value} cannot be used to resolve a report")
        if self.duration_days is not None and self.action != ModerationAction.USER_SUSPENDED:
            raise ValueError("duration_days is only valid with USER_SUSPENDED")
        return self


class ActionEffects(BaseModel):
    """Per-effect outcome of a dispatched action."""

    content: str
    user_sanction: str
    responsible_user_id: int | None = None
    warning_id: int | None = None
    suspension_id: int | None = None


class ReportResolveResponse(BaseModel):
    """
    Result of a resolve call.

    `already_resolved` is a success: the earlier resolution stands and nothing
    was executed again. `degraded` means the report is resolved but at least
    one sub-effect did not apply; `effects` says which.
    """

    report_id: int
    outcome: Literal["resolved", "already_resolved"]
    degraded: bool = False
    action_taken: ModerationAction | None = None
    effects: ActionEffects | None = None
    log_id: int | None = None
    report: ReportResponse | None = None
