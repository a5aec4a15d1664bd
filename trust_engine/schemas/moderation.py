"""
Pydantic schemas for sanctions, the audit log, flags and dashboard stats.

These schemas handle:
- Manual warnings and suspensions
- Suspension lifts and the effective status of an account
- Moderation log browsing
- Content flags
- Queue health counters and sweep results
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from trust_engine.config import (
    FlagSource,
    FlagType,
    ModerationAction,
    SuspensionType,
    TargetKind,
    WarningSeverity,
)
from trust_engine.schemas.base import UTCDatetime, UTCDatetimeOptional

# ===== Warning Schemas =====


class WarningCreate(BaseModel):
    """Schema for issuing a warning to a user."""

    severity: WarningSeverity = Field(default=WarningSeverity.MODERATE)
    reason: str = Field(..., min_length=1, max_length=500, description="Reason shown to the user")
    notes: str | None = Field(None, max_length=2000, description="Internal notes")

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("reason cannot be blank")
        return v


class WarningResponse(BaseModel):
    """Response schema for a warning."""

    warning_id: int
    user_id: int
    moderator_id: int | None
    severity: WarningSeverity
    reason: str
    notes: str | None = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class WarningIssuedResponse(WarningResponse):
    """A newly issued warning, with the suspension a FINAL warning triggers."""

    suspension_id: int | None = None


class WarningListResponse(BaseModel):
    """Response schema for a user's warning history."""

    user_id: int
    total: int
    items: list[WarningResponse]


# ===== Suspension Schemas =====


class SuspensionCreate(BaseModel):
    """
    Schema for suspending a user.

    TEMPORARY suspensions take either `ends_at` or `duration_days`; with
    neither the default duration applies. PERMANENT suspensions never end.
    Partial restrictions may carry an end date or run until lifted.
    """

    type: SuspensionType = Field(default=SuspensionType.TEMPORARY)
    reason: str = Field(..., min_length=1, max_length=500, description="Reason shown to the user")
    ends_at: datetime | None = Field(None, description="When the suspension ends (UTC)")
    duration_days: int | None = Field(None, ge=1, le=365, description="Length in days")

    @field_validator("ends_at")
    @classmethod
    def normalize_ends_at(cls, v: datetime | None) -> datetime | None:
        """Store naive UTC; aware inputs are converted first."""
        if v is None or v.tzinfo is None:
            return v
        return v.astimezone(UTC).replace(tzinfo=None)

    @model_validator(mode="after")
    def validate_duration(self) -> "SuspensionCreate":
        if self.ends_at is not None and self.duration_days is not None:
            raise ValueError("Provide ends_at or duration_days, not both")
        if self.type == SuspensionType.PERMANENT and (
            self.ends_at is not None or self.duration_days is not None
        ):
            raise ValueError("PERMANENT suspensions cannot have an end date")
        return self


class SuspensionResponse(BaseModel):
    """Response schema for a suspension."""

    suspension_id: int
    user_id: int
    moderator_id: int | None
    type: SuspensionType
    reason: str
    is_active: bool
    starts_at: UTCDatetime
    ends_at: UTCDatetimeOptional = None
    deactivated_at: UTCDatetimeOptional = None
    lifted_by: int | None = None
    appealed: bool = False
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class SuspensionListResponse(BaseModel):
    """Response schema for a user's suspension history."""

    user_id: int
    total: int
    items: list[SuspensionResponse]


class SuspensionLiftRequest(BaseModel):
    """Optional reason recorded when lifting."""

    reason: str | None = Field(None, max_length=500)


class SuspensionLiftResponse(BaseModel):
    """Result of a lift. `lifted` is 0 when nothing was active."""

    user_id: int
    lifted: int
    suspension_ids: list[int]
    is_suspended: bool


class SuspensionStatusResponse(BaseModel):
    """Effective restriction state of an account."""

    user_id: int
    is_suspended: bool
    can_post: bool
    can_comment: bool
    suspension: SuspensionResponse | None = None


class SweepResponse(BaseModel):
    """Counts from one sweep pass."""

    processed: int
    expired: int
    errors: int


# ===== Moderation Log Schemas =====


class ModerationLogResponse(BaseModel):
    """Response schema for a moderation log entry."""

    log_id: int
    moderator_id: int | None
    target_kind: TargetKind
    target_id: int
    action: ModerationAction
    reason: str
    notes: str | None = None
    details: dict[str, Any] | None = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class ModerationLogListResponse(BaseModel):
    """Response schema for listing moderation log entries."""

    total: int
    page: int
    per_page: int
    items: list[ModerationLogResponse]


# ===== Content Flag Schemas =====


class ContentFlagResponse(BaseModel):
    """Response schema for a content flag."""

    flag_id: int
    content_kind: TargetKind
    content_id: int
    flag_type: FlagType
    confidence: float
    source: FlagSource
    details: dict[str, Any] | None = None
    resolved: bool
    resolved_by: int | None = None
    resolved_at: UTCDatetimeOptional = None
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class ContentFlagListResponse(BaseModel):
    """Response schema for listing content flags."""

    total: int
    page: int
    per_page: int
    items: list[ContentFlagResponse]


# ===== Dashboard Schemas =====


class StatsResponse(BaseModel):
    """Queue health counters."""

    pending_count: int
    urgent_pending_count: int
    resolved_last_24h: int
    active_flag_count: int
    suspended_user_count: int
    total_report_count: int


class ModerationHealthResponse(BaseModel):
    """Moderation subsystem health."""

    status: str
    sweep_mode: str
    sweep_running: bool
    last_sweep_at: UTCDatetimeOptional = None
    last_sweep: SweepResponse | None = None
