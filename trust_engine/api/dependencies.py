"""
Common query parameter models for API endpoints.

These Pydantic models are used with FastAPI's Depends() to provide reusable
query parameter sets, reducing code duplication across routes.
"""

from pydantic import BaseModel, Field, computed_field

from trust_engine.config import (
    AppealStatus,
    FlagType,
    ModerationAction,
    ReportPriority,
    ReportStatus,
    TargetKind,
    settings,
)


class PaginationParams(BaseModel):
    """Common pagination query parameters. Pages never exceed MAX_PAGE_SIZE."""

    page: int = Field(default=1, ge=1, description="Page number")
    per_page: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def offset(self) -> int:
        """Calculate offset from page and per_page."""
        return (self.page - 1) * self.per_page


class QueueFilterParams(BaseModel):
    """Moderation queue filters. Without a status only open reports are listed."""

    status: ReportStatus | None = Field(default=None, description="Report status")
    priority: ReportPriority | None = Field(default=None, description="Priority tier")
    target_kind: TargetKind | None = Field(default=None, description="Target kind")


class LogFilterParams(BaseModel):
    """Moderation log filters."""

    target_kind: TargetKind | None = None
    target_id: int | None = Field(default=None, ge=1)
    moderator_id: int | None = Field(default=None, ge=1)
    action: ModerationAction | None = None


class FlagFilterParams(BaseModel):
    """Content flag filters."""

    resolved: bool = Field(default=False, description="Show resolved flags instead of open ones")
    flag_type: FlagType | None = None
    content_kind: TargetKind | None = None


class AppealFilterParams(BaseModel):
    """Appeal queue filters."""

    status: AppealStatus | None = Field(default=AppealStatus.PENDING)
