"""
SQLModel-based Report models with inheritance for security

This module defines the Reports database model using SQLModel. The inheritance
structure is:

ReportBase (shared public fields)
    ├─> Reports (database table, adds workflow and resolution fields)
    └─> ReportCreate/ReportResponse (API schemas, defined in trust_engine/schemas)

One-open-report-per-target is enforced by the database, not by application
code: `open_slot` is 1 while a report is PENDING or IN_REVIEW and NULL once
it is RESOLVED. The unique index over (reporter_id, target_kind, target_id,
open_slot) therefore admits a single open row per reporter and target, while
NULLs (resolved rows) never collide, which allows re-reporting after
resolution. This works the same on MariaDB, PostgreSQL and SQLite.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlmodel import Field, SQLModel

from trust_engine.config import (
    AiUrgency,
    ModerationAction,
    ReportPriority,
    ReportReason,
    ReportStatus,
    TargetKind,
)
from trust_engine.core.database import utcnow

OPEN_SLOT = 1


class ReportBase(SQLModel):
    """
    Base model with shared public fields for Reports.

    These fields are safe to show to the reporter.
    """

    target_kind: TargetKind
    target_id: int

    reason: ReportReason
    description: str | None = Field(default=None, max_length=1000)

    status: ReportStatus = Field(default=ReportStatus.PENDING)
    priority: ReportPriority = Field(default=ReportPriority.MEDIUM)


class Reports(ReportBase, table=True):
    """
    Database table for abuse/content reports.

    Extends ReportBase with:
    - Primary key and reporter reference
    - External scoring signals (geographic weight, AI urgency)
    - Claim and resolution tracking
    - The open_slot uniqueness guard

    Reports are never deleted. RESOLVED is terminal.
    """

    __tablename__ = "reports"

    __table_args__ = (
        Index(
            "uq_reports_open_per_reporter_target",
            "reporter_id",
            "target_kind",
            "target_id",
            "open_slot",
            unique=True,
        ),
        Index("idx_reports_target", "target_kind", "target_id"),
        Index("idx_reports_status_priority", "status", "priority"),
        Index("idx_reports_created_at", "created_at"),
        Index("idx_reports_moderated_at", "moderated_at"),
    )

    report_id: int | None = Field(default=None, primary_key=True)

    reporter_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )

    # 1 while open, NULL once resolved (see module docstring)
    open_slot: int | None = Field(default=OPEN_SLOT)

    # Signals supplied by the external scoring collaborator
    geographic_weight: float | None = Field(default=None)
    ai_urgency: AiUrgency | None = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Claim tracking (PENDING -> IN_REVIEW)
    claimed_by: int | None = Field(default=None)
    claimed_at: datetime | None = Field(default=None)

    # Resolution (set exactly once, together with status=RESOLVED)
    moderator_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="SET NULL", onupdate="CASCADE"),
            nullable=True,
        ),
    )
    moderated_at: datetime | None = Field(default=None)
    moderator_notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    action_taken: ModerationAction | None = Field(default=None)

    # Note: Relationships are intentionally omitted.
    # Foreign keys are sufficient for queries, and omitting relationships avoids:
    # - Circular import issues
    # - Accidental eager loading
    # - Unwanted auto-serialization in API responses
