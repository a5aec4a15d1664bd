"""
SQLModel-based ContentFlag model

Flags are raised by automated checks (currently: brigading detection on
candidate reports) and cleared by a moderator. Unresolved flags feed the
dashboard's active flag count.

At most one unresolved flag of a type may exist per content item:
`open_slot` is 1 until the flag is resolved and NULL after, under a unique
index with the content and flag type (the same scheme as reports).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index
from sqlmodel import Column, Field, SQLModel

from trust_engine.config import FlagSource, FlagType, TargetKind
from trust_engine.core.database import utcnow
from trust_engine.models.report import OPEN_SLOT


class ContentFlags(SQLModel, table=True):
    """Automated or manual flags against a piece of content."""

    __tablename__ = "content_flags"

    __table_args__ = (
        Index("idx_content_flags_content", "content_kind", "content_id"),
        Index("idx_content_flags_type_resolved", "flag_type", "resolved"),
        Index("idx_content_flags_created_at", "created_at"),
        Index(
            "uq_content_flags_open",
            "content_kind",
            "content_id",
            "flag_type",
            "open_slot",
            unique=True,
        ),
    )

    flag_id: int | None = Field(default=None, primary_key=True)

    content_kind: TargetKind
    content_id: int

    flag_type: FlagType
    confidence: float = Field(default=0.0)
    source: FlagSource = Field(default=FlagSource.AUTOMATED)
    details: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))

    resolved: bool = Field(default=False)
    open_slot: int | None = Field(default=OPEN_SLOT)
    resolved_by: int | None = Field(default=None)
    resolved_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
