"""
SQLModel-based ModerationLog model for audit logging

This module defines the ModerationLogs table: the append-only audit trail
of every moderation action. One row is written per action execution,
including automatic ones (suspension expiry), whether or not every
sub-effect of the action succeeded. Rows are never updated or deleted.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index, Text
from sqlmodel import Column, Field, SQLModel

from trust_engine.config import ModerationAction, TargetKind
from trust_engine.core.database import utcnow


class ModerationLogs(SQLModel, table=True):
    """
    Audit log for moderation actions.

    It stores:
    - Who performed the action (NULL for system actions such as the sweep)
    - What was acted on (target kind + id)
    - The action code and a reason line
    - JSON metadata with context

    Metadata examples:
    - report resolution: {"report_id": 12, "original_reason": "SPAM",
      "effects": {"content": "succeeded", "user_sanction": "skipped"}}
    - suspension expiry: {"suspension_id": 7, "automatic": true}
    - appeal review: {"appeal_id": 3, "suspension_id": 7}
    """

    __tablename__ = "moderation_logs"

    __table_args__ = (
        Index("idx_moderation_logs_moderator_id", "moderator_id"),
        Index("idx_moderation_logs_target", "target_kind", "target_id"),
        Index("idx_moderation_logs_action", "action"),
        Index("idx_moderation_logs_created_at", "created_at"),
    )

    log_id: int | None = Field(default=None, primary_key=True)

    # Moderator who performed the action (no FK: the log outlives accounts)
    moderator_id: int | None = Field(default=None)

    target_kind: TargetKind
    target_id: int

    action: ModerationAction
    reason: str = Field(max_length=500)
    notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    details: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow)
