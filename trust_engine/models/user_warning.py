"""
SQLModel-based UserWarning model

Warnings are read-only history: created by the action dispatcher or a
moderator, never mutated or deleted. Only storage and counting are
required of them; escalation (a FINAL warning also suspending) is handled
by the sanction lifecycle when the warning is issued.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlmodel import Field, SQLModel

from trust_engine.config import WarningSeverity
from trust_engine.core.database import utcnow


class UserWarnings(SQLModel, table=True):
    """Warnings issued to users."""

    __tablename__ = "user_warnings"

    __table_args__ = (
        Index("idx_user_warnings_user_id", "user_id"),
        Index("idx_user_warnings_severity", "severity"),
        Index("idx_user_warnings_created_at", "created_at"),
    )

    warning_id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    moderator_id: int | None = Field(default=None)

    severity: WarningSeverity
    reason: str = Field(max_length=500)
    notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=utcnow)
