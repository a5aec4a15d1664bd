"""
SQLModel-based Appeal model

A user may appeal each suspension once. The unique index on suspension_id
makes that a storage guarantee.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlmodel import Field, SQLModel

from trust_engine.config import AppealStatus
from trust_engine.core.database import utcnow


class Appeals(SQLModel, table=True):
    """Suspension appeals."""

    __tablename__ = "appeals"

    __table_args__ = (
        Index("uq_appeals_suspension_id", "suspension_id", unique=True),
        Index("idx_appeals_user_id", "user_id"),
        Index("idx_appeals_status_created_at", "status", "created_at"),
    )

    appeal_id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    suspension_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey(
                "user_suspensions.suspension_id", ondelete="CASCADE", onupdate="CASCADE"
            ),
            nullable=False,
        )
    )

    reason: str = Field(sa_column=Column(Text, nullable=False))
    additional_info: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    status: AppealStatus = Field(default=AppealStatus.PENDING)
    review_notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    reviewed_by: int | None = Field(default=None)
    reviewed_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
