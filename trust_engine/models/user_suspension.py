"""
SQLModel-based UserSuspension model

Each row is one restriction placed on an account. Rows are created active
and only ever move to inactive, either through an explicit lift or through
the sweep once `ends_at` has passed. PERMANENT rows have no `ends_at` and
are never touched by the sweep.

Whether an account is blanket-suspended is a projection of these rows
(see Users.is_suspended); this table is the source of truth.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer
from sqlmodel import Field, SQLModel

from trust_engine.config import SuspensionType
from trust_engine.core.database import utcnow


class UserSuspensions(SQLModel, table=True):
    """
    Account restrictions.

    Fields:
    - suspension_id: Primary key
    - user_id: Restricted user
    - moderator_id: Moderator who issued it
    - type: TEMPORARY | PERMANENT | POSTING_RESTRICTED | COMMENTING_RESTRICTED
    - reason: Reason shown to user
    - is_active: Cleared by lift or expiry, never set again
    - ends_at: Expiry (required for TEMPORARY, NULL for PERMANENT)
    - appealed/appealed_at: Set when the user files an appeal
    """

    __tablename__ = "user_suspensions"

    __table_args__ = (
        Index("idx_user_suspensions_user_active", "user_id", "is_active"),
        Index("idx_user_suspensions_sweep", "is_active", "type", "ends_at"),
        Index("idx_user_suspensions_created_at", "created_at"),
    )

    suspension_id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    moderator_id: int | None = Field(default=None)

    type: SuspensionType
    reason: str = Field(max_length=500)

    is_active: bool = Field(default=True)
    starts_at: datetime = Field(default_factory=utcnow)
    ends_at: datetime | None = Field(default=None)

    # Set when the suspension is lifted or expires (lifted_by stays NULL on expiry)
    deactivated_at: datetime | None = Field(default=None)
    lifted_by: int | None = Field(default=None)

    appealed: bool = Field(default=False)
    appealed_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
