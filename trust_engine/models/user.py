"""
SQLModel-based User model

Accounts are owned by the identity service; this table mirrors the fields the
moderation engine reads (existence, roles, contact address) and the one field
it writes: the denormalized `is_suspended` flag.

UserBase (shared public fields)
    ├─> Users (database table, adds internal fields)
    └─> UserSummary (API schema, defined in trust_engine/schemas)
"""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from trust_engine.core.database import utcnow


class UserBase(SQLModel):
    """
    Base model with shared public fields for Users.

    These fields are safe to expose via the API.
    """

    username: str = Field(max_length=30)


class Users(UserBase, table=True):
    """
    Database table for users with internal fields.

    Internal fields (should NOT be exposed via public API):
    - email: Privacy-sensitive, used for moderation notifications only
    - active: Account enabled by the identity service
    - is_moderator, is_admin: Access control
    - is_suspended: Cached projection of active full-restriction suspensions.
      Recomputed by the sanction lifecycle after every suspension change;
      never written anywhere else.
    """

    __tablename__ = "users"

    __table_args__ = (
        Index("username", "username", unique=True),
        Index("idx_users_is_suspended", "is_suspended"),
    )

    # Primary key
    user_id: int | None = Field(default=None, primary_key=True)

    # Contact info (privacy-sensitive)
    email: str = Field(max_length=120)

    # Internal status fields
    active: bool = Field(default=True)
    is_moderator: bool = Field(default=False)
    is_admin: bool = Field(default=False)
    is_suspended: bool = Field(default=False)

    date_joined: datetime = Field(default_factory=utcnow)

    # Note: Relationships are intentionally omitted.
    # Foreign keys are sufficient for queries, and omitting relationships avoids:
    # - Circular import issues
    # - Accidental eager loading
    # - Unwanted auto-serialization in API responses
