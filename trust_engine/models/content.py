"""
Minimal mirrors of the reportable content owned by other services.

The moderation engine only needs to know that an entity exists, who is
responsible for it, and whether it is hidden from normal feeds. Everything
else about posts, comments, messages and candidates lives elsewhere.
"""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlmodel import Field, SQLModel

from trust_engine.core.database import utcnow


class Posts(SQLModel, table=True):
    """Feed posts. `author_id` is the responsible user."""

    __tablename__ = "posts"

    __table_args__ = (Index("idx_posts_author_id", "author_id"),)

    post_id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    is_hidden: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class Comments(SQLModel, table=True):
    """Comments on posts. `user_id` is the responsible user."""

    __tablename__ = "comments"

    __table_args__ = (
        Index("idx_comments_user_id", "user_id"),
        Index("idx_comments_post_id", "post_id"),
    )

    comment_id: int | None = Field(default=None, primary_key=True)
    post_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("posts.post_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=True,
        ),
    )
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    is_hidden: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class Messages(SQLModel, table=True):
    """Direct messages. `sender_id` is the responsible user."""

    __tablename__ = "messages"

    __table_args__ = (Index("idx_messages_sender_id", "sender_id"),)

    message_id: int | None = Field(default=None, primary_key=True)
    sender_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        )
    )
    recipient_id: int | None = Field(default=None)
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    is_hidden: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class Candidates(SQLModel, table=True):
    """
    Election candidates.

    A candidate profile may or may not be claimed by a platform account;
    `user_id` is the responsible user when it is.
    """

    __tablename__ = "candidates"

    candidate_id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    user_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.user_id", ondelete="SET NULL", onupdate="CASCADE"),
            nullable=True,
        ),
    )
    office_title: str | None = Field(default=None, max_length=200)
    district: str | None = Field(default=None, max_length=100)
