"""
Shared/common Pydantic schemas used across multiple endpoints
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Simple acknowledgement payload."""

    message: str


class UserSummary(BaseModel):
    """
    Minimal user information for embedding in moderation responses.

    Never carries the email address or role flags.
    """

    user_id: int
    username: str
    is_suspended: bool = False

    model_config = {"from_attributes": True}
