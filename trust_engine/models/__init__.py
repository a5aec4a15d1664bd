"""
SQLModel Models - Database schema models.

For modifications:
1. Edit the appropriate model file in trust_engine/models/
2. Create an Alembic migration to reflect the changes
3. Use Alembic to manage all schema changes going forward
"""

from trust_engine.models.appeal import Appeals

# Mirrors of content owned by other services
from trust_engine.models.content import Candidates, Comments, Messages, Posts
from trust_engine.models.content_flag import ContentFlags
from trust_engine.models.moderation_log import ModerationLogs

# Moderation models
from trust_engine.models.report import Reports
from trust_engine.models.user import Users
from trust_engine.models.user_suspension import UserSuspensions
from trust_engine.models.user_warning import UserWarnings

__all__ = [
    # External mirrors
    "Users",
    "Posts",
    "Comments",
    "Messages",
    "Candidates",
    # Moderation
    "Reports",
    "ModerationLogs",
    "UserWarnings",
    "UserSuspensions",
    "Appeals",
    "ContentFlags",
]
