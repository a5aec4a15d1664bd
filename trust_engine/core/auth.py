"""
Authentication dependencies for FastAPI route protection.

This module provides dependency functions for:
- Extracting and verifying the access token (bearer header or cookie)
- Loading the current user from the database
- Requiring the moderator or admin role
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trust_engine.core.database import get_db
from trust_engine.core.logging import set_actor_context
from trust_engine.core.security import verify_access_token
from trust_engine.models.user import Users

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> int:
    """
    Extract and verify the JWT access token.

    The Authorization header wins over the access_token cookie when both
    are present.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or expired
    """
    token = credentials.credentials if credentials else access_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = verify_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_actor_context(user_id)
    return user_id


async def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Users:
    """
    Load the current user from the database.

    Raises:
        HTTPException: 401 if the user is unknown or inactive
    """
    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    set_actor_context(user.user_id, actor_role(user))
    return user


def actor_role(user: Users) -> str:
    if user.is_admin:
        return "admin"
    if user.is_moderator:
        return "moderator"
    return "user"


async def require_moderator(
    current_user: Annotated[Users, Depends(get_current_user)],
) -> Users:
    """
    Require the moderator role (admins qualify).

    Raises:
        HTTPException: 403 if the user is neither moderator nor admin
    """
    if not (current_user.is_moderator or current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Moderator access required",
        )
    return current_user


async def require_admin(
    current_user: Annotated[Users, Depends(get_current_user)],
) -> Users:
    """
    Require the admin role.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


CurrentUser = Annotated[Users, Depends(get_current_user)]
ModeratorUser = Annotated[Users, Depends(require_moderator)]
AdminUser = Annotated[Users, Depends(require_admin)]
