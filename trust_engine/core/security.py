"""
Access token handling.

Accounts and logins belong to the identity service; this module only
verifies the HS256 access tokens it issues. `create_access_token` mints
tokens with the same claims for tests and operator tooling.
"""

from datetime import UTC, datetime, timedelta

import jwt

from trust_engine.config import settings


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: The user ID to encode in the token
        expires_delta: Optional custom expiration time (defaults to settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    expire = datetime.now(UTC) + expires_delta

    payload = {
        "sub": str(user_id),  # "sub" (subject) is standard JWT claim
        "exp": expire,  # "exp" (expiration) is standard JWT claim
        "type": "access",  # Custom claim to distinguish token types
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> int | None:
    """
    Verify and decode a JWT access token.

    Args:
        token: The JWT token to verify

    Returns:
        User ID if token is valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": True, "verify_signature": True},
        )

        if payload.get("type") != "access":
            return None

        user_id: str | None = payload.get("sub")
        if user_id is None:
            return None

        return int(user_id)

    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        # Bad signature, malformed token, missing claims
        return None
    except (ValueError, TypeError):
        # Non-numeric subject
        return None
