"""
Authentication dependencies for FastAPI routes.

Every read-only route depends on :func:`get_current_user`; every mutating
route on golfers, foursomes, champions, photos or other users depends on
:func:`require_admin`.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.database.db import get_db_session
from golftrip.services import auth_service, user_service
from golftrip.utils.errors import AuthenticationRequired, Forbidden


def get_session_token(request: Request) -> Optional[str]:
    """Session token from the raw ``Cookie`` header."""
    return auth_service.get_session_token(request.headers.get("cookie"))


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """
    Dependency to get the current user from the session cookie.

    Returns:
        User dictionary

    Raises:
        AuthenticationRequired: No cookie, or the session is unknown or expired
            (the app answers with a redirect to the login page)
    """
    user = await user_service.resolve_session(session, get_session_token(request))
    if user is None:
        raise AuthenticationRequired("Please log in to continue")
    return user


def ensure_admin(user: dict) -> dict:
    """
    Raises:
        Forbidden: If the user is not an admin
    """
    if not user.get("is_admin"):
        raise Forbidden("Admin access required")
    return user


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Require an authenticated admin."""
    return ensure_admin(user)
