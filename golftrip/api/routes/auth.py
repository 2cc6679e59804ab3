"""Authentication route handlers."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from golftrip.api.routes import limiter, AUTH_RATE_LIMIT
from golftrip.api.auth_dependencies import get_current_user, get_session_token
from golftrip.database.db import get_db_session
from golftrip.services import auth_service, email_service, user_service
from golftrip.models.schemas import (
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserResponse,
    MessageResponse,
)
from golftrip.utils.errors import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter()

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, we've sent you a link to reset your password."
)


def _set_session_cookie(response: Response, token: str) -> None:
    response.headers.append("set-cookie", auth_service.create_session_cookie(token))


@router.post("/api/auth/register", response_model=UserResponse, status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
):
    """Create an account (and its golfer) and log it in."""
    user = await user_service.register(
        session, payload.email, payload.password, payload.name, phone=payload.phone
    )
    token = await user_service.issue_session(session, user["id"])
    _set_session_cookie(response, token)
    return user


@router.post("/api/auth/login", response_model=UserResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
):
    """Check credentials and start a 30 day session."""
    user = await user_service.authenticate(session, payload.email, payload.password)
    token = await user_service.issue_session(session, user["id"])
    _set_session_cookie(response, token)
    logger.info(f"User {user['id']} logged in")
    return user


@router.post("/api/auth/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
):
    """End the current session. Safe to call without one."""
    token = get_session_token(request)
    if token:
        await user_service.revoke_session(session, token)
    response.headers.append("set-cookie", auth_service.clear_session_cookie())
    return MessageResponse(message="Logged out")


@router.get("/api/auth/me", response_model=UserResponse)
async def me(user: dict = Depends(get_current_user)):
    return user


@router.post("/api/auth/forgot-password", response_model=MessageResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Email a reset link. The response is the same whether or not the
    account exists.
    """
    user = await user_service.get_user_by_email(session, payload.email)
    if user is not None:
        token = await user_service.create_password_reset_token(session, payload.email)
        result = await asyncio.to_thread(
            email_service.send_password_reset_email, user["email"], user["name"], token
        )
        if not result.success:
            logger.warning(f"Password reset email for user {user['id']} not sent: {result.error}")
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.get("/api/auth/reset-password/{token}")
async def check_reset_token(token: str, session: AsyncSession = Depends(get_db_session)):
    user_id = await user_service.validate_password_reset_token(session, token, delete_if_expired=True)
    return {"valid": user_id is not None}


@router.post("/api/auth/reset-password/{token}", response_model=MessageResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def reset_password(
    request: Request,
    token: str,
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Set a new password; all existing sessions for the account end."""
    if not await user_service.reset_password(session, token, payload.password):
        raise ValidationError(
            "This password reset link is invalid or has expired",
            field_errors={"token": ["Invalid or expired reset link"]},
        )
    return MessageResponse(message="Your password has been reset. Please log in.")
