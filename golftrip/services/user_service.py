"""
User service layer: accounts, login sessions and password reset tokens.
"""

from typing import Optional, Dict, List
from datetime import datetime, timedelta
import logging
import os

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from golftrip.database.models import User, UserSession, PasswordResetToken, Golfer, Champion, Photo
from golftrip.services import auth_service
from golftrip.utils.constants import SESSION_DURATION_DAYS, PASSWORD_RESET_EXPIRATION_MINUTES
from golftrip.utils.datetime_utils import utcnow, ensure_utc
from golftrip.utils.errors import (
    ConflictError,
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NotFound,
)

logger = logging.getLogger(__name__)


def auto_provision_enabled() -> bool:
    """Whether login with an unknown email creates the account on the fly."""
    return os.getenv("AUTO_PROVISION_ON_LOGIN", "false").lower() in ("true", "1", "yes")


def _user_to_dict(user: User) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    The password hash is deliberately left out.
    """
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "phone": user.phone,
        "avatar": user.avatar,
        "is_admin": bool(user.is_admin),
        "golfer_id": user.golfer_id,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def _get_user(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[Dict]:
    """
    Get user by email address.

    Emails are matched exactly as stored (after trimming whitespace).
    """
    email = auth_service.normalize_email(email) if email else None
    if not email:
        return None
    result = await session.execute(select(User).where(User.email == email).limit(1))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def list_users(session: AsyncSession) -> List[Dict]:
    """All users, newest first."""
    result = await session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return [_user_to_dict(u) for u in result.scalars().all()]


async def _add_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str,
    is_admin: bool = False,
    phone: Optional[str] = None,
) -> User:
    """Insert a user and flush it without committing."""
    email = auth_service.normalize_email(email)
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateEmail("An account with this email already exists")

    user = User(
        email=email,
        password_hash=auth_service.hash_password(password),
        name=name.strip(),
        phone=phone or None,
        is_admin=is_admin,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await session.rollback()
        raise DuplicateEmail("An account with this email already exists")
    return user


async def create_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str,
    is_admin: bool = False,
    phone: Optional[str] = None,
) -> Dict:
    """
    Create a new user account.

    Args:
        session: Database session
        email: Login email (unique)
        password: Plain text password; only its bcrypt hash is stored
        name: Display name
        is_admin: Grant admin rights
        phone: Optional phone number

    Returns:
        User dictionary

    Raises:
        DuplicateEmail: If an account already uses this email
    """
    user = await _add_user(session, email, password, name, is_admin=is_admin, phone=phone)
    await session.commit()
    logger.info(f"Created user {user.id} (admin={is_admin})")
    return _user_to_dict(user)


async def register(
    session: AsyncSession, email: str, password: str, name: str, phone: Optional[str] = None
) -> Dict:
    """
    Self-registration: create a non-admin account and a golfer linked to it.

    Raises:
        DuplicateEmail: If an account already uses this email
    """
    user = await _add_user(session, email, password, name, is_admin=False, phone=phone)

    golfer = Golfer(name=user.name, email=user.email, phone=user.phone)
    session.add(golfer)
    await session.flush()

    user.golfer_id = golfer.id
    await session.commit()
    logger.info(f"Registered user {user.id} with golfer {golfer.id}")
    return _user_to_dict(user)


async def authenticate(session: AsyncSession, email: str, password: str) -> Dict:
    """
    Verify an email/password pair.

    An unknown email is rejected unless ``AUTO_PROVISION_ON_LOGIN`` is set,
    in which case the account is registered from the submitted credentials.

    Returns:
        User dictionary

    Raises:
        InvalidCredentials: Unknown email (without auto-provisioning) or wrong password
    """
    email = auth_service.normalize_email(email)
    result = await session.execute(select(User).where(User.email == email).limit(1))
    user = result.scalar_one_or_none()

    if user is None:
        if auto_provision_enabled():
            logger.warning("Auto-provisioning account on first login")
            return await register(session, email, password, name=email.split("@")[0])
        raise InvalidCredentials("Invalid email or password")

    if not auth_service.verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid email or password")

    return _user_to_dict(user)


async def update_profile(
    session: AsyncSession,
    user_id: int,
    name: str,
    phone: Optional[str] = None,
    avatar: Optional[str] = None,
) -> Dict:
    """Update the current user's own name, phone and avatar URL."""
    user = await _get_user(session, user_id)
    user.name = name.strip()
    user.phone = phone or None
    user.avatar = avatar or None
    await session.commit()
    return _user_to_dict(user)


async def update_user(
    session: AsyncSession,
    user_id: int,
    name: str,
    email: str,
    phone: Optional[str] = None,
    is_admin: bool = False,
    golfer_id: Optional[int] = None,
    create_new_golfer: bool = False,
    new_golfer_name: Optional[str] = None,
    new_golfer_phone: Optional[str] = None,
) -> Dict:
    """
    Admin edit of a user, including the golfer association.

    The association is, in priority order: a newly created golfer
    (``create_new_golfer``), an existing golfer (``golfer_id``), or none.

    Raises:
        NotFound: Unknown user or golfer
        DuplicateEmail: Email belongs to another user
        ConflictError: Golfer already linked to another user
    """
    user = await _get_user(session, user_id)
    email = auth_service.normalize_email(email)

    if email != user.email:
        conflict = await session.execute(
            select(User.id).where(User.email == email, User.id != user_id)
        )
        if conflict.scalar_one_or_none() is not None:
            raise DuplicateEmail(f"Email {email} is already in use by another user")

    user.name = name.strip()
    user.email = email
    user.phone = phone or None
    user.is_admin = is_admin

    if create_new_golfer:
        golfer = Golfer(name=new_golfer_name.strip(), email=email, phone=new_golfer_phone or None)
        session.add(golfer)
        await session.flush()
        user.golfer_id = golfer.id
    elif golfer_id is not None:
        golfer = await session.get(Golfer, golfer_id)
        if golfer is None:
            raise NotFound("Golfer not found")
        linked = await session.execute(
            select(User.id).where(User.golfer_id == golfer_id, User.id != user_id)
        )
        if linked.scalar_one_or_none() is not None:
            raise ConflictError(f"{golfer.name} is already linked to another user")
        user.golfer_id = golfer_id
    else:
        user.golfer_id = None

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("User update conflicts with an existing record")
    return _user_to_dict(user)


async def delete_user(session: AsyncSession, user_id: int, acting_user_id: int) -> None:
    """
    Delete a user and their sessions.

    Raises:
        NotFound: Unknown user
        Forbidden: Attempt to delete one's own account
        ConflictError: User created champions or photos
    """
    user = await _get_user(session, user_id)

    if user.id == acting_user_id:
        raise Forbidden("Cannot delete your own account")

    champions = await session.execute(
        select(func.count()).select_from(Champion).where(Champion.created_by == user_id)
    )
    photos = await session.execute(
        select(func.count()).select_from(Photo).where(Photo.created_by == user_id)
    )
    if champions.scalar_one() > 0 or photos.scalar_one() > 0:
        raise ConflictError("Cannot delete user. They have associated champions or photos.")

    await session.execute(delete(UserSession).where(UserSession.user_id == user_id))
    await session.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user_id))
    await session.delete(user)
    await session.commit()
    logger.info(f"Deleted user {user_id}")


async def has_admin(session: AsyncSession) -> bool:
    result = await session.execute(select(User.id).where(User.is_admin.is_(True)).limit(1))
    return result.scalar_one_or_none() is not None


# Login session functions


async def issue_session(session: AsyncSession, user_id: int) -> str:
    """
    Create a login session for a user.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        Opaque token to store in the ``session`` cookie
    """
    token = auth_service.generate_session_token()
    expires_at = utcnow() + timedelta(days=SESSION_DURATION_DAYS)
    session.add(UserSession(token=token, user_id=user_id, expires_at=expires_at))
    await session.commit()
    return token


async def resolve_session(
    session: AsyncSession, token: Optional[str], now: Optional[datetime] = None
) -> Optional[Dict]:
    """
    Look up the user behind a session token.

    Expired sessions are deleted on access; valid ones are not extended.

    Args:
        session: Database session
        token: Session token from the cookie
        now: Override of the current time

    Returns:
        User dictionary, or None if the token is unknown or expired
    """
    if not token:
        return None

    result = await session.execute(
        select(UserSession)
        .options(selectinload(UserSession.user))
        .where(UserSession.token == token)
    )
    user_session = result.scalar_one_or_none()
    if user_session is None:
        return None

    now = now or utcnow()
    if now >= ensure_utc(user_session.expires_at):
        await session.delete(user_session)
        await session.commit()
        return None

    return _user_to_dict(user_session.user)


async def revoke_session(session: AsyncSession, token: str) -> bool:
    """
    Delete a session (logout). No-op if it does not exist.

    Returns:
        True if a session was deleted
    """
    result = await session.execute(delete(UserSession).where(UserSession.token == token))
    await session.commit()
    return result.rowcount > 0


async def revoke_user_sessions(session: AsyncSession, user_id: int) -> int:
    """Delete every session of a user. Returns the number deleted."""
    result = await session.execute(delete(UserSession).where(UserSession.user_id == user_id))
    await session.commit()
    return result.rowcount


# Password reset token functions


async def create_password_reset_token(session: AsyncSession, email: str) -> Optional[str]:
    """
    Create a password reset token for the account with this email.

    Older tokens for the user are replaced.

    Returns:
        Token string, or None if no account uses the email
    """
    user = await get_user_by_email(session, email)
    if user is None:
        return None

    await session.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user["id"]))

    token = auth_service.generate_password_reset_token()
    expires_at = utcnow() + timedelta(minutes=PASSWORD_RESET_EXPIRATION_MINUTES)
    session.add(PasswordResetToken(token=token, user_id=user["id"], expires_at=expires_at))
    await session.commit()
    return token


async def validate_password_reset_token(
    session: AsyncSession, token: str, delete_if_expired: bool = False
) -> Optional[int]:
    """
    Check a reset token.

    Returns:
        Owning user ID if the token exists and has not expired, else None
    """
    result = await session.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == token)
    )
    reset_token = result.scalar_one_or_none()
    if reset_token is None:
        return None

    if utcnow() >= ensure_utc(reset_token.expires_at):
        if delete_if_expired:
            await session.delete(reset_token)
            await session.commit()
        return None

    return reset_token.user_id


async def reset_password(session: AsyncSession, token: str, new_password: str) -> bool:
    """
    Set a new password using a reset token.

    The token is consumed and the user's existing sessions are revoked.

    Returns:
        True on success, False for an unknown or expired token
    """
    user_id = await validate_password_reset_token(session, token, delete_if_expired=True)
    if user_id is None:
        return False

    user = await _get_user(session, user_id)
    user.password_hash = auth_service.hash_password(new_password)
    await session.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
    await session.execute(delete(UserSession).where(UserSession.user_id == user_id))
    await session.commit()
    logger.info(f"Password reset for user {user_id}")
    return True
