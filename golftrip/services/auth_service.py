"""
Authentication primitives: password hashing, token generation and the
session cookie format.
"""

import os
import secrets
from typing import Optional

import bcrypt

from golftrip.utils.constants import BCRYPT_ROUNDS, SESSION_COOKIE_NAME, SESSION_MAX_AGE_SECONDS


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash string (salt included)
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode(
        "utf-8"
    )


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plain text password against a stored bcrypt hash.

    Returns False (rather than raising) for malformed hashes.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_session_token() -> str:
    """Opaque, unguessable session token (256 bits of entropy)."""
    return secrets.token_urlsafe(32)


def generate_password_reset_token() -> str:
    return secrets.token_urlsafe(32)


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace. Case is preserved: emails match as stored."""
    return email.strip()


def get_session_token(cookie_header: Optional[str]) -> Optional[str]:
    """
    Extract the session token from a raw ``Cookie`` header.

    Args:
        cookie_header: e.g. ``"theme=dark; session=abc123"``

    Returns:
        Token string, or None if the header has no non-empty ``session`` cookie
    """
    if not cookie_header:
        return None

    prefix = f"{SESSION_COOKIE_NAME}="
    for part in cookie_header.split(";"):
        part = part.strip()
        if part.startswith(prefix):
            token = part[len(prefix):]
            return token or None
    return None


def _cookie_attributes(max_age: int) -> str:
    attributes = f"Path=/; HttpOnly; SameSite=Lax; Max-Age={max_age}"
    if os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true":
        attributes += "; Secure"
    return attributes


def create_session_cookie(token: str) -> str:
    """``Set-Cookie`` value issued at login."""
    return f"{SESSION_COOKIE_NAME}={token}; {_cookie_attributes(SESSION_MAX_AGE_SECONDS)}"


def clear_session_cookie() -> str:
    """``Set-Cookie`` value issued at logout."""
    return f"{SESSION_COOKIE_NAME}=; {_cookie_attributes(0)}"
