"""
Email service using SendGrid for transactional mail (password resets).
"""

import os
import logging
from dataclasses import dataclass
from html import escape
from typing import Optional
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content
from dotenv import load_dotenv

from golftrip.utils.constants import PASSWORD_RESET_EXPIRATION_MINUTES

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_FROM_EMAIL = "noreply@golftrip.local"


def get_bool_env(key: str, default: bool = True) -> bool:
    """
    Parse a boolean environment variable ("true", "1", "yes" are True).

    Args:
        key: Environment variable name
        default: Default value if the variable is not set
    """
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


def send_email(to: str, subject: str, html: str, from_email: Optional[str] = None) -> EmailResult:
    """
    Send an HTML email via SendGrid.

    Never raises: a missing API key or a provider failure comes back as an
    unsuccessful EmailResult.

    Args:
        to: Recipient address
        subject: Subject line
        html: HTML body
        from_email: Sender, defaults to ``SENDGRID_FROM_EMAIL``

    Returns:
        EmailResult
    """
    if not get_bool_env("ENABLE_EMAIL", default=True):
        logger.info("Email sending is disabled. Email to %s skipped.", to)
        return EmailResult(success=False, error="Email sending is disabled")

    api_key = os.getenv("SENDGRID_API_KEY")
    if not api_key:
        logger.warning("SENDGRID_API_KEY not configured. Email notification skipped.")
        return EmailResult(success=False, error="Email service not configured")

    try:
        message = Mail(
            from_email=Email(from_email or os.getenv("SENDGRID_FROM_EMAIL", DEFAULT_FROM_EMAIL)),
            to_emails=To(to),
            subject=subject,
            html_content=Content("text/html", html),
        )

        sg = SendGridAPIClient(api_key)
        response = sg.send(message)

        if 200 <= response.status_code < 300:
            message_id = response.headers.get("X-Message-Id") if response.headers else None
            logger.info(f"Email sent successfully to {to}")
            return EmailResult(success=True, message_id=message_id)

        logger.error(f"SendGrid returned status {response.status_code}: {response.body}")
        return EmailResult(success=False, error="Failed to send email")

    except Exception as e:
        logger.error(f"Failed to send email: {str(e)}")
        return EmailResult(success=False, error="Failed to send email")


def build_reset_link(token: str) -> str:
    app_url = os.getenv("APP_URL", "http://localhost:5173").rstrip("/")
    return f"{app_url}/reset-password/{token}"


def create_password_reset_email(reset_link: str, user_name: str) -> str:
    """HTML body for a password reset message."""
    hours = PASSWORD_RESET_EXPIRATION_MINUTES // 60
    name = escape(user_name)
    link = escape(reset_link, quote=True)
    return f"""<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #1f2937;">
    <h2>Reset your Golf Trip password</h2>
    <p>Hi {name},</p>
    <p>We received a request to reset the password for your Golf Trip account.</p>
    <p><a href="{link}" style="background:#15803d;color:#fff;padding:10px 18px;border-radius:6px;text-decoration:none;">Reset password</a></p>
    <p>Or paste this link into your browser:<br>{link}</p>
    <ul>
      <li>This link expires in {hours} hour{'s' if hours != 1 else ''}</li>
      <li>If you didn't request this reset, you can safely ignore this email</li>
    </ul>
  </body>
</html>
"""


def send_password_reset_email(to: str, user_name: str, token: str) -> EmailResult:
    return send_email(
        to=to,
        subject="Reset your Golf Trip password",
        html=create_password_reset_email(build_reset_link(token), user_name),
    )
