"""Outbound email over SMTP (password reset links)."""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request"


class EmailNotConfiguredError(Exception):
    """Raised when an email must be sent but SMTP_HOST is not set."""


class EmailSendError(Exception):
    """Raised when the SMTP server rejects or cannot deliver the message."""

    def __init__(self, message: str, recipient: str) -> None:
        self.message = message
        self.recipient = recipient
        super().__init__(message)


def build_reset_link(settings: Settings, token: str) -> str:
    """Absolute URL of the reset-password endpoint for token."""
    return f"{settings.PUBLIC_BASE_URL}{settings.API_V1_PREFIX}/auth/reset-password/{token}"


def render_reset_email(first_name: str | None, link: str, ttl_minutes: int) -> str:
    safe = html.escape(link, quote=True)
    name = html.escape(first_name or "User")
    return (
        f"<p>Hi {name},</p>"
        "<p>You requested a password reset.</p>"
        f'<p>Click <a href="{safe}">here</a> to reset your password.</p>'
        f"<p>This link expires in {ttl_minutes} minutes. "
        "If you did not request a reset, you can ignore this email.</p>"
    )


def send_email(settings: Settings, to: str, subject: str, html_body: str) -> None:
    """
    Send one HTML email.

    Raises EmailNotConfiguredError if SMTP is not configured and EmailSendError
    on any SMTP or network failure.
    """
    if not settings.smtp_configured:
        raise EmailNotConfiguredError("SMTP_HOST is not configured")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM or settings.SMTP_USER or "no-reply@localhost"
    msg["To"] = to
    msg.set_content("This message requires an HTML capable email client.")
    msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SEC
        ) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD is not None:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD.get_secret_value())
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Email could not be sent to %s: %s", to, e)
        raise EmailSendError("Email could not be sent", recipient=to) from e
    logger.info("Email sent", extra={"recipient": to, "subject": subject})


def send_password_reset_email(settings: Settings, to: str, first_name: str | None, token: str) -> str:
    """Email the reset link for token to the user; returns the link."""
    link = build_reset_link(settings, token)
    send_email(
        settings,
        to,
        RESET_SUBJECT,
        render_reset_email(first_name, link, settings.RESET_TOKEN_TTL_MINUTES),
    )
    return link
