"""Outbound email for recruiter password resets."""

import logging
import smtplib
from email.message import EmailMessage

from jobportal.core.config import Settings

logger = logging.getLogger("jobportal.mailer")

RESET_SUBJECT = "Reset your recruiter password"


def build_reset_message(settings: Settings, to_email: str, reset_url: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = RESET_SUBJECT
    message["From"] = settings.MAIL_FROM
    message["To"] = to_email
    message.set_content(
        "You requested a password reset.\n\n"
        f"Open this link to reset your password (expires in 1 hour):\n{reset_url}\n"
    )
    message.add_alternative(
        "<p>You requested a password reset.</p>"
        "<p>Click the link below to reset your password. This link expires in 1 hour.</p>"
        f'<p><a href="{reset_url}">Reset Password</a></p>',
        subtype="html",
    )
    return message


def send_password_reset(settings: Settings, to_email: str, reset_url: str) -> bool:
    """
    Email a reset link, or log it when SMTP is not configured.

    Returns True when a message was handed to the SMTP server. SMTP errors
    propagate to the caller.
    """
    if not settings.smtp_configured:
        logger.info("Password reset URL (SMTP not configured): %s", reset_url)
        return False

    message = build_reset_message(settings, to_email, reset_url)

    if settings.SMTP_SECURE:
        server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)

    with server:
        if not settings.SMTP_SECURE:
            server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASS)
        server.send_message(message)

    logger.info("Password reset email sent to %s", to_email)
    return True
