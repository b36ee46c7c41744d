"""
Email Transport

Delivers rendered HTML emails through one of:

1. The SMTP relay (STARTTLS submission) when SMTP_USER / SMTP_PASSWORD are set
2. Resend when RESEND_API_KEY is set
3. The application log, when neither is configured (local development)

Sending never raises: the outcome is returned as an EmailResult so callers
can record it in the email audit log.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


@dataclass
class EmailResult:
    """Outcome of a single send attempt."""

    success: bool
    message_id: str | None = None
    error: str | None = None


def _from_address() -> str:
    address = settings.email_from_address or settings.smtp_user or "noreply@localhost"
    return formataddr((settings.email_from_name, address))


def _send_smtp(to_email: str, subject: str, html_content: str) -> str:
    """Blocking SMTP submission; run in a worker thread."""
    message_id = make_msgid()

    msg = MIMEMultipart("alternative")
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg["Subject"] = subject
    msg["Message-ID"] = message_id
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
        server.starttls()
        server.login(settings.smtp_user, settings.smtp_password)
        server.sendmail(msg["From"], [to_email], msg.as_string())

    return message_id


def _send_resend(to_email: str, subject: str, html_content: str) -> str:
    resend.api_key = settings.resend_api_key
    params: resend.Emails.SendParams = {
        "from": _from_address(),
        "to": [to_email],
        "subject": subject,
        "html": html_content,
    }
    email = resend.Emails.send(params)
    return email["id"]


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> EmailResult:
    """
    Send an email through the configured transport.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        EmailResult with the provider message id, or the error text on failure
    """
    if settings.smtp_configured:
        sender = _send_smtp
    elif settings.resend_api_key:
        sender = _send_resend
    else:
        logger.warning("No email transport configured - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return EmailResult(success=True, message_id=None)

    try:
        # Blocking client calls run in the thread pool to keep the event loop free
        message_id = await asyncio.to_thread(sender, to_email, subject, html_content)
        logger.info(f"Email sent successfully to {to_email}, id: {message_id}")
        return EmailResult(success=True, message_id=message_id)
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return EmailResult(success=False, error=str(e))
