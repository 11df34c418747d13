"""Outgoing mail over SMTP.

Delivery is skipped, with a warning, when no SMTP host is configured.
"""

from email.message import EmailMessage

import aiosmtplib
import structlog

from tbsa.config import settings


logger = structlog.get_logger()


def build_message(
    to_email: str,
    subject: str,
    body: str,
    reply_to: str | None = None,
) -> EmailMessage:
    """Build a plain-text message from the configured sender."""
    message = EmailMessage()
    message["From"] = f"{settings.smtp_from_name} <{settings.smtp_from_email}>"
    message["To"] = to_email
    message["Subject"] = subject
    if reply_to:
        message["Reply-To"] = reply_to
    message.set_content(body)
    return message


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    reply_to: str | None = None,
) -> bool:
    """Send a plain-text email.

    Args:
        to_email: Recipient address
        subject: Subject line
        body: Plain-text body
        reply_to: Optional Reply-To address

    Returns:
        True if the message was handed to the SMTP server, False if
        delivery is not configured

    Raises:
        aiosmtplib.SMTPException: If the server refuses the message
    """
    if not settings.smtp_host:
        logger.warning("email_delivery_skipped", to=to_email, subject=subject)
        return False

    await aiosmtplib.send(
        build_message(to_email, subject, body, reply_to),
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        start_tls=settings.smtp_use_tls,
    )
    logger.info("email_sent", to=to_email, subject=subject)
    return True
