"""Contact form delivery."""

import secrets
from datetime import UTC, datetime

import aiosmtplib
import structlog

from tbsa.config import settings
from tbsa.core.errors import InternalError
from tbsa.core.mail import send_email
from tbsa.modules.contact.schemas import ContactRequest


logger = structlog.get_logger()


def generate_submission_id(now: datetime | None = None) -> str:
    """Return an identifier like ``CONTACT-20250101120000-1A2B3C``."""
    now = now or datetime.now(UTC)
    return f"CONTACT-{now:%Y%m%d%H%M%S}-{secrets.token_hex(3).upper()}"


def _admin_body(data: ContactRequest, submission_id: str) -> str:
    return "\n".join(
        [
            f"Submission: {submission_id}",
            f"Name: {data.first_name} {data.last_name}",
            f"Email: {data.email}",
            f"Phone: {data.phone or '-'}",
            f"Subject: {data.subject}",
            "",
            data.message,
        ]
    )


def _confirmation_body(data: ContactRequest, submission_id: str) -> str:
    return (
        f"Bună {data.first_name},\n\n"
        "Am primit mesajul tău și îți vom răspunde în curând.\n\n"
        f"Subiect: {data.subject}\n"
        f"Referință: {submission_id}\n\n"
        f"Echipa {settings.app_name}"
    )


async def submit_contact_form(data: ContactRequest) -> str:
    """Notify the contact inbox and send the sender a confirmation.

    Args:
        data: The validated form

    Returns:
        The submission id

    Raises:
        InternalError: If the SMTP server rejects a message
    """
    submission_id = generate_submission_id()
    logger.info(
        "contact_form_submitted",
        submission_id=submission_id,
        subject=data.subject,
    )

    # The sender is only confirmed once the inbox has the message
    try:
        await send_email(
            settings.contact_inbox,
            f"[{settings.app_name} Contact] {data.subject}",
            _admin_body(data, submission_id),
            reply_to=data.email,
        )
        await send_email(
            data.email,
            "Am primit mesajul tău",
            _confirmation_body(data, submission_id),
        )
    except aiosmtplib.SMTPException as e:
        logger.error(
            "contact_delivery_failed",
            submission_id=submission_id,
            error=str(e),
        )
        raise InternalError(
            "Message could not be delivered, please try again",
            error_code="CONTACT_DELIVERY_FAILED",
        ) from e

    return submission_id
