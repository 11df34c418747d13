"""Unit tests for the contact form schema and delivery."""

import re
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest
from pydantic import ValidationError

from tbsa.config import settings
from tbsa.core.errors import InternalError
from tbsa.modules.contact.schemas import ContactRequest
from tbsa.modules.contact.services import generate_submission_id, submit_contact_form


pytestmark = pytest.mark.unit


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "firstName": "Ștefan",
        "lastName": "Pop-Mureșan",
        "email": "Stefan@Example.com",
        "phone": "0722 123 456",
        "subject": "Intrebare abonament",
        "message": "As dori mai multe detalii despre planul Professional.",
    }
    payload.update(overrides)
    return payload


class TestContactRequest:
    """Tests for contact form validation."""

    def test_accepts_camel_case_and_normalizes(self):
        data = ContactRequest.model_validate(_payload())

        assert data.first_name == "Ștefan"
        assert data.email == "stefan@example.com"
        assert data.phone == "0722123456"

    def test_accepts_snake_case(self):
        data = ContactRequest.model_validate(
            {
                "first_name": "Ana",
                "last_name": "Marin",
                "email": "ana@example.com",
                "subject": "Salutare",
                "message": "Un mesaj suficient de lung pentru formular.",
            }
        )

        assert data.phone is None

    def test_strips_surrounding_whitespace(self):
        data = ContactRequest.model_validate(_payload(subject="   Intrebare   "))

        assert data.subject == "Intrebare"

    @pytest.mark.parametrize("phone", ["+40722123456", "0040722123456", "0722123456"])
    def test_romanian_phone_formats(self, phone: str):
        assert ContactRequest.model_validate(_payload(phone=phone)).phone == phone

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("phone", "12345"),
            ("phone", "+33612345678"),
            ("firstName", "R2D2"),
            ("firstName", "A"),
            ("subject", "Hey"),
            ("subject", "Intrebare\nBcc: spam@example.com"),
            ("subject", "Intrebare\r\nX-Priority: 1"),
            ("message", "Prea scurt"),
            ("email", "not-an-email"),
        ],
    )
    def test_rejects_invalid_fields(self, field: str, value: str):
        with pytest.raises(ValidationError):
            ContactRequest.model_validate(_payload(**{field: value}))


class TestSubmission:
    """Tests for delivering the contact form."""

    def test_submission_id_format(self):
        now = datetime(2026, 3, 1, 9, 5, 7, tzinfo=UTC)

        submission_id = generate_submission_id(now)

        assert re.fullmatch(r"CONTACT-20260301090507-[0-9A-F]{6}", submission_id)

    async def test_delivery_skipped_without_smtp(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "smtp_host", None)

        submission_id = await submit_contact_form(ContactRequest.model_validate(_payload()))

        assert submission_id.startswith("CONTACT-")

    async def test_sends_notification_and_confirmation(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")

        with patch("tbsa.core.mail.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            await submit_contact_form(ContactRequest.model_validate(_payload()))

        recipients = sorted(call.args[0]["To"] for call in mock_send.await_args_list)
        assert recipients == sorted([settings.contact_inbox, "stefan@example.com"])
        inbox_message = next(
            call.args[0]
            for call in mock_send.await_args_list
            if call.args[0]["To"] == settings.contact_inbox
        )
        assert inbox_message["Reply-To"] == "stefan@example.com"

    async def test_smtp_failure_becomes_internal_error(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")

        with (
            patch(
                "tbsa.core.mail.aiosmtplib.send",
                new_callable=AsyncMock,
                side_effect=aiosmtplib.SMTPException("refused"),
            ) as mock_send,
            pytest.raises(InternalError) as exc_info,
        ):
            await submit_contact_form(ContactRequest.model_validate(_payload()))

        assert exc_info.value.error_code == "CONTACT_DELIVERY_FAILED"
        # No confirmation goes out when the inbox refused the message
        assert mock_send.await_count == 1
        assert mock_send.await_args.args[0]["To"] == settings.contact_inbox
