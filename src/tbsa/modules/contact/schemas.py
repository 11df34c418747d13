"""Contact form schemas."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


NAME_PATTERN = r"^[a-zA-ZăâîșțĂÂÎȘȚşţŞŢ\s-]+$"
# Header values cannot carry control characters
SUBJECT_PATTERN = r"^[^\x00-\x1f\x7f]+$"
PHONE_PATTERN = re.compile(r"^(\+40|0040|0)[0-9]{9}$")


class ContactRequest(BaseModel):
    """A message sent from the public contact form.

    Accepts camelCase keys (``firstName``) as well as snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    email: EmailStr
    phone: str | None = None
    subject: str = Field(..., min_length=5, max_length=100, pattern=SUBJECT_PATTERN)
    message: str = Field(..., min_length=20, max_length=1000)

    @field_validator("first_name", "last_name", "subject", "message", mode="before")
    @classmethod
    def strip_whitespace(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if not 5 <= len(v) <= 100:
            raise ValueError("Email must be between 5 and 100 characters")
        return v.lower()

    @field_validator("phone")
    @classmethod
    def romanian_phone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        compact = re.sub(r"\s", "", v)
        if not compact:
            return None
        if not PHONE_PATTERN.match(compact):
            raise ValueError("Phone number must be a valid Romanian number")
        return compact


class ContactResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    submission_id: str
