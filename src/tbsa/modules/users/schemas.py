"""Pydantic schemas for user operations."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tbsa.core.constants import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH


# ============================================================
# Password Validation
# ============================================================

# Password complexity rules: (regex pattern, human-readable name)
PASSWORD_COMPLEXITY_RULES: list[tuple[str, str]] = [
    (r"[A-Z]", "uppercase letter"),
    (r"[a-z]", "lowercase letter"),
    (r"\d", "digit"),
]

PHONE_PATTERN = r"^(\+40|0040|0)[0-9]{9}$"


def validate_password_complexity(password: str) -> str:
    """Validate password meets complexity requirements.

    Requirements:
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Args:
        password: The password to validate

    Returns:
        The validated password

    Raises:
        ValueError: If password doesn't meet requirements
    """
    missing = [
        name
        for pattern, name in PASSWORD_COMPLEXITY_RULES
        if not re.search(pattern, password)
    ]

    if missing:
        if len(missing) == 1:
            raise ValueError(f"Password must contain at least one {missing[0]}")
        raise ValueError(f"Password must contain at least one: {', '.join(missing)}")

    return password


# ============================================================
# User Schemas
# ============================================================


class UserBase(BaseModel):
    """Base schema for user data."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(BaseModel):
    """Schema for updating one's own profile."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)


class UserResponse(BaseModel):
    """Schema for user response data."""

    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    phone: str | None = None
    is_active: bool
    role: str | None = Field(None, validation_alias="role_name")
    organization_id: UUID | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CurrentUserResponse(BaseModel):
    """The authenticated user with their permission snapshot."""

    user: UserResponse
    role: str | None
    permissions: list[str]
    session_id: UUID


class UserListResponse(BaseModel):
    """Schema for listing users."""

    items: list[UserResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# Authentication Schemas
# ============================================================


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Schema for a successful login or refresh.

    Tokens travel in cookies; only their lifetime is returned.
    """

    user: UserResponse
    session_id: UUID
    expires_in: int = Field(..., description="Access token expiration in seconds")


class RefreshTokenRequest(BaseModel):
    """Refresh token for clients that cannot use cookies."""

    refresh_token: str | None = None


# ============================================================
# Registration Schemas
# ============================================================


class RegisterRequest(UserBase):
    """Schema for owner self-registration."""

    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )

    @field_validator("password")
    @classmethod
    def password_complexity(cls, v: str) -> str:
        """Validate password complexity."""
        return validate_password_complexity(v)


class OrganizationRegisterRequest(RegisterRequest):
    """Schema for registering an organization and its first administrator."""

    organization_name: str = Field(..., min_length=2, max_length=100)
    company_name: str | None = Field(None, max_length=100)
    subscription_plan: str | None = Field(
        None, description="Name of the subscription plan to start with"
    )
