"""Pydantic schemas for invite codes."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tbsa.core.constants import INVITE_CODE_LENGTH, INVITE_CODE_MIN_INPUT_LENGTH
from tbsa.modules.invite_codes.models import InviteCodeStatus


class InviteCodeCreate(BaseModel):
    """Schema for generating an invite code for an apartment."""

    apartment_id: UUID
    expires_in_days: int | None = Field(
        None, ge=1, le=365, description="Defaults to the configured expiry"
    )


class InviteCodeRedeem(BaseModel):
    """Schema for redeeming an invite code.

    Input is trimmed and upper-cased before validation.
    """

    code: str = Field(
        ...,
        min_length=INVITE_CODE_MIN_INPUT_LENGTH,
        max_length=INVITE_CODE_LENGTH,
        pattern=r"^[A-Z0-9]+$",
    )

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class InviteCodeResponse(BaseModel):
    """Schema for invite code response data."""

    id: UUID
    code: str
    status: InviteCodeStatus
    apartment_id: UUID
    created_by_id: UUID | None = None
    used_by_id: UUID | None = None
    used_at: datetime | None = None
    expires_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RedeemResponse(BaseModel):
    """The apartment claimed by redeeming a code."""

    apartment_id: UUID
    apartment_number: str
    building_id: UUID
    building_name: str
