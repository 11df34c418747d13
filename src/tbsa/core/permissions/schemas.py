"""Pydantic schemas for role and permission administration."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tbsa.core.constants import MAX_DESCRIPTION_LENGTH
from tbsa.core.permissions.codes import parse_permission


class PermissionResponse(BaseModel):
    id: UUID
    code: str
    resource: str
    action: str
    scope: str | None = None
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleResponse(BaseModel):
    """A role with its permission codes and how many users hold it."""

    id: UUID
    name: str
    description: str | None = None
    is_system: bool
    permissions: list[str]
    user_count: int = 0


class RoleCreate(BaseModel):
    """Schema for creating a custom role."""

    name: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]{1,49}$")
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    permissions: list[str] = Field(default_factory=list)

    @field_validator("permissions")
    @classmethod
    def well_formed_codes(cls, v: list[str]) -> list[str]:
        for code in v:
            parse_permission(code)
        return sorted(set(v))


class RoleAssignment(BaseModel):
    role: str = Field(..., min_length=1, max_length=100)


class RoleAssignmentResponse(BaseModel):
    """Outcome of a role change; the user's sessions are revoked."""

    user_id: UUID
    role: str
    invalidated_sessions: int
