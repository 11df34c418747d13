"""Pydantic schemas for session management."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SessionResponse(BaseModel):
    """A live login session of the current user."""

    id: UUID
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime
    last_used_at: datetime | None = None
    expires_at: datetime
    is_current: bool = False

    model_config = ConfigDict(from_attributes=True)


class InvalidationResponse(BaseModel):
    """Result of invalidating one or more sessions."""

    invalidated_count: int
    current_session_invalidated: bool


class CleanupResponse(BaseModel):
    """Result of deleting dead session rows."""

    deleted: int
