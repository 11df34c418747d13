"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class TokenData(BaseModel):
    """Data extracted from a JWT access token.

    Attributes:
        user_id: The user's UUID
        session_id: The session that issued the token
        role: Role name at issue time
        permissions: Permission codes at issue time
        organization_id: The user's organization at issue time
        exp: Token expiration time
        type: Token type
    """

    user_id: UUID
    session_id: UUID
    role: str | None = None
    permissions: list[str] = []
    organization_id: UUID | None = None
    exp: datetime
    type: str = "access"


class TokenPair(BaseModel):
    """A pair of access and refresh tokens.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Long-lived token for getting new access tokens
        session_id: The session both tokens belong to
        expires_in: Access token expiration in seconds
    """

    access_token: str
    refresh_token: str
    session_id: UUID
    expires_in: int
