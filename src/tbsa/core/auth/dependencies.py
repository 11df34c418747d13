"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Reading the access token from the auth cookie or a Bearer header
- Verifying that the token's session is still live
- Getting the current authenticated user and its permission snapshot
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tbsa.api.dependencies import DBSession
from tbsa.config import settings
from tbsa.core.auth.backend import decode_token
from tbsa.core.auth.schemas import TokenData
from tbsa.core.errors import ForbiddenError, UnauthorizedError
from tbsa.core.permissions.checker import snapshot_allows


if TYPE_CHECKING:
    from tbsa.modules.users.models import User


# HTTP Bearer token security scheme, for non-browser clients
bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = None,
) -> str | None:
    """Return the raw access token, preferring the auth cookie."""
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    if credentials:
        return credentials.credentials
    return None


async def get_token_data(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate the access token of the request.

    Args:
        request: The incoming request
        credentials: Bearer token credentials, if any

    Returns:
        Decoded token data

    Raises:
        UnauthorizedError: If token is missing or invalid
    """
    token = extract_token(request, credentials)
    if not token:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="MISSING_TOKEN",
        )

    token_data = decode_token(token)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="INVALID_TOKEN",
        )

    if token_data.type != "access":
        raise UnauthorizedError(
            "Invalid token type",
            error_code="INVALID_TOKEN_TYPE",
        )

    return token_data


@dataclass
class AuthContext:
    """The authenticated user together with the token it presented.

    Authorization decisions use the permission snapshot embedded in the
    token, not the role currently stored for the user.
    """

    user: "User"
    token: TokenData

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def session_id(self) -> UUID:
        return self.token.session_id

    @property
    def role(self) -> str | None:
        return self.token.role

    @property
    def permissions(self) -> list[str]:
        return self.token.permissions

    @property
    def organization_id(self) -> UUID | None:
        return self.user.organization_id

    def allows(self, resource: str, action: str, scope: str | None = None) -> bool:
        """Check one permission against the token snapshot."""
        return snapshot_allows(self.role, self.permissions, [(resource, action, scope)])


async def get_auth_context(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
) -> AuthContext:
    """Resolve the token to a live session and an active user.

    Args:
        token_data: Validated token data
        db: Database session

    Returns:
        The authentication context

    Raises:
        UnauthorizedError: If the session was invalidated or expired, or
            the user no longer exists
        ForbiddenError: If the user is deactivated
    """
    from tbsa.modules.sessions.services import SessionService  # noqa: PLC0415

    await SessionService(db).get_active_session(token_data.session_id, token_data.user_id)

    user = await _load_user(db, token_data.user_id)
    if not user:
        raise UnauthorizedError(
            "User not found",
            error_code="USER_NOT_FOUND",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="USER_INACTIVE",
        )

    return AuthContext(user=user, token=token_data)


async def get_current_user(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> Any:  # Returns User, but use Any to avoid circular import
    """Get the currently authenticated user."""
    return auth.user


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: DBSession,
) -> Any | None:
    """Get the current user if authenticated, None otherwise.

    Useful for endpoints that work with or without authentication.
    """
    token = extract_token(request, credentials)
    if not token:
        return None

    token_data = decode_token(token)
    if not token_data or token_data.type != "access":
        return None

    from tbsa.modules.sessions.repos import SessionRepository  # noqa: PLC0415

    login_session = await SessionRepository(db).get_by_id(token_data.session_id)
    if login_session is None or not login_session.is_active:
        return None

    user = await _load_user(db, token_data.user_id)
    if not user or not user.is_active:
        return None

    return user


async def _load_user(db: DBSession, user_id: UUID) -> Any:
    from tbsa.modules.users.repos import UserRepository  # noqa: PLC0415

    return await UserRepository(db).get_by_id(user_id)


# Type aliases for cleaner dependency injection
CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
CurrentUser = Annotated[Any, Depends(get_current_user)]
OptionalUser = Annotated[Any | None, Depends(get_optional_user)]
