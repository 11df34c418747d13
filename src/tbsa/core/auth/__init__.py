"""Authentication: password hashing, access tokens, cookies and dependencies.

The auth router lives in ``tbsa.core.auth.routes`` and is mounted by the
API router.
"""

from tbsa.core.auth.backend import (
    create_access_token,
    create_fingerprint,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from tbsa.core.auth.cookies import clear_auth_cookies, set_auth_cookies
from tbsa.core.auth.dependencies import (
    AuthContext,
    CurrentAuth,
    CurrentUser,
    OptionalUser,
    get_auth_context,
    get_current_user,
)
from tbsa.core.auth.middleware import AuthContextMiddleware, RequestIdMiddleware
from tbsa.core.auth.schemas import TokenData, TokenPair


__all__ = [
    # Dependencies
    "AuthContext",
    # Middleware
    "AuthContextMiddleware",
    "CurrentAuth",
    "CurrentUser",
    "OptionalUser",
    "RequestIdMiddleware",
    # Schemas
    "TokenData",
    "TokenPair",
    # Cookies
    "clear_auth_cookies",
    # Token utilities
    "create_access_token",
    "create_fingerprint",
    "create_refresh_token",
    "decode_token",
    "get_auth_context",
    "get_current_user",
    # Password utilities
    "hash_password",
    "hash_token",
    "set_auth_cookies",
    "verify_password",
]
