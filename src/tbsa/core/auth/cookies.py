"""Auth cookie helpers.

The access token travels in the ``auth-token`` cookie and the refresh token
in the ``refresh-token`` cookie, which is only sent to ``/api/auth``.
Both are HTTP-only, SameSite=Lax, and Secure in production.
"""

from starlette.responses import Response

from tbsa.config import settings
from tbsa.core.auth.schemas import TokenPair


def _secure() -> bool:
    return settings.environment == "production"


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    """Attach both auth cookies to a response."""
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=tokens.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
        httponly=True,
        secure=_secure(),
        samesite="lax",
    )
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=tokens.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=_secure(),
        samesite="lax",
    )


def clear_auth_cookies(response: Response) -> None:
    """Expire both auth cookies on a response."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=_secure(),
        samesite="lax",
    )
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=_secure(),
        samesite="lax",
    )
