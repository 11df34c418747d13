"""Authentication backend for JWT and password handling.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- Access token creation and verification (with permission snapshot)
- Refresh token generation and hashing for storage
- Client fingerprinting
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from tbsa.config import settings
from tbsa.core.auth.schemas import TokenData
from tbsa.core.constants import ACCESS_TOKEN_JTI_LENGTH, BCRYPT_ROUNDS, REFRESH_TOKEN_BYTES


# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


# ============================================================
# Password Utilities
# ============================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================
# JWT Token Utilities
# ============================================================


def create_access_token(
    user_id: UUID,
    session_id: UUID,
    role: str | None,
    permissions: list[str],
    organization_id: UUID | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived JWT access token.

    The token carries a snapshot of the user's role and permission codes
    so route guards can authorize without loading the role.

    Args:
        user_id: The user's UUID
        session_id: The session the token belongs to
        role: Role name at issue time
        permissions: Permission codes at issue time
        organization_id: The user's organization, if any
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT access token
    """
    now = datetime.now(UTC)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "sid": str(session_id),
        "role": role,
        "perms": permissions,
        "org": str(organization_id) if organization_id else None,
        "exp": expire,
        "type": "access",
        "iat": now,
        "jti": secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
    }

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def create_refresh_token() -> str:
    """Create a long-lived refresh token.

    The refresh token is a random string (not a JWT). Only its hash is
    stored, on the session row.

    Returns:
        Random refresh token string
    """
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a token for secure storage.

    Args:
        token: The token to hash

    Returns:
        SHA-256 hex digest of the token
    """
    return hashlib.sha256(token.encode()).hexdigest()


def create_fingerprint(
    user_agent: str | None,
    ip_address: str | None,
    accept_language: str | None = None,
    accept_encoding: str | None = None,
) -> str:
    """Fingerprint a client from its identifying request headers.

    Args:
        user_agent: User-Agent header
        ip_address: Client IP address
        accept_language: Accept-Language header
        accept_encoding: Accept-Encoding header

    Returns:
        SHA-256 hex digest of the joined values
    """
    raw = "|".join(
        value or "" for value in (user_agent, ip_address, accept_language, accept_encoding)
    )
    return hashlib.sha256(raw.encode()).hexdigest()


def decode_token(token: str) -> TokenData | None:
    """Decode and validate a JWT access token.

    Args:
        token: The JWT token to decode

    Returns:
        TokenData if valid, None if invalid, expired or malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        user_id = payload.get("sub")
        session_id = payload.get("sid")
        exp = payload.get("exp")

        if not user_id or not session_id or exp is None:
            return None

        organization_id = payload.get("org")
        return TokenData(
            user_id=UUID(user_id),
            session_id=UUID(session_id),
            role=payload.get("role"),
            permissions=list(payload.get("perms") or []),
            organization_id=UUID(organization_id) if organization_id else None,
            exp=datetime.fromtimestamp(exp, tz=UTC),
            type=payload.get("type", "access"),
        )

    except (JWTError, ValueError, TypeError):
        return None


def get_token_expiration(days: int | None = None) -> datetime:
    """Get the expiration datetime for a refresh token.

    Args:
        days: Number of days until expiration

    Returns:
        Expiration datetime
    """
    if days is None:
        days = settings.refresh_token_expire_days
    return datetime.now(UTC) + timedelta(days=days)
