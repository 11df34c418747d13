"""Unit tests for auth backend (JWT and password handling)."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from tbsa.config import settings
from tbsa.core.auth.backend import (
    create_access_token,
    create_fingerprint,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_returns_hash(self, password_hash: str):
        """hash_password should return a bcrypt hash."""
        assert password_hash != "SecurePass123"
        assert password_hash.startswith("$2b$")  # bcrypt prefix

    def test_verify_password_correct(self, password_hash: str):
        """verify_password should return True for correct password."""
        assert verify_password("SecurePass123", password_hash) is True

    def test_verify_password_incorrect(self, password_hash: str):
        """verify_password should return False for incorrect password."""
        assert verify_password("WrongPass123", password_hash) is False

    def test_hash_password_different_each_time(self, password_hash: str):
        """hash_password should produce different hashes for same password."""
        # Different due to random salt
        assert hash_password("SecurePass123") != password_hash


class TestAccessTokens:
    """Tests for access token creation and decoding."""

    def test_round_trip_carries_snapshot(self):
        """decode_token should return the identity and permission snapshot."""
        user_id, session_id, org_id = uuid4(), uuid4(), uuid4()

        token = create_access_token(
            user_id=user_id,
            session_id=session_id,
            role="OWNER",
            permissions=["apartments:read:own"],
            organization_id=org_id,
        )
        data = decode_token(token)

        assert data is not None
        assert data.user_id == user_id
        assert data.session_id == session_id
        assert data.role == "OWNER"
        assert data.permissions == ["apartments:read:own"]
        assert data.organization_id == org_id
        assert data.type == "access"

    def test_token_without_organization(self):
        token = create_access_token(uuid4(), uuid4(), role=None, permissions=[])

        data = decode_token(token)

        assert data is not None
        assert data.organization_id is None
        assert data.role is None

    def test_tokens_are_unique(self):
        """Two tokens issued in the same second should differ (jti)."""
        user_id, session_id = uuid4(), uuid4()

        first = create_access_token(user_id, session_id, "OWNER", [])
        second = create_access_token(user_id, session_id, "OWNER", [])

        assert first != second

    def test_expired_token_is_rejected(self):
        token = create_access_token(
            uuid4(), uuid4(), "OWNER", [], expires_delta=timedelta(seconds=-1)
        )

        assert decode_token(token) is None

    def test_wrong_signature_is_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "sid": str(uuid4()), "exp": 9999999999},
            "another-secret-key-that-is-long-enough",
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_token_without_session_is_rejected(self):
        """Tokens not bound to a session are not access tokens."""
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_token("not-a-jwt") is None


class TestRefreshTokensAndFingerprints:
    """Tests for refresh token and fingerprint helpers."""

    def test_refresh_tokens_are_random(self):
        assert create_refresh_token() != create_refresh_token()

    def test_hash_token_is_sha256_hex(self):
        hashed = hash_token("some-token")

        assert len(hashed) == 64
        assert hashed == hash_token("some-token")
        assert hashed != hash_token("other-token")

    def test_fingerprint_depends_on_every_header(self):
        base = create_fingerprint("agent", "10.0.0.1", "ro-RO", "gzip")

        assert base == create_fingerprint("agent", "10.0.0.1", "ro-RO", "gzip")
        assert base != create_fingerprint("agent", "10.0.0.2", "ro-RO", "gzip")
        assert base != create_fingerprint("other", "10.0.0.1", "ro-RO", "gzip")
        assert base != create_fingerprint("agent", "10.0.0.1", "en-US", "gzip")

    def test_fingerprint_accepts_missing_values(self):
        assert len(create_fingerprint(None, None)) == 64
