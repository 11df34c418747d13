"""Unit tests for the session lifecycle."""

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.core.auth.backend import decode_token, hash_token
from tbsa.core.database import utcnow
from tbsa.core.errors import NotFoundError, UnauthorizedError
from tbsa.modules.sessions.models import Session
from tbsa.modules.sessions.services import ClientInfo, SessionService
from tbsa.modules.users.models import User


pytestmark = pytest.mark.unit

BROWSER = ClientInfo(user_agent="Firefox", ip_address="10.0.0.1", fingerprint="fp-browser")
PHONE = ClientInfo(user_agent="Safari", ip_address="10.0.0.2", fingerprint="fp-phone")


class TestCreateAndRefresh:
    """Tests for opening and refreshing sessions."""

    async def test_create_session_issues_bound_tokens(self, db: AsyncSession, owner_user: User):
        """The access token should name the session and carry the role snapshot."""
        service = SessionService(db)

        tokens = await service.create_session(owner_user, BROWSER)

        data = decode_token(tokens.access_token)
        assert data is not None
        assert data.session_id == tokens.session_id
        assert data.role == "OWNER"
        assert "apartments:read:own" in data.permissions

        stored = await db.get(Session, tokens.session_id)
        assert stored is not None
        assert stored.token_hash == hash_token(tokens.refresh_token)
        assert stored.client_fingerprint == "fp-browser"
        assert stored.is_active

    async def test_refresh_rotates_refresh_token(self, db: AsyncSession, owner_user: User):
        """The old refresh token should stop working after a refresh."""
        service = SessionService(db)
        tokens = await service.create_session(owner_user, BROWSER)

        user, rotated = await service.refresh_session(tokens.refresh_token, BROWSER)

        assert user.id == owner_user.id
        assert rotated.session_id == tokens.session_id
        assert rotated.refresh_token != tokens.refresh_token

        with pytest.raises(UnauthorizedError) as exc_info:
            await service.refresh_session(tokens.refresh_token, BROWSER)
        assert exc_info.value.error_code == "INVALID_REFRESH_TOKEN"

    async def test_refresh_from_another_client_is_rejected(
        self, db: AsyncSession, owner_user: User
    ):
        service = SessionService(db)
        tokens = await service.create_session(owner_user, BROWSER)

        with pytest.raises(UnauthorizedError) as exc_info:
            await service.refresh_session(tokens.refresh_token, PHONE)

        assert exc_info.value.error_code == "FINGERPRINT_MISMATCH"

    async def test_refresh_of_invalidated_session_is_rejected(
        self, db: AsyncSession, owner_user: User
    ):
        service = SessionService(db)
        tokens = await service.create_session(owner_user, BROWSER)
        await service.invalidate_session(owner_user.id, tokens.session_id)

        with pytest.raises(UnauthorizedError):
            await service.refresh_session(tokens.refresh_token, BROWSER)

    async def test_get_active_session_rejects_foreign_user(
        self, db: AsyncSession, owner_user: User, admin_user: User
    ):
        service = SessionService(db)
        tokens = await service.create_session(owner_user, BROWSER)

        with pytest.raises(UnauthorizedError) as exc_info:
            await service.get_active_session(tokens.session_id, admin_user.id)

        assert exc_info.value.error_code == "SESSION_INVALID"


class TestInvalidation:
    """Tests for ending sessions."""

    async def test_invalidate_foreign_session_is_not_found(
        self, db: AsyncSession, owner_user: User, admin_user: User
    ):
        """Users may not end each other's sessions."""
        service = SessionService(db)
        tokens = await service.create_session(owner_user, BROWSER)

        with pytest.raises(NotFoundError):
            await service.invalidate_session(admin_user.id, tokens.session_id)

    async def test_invalidate_all_reports_current_session(
        self, db: AsyncSession, owner_user: User
    ):
        service = SessionService(db)
        current = await service.create_session(owner_user, BROWSER)
        await service.create_session(owner_user, PHONE)

        result = await service.invalidate_all_sessions(
            owner_user.id, current_session_id=current.session_id
        )

        assert result.count == 2
        assert result.current_session_invalidated is True
        assert await service.list_sessions(owner_user.id) == []

    async def test_invalidate_all_keep_current(self, db: AsyncSession, owner_user: User):
        """keep_current should end every session except the caller's."""
        service = SessionService(db)
        current = await service.create_session(owner_user, BROWSER)
        other = await service.create_session(owner_user, PHONE)

        result = await service.invalidate_all_sessions(
            owner_user.id,
            current_session_id=current.session_id,
            keep_current=True,
        )

        assert result.invalidated_ids == [other.session_id]
        assert result.current_session_invalidated is False
        remaining = await service.list_sessions(owner_user.id)
        assert [s.id for s in remaining] == [current.session_id]

    async def test_cleanup_deletes_dead_sessions_only(self, db: AsyncSession, owner_user: User):
        service = SessionService(db)
        live = await service.create_session(owner_user, BROWSER)
        ended = await service.create_session(owner_user, BROWSER)
        expired = await service.create_session(owner_user, BROWSER)

        await service.invalidate_session(owner_user.id, ended.session_id)
        expired_row = await db.get(Session, expired.session_id)
        assert expired_row is not None
        expired_row.expires_at = utcnow() - timedelta(minutes=1)
        await db.flush()

        deleted = await service.cleanup_expired_sessions()

        assert deleted == 2
        result = await db.execute(select(Session.id).where(Session.user_id == owner_user.id))
        assert list(result.scalars().all()) == [live.session_id]
