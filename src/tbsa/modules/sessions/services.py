"""Session service: issuing, rotating, listing and invalidating sessions."""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID, uuid4

import structlog
from fastapi import Depends

from tbsa.api.dependencies import DBSession
from tbsa.config import settings
from tbsa.core.auth.backend import (
    create_access_token,
    create_refresh_token,
    get_token_expiration,
    hash_token,
)
from tbsa.core.auth.schemas import TokenPair
from tbsa.core.database.base import utcnow
from tbsa.core.errors import NotFoundError, UnauthorizedError
from tbsa.core.permissions.checker import PermissionChecker
from tbsa.modules.sessions.models import Session
from tbsa.modules.sessions.repos import SessionRepository
from tbsa.modules.users.models import User
from tbsa.modules.users.repos import UserRepository


logger = structlog.get_logger()


@dataclass
class ClientInfo:
    """Identifying data of the client opening or refreshing a session."""

    user_agent: str | None = None
    ip_address: str | None = None
    fingerprint: str | None = None


@dataclass
class InvalidationResult:
    """Outcome of invalidating one or more sessions."""

    invalidated_ids: list[UUID]
    current_session_invalidated: bool

    @property
    def count(self) -> int:
        return len(self.invalidated_ids)


class SessionService:
    """Service for the session lifecycle.

    A session is created on login. Its id is embedded in every access
    token together with a permission snapshot, and its refresh token hash
    is rotated on every refresh.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = SessionRepository(db)
        self.user_repo = UserRepository(db)
        self.checker = PermissionChecker(db)

    async def create_session(self, user: User, client: ClientInfo) -> TokenPair:
        """Open a session for a user and issue its tokens.

        Args:
            user: The authenticated user
            client: Client information for fingerprinting

        Returns:
            Token pair bound to the new session
        """
        refresh_token = create_refresh_token()
        login_session = Session(
            id=uuid4(),
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            client_fingerprint=client.fingerprint,
            user_agent=client.user_agent,
            ip_address=client.ip_address,
            expires_at=get_token_expiration(),
        )
        await self.repo.create(login_session)

        logger.info(
            "session_created",
            user_id=str(user.id),
            session_id=str(login_session.id),
        )

        return await self._issue_tokens(user, login_session, refresh_token)

    async def refresh_session(
        self,
        refresh_token: str,
        client: ClientInfo,
    ) -> tuple[User, TokenPair]:
        """Rotate the refresh token of a session and issue a new access token.

        The permission snapshot is re-read from the database.

        Args:
            refresh_token: The presented refresh token
            client: Client information for fingerprint verification

        Returns:
            Tuple of (user, new token pair for the same session)

        Raises:
            UnauthorizedError: If the session is unknown, inactive or was
                opened from a different client
        """
        login_session = await self.get_session_for_refresh(refresh_token)

        if (
            login_session.client_fingerprint
            and client.fingerprint
            and login_session.client_fingerprint != client.fingerprint
        ):
            logger.warning(
                "session_fingerprint_mismatch",
                user_id=str(login_session.user_id),
                session_id=str(login_session.id),
            )
            raise UnauthorizedError(
                "Session was opened from a different client",
                error_code="FINGERPRINT_MISMATCH",
            )

        user = await self.user_repo.get_by_id(login_session.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError(
                "User not found or inactive",
                error_code="USER_INVALID",
            )

        new_refresh_token = create_refresh_token()
        login_session.token_hash = hash_token(new_refresh_token)
        login_session.last_used_at = utcnow()
        await self.db.flush()

        tokens = await self._issue_tokens(user, login_session, new_refresh_token)
        return user, tokens

    async def get_session_for_refresh(self, refresh_token: str) -> Session:
        """Look up the live session owning a refresh token.

        Raises:
            UnauthorizedError: If no live session matches
        """
        login_session = await self.repo.get_by_token_hash(hash_token(refresh_token))
        if login_session is None or not login_session.is_active:
            raise UnauthorizedError(
                "Invalid or expired refresh token",
                error_code="INVALID_REFRESH_TOKEN",
            )
        return login_session

    async def get_active_session(self, session_id: UUID, user_id: UUID) -> Session:
        """Get a live session belonging to a user.

        Raises:
            UnauthorizedError: If the session is missing, foreign or inactive
        """
        login_session = await self.repo.get_by_id(session_id)
        if (
            login_session is None
            or login_session.user_id != user_id
            or not login_session.is_active
        ):
            raise UnauthorizedError(
                "Session is no longer valid",
                error_code="SESSION_INVALID",
            )
        return login_session

    async def list_sessions(self, user_id: UUID) -> list[Session]:
        """List a user's live sessions."""
        return await self.repo.list_active_for_user(user_id)

    async def invalidate_session(
        self,
        user_id: UUID,
        session_id: UUID,
        current_session_id: UUID | None = None,
    ) -> InvalidationResult:
        """Invalidate one session of a user.

        Args:
            user_id: The requesting user
            session_id: The session to invalidate
            current_session_id: The session making the request

        Returns:
            The invalidation outcome

        Raises:
            NotFoundError: If the session does not exist or belongs to
                another user
        """
        login_session = await self.repo.get_by_id(session_id)
        if login_session is None or login_session.user_id != user_id:
            raise NotFoundError(
                "Session not found",
                error_code="SESSION_NOT_FOUND",
                resource="session",
                resource_id=str(session_id),
            )

        await self.repo.invalidate(login_session)
        logger.info(
            "session_invalidated",
            user_id=str(user_id),
            session_id=str(session_id),
        )
        return InvalidationResult(
            invalidated_ids=[session_id],
            current_session_invalidated=session_id == current_session_id,
        )

    async def invalidate_all_sessions(
        self,
        user_id: UUID,
        current_session_id: UUID | None = None,
        keep_current: bool = False,
    ) -> InvalidationResult:
        """Invalidate every live session of a user.

        Args:
            user_id: The user whose sessions are invalidated
            current_session_id: The session making the request
            keep_current: Leave the current session alive

        Returns:
            The invalidation outcome; ``current_session_invalidated`` is
            True only if the current session was among those invalidated
        """
        except_id = current_session_id if keep_current else None
        invalidated = await self.repo.invalidate_all_for_user(user_id, except_id)

        logger.info(
            "sessions_invalidated",
            user_id=str(user_id),
            count=len(invalidated),
            kept_current=keep_current,
        )
        return InvalidationResult(
            invalidated_ids=invalidated,
            current_session_invalidated=(
                current_session_id is not None and current_session_id in invalidated
            ),
        )

    async def cleanup_expired_sessions(self) -> int:
        """Delete expired and invalidated session rows.

        Returns:
            Number of rows deleted
        """
        deleted = await self.repo.delete_expired()
        logger.info("sessions_cleaned_up", deleted=deleted)
        return deleted

    async def _issue_tokens(
        self,
        user: User,
        login_session: Session,
        refresh_token: str,
    ) -> TokenPair:
        role = await self.checker.get_user_role(user.id)
        access_token = create_access_token(
            user_id=user.id,
            session_id=login_session.id,
            role=role.name if role else None,
            permissions=role.permission_codes if role else [],
            organization_id=user.organization_id,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            session_id=login_session.id,
            expires_in=settings.access_token_expire_minutes * 60,
        )


# Type alias for dependency injection
SessionSvc = Annotated[SessionService, Depends(SessionService)]
