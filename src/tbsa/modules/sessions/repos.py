"""Session repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, or_, select, update

from tbsa.api.dependencies import DBSession
from tbsa.core.database.base import utcnow
from tbsa.modules.sessions.models import Session


class SessionRepository:
    """Repository for Session database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, login_session: Session) -> Session:
        """Persist a new session.

        Args:
            login_session: Session instance to create

        Returns:
            The created session with ID populated
        """
        self.session.add(login_session)
        await self.session.flush()
        return login_session

    async def get_by_id(self, session_id: UUID) -> Session | None:
        """Get a session by ID, whatever its state."""
        return await self.session.get(Session, session_id)

    async def get_by_token_hash(self, token_hash: str) -> Session | None:
        """Get a session by the hash of its current refresh token.

        Args:
            token_hash: SHA-256 hash of the refresh token

        Returns:
            Session if found, None otherwise
        """
        stmt = select(Session).where(Session.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_for_user(self, user_id: UUID) -> list[Session]:
        """List sessions of a user that are neither invalidated nor expired.

        Args:
            user_id: The user's UUID

        Returns:
            Sessions ordered from newest to oldest
        """
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.invalidated_at.is_(None),
                Session.expires_at > utcnow(),
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def invalidate(self, login_session: Session) -> None:
        """Mark a session as invalidated.

        Args:
            login_session: The session to invalidate
        """
        if login_session.invalidated_at is None:
            login_session.invalidated_at = utcnow()
            await self.session.flush()

    async def invalidate_all_for_user(
        self,
        user_id: UUID,
        except_session_id: UUID | None = None,
    ) -> list[UUID]:
        """Invalidate every live session of a user.

        Args:
            user_id: The user's UUID
            except_session_id: Session to leave untouched

        Returns:
            IDs of the sessions that were invalidated
        """
        stmt = select(Session.id).where(
            Session.user_id == user_id,
            Session.invalidated_at.is_(None),
        )
        if except_session_id is not None:
            stmt = stmt.where(Session.id != except_session_id)
        result = await self.session.execute(stmt)
        session_ids = list(result.scalars().all())

        if session_ids:
            await self.session.execute(
                update(Session)
                .where(Session.id.in_(session_ids))
                .values(invalidated_at=utcnow())
                .execution_options(synchronize_session="fetch")
            )
            await self.session.flush()

        return session_ids

    async def delete_expired(self, now: datetime | None = None) -> int:
        """Delete sessions that have expired or were invalidated.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            Number of sessions deleted
        """
        now = now or utcnow()
        result = await self.session.execute(
            select(Session.id).where(
                or_(
                    Session.expires_at < now,
                    Session.invalidated_at.is_not(None),
                )
            )
        )
        session_ids = list(result.scalars().all())

        if session_ids:
            await self.session.execute(
                delete(Session)
                .where(Session.id.in_(session_ids))
                .execution_options(synchronize_session="fetch")
            )
            await self.session.flush()

        return len(session_ids)


# Type alias for dependency injection
SessionRepo = Annotated[SessionRepository, Depends(SessionRepository)]
