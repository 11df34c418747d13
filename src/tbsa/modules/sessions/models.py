"""Session database model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from tbsa.core.constants import (
    MAX_IPV6_LENGTH,
    MAX_USER_AGENT_LENGTH,
    SHA256_HEX_LENGTH,
)
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin, utcnow


class Session(Base, UUIDMixin, TimestampMixin):
    """A login session.

    The session id is embedded in every access token; a token is only
    honoured while its session is neither invalidated nor expired. The
    refresh token itself is never stored, only its SHA-256 fingerprint.

    Attributes:
        user_id: The user this session belongs to
        token_hash: SHA-256 fingerprint of the current refresh token
        client_fingerprint: SHA-256 of the client's identifying headers
        user_agent: Client user agent at login
        ip_address: Client IP address at login
        expires_at: When the session (and its refresh token) expires
        last_used_at: Last time the session was refreshed
        invalidated_at: When the session was invalidated, if it was
    """

    __tablename__ = "sessions"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    client_fingerprint: Mapped[str | None] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=True,
    )
    user_agent: Mapped[str | None] = mapped_column(
        String(MAX_USER_AGENT_LENGTH),
        nullable=True,
    )
    ip_address: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    expires_at: Mapped[datetime] = mapped_column(nullable=False, index=True)
    last_used_at: Mapped[datetime | None] = mapped_column(nullable=True)
    invalidated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    @property
    def is_active(self) -> bool:
        """Whether the session can still authenticate requests."""
        return self.invalidated_at is None and self.expires_at > utcnow()

    def __repr__(self) -> str:
        return f"<Session(id={self.id}, user_id={self.user_id}, active={self.is_active})>"
