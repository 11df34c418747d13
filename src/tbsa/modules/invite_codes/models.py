"""Invite code database model."""

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import INVITE_CODE_LENGTH
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin, utcnow


if TYPE_CHECKING:
    from tbsa.modules.apartments.models import Apartment


class InviteCodeStatus(StrEnum):
    """Lifecycle states. ACTIVE is the only non-terminal state."""

    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class InviteCode(Base, UUIDMixin, TimestampMixin):
    """A single-use code that lets an owner claim an apartment.

    Attributes:
        code: The code string, globally unique
        status: One of InviteCodeStatus
        apartment_id: The apartment this code claims
        created_by_id: Administrator who generated the code
        used_by_id: User who redeemed the code
        used_at: When the code was redeemed
        expires_at: After this instant the code cannot be redeemed
    """

    __tablename__ = "invite_codes"

    code: Mapped[str] = mapped_column(
        String(INVITE_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=InviteCodeStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    apartment_id: Mapped[UUID] = mapped_column(
        ForeignKey("apartments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    used_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    used_at: Mapped[datetime | None] = mapped_column(nullable=True)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)

    apartment: Mapped["Apartment"] = relationship("Apartment", lazy="selectin")

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= utcnow()

    def __repr__(self) -> str:
        return f"<InviteCode(code={self.code}, status={self.status})>"
