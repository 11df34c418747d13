"""User database models."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_PHONE_LENGTH
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from tbsa.core.permissions.models import Role
    from tbsa.modules.apartments.models import Apartment
    from tbsa.modules.buildings.models import Building
    from tbsa.modules.organizations.models import Organization


class User(Base, UUIDMixin, TimestampMixin):
    """An authenticated user.

    Every user holds at most one role. Users acting as building
    administrators carry an AdministratorProfile; apartment owners carry an
    OwnerProfile.

    Attributes:
        email: Globally unique email address
        password_hash: Bcrypt-hashed password
        first_name: Given name
        last_name: Family name
        phone: Optional phone number
        is_active: Whether the user can log in
        role_id: The user's role
        organization_id: The organization the user belongs to, if any
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    last_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(MAX_PHONE_LENGTH), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    organization_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    role: Mapped["Role | None"] = relationship(
        "Role",
        back_populates="users",
        lazy="selectin",
    )
    organization: Mapped["Organization | None"] = relationship(
        "Organization",
        lazy="selectin",
    )
    administrator_profile: Mapped["AdministratorProfile | None"] = relationship(
        "AdministratorProfile",
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )
    owner_profile: Mapped["OwnerProfile | None"] = relationship(
        "OwnerProfile",
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role else None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class AdministratorProfile(Base, UUIDMixin, TimestampMixin):
    """Administrator-specific data for a user.

    Buildings point at the administrator profile that manages them.
    """

    __tablename__ = "administrator_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    company_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="administrator_profile",
    )
    buildings: Mapped[list["Building"]] = relationship(
        "Building",
        back_populates="administrator",
    )


class OwnerProfile(Base, UUIDMixin, TimestampMixin):
    """Owner-specific data for a user.

    Created when a user first claims an apartment.
    """

    __tablename__ = "owner_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="owner_profile",
    )
    apartments: Mapped[list["Apartment"]] = relationship(
        "Apartment",
        back_populates="owner",
    )
