"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: a globally unique ``resource:action:scope`` code
- Role: a named set of permissions; each user holds exactly one role
- role_permissions: junction table linking roles to permissions
"""

from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_CODE_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MAX_PERMISSION_SCOPE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin
from tbsa.core.permissions.codes import format_permission


if TYPE_CHECKING:
    from tbsa.modules.users.models import User


# Junction table for Role <-> Permission many-to-many relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permission(Base, UUIDMixin, TimestampMixin):
    """A grantable capability.

    Attributes:
        code: ``resource:action:scope`` string, globally unique
        resource: The resource being protected (e.g. "apartments")
        action: The action being performed (e.g. "read")
        scope: Breadth of the grant ("all", "building", "own") or None
        description: Human-readable description
    """

    __tablename__ = "permissions"

    code: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    resource: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_RESOURCE_LENGTH),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    scope: Mapped[str | None] = mapped_column(
        String(MAX_PERMISSION_SCOPE_LENGTH),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
    )

    @classmethod
    def from_parts(
        cls,
        resource: str,
        action: str,
        scope: str | None = None,
        description: str | None = None,
    ) -> "Permission":
        """Build a permission with its code derived from the parts."""
        return cls(
            code=format_permission(resource, action, scope),
            resource=resource,
            action=action,
            scope=scope,
            description=description,
        )

    def __repr__(self) -> str:
        return f"<Permission({self.code})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """A named set of permissions.

    Attributes:
        name: Unique role name (e.g. "ADMINISTRATOR", "OWNER")
        description: Human-readable description
        is_system: Whether the role is one of the seeded defaults
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    is_system: Mapped[bool] = mapped_column(default=False, nullable=False)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin",
    )
    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="role",
    )

    @property
    def permission_codes(self) -> list[str]:
        """Sorted permission codes of this role."""
        return sorted(p.code for p in self.permissions)

    def __repr__(self) -> str:
        return f"<Role(name={self.name})>"
