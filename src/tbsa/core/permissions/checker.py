"""Permission checking logic.

This module resolves whether a user may perform an action on a resource,
based on the permission codes of the single role assigned to the user.
Resolution is fail-closed: an unknown user or a user without a role is
denied.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tbsa.core.constants import SUPER_ADMIN_ROLE
from tbsa.core.permissions import codes
from tbsa.core.permissions.models import Role


class PermissionChecker:
    """Service for checking user permissions against the database."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user_role(self, user_id: UUID) -> Role | None:
        """Get the role assigned to a user.

        Args:
            user_id: The user's UUID

        Returns:
            The user's role with permissions loaded, or None if the user
            does not exist or has no role
        """
        from tbsa.modules.users.models import User  # noqa: PLC0415

        stmt = (
            select(Role)
            .join(User, User.role_id == Role.id)
            .where(User.id == user_id)
            .options(selectinload(Role.permissions))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_permissions(self, user_id: UUID) -> list[str]:
        """Get the permission codes held by a user.

        Args:
            user_id: The user's UUID

        Returns:
            Sorted permission codes; empty if the user or role is missing
        """
        role = await self.get_user_role(user_id)
        if role is None:
            return []
        return role.permission_codes

    async def has_permission(
        self,
        user_id: UUID,
        resource: str,
        action: str,
        scope: str | None = None,
    ) -> bool:
        """Check if a user has a specific permission.

        Args:
            user_id: The user's UUID
            resource: The resource to check (e.g. "apartments")
            action: The action to check (e.g. "read")
            scope: Optional scope ("own", "building", "all")

        Returns:
            True if the user's role grants the permission
        """
        role = await self.get_user_role(user_id)
        if role is None:
            return False
        if role.name == SUPER_ADMIN_ROLE:
            return True
        return codes.has_permission(role.permission_codes, resource, action, scope)

    async def has_any_permission(
        self,
        user_id: UUID,
        permissions: Iterable[tuple[str, str, str | None]],
    ) -> bool:
        """Check if a user has any of the specified permissions.

        Args:
            user_id: The user's UUID
            permissions: (resource, action, scope) tuples

        Returns:
            True if the user has at least one permission
        """
        role = await self.get_user_role(user_id)
        return snapshot_allows(
            role.name if role else None,
            role.permission_codes if role else [],
            permissions,
            require_all=False,
        )

    async def has_all_permissions(
        self,
        user_id: UUID,
        permissions: Iterable[tuple[str, str, str | None]],
    ) -> bool:
        """Check if a user has all of the specified permissions.

        Args:
            user_id: The user's UUID
            permissions: (resource, action, scope) tuples

        Returns:
            True if the user has every permission
        """
        role = await self.get_user_role(user_id)
        return snapshot_allows(
            role.name if role else None,
            role.permission_codes if role else [],
            permissions,
            require_all=True,
        )


def snapshot_allows(
    role_name: str | None,
    permission_codes: Iterable[str],
    permissions: Iterable[tuple[str, str, str | None]],
    require_all: bool = True,
) -> bool:
    """Evaluate requested permissions against a role snapshot.

    This is the check used for access tokens, which carry the role name and
    permission codes so guarded requests need no role lookup.

    Args:
        role_name: Role name from the snapshot, or None
        permission_codes: Permission codes from the snapshot
        permissions: Requested (resource, action, scope) tuples
        require_all: If True every permission is required, otherwise any one

    Returns:
        True if the snapshot grants the request
    """
    if role_name is None:
        return False
    if role_name == SUPER_ADMIN_ROLE:
        return True

    held = list(permission_codes)
    results = (
        codes.has_permission(held, resource, action, scope)
        for resource, action, scope in permissions
    )
    return all(results) if require_all else any(results)
