"""Role and permission administration."""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import func, select

from tbsa.api.dependencies import DBSession
from tbsa.core.errors import ConflictError, NotFoundError, ValidationError
from tbsa.core.permissions.codes import Action, Resource
from tbsa.core.permissions.models import Permission, Role
from tbsa.core.permissions.schemas import RoleCreate, RoleResponse
from tbsa.core.permissions.scoping import resolve_scope
from tbsa.modules.sessions.services import InvalidationResult, SessionService
from tbsa.modules.users.models import User
from tbsa.modules.users.repos import UserRepository


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


logger = structlog.get_logger()


class PermissionAdminService:
    """Service for listing permissions and managing roles.

    Assigning a role revokes every session of the target user, because
    access tokens carry a snapshot of the previous role's permissions.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.sessions = SessionService(db)

    async def list_permissions(self) -> list[Permission]:
        result = await self.db.execute(
            select(Permission).order_by(
                Permission.resource, Permission.action, Permission.scope
            )
        )
        return list(result.scalars().all())

    async def list_roles(self) -> list[RoleResponse]:
        """List roles with their permission codes and user counts."""
        roles = (await self.db.execute(select(Role).order_by(Role.name))).scalars().all()
        counts = dict(
            (
                await self.db.execute(
                    select(User.role_id, func.count(User.id)).group_by(User.role_id)
                )
            ).all()
        )
        return [self._role_response(role, counts.get(role.id, 0)) for role in roles]

    async def create_role(self, data: RoleCreate) -> RoleResponse:
        """Create a custom role from existing permission codes.

        Raises:
            ConflictError: If the role name is taken
            ValidationError: If a permission code is unknown
        """
        if await self.users.get_role_by_name(data.name) is not None:
            raise ConflictError(
                f"Role {data.name} already exists",
                error_code="ROLE_EXISTS",
            )

        permissions: list[Permission] = []
        if data.permissions:
            result = await self.db.execute(
                select(Permission).where(Permission.code.in_(data.permissions))
            )
            permissions = list(result.scalars().all())
            unknown = sorted(set(data.permissions) - {p.code for p in permissions})
            if unknown:
                raise ValidationError(
                    "Unknown permission codes",
                    errors=[
                        {"field": "permissions", "message": f"Unknown permission: {code}"}
                        for code in unknown
                    ],
                )

        role = Role(
            name=data.name,
            description=data.description,
            is_system=False,
            permissions=permissions,
        )
        self.db.add(role)
        await self.db.flush()

        logger.info("role_created", role=role.name, permissions=len(permissions))
        return self._role_response(role, 0)

    async def list_users(
        self,
        auth: "AuthContext",
        role_name: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[User], int]:
        """List users visible to the caller, optionally holding one role.

        Raises:
            NotFoundError: If ``role_name`` names no role
        """
        access = resolve_scope(auth, Resource.USERS, Action.READ)
        if role_name is not None:
            await self._get_role(role_name)
        return await self.users.list_users(
            organization_id=None if access.is_global else access.organization_id,
            role_name=role_name,
            page=page,
            page_size=page_size,
        )

    async def assign_role(
        self,
        auth: "AuthContext",
        user_id: UUID,
        role_name: str,
    ) -> tuple[User, InvalidationResult]:
        """Give a user a new role and revoke their sessions.

        Raises:
            NotFoundError: If the user is outside the caller's organization
                or the role does not exist
        """
        access = resolve_scope(auth, Resource.ADMIN_GRANT, Action.CREATE)
        user = await self.users.get_by_id(user_id)
        if user is None or (
            not access.is_global and user.organization_id != access.organization_id
        ):
            raise NotFoundError(
                "User not found",
                error_code="USER_NOT_FOUND",
                resource="user",
                resource_id=str(user_id),
            )
        role = await self._get_role(role_name)

        previous = user.role_name
        user.role_id = role.id
        await self.db.flush()
        await self.db.refresh(user, attribute_names=["role"])

        result = await self.sessions.invalidate_all_sessions(
            user.id, current_session_id=auth.session_id
        )
        logger.info(
            "role_assigned",
            user_id=str(user.id),
            previous_role=previous,
            role=role.name,
            assigned_by=str(auth.user_id),
            invalidated_sessions=result.count,
        )
        return user, result

    async def _get_role(self, name: str) -> Role:
        role = await self.users.get_role_by_name(name)
        if role is None:
            raise NotFoundError(
                f"Role {name} not found",
                error_code="ROLE_NOT_FOUND",
                resource="role",
                resource_id=name,
            )
        return role

    @staticmethod
    def _role_response(role: Role, user_count: int) -> RoleResponse:
        return RoleResponse(
            id=role.id,
            name=role.name,
            description=role.description,
            is_system=role.is_system,
            permissions=role.permission_codes,
            user_count=user_count,
        )


# Type alias for dependency injection
PermissionAdminSvc = Annotated[PermissionAdminService, Depends(PermissionAdminService)]
