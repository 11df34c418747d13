"""Default permission catalogue and role definitions.

Used by the seed script and by tests to install the standard roles.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.core.constants import ADMINISTRATOR_ROLE, OWNER_ROLE, SUPER_ADMIN_ROLE
from tbsa.core.permissions.codes import Action, Resource, Scope, format_permission
from tbsa.core.permissions.models import Permission, Role


ALL_ACTIONS = [Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE]

# Every (resource, action, scope) combination that may be granted
PERMISSION_CATALOGUE: list[tuple[str, str, str]] = [
    (resource, action, scope)
    for resource in Resource
    for action in ALL_ACTIONS
    for scope in (Scope.ALL, Scope.BUILDING, Scope.OWN)
]


def _codes(resource: str, actions: list[str], scope: str) -> list[str]:
    return [format_permission(resource, action, scope) for action in actions]


DEFAULT_ROLES: dict[str, dict[str, object]] = {
    SUPER_ADMIN_ROLE: {
        "description": "Platform administrator with unrestricted access",
        "permissions": [
            format_permission(resource, action, Scope.ALL)
            for resource in Resource
            for action in ALL_ACTIONS
        ],
    },
    ADMINISTRATOR_ROLE: {
        "description": "Building administrator",
        "permissions": [
            *_codes(Resource.BUILDINGS, ALL_ACTIONS, Scope.OWN),
            *_codes(Resource.APARTMENTS, ALL_ACTIONS, Scope.BUILDING),
            *_codes(Resource.WATER_READINGS, ALL_ACTIONS, Scope.BUILDING),
            *_codes(Resource.INVITE_CODES, ALL_ACTIONS, Scope.BUILDING),
            format_permission(Resource.USERS, Action.READ, Scope.BUILDING),
            *_codes(Resource.USERS, [Action.READ, Action.UPDATE], Scope.OWN),
        ],
    },
    OWNER_ROLE: {
        "description": "Apartment owner",
        "permissions": [
            *_codes(Resource.APARTMENTS, [Action.READ, Action.UPDATE], Scope.OWN),
            *_codes(
                Resource.WATER_READINGS,
                [Action.READ, Action.CREATE, Action.UPDATE],
                Scope.OWN,
            ),
            *_codes(Resource.USERS, [Action.READ, Action.UPDATE], Scope.OWN),
        ],
    },
}


async def install_default_roles(session: AsyncSession) -> dict[str, Role]:
    """Create the permission catalogue and default roles if missing.

    Idempotent: existing permissions and roles are reused and missing
    permissions are added to existing default roles.

    Args:
        session: Database session (flushed, not committed)

    Returns:
        Mapping of role name to Role
    """
    result = await session.execute(select(Permission))
    permissions = {p.code: p for p in result.scalars().all()}

    for resource, action, scope in PERMISSION_CATALOGUE:
        code = format_permission(resource, action, scope)
        if code not in permissions:
            permission = Permission.from_parts(
                resource, action, scope, description=f"{action} {resource} ({scope})"
            )
            session.add(permission)
            permissions[code] = permission

    result = await session.execute(select(Role))
    roles = {r.name: r for r in result.scalars().all()}

    for name, definition in DEFAULT_ROLES.items():
        role = roles.get(name)
        if role is None:
            role = Role(
                name=name,
                description=str(definition["description"]),
                is_system=True,
                permissions=[],
            )
            session.add(role)
            roles[name] = role
        held = {p.code for p in role.permissions}
        for code in definition["permissions"]:  # type: ignore[attr-defined]
            if code not in held:
                role.permissions.append(permissions[code])

    await session.flush()
    return roles
