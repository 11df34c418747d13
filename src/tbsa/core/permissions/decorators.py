"""Permission decorators for route protection.

The decorators read the ``auth`` keyword argument of the route (a
``CurrentAuth`` dependency) and evaluate the permission snapshot carried
by the access token. No database access is needed.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

import structlog

from tbsa.core.constants import SUPER_ADMIN_ROLE
from tbsa.core.errors import ForbiddenError, UnauthorizedError
from tbsa.core.permissions.checker import snapshot_allows
from tbsa.core.permissions.codes import format_permission


if TYPE_CHECKING:
    from fastapi import Request

    from tbsa.core.auth.dependencies import AuthContext


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

PermissionSpec = tuple[str, str, str | None]


def _get_auth(kwargs: dict[str, Any]) -> tuple["AuthContext | None", "Request | None"]:
    """Extract the auth context and request from route kwargs."""
    auth = cast("AuthContext | None", kwargs.get("auth"))
    request = cast("Request | None", kwargs.get("request"))
    return auth, request


def _check(
    auth: "AuthContext",
    permissions: list[PermissionSpec],
    require_all: bool,
    request: "Request | None" = None,
) -> bool:
    if auth.role == SUPER_ADMIN_ROLE:
        logger.info(
            "super_admin_bypass",
            user_id=str(auth.user_id),
            permissions=[format_permission(*p) for p in permissions],
            endpoint=request.url.path if request else "unknown",
        )
        return True

    return snapshot_allows(auth.role, auth.permissions, permissions, require_all)


def _guard(
    permissions: list[PermissionSpec],
    require_all: bool,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            auth, request = _get_auth(kwargs)

            if auth is None:
                raise UnauthorizedError(
                    "Authentication required",
                    error_code="AUTH_REQUIRED",
                )

            if not _check(auth, permissions, require_all, request):
                perm_strs = [format_permission(*p) for p in permissions]
                logger.info(
                    "permission_denied",
                    user_id=str(auth.user_id),
                    role=auth.role,
                    required=perm_strs,
                )
                if require_all:
                    message = f"Missing required permissions: {', '.join(perm_strs)}"
                else:
                    message = (
                        f"Missing required permission. Need one of: {', '.join(perm_strs)}"
                    )
                raise ForbiddenError(
                    message,
                    error_code="PERMISSION_DENIED",
                    details={"required_permissions": perm_strs},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    resource: str,
    action: str,
    scope: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    A held permission with a broader scope also satisfies the requirement
    (``all`` covers ``building`` covers ``own``).

    Usage:
        @router.delete("/buildings/{building_id}")
        @require_permission("buildings", "delete", "own")
        async def delete_building(building_id: UUID, auth: CurrentAuth):
            ...

    Args:
        resource: The resource being accessed (e.g., "buildings")
        action: The action being performed (e.g., "delete")
        scope: The narrowest scope that grants access

    Returns:
        Decorator function

    Raises:
        ForbiddenError: If the session lacks the required permission
    """
    return _guard([(resource, action, scope)], require_all=True)


def require_any_permission(
    permissions: list[PermissionSpec],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the specified permissions.

    Usage:
        @router.get("/water-meters")
        @require_any_permission([
            ("water_readings", "read", "own"),
            ("water_readings", "read", "building"),
        ])
        async def list_meters(auth: CurrentAuth):
            ...

    Args:
        permissions: List of (resource, action, scope) tuples

    Returns:
        Decorator function
    """
    return _guard(permissions, require_all=False)


def require_all_permissions(
    permissions: list[PermissionSpec],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires all of the specified permissions.

    Args:
        permissions: List of (resource, action, scope) tuples

    Returns:
        Decorator function
    """
    return _guard(permissions, require_all=True)
