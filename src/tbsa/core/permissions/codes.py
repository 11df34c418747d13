"""Permission code parsing and scope matching.

A permission code has the form ``resource:action:scope``, e.g.
``apartments:read:own``. Scopes form a hierarchy where a broader scope
satisfies every narrower one::

    all  >  building  >  own

A code without a scope (``roles:create``) only matches a request that
also has no scope.
"""

from collections.abc import Iterable
from enum import StrEnum
from typing import NamedTuple


class Scope(StrEnum):
    """Breadth of a permission."""

    ALL = "all"
    BUILDING = "building"
    OWN = "own"


class Resource(StrEnum):
    """Resources guarded by permissions."""

    BUILDINGS = "buildings"
    APARTMENTS = "apartments"
    USERS = "users"
    WATER_READINGS = "water_readings"
    INVITE_CODES = "invite_codes"
    ROLES = "roles"
    ADMIN_GRANT = "admin_grant"


class Action(StrEnum):
    """Actions that can be performed on a resource."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


SCOPE_RANK: dict[str, int] = {
    Scope.OWN: 0,
    Scope.BUILDING: 1,
    Scope.ALL: 2,
}

# Legacy rows may spell a missing scope as "null"
_NULL_SCOPES = {"", "null", "none"}


class PermissionCode(NamedTuple):
    """A parsed ``resource:action:scope`` code."""

    resource: str
    action: str
    scope: str | None = None

    def __str__(self) -> str:
        return format_permission(self.resource, self.action, self.scope)

    def satisfies(self, resource: str, action: str, scope: str | None = None) -> bool:
        """Check whether this held permission grants the requested access.

        Args:
            resource: Requested resource
            action: Requested action
            scope: Requested scope, or None for scope-less permissions

        Returns:
            True if resource and action match and the held scope covers
            the requested one
        """
        if self.resource != resource or self.action != action:
            return False
        if self.scope is None or scope is None:
            return self.scope is None and scope is None
        held = SCOPE_RANK.get(self.scope)
        wanted = SCOPE_RANK.get(scope)
        if held is None or wanted is None:
            return self.scope == scope
        return held >= wanted


def format_permission(resource: str, action: str, scope: str | None = None) -> str:
    """Build a permission code string.

    Args:
        resource: Resource name
        action: Action name
        scope: Optional scope

    Returns:
        ``resource:action:scope`` or ``resource:action`` when scope is None
    """
    if scope is None:
        return f"{resource}:{action}"
    return f"{resource}:{action}:{scope}"


def parse_permission(code: str) -> PermissionCode:
    """Parse a permission code string.

    Args:
        code: A ``resource:action[:scope]`` string

    Returns:
        The parsed code

    Raises:
        ValueError: If the code does not have two or three non-empty parts
    """
    parts = code.strip().split(":")
    if len(parts) not in (2, 3) or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid permission code: {code!r}")

    scope: str | None = None
    if len(parts) == 3 and parts[2].lower() not in _NULL_SCOPES:
        scope = parts[2]
    return PermissionCode(resource=parts[0], action=parts[1], scope=scope)


def _parse_all(codes: Iterable[str]) -> list[PermissionCode]:
    parsed = []
    for code in codes:
        try:
            parsed.append(parse_permission(code))
        except ValueError:
            continue
    return parsed


def has_permission(
    codes: Iterable[str],
    resource: str,
    action: str,
    scope: str | None = None,
) -> bool:
    """Check a set of held codes against a requested permission.

    Malformed codes are ignored; an empty set denies.

    Args:
        codes: Permission codes held by the user
        resource: Requested resource
        action: Requested action
        scope: Requested scope

    Returns:
        True if any held code satisfies the request
    """
    return any(p.satisfies(resource, action, scope) for p in _parse_all(codes))


def broadest_scope(codes: Iterable[str], resource: str, action: str) -> Scope | None:
    """Return the widest scope held for a resource/action pair.

    Services use this to decide how far a query may reach.

    Args:
        codes: Permission codes held by the user
        resource: Resource name
        action: Action name

    Returns:
        The broadest held Scope, or None if the pair is not granted at all
    """
    best: Scope | None = None
    for p in _parse_all(codes):
        if p.resource != resource or p.action != action or p.scope is None:
            continue
        if p.scope not in SCOPE_RANK:
            continue
        if best is None or SCOPE_RANK[p.scope] > SCOPE_RANK[best]:
            best = Scope(p.scope)
    return best
