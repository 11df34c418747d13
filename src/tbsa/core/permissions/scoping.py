"""Translate a permission scope into row filters.

Scopes mean:

- ``all``: every row of the caller's organization, or every row at all for
  a super admin without an organization
- ``building``: rows of buildings administered by the caller's
  administrator profile
- ``own``: for buildings, the buildings the caller administers or lives
  in; for everything below a building, the apartments the caller owns
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ColumnElement, false, or_, select, true

from tbsa.core.constants import SUPER_ADMIN_ROLE
from tbsa.core.errors import ForbiddenError
from tbsa.core.permissions.codes import Scope, broadest_scope, format_permission
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


@dataclass(frozen=True)
class AccessScope:
    """How far a caller reaches for one resource/action pair."""

    scope: Scope
    organization_id: UUID | None = None
    administrator_id: UUID | None = None
    owner_id: UUID | None = None
    is_super_admin: bool = False

    @property
    def is_global(self) -> bool:
        return self.is_super_admin and self.organization_id is None

    def building_filter(self) -> ColumnElement[bool]:
        """Condition on ``Building`` rows visible within this scope."""
        if self.scope == Scope.ALL:
            if self.is_global:
                return true()
            if self.organization_id is None:
                return false()
            return Building.organization_id == self.organization_id

        conditions: list[ColumnElement[bool]] = []
        if self.administrator_id is not None:
            conditions.append(Building.administrator_id == self.administrator_id)
        if self.scope == Scope.OWN and self.owner_id is not None:
            conditions.append(
                Building.id.in_(
                    select(Apartment.building_id).where(
                        Apartment.owner_id == self.owner_id
                    )
                )
            )
        return or_(*conditions) if conditions else false()

    def apartment_filter(self) -> ColumnElement[bool]:
        """Condition on ``Apartment`` rows visible within this scope.

        The query must join ``Building`` on ``Apartment.building_id``.
        """
        if self.scope == Scope.ALL:
            return self.building_filter()
        if self.scope == Scope.BUILDING:
            if self.administrator_id is None:
                return false()
            return Building.administrator_id == self.administrator_id
        if self.owner_id is None:
            return false()
        return Apartment.owner_id == self.owner_id

    def covers_building(self, building: Building) -> bool:
        """Check a loaded building against this scope without a query.

        Only meaningful for the ``all`` and ``building`` scopes; ``own``
        access to a building through an owned apartment needs a query.
        """
        if self.scope == Scope.ALL:
            return self.is_global or building.organization_id == self.organization_id
        return (
            self.administrator_id is not None
            and building.administrator_id == self.administrator_id
        )


def resolve_scope(auth: "AuthContext", resource: str, action: str) -> AccessScope:
    """Compute the caller's reach for a resource/action pair.

    Args:
        auth: The authenticated caller
        resource: Resource name
        action: Action name

    Returns:
        The broadest scope granted by the session's permission snapshot

    Raises:
        ForbiddenError: If the snapshot grants the pair at no scope
    """
    user = auth.user
    admin_profile = user.administrator_profile
    owner_profile = user.owner_profile
    is_super_admin = auth.role == SUPER_ADMIN_ROLE

    scope = Scope.ALL if is_super_admin else broadest_scope(
        auth.permissions, resource, action
    )
    if scope is None:
        raise ForbiddenError(
            "Insufficient permissions",
            error_code="PERMISSION_DENIED",
            details={"required_permissions": [format_permission(resource, action, Scope.OWN)]},
        )

    return AccessScope(
        scope=scope,
        organization_id=user.organization_id,
        administrator_id=admin_profile.id if admin_profile else None,
        owner_id=owner_profile.id if owner_profile else None,
        is_super_admin=is_super_admin,
    )
