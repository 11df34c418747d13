"""Import every ORM model so they register with ``Base.metadata``.

Used by Alembic, the worker and the test suite, which need the complete
mapper graph without importing the HTTP layer.
"""

from tbsa.core.database.base import Base
from tbsa.core.permissions.models import Permission, Role, role_permissions
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.invite_codes.models import InviteCode
from tbsa.modules.organizations.models import Organization
from tbsa.modules.sessions.models import Session
from tbsa.modules.subscriptions.models import Module, SubscriptionPlan, plan_modules
from tbsa.modules.users.models import AdministratorProfile, OwnerProfile, User
from tbsa.modules.water_meters.models import WaterMeter, WaterReading


__all__ = [
    "AdministratorProfile",
    "Apartment",
    "Base",
    "Building",
    "InviteCode",
    "Module",
    "Organization",
    "OwnerProfile",
    "Permission",
    "Role",
    "Session",
    "SubscriptionPlan",
    "User",
    "WaterMeter",
    "WaterReading",
    "plan_modules",
    "role_permissions",
]
