"""Default modules and subscription plans installed by the seed script."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.modules.subscriptions.models import Module, SubscriptionPlan


DEFAULT_MODULES: list[dict[str, str]] = [
    {
        "code": "USER_MANAGEMENT",
        "name": "User Management",
        "description": "Manage users, roles, and permissions",
    },
    {
        "code": "BUILDING_MANAGEMENT",
        "name": "Building Management",
        "description": "Manage buildings and apartments",
    },
    {
        "code": "WATER_READING",
        "name": "Water Reading",
        "description": "Water meter readings and management",
    },
    {"code": "BILLING", "name": "Billing", "description": "Billing and payment management"},
    {
        "code": "NOTIFICATIONS",
        "name": "Notifications",
        "description": "Email and SMS notifications",
    },
    {"code": "REPORTS", "name": "Reports", "description": "Analytics and reporting"},
    {
        "code": "API_ACCESS",
        "name": "API Access",
        "description": "API access and integrations",
    },
    {
        "code": "PRIORITY_SUPPORT",
        "name": "Priority Support",
        "description": "Priority customer support",
    },
]

_CORE_MODULES = ["USER_MANAGEMENT", "BUILDING_MANAGEMENT", "WATER_READING", "BILLING"]

DEFAULT_PLANS: list[dict[str, Any]] = [
    {
        "name": "Starter",
        "price": 499,
        "max_buildings": 1,
        "max_apartments": 50,
        "modules": [*_CORE_MODULES, "REPORTS"],
        "features": {
            "waterReadings": True,
            "automaticBilling": True,
            "basicReports": True,
            "emailSupport": True,
            "maxUsers": 5,
            "apiAccess": False,
            "prioritySupport": False,
            "customReports": False,
            "smsNotifications": False,
            "dedicatedManager": False,
        },
    },
    {
        "name": "Professional",
        "price": 1299,
        "max_buildings": 3,
        "max_apartments": 200,
        "modules": [*_CORE_MODULES, "NOTIFICATIONS", "REPORTS"],
        "features": {
            "waterReadings": True,
            "automaticBilling": True,
            "basicReports": True,
            "advancedReports": True,
            "emailSupport": True,
            "phoneSupport": True,
            "maxUsers": 15,
            "automaticNotifications": True,
            "apiAccess": False,
            "prioritySupport": False,
            "customReports": False,
            "smsNotifications": True,
            "dedicatedManager": True,
        },
    },
    {
        "name": "Enterprise",
        "price": 1999,
        "max_buildings": None,
        "max_apartments": 500,
        "modules": [m["code"] for m in DEFAULT_MODULES],
        "features": {
            "waterReadings": True,
            "automaticBilling": True,
            "basicReports": True,
            "advancedReports": True,
            "customReports": True,
            "emailSupport": True,
            "phoneSupport": True,
            "prioritySupport": True,
            "maxUsers": None,
            "automaticNotifications": True,
            "customApi": True,
            "apiAccess": True,
            "teamTraining": True,
            "customImplementation": True,
            "smsNotifications": True,
            "dedicatedManager": True,
        },
    },
]


async def install_default_plans(session: AsyncSession) -> dict[str, SubscriptionPlan]:
    """Create or update the default modules and plans.

    Safe to run repeatedly: existing rows are matched by module code and
    plan name and updated in place.

    Args:
        session: Database session; the caller commits

    Returns:
        Plans keyed by name
    """
    modules: dict[str, Module] = {
        m.code: m for m in (await session.execute(select(Module))).scalars().all()
    }
    for data in DEFAULT_MODULES:
        module = modules.get(data["code"])
        if module is None:
            module = Module(**data)
            session.add(module)
            modules[module.code] = module
        else:
            module.name = data["name"]
            module.description = data["description"]
    await session.flush()

    plans: dict[str, SubscriptionPlan] = {
        p.name: p for p in (await session.execute(select(SubscriptionPlan))).scalars().all()
    }
    for data in DEFAULT_PLANS:
        fields = {k: v for k, v in data.items() if k != "modules"}
        plan = plans.get(data["name"])
        if plan is None:
            plan = SubscriptionPlan(**fields, modules=[])
            session.add(plan)
            plans[plan.name] = plan
        else:
            for key, value in fields.items():
                setattr(plan, key, value)
        plan.modules = [modules[code] for code in data["modules"]]
    await session.flush()

    return plans
