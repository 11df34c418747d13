"""Subscription plan limits on buildings and apartments."""

from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.core.errors import ForbiddenError
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.organizations.models import Organization
from tbsa.modules.subscriptions.models import SubscriptionPlan


logger = structlog.get_logger()


async def get_plan(db: AsyncSession, organization_id: UUID | None) -> SubscriptionPlan | None:
    """Return the organization's subscription plan, if it has one."""
    if organization_id is None:
        return None
    organization = await db.get(Organization, organization_id)
    if organization is None:
        return None
    return organization.subscription_plan


async def count_buildings(db: AsyncSession, organization_id: UUID) -> int:
    stmt = select(func.count(Building.id)).where(
        Building.organization_id == organization_id
    )
    return (await db.execute(stmt)).scalar_one()


async def count_apartments(db: AsyncSession, organization_id: UUID) -> int:
    stmt = (
        select(func.count(Apartment.id))
        .join(Building, Building.id == Apartment.building_id)
        .where(Building.organization_id == organization_id)
    )
    return (await db.execute(stmt)).scalar_one()


def _reject(resource: str, limit: int, current: int, adding: int) -> None:
    logger.info(
        "plan_limit_reached",
        resource=resource,
        limit=limit,
        current=current,
        adding=adding,
    )
    raise ForbiddenError(
        f"Your subscription plan allows at most {limit} {resource}",
        error_code="PLAN_LIMIT_REACHED",
        details={"resource": resource, "limit": limit, "current": current},
    )


async def ensure_building_capacity(
    db: AsyncSession,
    organization_id: UUID | None,
    adding: int = 1,
) -> None:
    """Refuse to exceed the plan's building limit.

    Organizations without a plan, and plans with no limit, are unlimited.

    Raises:
        ForbiddenError: With code PLAN_LIMIT_REACHED
    """
    plan = await get_plan(db, organization_id)
    if plan is None or plan.max_buildings is None or organization_id is None:
        return
    current = await count_buildings(db, organization_id)
    if current + adding > plan.max_buildings:
        _reject("buildings", plan.max_buildings, current, adding)


async def ensure_apartment_capacity(
    db: AsyncSession,
    organization_id: UUID | None,
    adding: int = 1,
) -> None:
    """Refuse to exceed the plan's apartment limit.

    Raises:
        ForbiddenError: With code PLAN_LIMIT_REACHED
    """
    plan = await get_plan(db, organization_id)
    if plan is None or plan.max_apartments is None or organization_id is None:
        return
    current = await count_apartments(db, organization_id)
    if current + adding > plan.max_apartments:
        _reject("apartments", plan.max_apartments, current, adding)
