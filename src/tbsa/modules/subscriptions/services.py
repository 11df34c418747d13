"""Subscription service: plan catalogue and the caller's current plan."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import select

from tbsa.api.dependencies import DBSession
from tbsa.core.auth.dependencies import AuthContext
from tbsa.core.errors import NotFoundError
from tbsa.modules.subscriptions import limits
from tbsa.modules.subscriptions.models import Module, SubscriptionPlan
from tbsa.modules.subscriptions.schemas import (
    CurrentSubscriptionResponse,
    PlanResponse,
    PlanUsage,
)


class SubscriptionService:
    """Read access to plans, modules and organization usage."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    async def list_plans(self) -> list[SubscriptionPlan]:
        """List active plans from cheapest to most expensive."""
        stmt = (
            select(SubscriptionPlan)
            .where(SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.price)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def list_modules(self) -> list[Module]:
        stmt = select(Module).where(Module.is_active.is_(True)).order_by(Module.name)
        return list((await self.db.execute(stmt)).scalars().all())

    async def current(self, auth: AuthContext) -> CurrentSubscriptionResponse:
        """Describe the caller organization's plan and consumption.

        Raises:
            NotFoundError: If the caller belongs to no organization
        """
        organization_id = auth.organization_id
        if organization_id is None:
            raise NotFoundError(
                "You do not belong to an organization",
                error_code="ORGANIZATION_NOT_FOUND",
                resource="organization",
            )

        plan = await limits.get_plan(self.db, organization_id)
        usage = PlanUsage(
            buildings=await limits.count_buildings(self.db, organization_id),
            apartments=await limits.count_apartments(self.db, organization_id),
            max_buildings=plan.max_buildings if plan else None,
            max_apartments=plan.max_apartments if plan else None,
        )
        return CurrentSubscriptionResponse(
            organization_id=organization_id,
            plan=PlanResponse.model_validate(plan) if plan else None,
            usage=usage,
        )


# Type alias for dependency injection
SubscriptionSvc = Annotated[SubscriptionService, Depends(SubscriptionService)]
