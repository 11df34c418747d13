"""Pydantic schemas for subscription plans."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ModuleResponse(BaseModel):
    """A feature module that plans can include."""

    id: UUID
    code: str
    name: str
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanResponse(BaseModel):
    """A subscription plan with its limits and modules."""

    id: UUID
    name: str
    description: str | None = None
    price: int
    currency: str
    max_buildings: int | None = None
    max_apartments: int | None = None
    features: dict[str, Any]
    modules: list[ModuleResponse]

    model_config = ConfigDict(from_attributes=True)


class PlanUsage(BaseModel):
    """How much of a plan an organization consumes."""

    buildings: int
    apartments: int
    max_buildings: int | None = None
    max_apartments: int | None = None


class CurrentSubscriptionResponse(BaseModel):
    """The caller organization's plan, or none."""

    organization_id: UUID
    plan: PlanResponse | None = None
    usage: PlanUsage
