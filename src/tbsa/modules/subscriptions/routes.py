"""Subscription plan routes."""

from fastapi import APIRouter

from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.subscriptions.schemas import (
    CurrentSubscriptionResponse,
    ModuleResponse,
    PlanResponse,
)
from tbsa.modules.subscriptions.services import SubscriptionSvc


router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get(
    "/plans",
    response_model=ApiResponse[list[PlanResponse]],
    summary="List subscription plans",
)
async def list_plans(service: SubscriptionSvc) -> ApiResponse[list[PlanResponse]]:
    plans = await service.list_plans()
    return ok([PlanResponse.model_validate(p) for p in plans])


@router.get(
    "/modules",
    response_model=ApiResponse[list[ModuleResponse]],
    summary="List feature modules",
)
async def list_modules(service: SubscriptionSvc) -> ApiResponse[list[ModuleResponse]]:
    modules = await service.list_modules()
    return ok([ModuleResponse.model_validate(m) for m in modules])


@router.get(
    "/current",
    response_model=ApiResponse[CurrentSubscriptionResponse],
    summary="Current organization plan",
    description="Returns the caller organization's plan with building and apartment usage.",
)
async def current_subscription(
    auth: CurrentAuth,
    service: SubscriptionSvc,
) -> ApiResponse[CurrentSubscriptionResponse]:
    return ok(await service.current(auth))
