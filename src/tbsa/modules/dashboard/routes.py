"""Dashboard routes."""

from fastapi import APIRouter

from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.dashboard.schemas import AdminDashboardStats, OwnerDashboardStats
from tbsa.modules.dashboard.services import DashboardSvc


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/admin/stats",
    response_model=ApiResponse[AdminDashboardStats],
    summary="Administrator dashboard statistics",
)
@require_permission("buildings", "read", "own")
async def admin_stats(
    auth: CurrentAuth,
    service: DashboardSvc,
) -> ApiResponse[AdminDashboardStats]:
    return ok(await service.admin_stats(auth))


@router.get(
    "/owner/stats",
    response_model=ApiResponse[OwnerDashboardStats],
    summary="Owner dashboard statistics",
)
@require_permission("apartments", "read", "own")
async def owner_stats(
    auth: CurrentAuth,
    service: DashboardSvc,
) -> ApiResponse[OwnerDashboardStats]:
    return ok(await service.owner_stats(auth))
