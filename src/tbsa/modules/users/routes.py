"""User profile routes."""

from fastapi import APIRouter

from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.users.schemas import UserResponse, UserUpdate
from tbsa.modules.users.services import UserSvc


router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get own profile",
)
@require_permission("users", "read", "own")
async def get_profile(auth: CurrentAuth) -> ApiResponse[UserResponse]:
    return ok(UserResponse.model_validate(auth.user))


@router.patch(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Update own profile",
)
@require_permission("users", "update", "own")
async def update_profile(
    data: UserUpdate,
    auth: CurrentAuth,
    service: UserSvc,
) -> ApiResponse[UserResponse]:
    user = await service.update_profile(auth.user, data)
    return ok(UserResponse.model_validate(user), message="Profile updated")
