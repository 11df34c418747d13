"""Role and permission administration routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from tbsa.api.dependencies import Pagination
from tbsa.core.auth.cookies import clear_auth_cookies
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.permissions.schemas import (
    PermissionResponse,
    RoleAssignment,
    RoleAssignmentResponse,
    RoleCreate,
    RoleResponse,
)
from tbsa.core.permissions.service import PermissionAdminSvc
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.users.schemas import UserListResponse, UserResponse


router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get(
    "",
    response_model=ApiResponse[list[PermissionResponse]],
    summary="List permissions",
)
@require_permission("roles", "read", "all")
async def list_permissions(
    auth: CurrentAuth,
    service: PermissionAdminSvc,
) -> ApiResponse[list[PermissionResponse]]:
    permissions = await service.list_permissions()
    return ok([PermissionResponse.model_validate(p) for p in permissions])


@router.get(
    "/roles",
    response_model=ApiResponse[list[RoleResponse]],
    summary="List roles",
)
@require_permission("roles", "read", "all")
async def list_roles(
    auth: CurrentAuth,
    service: PermissionAdminSvc,
) -> ApiResponse[list[RoleResponse]]:
    return ok(await service.list_roles())


@router.post(
    "/roles",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
@require_permission("roles", "create", "all")
async def create_role(
    data: RoleCreate,
    auth: CurrentAuth,
    service: PermissionAdminSvc,
) -> ApiResponse[RoleResponse]:
    return ok(await service.create_role(data), message="Role created")


@router.get(
    "/roles/{role_name}/users",
    response_model=ApiResponse[UserListResponse],
    summary="List users holding a role",
)
@require_permission("users", "read", "all")
async def list_role_users(
    role_name: str,
    auth: CurrentAuth,
    service: PermissionAdminSvc,
    pagination: Pagination,
) -> ApiResponse[UserListResponse]:
    users, total = await service.list_users(
        auth,
        role_name=role_name,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return ok(
        UserListResponse(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
    )


@router.get(
    "/users",
    response_model=ApiResponse[UserListResponse],
    summary="List users with their roles",
)
@require_permission("users", "read", "all")
async def list_users(
    auth: CurrentAuth,
    service: PermissionAdminSvc,
    pagination: Pagination,
    role: Annotated[str | None, Query(max_length=100)] = None,
) -> ApiResponse[UserListResponse]:
    users, total = await service.list_users(
        auth,
        role_name=role,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return ok(
        UserListResponse(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
    )


@router.put(
    "/users/{user_id}/role",
    response_model=ApiResponse[RoleAssignmentResponse],
    summary="Assign a role",
    description="Replaces the user's role and ends all of their sessions.",
)
@require_permission("admin_grant", "create", "all")
async def assign_role(
    user_id: UUID,
    data: RoleAssignment,
    auth: CurrentAuth,
    service: PermissionAdminSvc,
    response: Response,
) -> ApiResponse[RoleAssignmentResponse]:
    user, result = await service.assign_role(auth, user_id, data.role)
    if result.current_session_invalidated:
        clear_auth_cookies(response)
    return ok(
        RoleAssignmentResponse(
            user_id=user.id,
            role=data.role,
            invalidated_sessions=result.count,
        ),
        message="Role assigned",
    )
