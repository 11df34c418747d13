"""Apartment routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tbsa.api.dependencies import Pagination
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.apartments.schemas import (
    ApartmentBulkCreate,
    ApartmentBulkResult,
    ApartmentCreate,
    ApartmentListResponse,
    ApartmentResponse,
    ApartmentStats,
    ApartmentUpdate,
)
from tbsa.modules.apartments.services import ApartmentSvc


router = APIRouter(prefix="/apartments", tags=["apartments"])


@router.get(
    "",
    response_model=ApiResponse[ApartmentListResponse],
    summary="List apartments",
)
@require_permission("apartments", "read", "own")
async def list_apartments(
    auth: CurrentAuth,
    service: ApartmentSvc,
    pagination: Pagination,
    building_id: UUID | None = None,
    owned: bool | None = None,
    search: Annotated[str | None, Query(max_length=10)] = None,
) -> ApiResponse[ApartmentListResponse]:
    apartments, total = await service.list_apartments(
        auth,
        building_id=building_id,
        owned=owned,
        search=search,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return ok(
        ApartmentListResponse(
            items=[ApartmentResponse.model_validate(a) for a in apartments],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[ApartmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create an apartment",
)
@require_permission("apartments", "create", "building")
async def create_apartment(
    data: ApartmentCreate,
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[ApartmentResponse]:
    apartment = await service.create_apartment(auth, data)
    return ok(ApartmentResponse.model_validate(apartment), message="Apartment created")


@router.post(
    "/bulk",
    response_model=ApiResponse[ApartmentBulkResult],
    status_code=status.HTTP_201_CREATED,
    summary="Create apartments in bulk",
    description="Creates every valid item and reports the others per index.",
)
@require_permission("apartments", "create", "building")
async def create_apartments_bulk(
    data: ApartmentBulkCreate,
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[ApartmentBulkResult]:
    result = await service.create_bulk(auth, data)
    return ok(
        result,
        message=f"Created {result.success_count} of {result.total} apartments",
    )


@router.get(
    "/stats",
    response_model=ApiResponse[ApartmentStats],
    summary="Apartment statistics",
)
@require_permission("apartments", "read", "own")
async def apartment_stats(
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[ApartmentStats]:
    return ok(await service.stats(auth))


@router.get(
    "/{apartment_id}",
    response_model=ApiResponse[ApartmentResponse],
    summary="Get an apartment",
)
@require_permission("apartments", "read", "own")
async def get_apartment(
    apartment_id: UUID,
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[ApartmentResponse]:
    apartment = await service.get_apartment(auth, apartment_id)
    return ok(ApartmentResponse.model_validate(apartment))


@router.patch(
    "/{apartment_id}",
    response_model=ApiResponse[ApartmentResponse],
    summary="Update an apartment",
)
@require_permission("apartments", "update", "own")
async def update_apartment(
    apartment_id: UUID,
    data: ApartmentUpdate,
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[ApartmentResponse]:
    apartment = await service.update_apartment(auth, apartment_id, data)
    return ok(ApartmentResponse.model_validate(apartment), message="Apartment updated")


@router.delete(
    "/{apartment_id}",
    response_model=ApiResponse[None],
    summary="Delete an apartment",
)
@require_permission("apartments", "delete", "building")
async def delete_apartment(
    apartment_id: UUID,
    auth: CurrentAuth,
    service: ApartmentSvc,
) -> ApiResponse[None]:
    await service.delete_apartment(auth, apartment_id)
    return ok(None, message="Apartment deleted")
