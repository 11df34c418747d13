"""Building routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tbsa.api.dependencies import Pagination
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.apartments.schemas import ApartmentResponse
from tbsa.modules.buildings.models import Building, BuildingType
from tbsa.modules.buildings.schemas import (
    BuildingCreate,
    BuildingListResponse,
    BuildingResponse,
    BuildingUpdate,
    WaterConsumptionReport,
)
from tbsa.modules.buildings.services import BuildingSvc


router = APIRouter(prefix="/buildings", tags=["buildings"])


def _to_response(building: Building, apartment_count: int = 0) -> BuildingResponse:
    return BuildingResponse.model_validate(building).model_copy(
        update={"apartment_count": apartment_count}
    )


@router.get(
    "",
    response_model=ApiResponse[BuildingListResponse],
    summary="List buildings",
)
@require_permission("buildings", "read", "own")
async def list_buildings(
    auth: CurrentAuth,
    service: BuildingSvc,
    pagination: Pagination,
    search: Annotated[str | None, Query(max_length=100)] = None,
    city: str | None = None,
    building_type: Annotated[BuildingType | None, Query(alias="type")] = None,
) -> ApiResponse[BuildingListResponse]:
    rows, total = await service.list_buildings(
        auth,
        search=search,
        city=city,
        building_type=building_type,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return ok(
        BuildingListResponse(
            items=[_to_response(b, count) for b, count in rows],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[BuildingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a building",
)
@require_permission("buildings", "create", "own")
async def create_building(
    data: BuildingCreate,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[BuildingResponse]:
    building = await service.create_building(auth, data)
    return ok(_to_response(building), message="Building created")


@router.get(
    "/{building_id}",
    response_model=ApiResponse[BuildingResponse],
    summary="Get a building",
)
@require_permission("buildings", "read", "own")
async def get_building(
    building_id: UUID,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[BuildingResponse]:
    building = await service.get_building(auth, building_id)
    counts = await service.repo.apartment_counts([building.id])
    return ok(_to_response(building, counts.get(building.id, 0)))


@router.patch(
    "/{building_id}",
    response_model=ApiResponse[BuildingResponse],
    summary="Update a building",
)
@require_permission("buildings", "update", "own")
async def update_building(
    building_id: UUID,
    data: BuildingUpdate,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[BuildingResponse]:
    building = await service.update_building(auth, building_id, data)
    counts = await service.repo.apartment_counts([building.id])
    return ok(_to_response(building, counts.get(building.id, 0)), message="Building updated")


@router.delete(
    "/{building_id}",
    response_model=ApiResponse[None],
    summary="Delete a building",
    description="Deletes the building together with its apartments, meters and readings.",
)
@require_permission("buildings", "delete", "own")
async def delete_building(
    building_id: UUID,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[None]:
    await service.delete_building(auth, building_id)
    return ok(None, message="Building deleted")


@router.get(
    "/{building_id}/apartments",
    response_model=ApiResponse[list[ApartmentResponse]],
    summary="List a building's apartments",
)
@require_permission("apartments", "read", "building")
async def list_building_apartments(
    building_id: UUID,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[list[ApartmentResponse]]:
    apartments = await service.list_apartments(auth, building_id)
    return ok([ApartmentResponse.model_validate(a) for a in apartments])


@router.get(
    "/{building_id}/water-consumption",
    response_model=ApiResponse[WaterConsumptionReport],
    summary="Building water consumption",
    description="Last month, last six months and a monthly breakdown of consumption.",
)
@require_permission("water_readings", "read", "building")
async def building_water_consumption(
    building_id: UUID,
    auth: CurrentAuth,
    service: BuildingSvc,
) -> ApiResponse[WaterConsumptionReport]:
    return ok(await service.water_consumption(auth, building_id))
