"""Water meter and reading routes."""

from uuid import UUID

from fastapi import APIRouter, status

from tbsa.api.dependencies import Pagination
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.water_meters.schemas import (
    WaterMeterBulkCreate,
    WaterMeterCreate,
    WaterMeterListResponse,
    WaterMeterResponse,
    WaterMeterUpdate,
    WaterReadingCreate,
    WaterReadingResponse,
)
from tbsa.modules.water_meters.services import WaterMeterSvc


router = APIRouter(tags=["water meters"])


@router.get(
    "/water-meters",
    response_model=ApiResponse[WaterMeterListResponse],
    summary="List water meters",
)
@require_permission("water_readings", "read", "own")
async def list_meters(
    auth: CurrentAuth,
    service: WaterMeterSvc,
    pagination: Pagination,
    apartment_id: UUID | None = None,
    building_id: UUID | None = None,
    is_active: bool | None = None,
) -> ApiResponse[WaterMeterListResponse]:
    meters, total = await service.list_meters(
        auth,
        apartment_id=apartment_id,
        building_id=building_id,
        is_active=is_active,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return ok(
        WaterMeterListResponse(
            items=[WaterMeterResponse.model_validate(m) for m in meters],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )
    )


@router.post(
    "/water-meters",
    response_model=ApiResponse[WaterMeterResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Install a water meter",
)
@require_permission("water_readings", "create", "building")
async def create_meter(
    data: WaterMeterCreate,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[WaterMeterResponse]:
    meter = await service.create_meter(auth, data)
    return ok(WaterMeterResponse.model_validate(meter), message="Water meter created")


@router.post(
    "/water-meters/bulk",
    response_model=ApiResponse[list[WaterMeterResponse]],
    status_code=status.HTTP_201_CREATED,
    summary="Install several water meters",
)
@require_permission("water_readings", "create", "building")
async def create_meters_bulk(
    data: WaterMeterBulkCreate,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[list[WaterMeterResponse]]:
    meters = await service.create_bulk(auth, data)
    return ok(
        [WaterMeterResponse.model_validate(m) for m in meters],
        message=f"Created {len(meters)} water meters",
    )


@router.get(
    "/water-meters/{meter_id}",
    response_model=ApiResponse[WaterMeterResponse],
    summary="Get a water meter",
)
@require_permission("water_readings", "read", "own")
async def get_meter(
    meter_id: UUID,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[WaterMeterResponse]:
    meter = await service.get_meter(auth, meter_id)
    return ok(WaterMeterResponse.model_validate(meter))


@router.patch(
    "/water-meters/{meter_id}",
    response_model=ApiResponse[WaterMeterResponse],
    summary="Update a water meter",
)
@require_permission("water_readings", "update", "building")
async def update_meter(
    meter_id: UUID,
    data: WaterMeterUpdate,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[WaterMeterResponse]:
    meter = await service.update_meter(auth, meter_id, data)
    return ok(WaterMeterResponse.model_validate(meter), message="Water meter updated")


@router.delete(
    "/water-meters/{meter_id}",
    response_model=ApiResponse[None],
    summary="Delete a water meter",
)
@require_permission("water_readings", "delete", "building")
async def delete_meter(
    meter_id: UUID,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[None]:
    await service.delete_meter(auth, meter_id)
    return ok(None, message="Water meter deleted")


@router.get(
    "/water-meters/{meter_id}/readings",
    response_model=ApiResponse[list[WaterReadingResponse]],
    summary="List a meter's readings",
)
@require_permission("water_readings", "read", "own")
async def list_readings(
    meter_id: UUID,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[list[WaterReadingResponse]]:
    readings = await service.list_readings(auth, meter_id)
    return ok([WaterReadingResponse.model_validate(r) for r in readings])


@router.post(
    "/water-meters/{meter_id}/readings",
    response_model=ApiResponse[WaterReadingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Submit a reading",
)
@require_permission("water_readings", "create", "own")
async def submit_reading(
    meter_id: UUID,
    data: WaterReadingCreate,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[WaterReadingResponse]:
    reading = await service.submit_reading(auth, meter_id, data)
    return ok(WaterReadingResponse.model_validate(reading), message="Reading submitted")


@router.post(
    "/water-readings/{reading_id}/validate",
    response_model=ApiResponse[WaterReadingResponse],
    summary="Validate a reading",
)
@require_permission("water_readings", "update", "building")
async def validate_reading(
    reading_id: UUID,
    auth: CurrentAuth,
    service: WaterMeterSvc,
) -> ApiResponse[WaterReadingResponse]:
    reading = await service.validate_reading(auth, reading_id)
    return ok(WaterReadingResponse.model_validate(reading), message="Reading validated")
