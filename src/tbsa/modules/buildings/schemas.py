"""Pydantic schemas for buildings."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tbsa.core.constants import (
    MAX_BUILDING_APARTMENTS,
    MAX_BUILDING_FLOORS,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
)
from tbsa.modules.buildings.models import BuildingType


class BuildingBase(BaseModel):
    """Fields shared by building create and response schemas."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    address: str = Field(..., min_length=1, max_length=255)
    city: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    type: BuildingType = BuildingType.RESIDENTIAL
    floors: int = Field(..., ge=1, le=MAX_BUILDING_FLOORS)
    total_apartments: int = Field(..., ge=1, le=MAX_BUILDING_APARTMENTS)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    reading_day: int = Field(25, ge=1, le=31)


class BuildingCreate(BuildingBase):
    """Schema for creating a building.

    ``administrator_id`` is only honoured for callers with organization-wide
    access; administrators always manage the buildings they create.
    """

    administrator_id: UUID | None = None


class BuildingUpdate(BaseModel):
    """Schema for a partial building update."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    type: BuildingType | None = None
    floors: int | None = Field(None, ge=1, le=MAX_BUILDING_FLOORS)
    total_apartments: int | None = Field(None, ge=1, le=MAX_BUILDING_APARTMENTS)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    reading_day: int | None = Field(None, ge=1, le=31)


class BuildingResponse(BuildingBase):
    """Schema for building response data."""

    id: UUID
    organization_id: UUID
    administrator_id: UUID | None = None
    apartment_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BuildingListResponse(BaseModel):
    """A page of buildings."""

    items: list[BuildingResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# Water consumption report
# ============================================================


class ConsumptionPeriod(BaseModel):
    total: float
    readings_count: int
    average: float


class LastMonthConsumption(ConsumptionPeriod):
    month: int
    year: int


class SixMonthConsumption(ConsumptionPeriod):
    monthly_average: float


class MonthlyConsumption(BaseModel):
    month: int
    year: int
    consumption: float
    readings_count: int


class WaterConsumptionReport(BaseModel):
    """Water consumption of a building.

    Averages are per occupied (owned) apartment.
    """

    building_id: UUID
    last_month: LastMonthConsumption
    six_months: SixMonthConsumption
    monthly_breakdown: list[MonthlyConsumption]
    total_apartments: int
    occupied_apartments: int
