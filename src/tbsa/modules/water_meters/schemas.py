"""Pydantic schemas for water meters and readings."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tbsa.core.constants import MAX_DESCRIPTION_LENGTH, MAX_METER_BULK_ITEMS, MAX_METER_VALUE


SERIAL_NUMBER_PATTERN = r"^[A-Za-z0-9_-]{1,50}$"


# ============================================================
# Water Meter Schemas
# ============================================================


class WaterMeterFields(BaseModel):
    """Fields describing one meter."""

    serial_number: str = Field(..., pattern=SERIAL_NUMBER_PATTERN)
    location: str | None = Field(None, max_length=100)
    brand: str | None = Field(None, max_length=50)
    model: str | None = Field(None, max_length=50)
    initial_value: float = Field(0, ge=0, le=MAX_METER_VALUE)


class WaterMeterCreate(WaterMeterFields):
    """Schema for installing a meter in an apartment.

    A positive ``initial_value`` is recorded as the meter's first reading.
    """

    apartment_id: UUID


class WaterMeterBulkCreate(BaseModel):
    """Schema for installing several meters in one apartment."""

    apartment_id: UUID
    meters: list[WaterMeterFields] = Field(..., min_length=1, max_length=MAX_METER_BULK_ITEMS)


class WaterMeterUpdate(BaseModel):
    location: str | None = Field(None, max_length=100)
    brand: str | None = Field(None, max_length=50)
    model: str | None = Field(None, max_length=50)
    is_active: bool | None = None


class WaterMeterResponse(BaseModel):
    """Schema for water meter response data."""

    id: UUID
    apartment_id: UUID
    serial_number: str
    location: str | None = None
    brand: str | None = None
    model: str | None = None
    initial_value: float
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WaterMeterListResponse(BaseModel):
    """A page of water meters."""

    items: list[WaterMeterResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# Reading Schemas
# ============================================================


class WaterReadingCreate(BaseModel):
    """Schema for submitting a meter index.

    The billing month and year are taken from ``reading_date``, which
    defaults to now.
    """

    value: float = Field(..., ge=0, le=MAX_METER_VALUE)
    reading_date: datetime | None = None
    notes: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class WaterReadingResponse(BaseModel):
    """Schema for reading response data."""

    id: UUID
    water_meter_id: UUID
    value: float
    consumption: float | None = None
    reading_date: datetime
    month: int
    year: int
    notes: str | None = None
    submitted_by_id: UUID | None = None
    validated: bool
    validated_by_id: UUID | None = None
    validated_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
