"""Pydantic schemas for apartments."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tbsa.core.constants import (
    MAX_APARTMENT_BULK_ITEMS,
    MAX_APARTMENT_FLOOR,
    MAX_APARTMENT_OCCUPANTS,
    MAX_APARTMENT_SURFACE,
    MAX_DESCRIPTION_LENGTH,
)


APARTMENT_NUMBER_PATTERN = r"^[A-Za-z0-9]{1,10}$"


class ApartmentFields(BaseModel):
    """Fields describing one apartment."""

    number: str = Field(..., pattern=APARTMENT_NUMBER_PATTERN)
    floor: int = Field(0, ge=0, le=MAX_APARTMENT_FLOOR)
    occupant_count: int = Field(0, ge=0, le=MAX_APARTMENT_OCCUPANTS)
    surface: float | None = Field(None, gt=0, le=MAX_APARTMENT_SURFACE)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class ApartmentCreate(ApartmentFields):
    """Schema for creating an apartment."""

    building_id: UUID


class ApartmentBulkCreate(BaseModel):
    """Schema for creating many apartments of one building."""

    building_id: UUID
    apartments: list[ApartmentFields] = Field(
        ..., min_length=1, max_length=MAX_APARTMENT_BULK_ITEMS
    )


class ApartmentUpdate(BaseModel):
    """Schema for a partial apartment update.

    Owners may only change ``occupant_count`` and ``description``.
    """

    number: str | None = Field(None, pattern=APARTMENT_NUMBER_PATTERN)
    floor: int | None = Field(None, ge=0, le=MAX_APARTMENT_FLOOR)
    occupant_count: int | None = Field(None, ge=0, le=MAX_APARTMENT_OCCUPANTS)
    surface: float | None = Field(None, gt=0, le=MAX_APARTMENT_SURFACE)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class ApartmentResponse(BaseModel):
    """Schema for apartment response data."""

    id: UUID
    building_id: UUID
    number: str
    floor: int
    occupant_count: int
    surface: float | None = None
    description: str | None = None
    owner_id: UUID | None = None
    is_owned: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApartmentListResponse(BaseModel):
    """A page of apartments."""

    items: list[ApartmentResponse]
    total: int
    page: int
    page_size: int


class BulkItemError(BaseModel):
    """Why one item of a bulk request was not created."""

    index: int
    number: str
    code: str
    error: str


class ApartmentBulkResult(BaseModel):
    """Outcome of a bulk creation; valid items are created even if others fail."""

    total: int
    success_count: int
    error_count: int
    created: list[ApartmentResponse]
    errors: list[BulkItemError]


class ApartmentStats(BaseModel):
    """Aggregates over the apartments visible to the caller."""

    total_apartments: int
    owned_apartments: int
    unowned_apartments: int
    total_occupants: int
    total_surface: float
    buildings: int
