"""Water meter service: meters, readings and validation."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from tbsa.api.dependencies import DBSession
from tbsa.core.database.base import utcnow
from tbsa.core.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from tbsa.core.permissions.codes import Action, Resource
from tbsa.core.permissions.scoping import resolve_scope
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.apartments.repos import ApartmentRepository
from tbsa.modules.water_meters.models import WaterMeter, WaterReading
from tbsa.modules.water_meters.repos import WaterMeterRepository
from tbsa.modules.water_meters.schemas import (
    WaterMeterBulkCreate,
    WaterMeterCreate,
    WaterMeterFields,
    WaterMeterUpdate,
    WaterReadingCreate,
)


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


logger = structlog.get_logger()


class WaterMeterService:
    """Service for water meters and their readings.

    Meters and readings share the ``water_readings`` permissions and are
    scoped through the apartment they belong to.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = WaterMeterRepository(db)
        self.apartments = ApartmentRepository(db)

    # ============================================================
    # Meters
    # ============================================================

    async def get_meter(
        self,
        auth: "AuthContext",
        meter_id: UUID,
        action: str = Action.READ,
    ) -> WaterMeter:
        """Get a meter the caller may act on.

        Raises:
            NotFoundError: If the meter is missing or outside the scope
        """
        access = resolve_scope(auth, Resource.WATER_READINGS, action)
        meter = await self.repo.get_visible(meter_id, access.apartment_filter())
        if meter is None:
            raise NotFoundError(
                "Water meter not found",
                error_code="WATER_METER_NOT_FOUND",
                resource="water_meter",
                resource_id=str(meter_id),
            )
        return meter

    async def list_meters(
        self,
        auth: "AuthContext",
        apartment_id: UUID | None = None,
        building_id: UUID | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[WaterMeter], int]:
        access = resolve_scope(auth, Resource.WATER_READINGS, Action.READ)
        return await self.repo.list_visible(
            access.apartment_filter(),
            apartment_id=apartment_id,
            building_id=building_id,
            is_active=is_active,
            offset=offset,
            limit=limit,
        )

    async def create_meter(self, auth: "AuthContext", data: WaterMeterCreate) -> WaterMeter:
        """Install one meter.

        Raises:
            NotFoundError: If the apartment is missing or outside the scope
            ConflictError: If the serial number is already registered
        """
        apartment = await self._target_apartment(auth, data.apartment_id)
        await self._ensure_serials_free([data.serial_number])
        meter = await self._install(auth, apartment, data)
        return meter

    async def create_bulk(
        self,
        auth: "AuthContext",
        data: WaterMeterBulkCreate,
    ) -> list[WaterMeter]:
        """Install several meters in one apartment.

        The request is all or nothing: any duplicate serial number, within
        the request or already registered, rejects every meter.

        Raises:
            NotFoundError: If the apartment is missing or outside the scope
            ConflictError: If any serial number is taken
        """
        apartment = await self._target_apartment(auth, data.apartment_id)
        serials = [m.serial_number for m in data.meters]
        duplicates = sorted({s for s in serials if serials.count(s) > 1})
        if duplicates:
            raise ConflictError(
                "Serial numbers must be unique",
                error_code="SERIAL_NUMBER_TAKEN",
                details={"serial_numbers": duplicates},
            )
        await self._ensure_serials_free(serials)

        return [await self._install(auth, apartment, fields) for fields in data.meters]

    async def update_meter(
        self,
        auth: "AuthContext",
        meter_id: UUID,
        data: WaterMeterUpdate,
    ) -> WaterMeter:
        meter = await self.get_meter(auth, meter_id, Action.UPDATE)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(meter, field, value)
        await self.db.flush()

        logger.info("water_meter_updated", meter_id=str(meter.id), fields=sorted(changes))
        return meter

    async def delete_meter(self, auth: "AuthContext", meter_id: UUID) -> None:
        meter = await self.get_meter(auth, meter_id, Action.DELETE)
        await self.repo.delete(meter)
        logger.info("water_meter_deleted", meter_id=str(meter_id))

    # ============================================================
    # Readings
    # ============================================================

    async def list_readings(self, auth: "AuthContext", meter_id: UUID) -> list[WaterReading]:
        meter = await self.get_meter(auth, meter_id)
        return await self.repo.list_readings(meter.id)

    async def submit_reading(
        self,
        auth: "AuthContext",
        meter_id: UUID,
        data: WaterReadingCreate,
    ) -> WaterReading:
        """Record a meter index.

        Consumption is the difference with the meter's latest reading, and
        stays empty for the first reading of a meter.

        Raises:
            BadRequestError: If the meter is inactive
            ValidationError: If the index is lower than the latest reading, or
                the reading is dated before it
        """
        meter = await self.get_meter(auth, meter_id, Action.CREATE)
        if not meter.is_active:
            raise BadRequestError(
                "Readings cannot be submitted for an inactive meter",
                error_code="METER_INACTIVE",
            )

        reading_date = data.reading_date or utcnow()
        if reading_date.tzinfo is None:
            reading_date = reading_date.replace(tzinfo=UTC)

        previous = await self.repo.latest_reading(meter.id)
        consumption = None
        if previous is not None:
            # Readings are append-only in time
            if reading_date < previous.reading_date:
                raise ValidationError(
                    "Reading date is earlier than the latest reading",
                    errors=[
                        {
                            "field": "reading_date",
                            "message": (
                                f"Must be on or after {previous.reading_date.date().isoformat()}"
                            ),
                        }
                    ],
                )
            if data.value < previous.value:
                raise ValidationError(
                    "Reading is lower than the previous one",
                    errors=[
                        {
                            "field": "value",
                            "message": f"Must be at least {previous.value}",
                        }
                    ],
                )
            consumption = data.value - previous.value

        reading = await self.repo.add_reading(
            self._reading(meter, data.value, reading_date, auth.user_id, consumption, data.notes)
        )
        logger.info(
            "water_reading_submitted",
            meter_id=str(meter.id),
            reading_id=str(reading.id),
            consumption=consumption,
        )
        return reading

    async def validate_reading(self, auth: "AuthContext", reading_id: UUID) -> WaterReading:
        """Mark a reading as accepted by an administrator.

        Raises:
            NotFoundError: If the reading is missing or outside the scope
            ConflictError: If the reading is already validated
        """
        access = resolve_scope(auth, Resource.WATER_READINGS, Action.UPDATE)
        reading = await self.repo.get_visible_reading(reading_id, access.apartment_filter())
        if reading is None:
            raise NotFoundError(
                "Water reading not found",
                error_code="WATER_READING_NOT_FOUND",
                resource="water_reading",
                resource_id=str(reading_id),
            )
        if reading.validated:
            raise ConflictError(
                "Reading is already validated",
                error_code="READING_ALREADY_VALIDATED",
            )

        reading.validated = True
        reading.validated_by_id = auth.user_id
        reading.validated_at = utcnow()
        await self.db.flush()

        logger.info("water_reading_validated", reading_id=str(reading.id))
        return reading

    # ============================================================
    # Helpers
    # ============================================================

    async def _target_apartment(self, auth: "AuthContext", apartment_id: UUID) -> Apartment:
        access = resolve_scope(auth, Resource.WATER_READINGS, Action.CREATE)
        apartment = await self.apartments.get_visible(apartment_id, access.apartment_filter())
        if apartment is None:
            raise NotFoundError(
                "Apartment not found",
                error_code="APARTMENT_NOT_FOUND",
                resource="apartment",
                resource_id=str(apartment_id),
            )
        return apartment

    async def _ensure_serials_free(self, serial_numbers: list[str]) -> None:
        taken = await self.repo.existing_serials(serial_numbers)
        if taken:
            raise ConflictError(
                "Serial number already registered",
                error_code="SERIAL_NUMBER_TAKEN",
                details={"serial_numbers": sorted(taken)},
            )

    async def _install(
        self,
        auth: "AuthContext",
        apartment: Apartment,
        fields: WaterMeterFields,
    ) -> WaterMeter:
        meter = await self.repo.create(
            WaterMeter(
                apartment_id=apartment.id,
                **fields.model_dump(include=set(WaterMeterFields.model_fields)),
            )
        )
        if meter.initial_value > 0:
            await self.repo.add_reading(
                self._reading(meter, meter.initial_value, utcnow(), auth.user_id, None, None)
            )
        logger.info(
            "water_meter_created",
            meter_id=str(meter.id),
            apartment_id=str(apartment.id),
        )
        return meter

    @staticmethod
    def _reading(
        meter: WaterMeter,
        value: float,
        reading_date: datetime,
        submitted_by: UUID,
        consumption: float | None,
        notes: str | None,
    ) -> WaterReading:
        return WaterReading(
            water_meter_id=meter.id,
            value=value,
            consumption=consumption,
            reading_date=reading_date,
            month=reading_date.month,
            year=reading_date.year,
            notes=notes,
            submitted_by_id=submitted_by,
        )


# Type alias for dependency injection
WaterMeterSvc = Annotated[WaterMeterService, Depends(WaterMeterService)]
