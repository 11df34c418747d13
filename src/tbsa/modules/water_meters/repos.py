"""Water meter and reading repository."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, Select, func, select

from tbsa.api.dependencies import DBSession
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.water_meters.models import WaterMeter, WaterReading


class WaterMeterRepository:
    """Repository for WaterMeter and WaterReading database operations.

    Visibility conditions are expressed over ``Apartment`` and ``Building``,
    so meter queries join both.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    def _visible_meters(self, visibility: ColumnElement[bool]) -> Select[tuple[WaterMeter]]:
        return (
            select(WaterMeter)
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(visibility)
        )

    async def create(self, meter: WaterMeter) -> WaterMeter:
        self.session.add(meter)
        await self.session.flush()
        return meter

    async def get_visible(
        self,
        meter_id: UUID,
        visibility: ColumnElement[bool],
    ) -> WaterMeter | None:
        stmt = self._visible_meters(visibility).where(WaterMeter.id == meter_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_visible(
        self,
        visibility: ColumnElement[bool],
        apartment_id: UUID | None = None,
        building_id: UUID | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[WaterMeter], int]:
        """List visible meters.

        Returns:
            Tuple of (meters, total count)
        """
        stmt = self._visible_meters(visibility)
        if apartment_id is not None:
            stmt = stmt.where(WaterMeter.apartment_id == apartment_id)
        if building_id is not None:
            stmt = stmt.where(Apartment.building_id == building_id)
        if is_active is not None:
            stmt = stmt.where(WaterMeter.is_active == is_active)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = stmt.order_by(WaterMeter.serial_number).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def existing_serials(self, serial_numbers: list[str]) -> set[str]:
        result = await self.session.execute(
            select(WaterMeter.serial_number).where(
                WaterMeter.serial_number.in_(serial_numbers)
            )
        )
        return set(result.scalars().all())

    async def delete(self, meter: WaterMeter) -> None:
        await self.session.delete(meter)
        await self.session.flush()

    # ============================================================
    # Readings
    # ============================================================

    async def add_reading(self, reading: WaterReading) -> WaterReading:
        self.session.add(reading)
        await self.session.flush()
        return reading

    async def latest_reading(self, meter_id: UUID) -> WaterReading | None:
        """Return the meter's most recent reading by reading date."""
        stmt = (
            select(WaterReading)
            .where(WaterReading.water_meter_id == meter_id)
            .order_by(WaterReading.reading_date.desc(), WaterReading.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_readings(self, meter_id: UUID) -> list[WaterReading]:
        stmt = (
            select(WaterReading)
            .where(WaterReading.water_meter_id == meter_id)
            .order_by(WaterReading.reading_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_visible_reading(
        self,
        reading_id: UUID,
        visibility: ColumnElement[bool],
    ) -> WaterReading | None:
        stmt = (
            select(WaterReading)
            .join(WaterMeter, WaterMeter.id == WaterReading.water_meter_id)
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(WaterReading.id == reading_id, visibility)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


# Type alias for dependency injection
WaterMeterRepo = Annotated[WaterMeterRepository, Depends(WaterMeterRepository)]
