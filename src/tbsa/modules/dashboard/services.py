"""Dashboard statistics over the caller's scope."""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends
from sqlalchemy import ColumnElement, Select, and_, func, select

from tbsa.api.dependencies import DBSession
from tbsa.core.constants import RECENT_ACTIVITY_LIMIT
from tbsa.core.database.base import utcnow
from tbsa.core.permissions.codes import Action, Resource
from tbsa.core.permissions.scoping import resolve_scope
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.dashboard.schemas import (
    AdminDashboardStats,
    LastReading,
    OwnerDashboardStats,
    ReadingActivity,
)
from tbsa.modules.users.models import OwnerProfile
from tbsa.modules.water_meters.models import WaterMeter, WaterReading


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


def _readings_in(visibility: ColumnElement[bool]) -> Select:
    return (
        select(WaterReading, WaterMeter.serial_number, Apartment.number, Building.name)
        .join(WaterMeter, WaterMeter.id == WaterReading.water_meter_id)
        .join(Apartment, Apartment.id == WaterMeter.apartment_id)
        .join(Building, Building.id == Apartment.building_id)
        .where(visibility)
    )


class DashboardService:
    """Aggregates for the administrator and owner dashboards."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    async def admin_stats(self, auth: "AuthContext") -> AdminDashboardStats:
        """Counts over the buildings, apartments and readings in scope.

        ``total_users`` counts the distinct owners of visible apartments.
        """
        buildings = resolve_scope(auth, Resource.BUILDINGS, Action.READ).building_filter()
        apartments = resolve_scope(auth, Resource.APARTMENTS, Action.READ).apartment_filter()
        readings = resolve_scope(
            auth, Resource.WATER_READINGS, Action.READ
        ).apartment_filter()

        total_buildings = await self._scalar(
            select(func.count(Building.id)).where(buildings)
        )
        total_apartments = await self._scalar(
            select(func.count(Apartment.id))
            .join(Building, Building.id == Apartment.building_id)
            .where(apartments)
        )
        total_users = await self._scalar(
            select(func.count(func.distinct(OwnerProfile.user_id)))
            .join(Apartment, Apartment.owner_id == OwnerProfile.id)
            .join(Building, Building.id == Apartment.building_id)
            .where(apartments)
        )
        total_readings = await self._count_readings(readings)
        pending_readings = await self._count_readings(
            and_(readings, WaterReading.validated.is_(False))
        )

        return AdminDashboardStats(
            total_users=total_users,
            total_buildings=total_buildings,
            total_apartments=total_apartments,
            total_readings=total_readings,
            pending_readings=pending_readings,
            recent_activity=await self._recent_activity(readings),
        )

    async def owner_stats(
        self,
        auth: "AuthContext",
        now: datetime | None = None,
    ) -> OwnerDashboardStats:
        """Overview of the caller's own apartments for the current month."""
        now = now or utcnow()
        apartments = resolve_scope(auth, Resource.APARTMENTS, Action.READ).apartment_filter()
        readings = resolve_scope(
            auth, Resource.WATER_READINGS, Action.READ
        ).apartment_filter()
        this_month = and_(WaterReading.month == now.month, WaterReading.year == now.year)

        total_apartments = await self._scalar(
            select(func.count(Apartment.id))
            .join(Building, Building.id == Apartment.building_id)
            .where(apartments)
        )

        read_this_month = select(WaterReading.water_meter_id).where(this_month)
        pending_readings = await self._scalar(
            select(func.count(WaterMeter.id))
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(
                readings,
                WaterMeter.is_active.is_(True),
                WaterMeter.id.not_in(read_this_month),
            )
        )

        monthly_consumption = await self._scalar(
            select(func.coalesce(func.sum(WaterReading.consumption), 0.0))
            .join(WaterMeter, WaterMeter.id == WaterReading.water_meter_id)
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(readings, this_month)
        )

        activity = await self._recent_activity(readings)
        last_reading = (
            LastReading(value=activity[0].value, date=activity[0].date) if activity else None
        )

        return OwnerDashboardStats(
            total_apartments=total_apartments,
            pending_readings=pending_readings,
            last_reading=last_reading,
            monthly_consumption=float(monthly_consumption),
            recent_activity=activity,
        )

    async def _scalar(self, stmt: Select) -> int:
        return (await self.db.execute(stmt)).scalar_one()

    async def _count_readings(self, condition: ColumnElement[bool]) -> int:
        return await self._scalar(
            select(func.count(WaterReading.id))
            .join(WaterMeter, WaterMeter.id == WaterReading.water_meter_id)
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(condition)
        )

    async def _recent_activity(self, visibility: ColumnElement[bool]) -> list[ReadingActivity]:
        stmt = (
            _readings_in(visibility)
            .order_by(WaterReading.reading_date.desc(), WaterReading.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            ReadingActivity(
                id=reading.id,
                water_meter_id=reading.water_meter_id,
                serial_number=serial_number,
                apartment_number=apartment_number,
                building_name=building_name,
                value=reading.value,
                consumption=reading.consumption,
                date=reading.reading_date,
                validated=reading.validated,
            )
            for reading, serial_number, apartment_number, building_name in rows
        ]


# Type alias for dependency injection
DashboardSvc = Annotated[DashboardService, Depends(DashboardService)]
