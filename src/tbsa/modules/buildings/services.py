"""Building service: scoped CRUD and water consumption reports."""

from datetime import date
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import and_, func, or_, select

from tbsa.api.dependencies import DBSession
from tbsa.core.errors import BadRequestError, NotFoundError, ValidationError
from tbsa.core.permissions.codes import Action, Resource, Scope
from tbsa.core.permissions.scoping import AccessScope, resolve_scope
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.buildings.repos import BuildingRepository
from tbsa.modules.buildings.schemas import (
    BuildingCreate,
    BuildingUpdate,
    LastMonthConsumption,
    MonthlyConsumption,
    SixMonthConsumption,
    WaterConsumptionReport,
)
from tbsa.modules.subscriptions.limits import ensure_building_capacity
from tbsa.modules.users.models import AdministratorProfile
from tbsa.modules.water_meters.models import WaterMeter, WaterReading


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


logger = structlog.get_logger()

REPORT_MONTHS = 6


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move a (year, month) pair by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class BuildingService:
    """Service for building operations within the caller's scope."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = BuildingRepository(db)

    async def get_building(
        self,
        auth: "AuthContext",
        building_id: UUID,
        action: str = Action.READ,
        resource: str = Resource.BUILDINGS,
    ) -> Building:
        """Get a building the caller may act on.

        Raises:
            NotFoundError: If the building is missing or outside the scope
        """
        access = resolve_scope(auth, resource, action)
        building = await self.repo.get_visible(building_id, access.building_filter())
        if building is None:
            raise NotFoundError(
                "Building not found",
                error_code="BUILDING_NOT_FOUND",
                resource="building",
                resource_id=str(building_id),
            )
        return building

    async def list_buildings(
        self,
        auth: "AuthContext",
        search: str | None = None,
        city: str | None = None,
        building_type: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[Building, int]], int]:
        access = resolve_scope(auth, Resource.BUILDINGS, Action.READ)
        return await self.repo.list_visible(
            access.building_filter(),
            search=search,
            city=city,
            building_type=building_type,
            offset=offset,
            limit=limit,
        )

    async def create_building(self, auth: "AuthContext", data: BuildingCreate) -> Building:
        """Create a building in the caller's organization.

        Raises:
            BadRequestError: If the caller belongs to no organization
            ForbiddenError: If the subscription plan is full
        """
        access = resolve_scope(auth, Resource.BUILDINGS, Action.CREATE)
        organization_id = auth.organization_id
        if organization_id is None:
            raise BadRequestError(
                "Buildings must belong to an organization",
                error_code="ORGANIZATION_REQUIRED",
            )

        administrator_id = await self._administrator_for(access, data.administrator_id)
        await ensure_building_capacity(self.db, organization_id)

        building = await self.repo.create(
            Building(
                organization_id=organization_id,
                administrator_id=administrator_id,
                **data.model_dump(exclude={"administrator_id"}),
            )
        )
        logger.info(
            "building_created",
            building_id=str(building.id),
            organization_id=str(organization_id),
        )
        return building

    async def update_building(
        self,
        auth: "AuthContext",
        building_id: UUID,
        data: BuildingUpdate,
    ) -> Building:
        """Apply a partial update.

        Raises:
            ValidationError: If ``total_apartments`` would drop below the
                number of apartments already registered
        """
        building = await self.get_building(auth, building_id, Action.UPDATE)
        changes = data.model_dump(exclude_unset=True)

        new_total = changes.get("total_apartments")
        if new_total is not None:
            existing = (await self.repo.apartment_counts([building.id])).get(building.id, 0)
            if new_total < existing:
                raise ValidationError(
                    "Building already has more apartments",
                    errors=[
                        {
                            "field": "total_apartments",
                            "message": f"Must be at least {existing}",
                        }
                    ],
                )

        for field, value in changes.items():
            setattr(building, field, value)
        await self.db.flush()

        logger.info("building_updated", building_id=str(building.id), fields=sorted(changes))
        return building

    async def delete_building(self, auth: "AuthContext", building_id: UUID) -> None:
        building = await self.get_building(auth, building_id, Action.DELETE)
        await self.repo.delete(building)
        logger.info("building_deleted", building_id=str(building_id))

    async def list_apartments(self, auth: "AuthContext", building_id: UUID) -> list[Apartment]:
        """List the apartments of a visible building, ordered by floor and number."""
        building = await self.get_building(
            auth, building_id, Action.READ, resource=Resource.APARTMENTS
        )
        result = await self.db.execute(
            select(Apartment)
            .where(Apartment.building_id == building.id)
            .order_by(Apartment.floor, Apartment.number)
        )
        return list(result.scalars().all())

    async def water_consumption(
        self,
        auth: "AuthContext",
        building_id: UUID,
        today: date | None = None,
    ) -> WaterConsumptionReport:
        """Summarize water consumption of a building.

        Covers the previous calendar month, the last six months and a
        month-by-month breakdown. Readings without a consumption value
        (first readings of a meter) are ignored.
        """
        building = await self.get_building(
            auth, building_id, Action.READ, resource=Resource.WATER_READINGS
        )
        today = today or date.today()
        last_year, last_month = shift_month(today.year, today.month, -1)
        start_year, start_month = shift_month(today.year, today.month, -REPORT_MONTHS)

        base = (
            select(
                WaterReading.year,
                WaterReading.month,
                func.coalesce(func.sum(WaterReading.consumption), 0.0),
                func.count(WaterReading.id),
            )
            .join(WaterMeter, WaterMeter.id == WaterReading.water_meter_id)
            .join(Apartment, Apartment.id == WaterMeter.apartment_id)
            .where(
                Apartment.building_id == building.id,
                WaterReading.consumption.is_not(None),
                or_(
                    WaterReading.year > start_year,
                    and_(
                        WaterReading.year == start_year,
                        WaterReading.month >= start_month,
                    ),
                ),
            )
            .group_by(WaterReading.year, WaterReading.month)
            .order_by(WaterReading.year, WaterReading.month)
        )
        rows = (await self.db.execute(base)).all()
        breakdown = [
            MonthlyConsumption(
                year=year,
                month=month,
                consumption=float(total),
                readings_count=count,
            )
            for year, month, total, count in rows
        ]

        occupied = (
            await self.db.execute(
                select(func.count(Apartment.id)).where(
                    Apartment.building_id == building.id,
                    Apartment.owner_id.is_not(None),
                )
            )
        ).scalar_one()
        total_apartments = (await self.repo.apartment_counts([building.id])).get(
            building.id, 0
        )

        last = next(
            (m for m in breakdown if m.year == last_year and m.month == last_month),
            None,
        )
        last_total = last.consumption if last else 0.0
        six_total = sum(m.consumption for m in breakdown)

        return WaterConsumptionReport(
            building_id=building.id,
            last_month=LastMonthConsumption(
                month=last_month,
                year=last_year,
                total=last_total,
                readings_count=last.readings_count if last else 0,
                average=last_total / occupied if occupied else 0.0,
            ),
            six_months=SixMonthConsumption(
                total=six_total,
                readings_count=sum(m.readings_count for m in breakdown),
                average=six_total / occupied / REPORT_MONTHS if occupied else 0.0,
                monthly_average=six_total / len(breakdown) if breakdown else 0.0,
            ),
            monthly_breakdown=breakdown,
            total_apartments=total_apartments,
            occupied_apartments=occupied,
        )

    async def _administrator_for(
        self,
        access: AccessScope,
        requested: UUID | None,
    ) -> UUID | None:
        if requested is None or access.scope != Scope.ALL:
            return access.administrator_id

        profile = await self.db.get(AdministratorProfile, requested)
        if profile is None:
            raise NotFoundError(
                "Administrator not found",
                error_code="ADMINISTRATOR_NOT_FOUND",
                resource="administrator",
                resource_id=str(requested),
            )
        return profile.id


# Type alias for dependency injection
BuildingSvc = Annotated[BuildingService, Depends(BuildingService)]
