"""Apartment repository for database operations."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, case, func, select

from tbsa.api.dependencies import DBSession
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building


class ApartmentRepository:
    """Repository for Apartment database operations.

    Every query joins ``Building`` so visibility conditions can filter on
    the building's organization or administrator.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, apartment: Apartment) -> Apartment:
        self.session.add(apartment)
        await self.session.flush()
        return apartment

    async def get_visible(
        self,
        apartment_id: UUID,
        visibility: ColumnElement[bool],
    ) -> Apartment | None:
        stmt = (
            select(Apartment)
            .join(Building, Building.id == Apartment.building_id)
            .where(Apartment.id == apartment_id, visibility)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_visible(
        self,
        visibility: ColumnElement[bool],
        building_id: UUID | None = None,
        owned: bool | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Apartment], int]:
        """List visible apartments.

        Args:
            visibility: Condition over ``Apartment``/``Building`` rows
            building_id: Restrict to one building
            owned: True for claimed apartments, False for unclaimed ones
            search: Case-insensitive prefix of the apartment number
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (apartments, total count)
        """
        stmt = (
            select(Apartment)
            .join(Building, Building.id == Apartment.building_id)
            .where(visibility)
        )
        if building_id is not None:
            stmt = stmt.where(Apartment.building_id == building_id)
        if owned is True:
            stmt = stmt.where(Apartment.owner_id.is_not(None))
        elif owned is False:
            stmt = stmt.where(Apartment.owner_id.is_(None))
        if search:
            stmt = stmt.where(func.lower(Apartment.number).like(f"{search.lower()}%"))

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            stmt.order_by(Building.name, Apartment.floor, Apartment.number)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def existing_numbers(self, building_id: UUID) -> set[str]:
        result = await self.session.execute(
            select(Apartment.number).where(Apartment.building_id == building_id)
        )
        return {number.upper() for number in result.scalars().all()}

    async def stats(self, visibility: ColumnElement[bool]) -> dict[str, Any]:
        """Aggregate counts over visible apartments."""
        stmt = (
            select(
                func.count(Apartment.id),
                func.coalesce(
                    func.sum(case((Apartment.owner_id.is_not(None), 1), else_=0)), 0
                ),
                func.coalesce(func.sum(Apartment.occupant_count), 0),
                func.coalesce(func.sum(Apartment.surface), 0.0),
                func.count(func.distinct(Apartment.building_id)),
            )
            .select_from(Apartment)
            .join(Building, Building.id == Apartment.building_id)
            .where(visibility)
        )
        total, owned, occupants, surface, buildings = (await self.session.execute(stmt)).one()
        return {
            "total_apartments": total,
            "owned_apartments": int(owned),
            "unowned_apartments": total - int(owned),
            "total_occupants": int(occupants),
            "total_surface": float(surface),
            "buildings": buildings,
        }

    async def delete(self, apartment: Apartment) -> None:
        await self.session.delete(apartment)
        await self.session.flush()


# Type alias for dependency injection
ApartmentRepo = Annotated[ApartmentRepository, Depends(ApartmentRepository)]
