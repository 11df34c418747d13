"""Building repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, func, or_, select

from tbsa.api.dependencies import DBSession
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building


class BuildingRepository:
    """Repository for Building database operations.

    Queries take a visibility condition built from the caller's
    permission scope.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, building: Building) -> Building:
        self.session.add(building)
        await self.session.flush()
        return building

    async def get_visible(
        self,
        building_id: UUID,
        visibility: ColumnElement[bool],
    ) -> Building | None:
        """Get a building by ID if it satisfies the visibility condition."""
        stmt = select(Building).where(Building.id == building_id, visibility)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_visible(
        self,
        visibility: ColumnElement[bool],
        search: str | None = None,
        city: str | None = None,
        building_type: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[Building, int]], int]:
        """List visible buildings with their apartment counts.

        Args:
            visibility: Condition over ``Building`` rows
            search: Case-insensitive match on name, address or city
            city: Exact city filter
            building_type: Building type filter
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of ((building, apartment count) pairs, total count)
        """
        stmt = select(Building).where(visibility)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Building.name).like(pattern),
                    func.lower(Building.address).like(pattern),
                    func.lower(Building.city).like(pattern),
                )
            )
        if city:
            stmt = stmt.where(Building.city == city)
        if building_type:
            stmt = stmt.where(Building.type == building_type)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = stmt.order_by(Building.name).offset(offset).limit(limit)
        buildings = list((await self.session.execute(stmt)).scalars().all())
        counts = await self.apartment_counts([b.id for b in buildings])
        return [(b, counts.get(b.id, 0)) for b in buildings], total

    async def apartment_counts(self, building_ids: list[UUID]) -> dict[UUID, int]:
        """Count apartments per building."""
        if not building_ids:
            return {}
        stmt = (
            select(Apartment.building_id, func.count(Apartment.id))
            .where(Apartment.building_id.in_(building_ids))
            .group_by(Apartment.building_id)
        )
        result = await self.session.execute(stmt)
        return {building_id: count for building_id, count in result.all()}

    async def delete(self, building: Building) -> None:
        await self.session.delete(building)
        await self.session.flush()


# Type alias for dependency injection
BuildingRepo = Annotated[BuildingRepository, Depends(BuildingRepository)]
