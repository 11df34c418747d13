"""Apartment service: scoped CRUD, bulk creation and statistics."""

from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends

from tbsa.api.dependencies import DBSession
from tbsa.core.errors import ConflictError, ForbiddenError, NotFoundError
from tbsa.core.permissions.codes import Action, Resource, Scope
from tbsa.core.permissions.scoping import resolve_scope
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.apartments.repos import ApartmentRepository
from tbsa.modules.apartments.schemas import (
    ApartmentBulkCreate,
    ApartmentBulkResult,
    ApartmentCreate,
    ApartmentResponse,
    ApartmentStats,
    ApartmentUpdate,
    BulkItemError,
)
from tbsa.modules.buildings.models import Building
from tbsa.modules.buildings.repos import BuildingRepository
from tbsa.modules.subscriptions.limits import ensure_apartment_capacity


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext


logger = structlog.get_logger()

# Fields an owner may change on an apartment they own
OWNER_EDITABLE_FIELDS = frozenset({"occupant_count", "description"})


class ApartmentService:
    """Service for apartment operations within the caller's scope."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = ApartmentRepository(db)
        self.buildings = BuildingRepository(db)

    async def get_apartment(
        self,
        auth: "AuthContext",
        apartment_id: UUID,
        action: str = Action.READ,
    ) -> Apartment:
        """Get an apartment the caller may act on.

        Raises:
            NotFoundError: If the apartment is missing or outside the scope
        """
        access = resolve_scope(auth, Resource.APARTMENTS, action)
        apartment = await self.repo.get_visible(apartment_id, access.apartment_filter())
        if apartment is None:
            raise NotFoundError(
                "Apartment not found",
                error_code="APARTMENT_NOT_FOUND",
                resource="apartment",
                resource_id=str(apartment_id),
            )
        return apartment

    async def list_apartments(
        self,
        auth: "AuthContext",
        building_id: UUID | None = None,
        owned: bool | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Apartment], int]:
        access = resolve_scope(auth, Resource.APARTMENTS, Action.READ)
        return await self.repo.list_visible(
            access.apartment_filter(),
            building_id=building_id,
            owned=owned,
            search=search,
            offset=offset,
            limit=limit,
        )

    async def create_apartment(self, auth: "AuthContext", data: ApartmentCreate) -> Apartment:
        """Create one apartment.

        Raises:
            NotFoundError: If the building is missing or outside the scope
            ConflictError: If the number is already used in the building, or
                the building already holds ``total_apartments`` apartments
            ForbiddenError: If the subscription plan is full
        """
        building = await self._target_building(auth, data.building_id)

        existing = await self.repo.existing_numbers(building.id)
        if data.number.upper() in existing:
            raise ConflictError(
                f"Apartment {data.number} already exists in this building",
                error_code="APARTMENT_NUMBER_TAKEN",
            )
        if len(existing) >= building.total_apartments:
            raise ConflictError(
                f"Building {building.name} already has {building.total_apartments} apartments",
                error_code="BUILDING_FULL",
                details={"limit": building.total_apartments, "current": len(existing)},
            )
        await ensure_apartment_capacity(self.db, building.organization_id)

        apartment = await self.repo.create(
            Apartment(**data.model_dump())
        )
        logger.info(
            "apartment_created",
            apartment_id=str(apartment.id),
            building_id=str(building.id),
        )
        return apartment

    async def create_bulk(
        self,
        auth: "AuthContext",
        data: ApartmentBulkCreate,
    ) -> ApartmentBulkResult:
        """Create many apartments of one building.

        Items whose number is already taken, in the building or earlier in
        the same request, are reported in ``errors`` and the rest are
        created. So are items past the building's ``total_apartments``.
        The plan limit is checked for the whole request up front.

        Raises:
            NotFoundError: If the building is missing or outside the scope
            ForbiddenError: If the subscription plan cannot hold the
                valid items
        """
        building = await self._target_building(auth, data.building_id)
        taken = await self.repo.existing_numbers(building.id)
        free_slots = building.total_apartments - len(taken)

        accepted: list[tuple[int, dict[str, Any]]] = []
        errors: list[BulkItemError] = []
        for index, item in enumerate(data.apartments):
            key = item.number.upper()
            if key in taken:
                errors.append(
                    BulkItemError(
                        index=index,
                        number=item.number,
                        code="APARTMENT_NUMBER_TAKEN",
                        error=f"Apartment {item.number} already exists in this building",
                    )
                )
                continue
            if len(accepted) >= free_slots:
                errors.append(
                    BulkItemError(
                        index=index,
                        number=item.number,
                        code="BUILDING_FULL",
                        error=(
                            f"Building {building.name} already has "
                            f"{building.total_apartments} apartments"
                        ),
                    )
                )
                continue
            taken.add(key)
            accepted.append((index, item.model_dump()))

        if accepted:
            await ensure_apartment_capacity(
                self.db, building.organization_id, adding=len(accepted)
            )

        created: list[ApartmentResponse] = []
        for _, fields in accepted:
            apartment = await self.repo.create(Apartment(building_id=building.id, **fields))
            created.append(ApartmentResponse.model_validate(apartment))

        logger.info(
            "apartments_bulk_created",
            building_id=str(building.id),
            created=len(created),
            failed=len(errors),
        )
        return ApartmentBulkResult(
            total=len(data.apartments),
            success_count=len(created),
            error_count=len(errors),
            created=created,
            errors=errors,
        )

    async def update_apartment(
        self,
        auth: "AuthContext",
        apartment_id: UUID,
        data: ApartmentUpdate,
    ) -> Apartment:
        """Apply a partial update.

        Raises:
            ForbiddenError: If an owner tries to change a structural field
            ConflictError: If the new number is already used in the building
        """
        access = resolve_scope(auth, Resource.APARTMENTS, Action.UPDATE)
        apartment = await self.get_apartment(auth, apartment_id, Action.UPDATE)
        changes = data.model_dump(exclude_unset=True)

        if access.scope == Scope.OWN:
            forbidden = sorted(set(changes) - OWNER_EDITABLE_FIELDS)
            if forbidden:
                raise ForbiddenError(
                    "Owners can only change occupants and description",
                    error_code="FIELD_NOT_EDITABLE",
                    details={"fields": forbidden},
                )

        number = changes.get("number")
        if number is not None and number.upper() != apartment.number.upper():
            if number.upper() in await self.repo.existing_numbers(apartment.building_id):
                raise ConflictError(
                    f"Apartment {number} already exists in this building",
                    error_code="APARTMENT_NUMBER_TAKEN",
                )

        for field, value in changes.items():
            setattr(apartment, field, value)
        await self.db.flush()

        logger.info(
            "apartment_updated",
            apartment_id=str(apartment.id),
            fields=sorted(changes),
        )
        return apartment

    async def delete_apartment(self, auth: "AuthContext", apartment_id: UUID) -> None:
        apartment = await self.get_apartment(auth, apartment_id, Action.DELETE)
        await self.repo.delete(apartment)
        logger.info("apartment_deleted", apartment_id=str(apartment_id))

    async def stats(self, auth: "AuthContext") -> ApartmentStats:
        access = resolve_scope(auth, Resource.APARTMENTS, Action.READ)
        return ApartmentStats(**await self.repo.stats(access.apartment_filter()))

    async def _target_building(self, auth: "AuthContext", building_id: UUID) -> Building:
        access = resolve_scope(auth, Resource.APARTMENTS, Action.CREATE)
        building = await self.buildings.get_visible(building_id, access.building_filter())
        if building is None:
            raise NotFoundError(
                "Building not found",
                error_code="BUILDING_NOT_FOUND",
                resource="building",
                resource_id=str(building_id),
            )
        return building


# Type alias for dependency injection
ApartmentSvc = Annotated[ApartmentService, Depends(ApartmentService)]
