"""Invite code repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, select, update

from tbsa.api.dependencies import DBSession
from tbsa.core.database.base import utcnow
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.invite_codes.models import InviteCode, InviteCodeStatus


class InviteCodeRepository:
    """Repository for InviteCode database operations.

    Status transitions out of ACTIVE are written as conditional updates
    so a code can never move backward or be consumed twice.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, invite: InviteCode) -> InviteCode:
        self.session.add(invite)
        await self.session.flush()
        return invite

    async def get_by_id(self, invite_id: UUID) -> InviteCode | None:
        result = await self.session.execute(
            select(InviteCode).where(InviteCode.id == invite_id)
        )
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> InviteCode | None:
        result = await self.session.execute(
            select(InviteCode).where(InviteCode.code == code)
        )
        return result.scalar_one_or_none()

    async def code_exists(self, code: str) -> bool:
        result = await self.session.execute(
            select(InviteCode.id).where(InviteCode.code == code)
        )
        return result.first() is not None

    async def list_visible(
        self,
        visibility: ColumnElement[bool],
        status: InviteCodeStatus | None = None,
        apartment_id: UUID | None = None,
    ) -> list[InviteCode]:
        """List codes of apartments matching a visibility condition.

        Args:
            visibility: Condition over ``Apartment``/``Building`` rows
            status: Restrict to one status
            apartment_id: Restrict to one apartment

        Returns:
            Codes from newest to oldest
        """
        stmt = (
            select(InviteCode)
            .join(Apartment, Apartment.id == InviteCode.apartment_id)
            .join(Building, Building.id == Apartment.building_id)
            .where(visibility)
        )
        if status is not None:
            stmt = stmt.where(InviteCode.status == status)
        if apartment_id is not None:
            stmt = stmt.where(InviteCode.apartment_id == apartment_id)
        stmt = stmt.order_by(InviteCode.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(
        self,
        invite: InviteCode,
        status: InviteCodeStatus,
        **values: object,
    ) -> bool:
        """Move an ACTIVE code to a terminal status.

        Args:
            invite: The code to transition
            status: The target status
            **values: Extra columns to set with the transition

        Returns:
            True if this call performed the transition, False if the code
            had already left the ACTIVE state
        """
        result = await self.session.execute(
            update(InviteCode)
            .where(
                InviteCode.id == invite.id,
                InviteCode.status == InviteCodeStatus.ACTIVE,
            )
            .values(status=status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(invite)
        return result.rowcount == 1

    async def cancel_active_for_apartment(self, apartment_id: UUID) -> list[UUID]:
        """Cancel every ACTIVE code of an apartment.

        Returns:
            IDs of the cancelled codes
        """
        result = await self.session.execute(
            select(InviteCode.id).where(
                InviteCode.apartment_id == apartment_id,
                InviteCode.status == InviteCodeStatus.ACTIVE,
            )
        )
        return await self._set_status(list(result.scalars().all()), InviteCodeStatus.CANCELLED)

    async def expire_overdue(self, now: datetime | None = None) -> list[UUID]:
        """Mark ACTIVE codes past their expiry as EXPIRED.

        Returns:
            IDs of the expired codes
        """
        now = now or utcnow()
        result = await self.session.execute(
            select(InviteCode.id).where(
                InviteCode.status == InviteCodeStatus.ACTIVE,
                InviteCode.expires_at <= now,
            )
        )
        return await self._set_status(list(result.scalars().all()), InviteCodeStatus.EXPIRED)

    async def _set_status(
        self,
        invite_ids: list[UUID],
        status: InviteCodeStatus,
    ) -> list[UUID]:
        if invite_ids:
            await self.session.execute(
                update(InviteCode)
                .where(
                    InviteCode.id.in_(invite_ids),
                    InviteCode.status == InviteCodeStatus.ACTIVE,
                )
                .values(status=status, updated_at=utcnow())
                .execution_options(synchronize_session="fetch")
            )
            await self.session.flush()
        return invite_ids


# Type alias for dependency injection
InviteCodeRepo = Annotated[InviteCodeRepository, Depends(InviteCodeRepository)]
