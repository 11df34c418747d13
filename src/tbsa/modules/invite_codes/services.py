"""Invite code service: generation, redemption and cancellation.

Lifecycle::

    ACTIVE --redeem--> USED
    ACTIVE --expiry--> EXPIRED
    ACTIVE --cancel--> CANCELLED

Every transition leaves ACTIVE; a code never moves backward.
"""

import secrets
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import update

from tbsa.api.dependencies import DBSession
from tbsa.config import settings
from tbsa.core.constants import (
    INVITE_CODE_CHARACTERS,
    INVITE_CODE_LENGTH,
    INVITE_CODE_MAX_ATTEMPTS,
)
from tbsa.core.database.base import utcnow
from tbsa.core.errors import BadRequestError, ConflictError, InternalError, NotFoundError
from tbsa.core.permissions.codes import Action, Resource
from tbsa.core.permissions.scoping import resolve_scope
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.invite_codes.models import InviteCode, InviteCodeStatus
from tbsa.modules.invite_codes.repos import InviteCodeRepository
from tbsa.modules.users.repos import UserRepository


if TYPE_CHECKING:
    from tbsa.core.auth.dependencies import AuthContext
    from tbsa.modules.users.models import User


logger = structlog.get_logger()


def generate_code(length: int = INVITE_CODE_LENGTH) -> str:
    """Draw a random code from the invite code alphabet."""
    return "".join(secrets.choice(INVITE_CODE_CHARACTERS) for _ in range(length))


class InviteCodeService:
    """Service for the invite code lifecycle."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = InviteCodeRepository(db)
        self.user_repo = UserRepository(db)

    async def generate_unique_code(self) -> str:
        """Generate a code not used by any existing invite.

        Raises:
            InternalError: If every attempt collided
        """
        for attempt in range(1, INVITE_CODE_MAX_ATTEMPTS + 1):
            code = generate_code()
            if not await self.repo.code_exists(code):
                return code
            logger.warning("invite_code_collision", attempt=attempt)

        logger.error("invite_code_generation_failed", attempts=INVITE_CODE_MAX_ATTEMPTS)
        raise InternalError(
            "Could not generate a unique invite code",
            error_code="CODE_GENERATION_FAILED",
        )

    async def create(
        self,
        auth: "AuthContext",
        apartment_id: UUID,
        expires_in_days: int | None = None,
    ) -> InviteCode:
        """Issue a new invite code for an unowned apartment.

        Any code of the apartment that is still ACTIVE is cancelled first,
        so an apartment has at most one usable code.

        Args:
            auth: The administrator issuing the code
            apartment_id: The apartment to be claimed
            expires_in_days: Lifetime of the code

        Returns:
            The new ACTIVE code

        Raises:
            NotFoundError: If the apartment does not exist or is outside
                the caller's buildings
            ConflictError: If the apartment already has an owner
        """
        access = resolve_scope(auth, Resource.INVITE_CODES, Action.CREATE)
        apartment = await self.db.get(Apartment, apartment_id)
        if apartment is None or not access.covers_building(apartment.building):
            raise NotFoundError(
                "Apartment not found",
                error_code="APARTMENT_NOT_FOUND",
                resource="apartment",
                resource_id=str(apartment_id),
            )

        if apartment.owner_id is not None:
            raise ConflictError(
                "Apartment already has an owner",
                error_code="APARTMENT_ALREADY_OWNED",
            )

        cancelled = await self.repo.cancel_active_for_apartment(apartment.id)
        days = expires_in_days or settings.invite_code_expiration_days

        invite = await self.repo.create(
            InviteCode(
                code=await self.generate_unique_code(),
                status=InviteCodeStatus.ACTIVE,
                apartment_id=apartment.id,
                created_by_id=auth.user_id,
                expires_at=utcnow() + timedelta(days=days),
            )
        )

        logger.info(
            "invite_code_created",
            invite_code_id=str(invite.id),
            apartment_id=str(apartment.id),
            cancelled_previous=len(cancelled),
        )
        return invite

    async def redeem(self, user: "User", code: str) -> Apartment:
        """Claim an apartment with an invite code.

        Checks, in order: the code exists, is ACTIVE, is not past its
        expiry, and its apartment is unowned. A code found past its expiry
        is transitioned to EXPIRED and that change is committed before
        the error is raised.

        Args:
            user: The redeeming user
            code: Normalized (upper-case) code

        Returns:
            The claimed apartment

        Raises:
            NotFoundError: INVALID_CODE
            BadRequestError: CODE_NOT_ACTIVE or CODE_EXPIRED
            ConflictError: APARTMENT_ALREADY_OWNED
        """
        invite = await self.repo.get_by_code(code)
        if invite is None:
            raise NotFoundError(
                "Invalid invite code",
                error_code="INVALID_CODE",
                resource="invite_code",
            )

        if invite.status != InviteCodeStatus.ACTIVE:
            raise BadRequestError(
                "Invite code is no longer active",
                error_code="CODE_NOT_ACTIVE",
                details={"status": invite.status},
            )

        if invite.is_expired:
            await self.repo.transition(invite, InviteCodeStatus.EXPIRED)
            # Persist the transition; the request transaction rolls back on raise
            await self.db.commit()
            logger.info("invite_code_expired_on_redeem", invite_code_id=str(invite.id))
            raise BadRequestError(
                "Invite code has expired",
                error_code="CODE_EXPIRED",
            )

        apartment = invite.apartment
        if apartment.owner_id is not None:
            raise ConflictError(
                "Apartment already has an owner",
                error_code="APARTMENT_ALREADY_OWNED",
            )

        profile = await self.user_repo.get_or_create_owner_profile(user)

        now = utcnow()
        if not await self.repo.transition(
            invite,
            InviteCodeStatus.USED,
            used_by_id=user.id,
            used_at=now,
        ):
            raise BadRequestError(
                "Invite code is no longer active",
                error_code="CODE_NOT_ACTIVE",
            )

        claimed = await self.db.execute(
            update(Apartment)
            .where(Apartment.id == apartment.id, Apartment.owner_id.is_(None))
            .values(owner_id=profile.id, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise ConflictError(
                "Apartment already has an owner",
                error_code="APARTMENT_ALREADY_OWNED",
            )
        await self.db.refresh(apartment)

        if user.organization_id is None:
            user.organization_id = apartment.building.organization_id
            await self.db.flush()

        logger.info(
            "invite_code_redeemed",
            invite_code_id=str(invite.id),
            apartment_id=str(apartment.id),
            user_id=str(user.id),
        )
        return apartment

    async def list_codes(
        self,
        auth: "AuthContext",
        status: InviteCodeStatus | None = None,
        apartment_id: UUID | None = None,
    ) -> list[InviteCode]:
        """List codes of the apartments the caller administers."""
        access = resolve_scope(auth, Resource.INVITE_CODES, Action.READ)
        return await self.repo.list_visible(
            access.apartment_filter(),
            status=status,
            apartment_id=apartment_id,
        )

    async def cancel(self, auth: "AuthContext", invite_id: UUID) -> InviteCode:
        """Cancel an ACTIVE code.

        Raises:
            NotFoundError: CODE_NOT_FOUND when missing or not visible
            BadRequestError: CODE_NOT_CANCELLABLE when not ACTIVE
        """
        access = resolve_scope(auth, Resource.INVITE_CODES, Action.UPDATE)
        invite = await self.repo.get_by_id(invite_id)
        if invite is None or not access.covers_building(invite.apartment.building):
            raise NotFoundError(
                "Invite code not found",
                error_code="CODE_NOT_FOUND",
                resource="invite_code",
                resource_id=str(invite_id),
            )

        if invite.status != InviteCodeStatus.ACTIVE or not await self.repo.transition(
            invite, InviteCodeStatus.CANCELLED
        ):
            raise BadRequestError(
                "Only active invite codes can be cancelled",
                error_code="CODE_NOT_CANCELLABLE",
                details={"status": invite.status},
            )

        logger.info("invite_code_cancelled", invite_code_id=str(invite.id))
        return invite

    async def expire_overdue(self) -> int:
        """Move every overdue ACTIVE code to EXPIRED.

        Returns:
            Number of codes expired
        """
        expired = await self.repo.expire_overdue()
        logger.info("invite_codes_expired", count=len(expired))
        return len(expired)


# Type alias for dependency injection
InviteCodeSvc = Annotated[InviteCodeService, Depends(InviteCodeService)]
