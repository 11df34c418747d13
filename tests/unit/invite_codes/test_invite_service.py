"""Unit tests for the invite code lifecycle."""

from collections.abc import Awaitable, Callable
from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.core.auth.dependencies import AuthContext
from tbsa.core.constants import INVITE_CODE_CHARACTERS, INVITE_CODE_LENGTH, OWNER_ROLE
from tbsa.core.database import utcnow
from tbsa.core.errors import BadRequestError, ConflictError, NotFoundError
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.invite_codes.models import InviteCode, InviteCodeStatus
from tbsa.modules.invite_codes.services import InviteCodeService, generate_code
from tbsa.modules.users.models import User


pytestmark = pytest.mark.unit


@pytest.fixture
async def newcomer(make_user: Callable[..., Awaitable[User]]) -> User:
    """A freshly registered owner with no profile and no organization."""
    return await make_user("newcomer@example.com", role=OWNER_ROLE)


@pytest.fixture
async def invite(db: AsyncSession, vacant_apartment: Apartment, admin_user: User) -> InviteCode:
    """An ACTIVE code for the vacant apartment."""
    code = InviteCode(
        code="ABCD2345",
        status=InviteCodeStatus.ACTIVE,
        apartment_id=vacant_apartment.id,
        created_by_id=admin_user.id,
        expires_at=utcnow() + timedelta(days=30),
    )
    db.add(code)
    await db.commit()
    await db.refresh(code)
    return code


def test_generate_code_uses_alphabet():
    code = generate_code()

    assert len(code) == INVITE_CODE_LENGTH
    assert set(code) <= set(INVITE_CODE_CHARACTERS)


class TestCreate:
    """Tests for issuing codes."""

    async def test_create_cancels_previous_active_code(
        self,
        db: AsyncSession,
        admin_user: User,
        invite: InviteCode,
        auth_for: Callable[..., AuthContext],
    ):
        """An apartment should have at most one ACTIVE code."""
        service = InviteCodeService(db)

        new_code = await service.create(auth_for(admin_user), invite.apartment_id)

        assert new_code.status == InviteCodeStatus.ACTIVE
        assert new_code.code != invite.code
        await db.refresh(invite)
        assert invite.status == InviteCodeStatus.CANCELLED

    async def test_create_uses_requested_lifetime(
        self,
        db: AsyncSession,
        admin_user: User,
        vacant_apartment: Apartment,
        auth_for: Callable[..., AuthContext],
    ):
        service = InviteCodeService(db)

        code = await service.create(auth_for(admin_user), vacant_apartment.id, expires_in_days=7)

        remaining = code.expires_at - utcnow()
        assert timedelta(days=6) < remaining <= timedelta(days=7)

    async def test_create_for_owned_apartment_conflicts(
        self,
        db: AsyncSession,
        admin_user: User,
        apartment: Apartment,
        auth_for: Callable[..., AuthContext],
    ):
        service = InviteCodeService(db)

        with pytest.raises(ConflictError) as exc_info:
            await service.create(auth_for(admin_user), apartment.id)

        assert exc_info.value.error_code == "APARTMENT_ALREADY_OWNED"

    async def test_create_outside_own_buildings_is_not_found(
        self,
        db: AsyncSession,
        make_user: Callable[..., Awaitable[User]],
        admin_user: User,
        vacant_apartment: Apartment,
        auth_for: Callable[..., AuthContext],
    ):
        """Another administrator of the organization cannot issue codes here."""
        colleague = await make_user(
            "colleague@example.com",
            role="ADMINISTRATOR",
            organization=admin_user.organization,
            administrator=True,
        )
        service = InviteCodeService(db)

        with pytest.raises(NotFoundError):
            await service.create(auth_for(colleague), vacant_apartment.id)


class TestRedeem:
    """Tests for claiming apartments."""

    async def test_redeem_claims_apartment(
        self, db: AsyncSession, invite: InviteCode, newcomer: User
    ):
        """Redeeming should mark the code USED and assign the apartment."""
        service = InviteCodeService(db)

        apartment = await service.redeem(newcomer, invite.code)

        assert apartment.owner_id is not None
        assert apartment.owner_id == newcomer.owner_profile.id
        assert newcomer.organization_id == apartment.building.organization_id
        await db.refresh(invite)
        assert invite.status == InviteCodeStatus.USED
        assert invite.used_by_id == newcomer.id
        assert invite.used_at is not None

    async def test_second_redemption_is_rejected(
        self,
        db: AsyncSession,
        invite: InviteCode,
        newcomer: User,
        owner_user: User,
    ):
        """A code can be consumed only once."""
        service = InviteCodeService(db)
        await service.redeem(newcomer, invite.code)

        with pytest.raises(BadRequestError) as exc_info:
            await service.redeem(owner_user, invite.code)

        assert exc_info.value.error_code == "CODE_NOT_ACTIVE"

    async def test_unknown_code(self, db: AsyncSession, newcomer: User):
        service = InviteCodeService(db)

        with pytest.raises(NotFoundError) as exc_info:
            await service.redeem(newcomer, "ZZZZZZZZ")

        assert exc_info.value.error_code == "INVALID_CODE"

    async def test_expired_code_is_marked_expired(
        self, db: AsyncSession, invite: InviteCode, newcomer: User
    ):
        """The EXPIRED transition should survive the failed redemption."""
        invite.expires_at = utcnow() - timedelta(minutes=1)
        await db.commit()
        service = InviteCodeService(db)

        with pytest.raises(BadRequestError) as exc_info:
            await service.redeem(newcomer, invite.code)
        await db.rollback()

        assert exc_info.value.error_code == "CODE_EXPIRED"
        result = await db.execute(
            select(InviteCode.status).where(InviteCode.id == invite.id)
        )
        assert result.scalar_one() == InviteCodeStatus.EXPIRED

    async def test_code_for_apartment_claimed_meanwhile(
        self,
        db: AsyncSession,
        invite: InviteCode,
        vacant_apartment: Apartment,
        owner_user: User,
        newcomer: User,
    ):
        vacant_apartment.owner_id = owner_user.owner_profile.id
        await db.commit()
        service = InviteCodeService(db)

        with pytest.raises(ConflictError) as exc_info:
            await service.redeem(newcomer, invite.code)

        assert exc_info.value.error_code == "APARTMENT_ALREADY_OWNED"


class TestCancelAndExpire:
    """Tests for cancellation and the periodic expiry sweep."""

    async def test_cancel_active_code(
        self,
        db: AsyncSession,
        admin_user: User,
        invite: InviteCode,
        auth_for: Callable[..., AuthContext],
    ):
        service = InviteCodeService(db)

        cancelled = await service.cancel(auth_for(admin_user), invite.id)

        assert cancelled.status == InviteCodeStatus.CANCELLED

    async def test_cancel_used_code_is_rejected(
        self,
        db: AsyncSession,
        admin_user: User,
        invite: InviteCode,
        newcomer: User,
        auth_for: Callable[..., AuthContext],
    ):
        """Codes never move backward out of a terminal status."""
        service = InviteCodeService(db)
        await service.redeem(newcomer, invite.code)

        with pytest.raises(BadRequestError) as exc_info:
            await service.cancel(auth_for(admin_user), invite.id)

        assert exc_info.value.error_code == "CODE_NOT_CANCELLABLE"

    async def test_expire_overdue(self, db: AsyncSession, invite: InviteCode):
        invite.expires_at = utcnow() - timedelta(days=1)
        await db.commit()
        service = InviteCodeService(db)

        assert await service.expire_overdue() == 1
        assert await service.expire_overdue() == 0
        await db.refresh(invite)
        assert invite.status == InviteCodeStatus.EXPIRED
