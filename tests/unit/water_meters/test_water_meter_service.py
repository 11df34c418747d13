"""Unit tests for water meter installation and reading rules."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.core.auth.dependencies import AuthContext
from tbsa.core.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from tbsa.modules.apartments.models import Apartment
from tbsa.modules.organizations.models import Organization
from tbsa.modules.users.models import User
from tbsa.modules.water_meters.models import WaterMeter, WaterReading
from tbsa.modules.water_meters.schemas import (
    WaterMeterBulkCreate,
    WaterMeterFields,
    WaterReadingCreate,
)
from tbsa.modules.water_meters.services import WaterMeterService
from tests.factories.building import WaterMeterCreateFactory


pytestmark = pytest.mark.unit


def _march(day: int) -> datetime:
    return datetime(2026, 3, day, 9, 30, tzinfo=UTC)


class TestSubmitReading:
    """Tests for WaterMeterService.submit_reading."""

    async def test_first_reading_has_no_consumption(
        self,
        db: AsyncSession,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        reading = await WaterMeterService(db).submit_reading(
            auth_for(owner_user),
            water_meter.id,
            WaterReadingCreate(value=12.5, reading_date=_march(1)),
        )

        assert reading.consumption is None
        assert (reading.month, reading.year) == (3, 2026)
        assert reading.submitted_by_id == owner_user.id
        assert reading.validated is False

    async def test_consumption_is_difference_with_latest(
        self,
        db: AsyncSession,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        service = WaterMeterService(db)
        auth = auth_for(owner_user)
        await service.submit_reading(
            auth, water_meter.id, WaterReadingCreate(value=12.5, reading_date=_march(1))
        )

        reading = await service.submit_reading(
            auth, water_meter.id, WaterReadingCreate(value=20.0, reading_date=_march(25))
        )

        assert reading.consumption == pytest.approx(7.5)

    async def test_lower_value_rejected(
        self,
        db: AsyncSession,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        service = WaterMeterService(db)
        auth = auth_for(owner_user)
        await service.submit_reading(
            auth, water_meter.id, WaterReadingCreate(value=30, reading_date=_march(1))
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.submit_reading(
                auth, water_meter.id, WaterReadingCreate(value=29.9, reading_date=_march(25))
            )

        assert exc_info.value.details["errors"][0]["field"] == "value"

    async def test_backdated_reading_rejected(
        self,
        db: AsyncSession,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        service = WaterMeterService(db)
        auth = auth_for(owner_user)
        await service.submit_reading(
            auth, water_meter.id, WaterReadingCreate(value=100, reading_date=_march(1))
        )
        await service.submit_reading(
            auth, water_meter.id, WaterReadingCreate(value=200, reading_date=_march(20))
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.submit_reading(
                auth, water_meter.id, WaterReadingCreate(value=250, reading_date=_march(10))
            )

        assert exc_info.value.details["errors"][0]["field"] == "reading_date"
        count = await db.scalar(
            select(func.count())
            .select_from(WaterReading)
            .where(WaterReading.water_meter_id == water_meter.id)
        )
        assert count == 2

    async def test_inactive_meter_rejected(
        self,
        db: AsyncSession,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        water_meter.is_active = False
        await db.commit()

        with pytest.raises(BadRequestError) as exc_info:
            await WaterMeterService(db).submit_reading(
                auth_for(owner_user), water_meter.id, WaterReadingCreate(value=1)
            )

        assert exc_info.value.error_code == "METER_INACTIVE"

    async def test_other_owner_cannot_submit(
        self,
        db: AsyncSession,
        make_user: Callable[..., Awaitable[User]],
        organization: Organization,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        neighbour = await make_user("vecin@example.com", organization=organization, owner=True)

        with pytest.raises(NotFoundError):
            await WaterMeterService(db).submit_reading(
                auth_for(neighbour), water_meter.id, WaterReadingCreate(value=1)
            )


class TestValidateReading:
    """Tests for WaterMeterService.validate_reading."""

    async def test_administrator_validates_once(
        self,
        db: AsyncSession,
        admin_user: User,
        owner_user: User,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        service = WaterMeterService(db)
        reading = await service.submit_reading(
            auth_for(owner_user), water_meter.id, WaterReadingCreate(value=5)
        )

        validated = await service.validate_reading(auth_for(admin_user), reading.id)

        assert validated.validated is True
        assert validated.validated_by_id == admin_user.id
        assert validated.validated_at is not None

        with pytest.raises(ConflictError) as exc_info:
            await service.validate_reading(auth_for(admin_user), reading.id)
        assert exc_info.value.error_code == "READING_ALREADY_VALIDATED"


class TestInstallMeters:
    """Tests for meter installation."""

    async def test_initial_value_recorded_as_reading(
        self,
        db: AsyncSession,
        admin_user: User,
        apartment: Apartment,
        auth_for: Callable[..., AuthContext],
    ):
        data = WaterMeterCreateFactory.build(apartment_id=apartment.id, initial_value=42.0)

        meter = await WaterMeterService(db).create_meter(auth_for(admin_user), data)

        readings = (
            await db.execute(select(WaterReading).where(WaterReading.water_meter_id == meter.id))
        ).scalars().all()
        assert [(r.value, r.consumption) for r in readings] == [(42.0, None)]

    async def test_duplicate_serial_rejected(
        self,
        db: AsyncSession,
        admin_user: User,
        apartment: Apartment,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
    ):
        data = WaterMeterCreateFactory.build(
            apartment_id=apartment.id, serial_number=water_meter.serial_number
        )

        with pytest.raises(ConflictError) as exc_info:
            await WaterMeterService(db).create_meter(auth_for(admin_user), data)

        assert exc_info.value.error_code == "SERIAL_NUMBER_TAKEN"

    async def test_bulk_creates_every_meter(
        self,
        db: AsyncSession,
        admin_user: User,
        apartment: Apartment,
        auth_for: Callable[..., AuthContext],
    ):
        data = WaterMeterBulkCreate(
            apartment_id=apartment.id,
            meters=[
                WaterMeterFields(serial_number="HOT-1", location="Baie"),
                WaterMeterFields(serial_number="COLD-1", location="Bucatarie"),
            ],
        )

        meters = await WaterMeterService(db).create_bulk(auth_for(admin_user), data)

        assert sorted(m.serial_number for m in meters) == ["COLD-1", "HOT-1"]

    @pytest.mark.parametrize(
        "serials",
        [
            ["NEW-1", "NEW-1"],
            ["NEW-1", "WM-0001"],
        ],
    )
    async def test_bulk_is_all_or_nothing(
        self,
        db: AsyncSession,
        admin_user: User,
        apartment: Apartment,
        water_meter: WaterMeter,
        auth_for: Callable[..., AuthContext],
        serials: list[str],
    ):
        data = WaterMeterBulkCreate(
            apartment_id=apartment.id,
            meters=[WaterMeterFields(serial_number=s) for s in serials],
        )

        with pytest.raises(ConflictError):
            await WaterMeterService(db).create_bulk(auth_for(admin_user), data)

        count = (await db.execute(select(func.count(WaterMeter.id)))).scalar_one()
        assert count == 1
