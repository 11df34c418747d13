"""Pytest configuration and shared fixtures."""

import os


# Settings are read at import time, so the test environment must be in
# place before anything from tbsa is imported.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("SMTP_HOST", "")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from contextlib import AsyncExitStack  # noqa: E402
from datetime import timedelta  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

import tbsa.models  # noqa: E402, F401
from tbsa.core.auth.backend import hash_password  # noqa: E402
from tbsa.core.auth.dependencies import AuthContext  # noqa: E402
from tbsa.core.auth.schemas import TokenData  # noqa: E402
from tbsa.core.constants import (  # noqa: E402
    ADMINISTRATOR_ROLE,
    OWNER_ROLE,
    SUPER_ADMIN_ROLE,
)
from tbsa.core.database import Base, get_db, utcnow  # noqa: E402
from tbsa.core.permissions.defaults import install_default_roles  # noqa: E402
from tbsa.core.permissions.models import Role  # noqa: E402
from tbsa.main import create_app  # noqa: E402
from tbsa.modules.apartments.models import Apartment  # noqa: E402
from tbsa.modules.buildings.models import Building  # noqa: E402
from tbsa.modules.organizations.models import Organization  # noqa: E402
from tbsa.modules.subscriptions.catalogue import install_default_plans  # noqa: E402
from tbsa.modules.subscriptions.models import SubscriptionPlan  # noqa: E402
from tbsa.modules.users.models import AdministratorProfile, OwnerProfile, User  # noqa: E402
from tbsa.modules.water_meters.models import WaterMeter  # noqa: E402
from tests.factories.building import BuildingFactory  # noqa: E402


TEST_PASSWORD = "SecurePass123"

LoginFn = Callable[..., Awaitable[AsyncClient]]


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Hash the shared test password once; bcrypt is slow on purpose."""
    return hash_password(TEST_PASSWORD)


# ============================================================
# Database and Application
# ============================================================


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a throwaway SQLite database for one test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and inspecting results.

    Requests get their own sessions, like in production, so objects
    read here after a request must be refreshed first.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[Any, None]:
    """Create test application instance."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Provide an anonymous async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def login(app: Any) -> AsyncGenerator[LoginFn, None]:
    """Return a coroutine that logs a user in on a fresh client.

    Each client keeps its own cookie jar, so several users can be signed
    in within one test.
    """
    async with AsyncExitStack() as stack:

        async def _login(email: str, password: str = TEST_PASSWORD) -> AsyncClient:
            client = await stack.enter_async_context(
                AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            )
            response = await client.post(
                "/api/auth/login",
                json={"email": email, "password": password},
            )
            assert response.status_code == 200, response.text
            return client

        yield _login


# ============================================================
# Roles, Plans and Organizations
# ============================================================


@pytest.fixture
async def roles(db: AsyncSession) -> dict[str, Role]:
    """Install the permission catalogue and the default roles."""
    installed = await install_default_roles(db)
    await db.commit()
    return installed


@pytest.fixture
async def plans(db: AsyncSession) -> dict[str, SubscriptionPlan]:
    installed = await install_default_plans(db)
    await db.commit()
    return installed


@pytest.fixture
async def organization(db: AsyncSession, plans: dict[str, SubscriptionPlan]) -> Organization:
    """An organization on the Professional plan."""
    org = Organization(
        name="Asociatia Proprietari Test",
        slug="asociatia-proprietari-test",
        subscription_plan_id=plans["Professional"].id,
    )
    db.add(org)
    await db.commit()
    return org


@pytest.fixture
async def other_organization(db: AsyncSession, plans: dict[str, SubscriptionPlan]) -> Organization:
    org = Organization(
        name="Alta Asociatie",
        slug="alta-asociatie",
        subscription_plan_id=plans["Professional"].id,
    )
    db.add(org)
    await db.commit()
    return org


# ============================================================
# Users
# ============================================================


@pytest.fixture
def make_user(
    db: AsyncSession,
    roles: dict[str, Role],
    password_hash: str,
) -> Callable[..., Awaitable[User]]:
    """Return a coroutine creating a user with a role and profiles."""

    async def _make_user(
        email: str,
        role: str | None = OWNER_ROLE,
        organization: Organization | None = None,
        administrator: bool = False,
        owner: bool = False,
        first_name: str = "Ion",
        last_name: str = "Popescu",
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role_id=roles[role].id if role else None,
            organization_id=organization.id if organization else None,
        )
        db.add(user)
        await db.flush()

        if administrator:
            db.add(AdministratorProfile(user_id=user.id))
        if owner:
            db.add(OwnerProfile(user_id=user.id))
        await db.commit()

        # Load role and profile relationships
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def admin_user(make_user: Callable[..., Awaitable[User]], organization: Organization) -> User:
    """An administrator of ``organization`` with an administrator profile."""
    return await make_user(
        "admin@example.com",
        role=ADMINISTRATOR_ROLE,
        organization=organization,
        administrator=True,
        first_name="Maria",
        last_name="Ionescu",
    )


@pytest.fixture
async def owner_user(make_user: Callable[..., Awaitable[User]], organization: Organization) -> User:
    """An apartment owner of ``organization`` with an owner profile."""
    return await make_user(
        "owner@example.com",
        role=OWNER_ROLE,
        organization=organization,
        owner=True,
    )


@pytest.fixture
async def super_admin(make_user: Callable[..., Awaitable[User]]) -> User:
    """A platform super admin outside any organization."""
    return await make_user(
        "root@example.com",
        role=SUPER_ADMIN_ROLE,
        first_name="Super",
        last_name="Admin",
    )


@pytest.fixture
async def admin_client(login: LoginFn, admin_user: User) -> AsyncClient:
    return await login(admin_user.email)


@pytest.fixture
async def owner_client(login: LoginFn, owner_user: User) -> AsyncClient:
    return await login(owner_user.email)


@pytest.fixture
async def super_admin_client(login: LoginFn, super_admin: User) -> AsyncClient:
    return await login(super_admin.email)


# ============================================================
# Buildings, Apartments and Meters
# ============================================================


@pytest.fixture
async def building(db: AsyncSession, organization: Organization, admin_user: User) -> Building:
    """A building administered by ``admin_user``."""
    data = BuildingFactory.build(name="Bloc A1", floors=4, total_apartments=16)
    building = Building(
        organization_id=organization.id,
        administrator_id=admin_user.administrator_profile.id,
        **data.model_dump(exclude={"administrator_id"}),
    )
    db.add(building)
    await db.commit()
    return building


@pytest.fixture
async def apartment(db: AsyncSession, building: Building, owner_user: User) -> Apartment:
    """Apartment 1 of ``building``, owned by ``owner_user``."""
    apt = Apartment(
        building_id=building.id,
        number="1",
        floor=0,
        occupant_count=2,
        surface=54.5,
        owner_id=owner_user.owner_profile.id,
    )
    db.add(apt)
    await db.commit()
    await db.refresh(apt)
    return apt


@pytest.fixture
async def vacant_apartment(db: AsyncSession, building: Building) -> Apartment:
    """Apartment 2 of ``building``, without an owner."""
    apt = Apartment(building_id=building.id, number="2", floor=0, occupant_count=0)
    db.add(apt)
    await db.commit()
    await db.refresh(apt)
    return apt


@pytest.fixture
async def water_meter(db: AsyncSession, apartment: Apartment) -> WaterMeter:
    """An active cold water meter in ``apartment`` with no readings."""
    meter = WaterMeter(
        apartment_id=apartment.id,
        serial_number="WM-0001",
        location="Bucatarie",
        initial_value=0,
    )
    db.add(meter)
    await db.commit()
    await db.refresh(meter)
    return meter


# ============================================================
# Service-level Auth
# ============================================================


@pytest.fixture
def auth_for() -> Callable[..., AuthContext]:
    """Return a function building an AuthContext from a user's current role.

    Service tests use it in place of a signed-in request.
    """

    def _auth_for(user: User, session_id: UUID | None = None) -> AuthContext:
        role = user.role
        return AuthContext(
            user=user,
            token=TokenData(
                user_id=user.id,
                session_id=session_id or uuid4(),
                role=role.name if role else None,
                permissions=role.permission_codes if role else [],
                organization_id=user.organization_id,
                exp=utcnow() + timedelta(minutes=15),
            ),
        )

    return _auth_for
