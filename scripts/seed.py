#!/usr/bin/env python
"""
Install reference data (permissions, roles, modules, plans) and,
optionally, a super admin and a demo organization.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select


# Add src to path for imports
sys.path.insert(0, "src")

import tbsa.models  # noqa: E402, F401
from tbsa.core.auth.backend import hash_password  # noqa: E402
from tbsa.core.constants import ADMINISTRATOR_ROLE, SUPER_ADMIN_ROLE  # noqa: E402
from tbsa.core.database.session import async_session_factory  # noqa: E402
from tbsa.core.permissions.defaults import install_default_roles  # noqa: E402
from tbsa.modules.apartments.models import Apartment  # noqa: E402
from tbsa.modules.buildings.models import Building  # noqa: E402
from tbsa.modules.organizations.models import Organization  # noqa: E402
from tbsa.modules.subscriptions.catalogue import install_default_plans  # noqa: E402
from tbsa.modules.users.models import AdministratorProfile, User  # noqa: E402


DEMO_ADMIN_EMAIL = "admin@demo.tbsa.ro"
DEMO_PASSWORD = "Demo12345"


async def seed_default(super_admin_email: str | None, super_admin_password: str | None) -> None:
    """Install roles and plans, and a super admin when credentials are given."""
    async with async_session_factory() as session:
        roles = await install_default_roles(session)
        plans = await install_default_plans(session)
        print(f"Roles: {', '.join(sorted(roles))}")
        print(f"Plans: {', '.join(sorted(plans))}")

        if super_admin_email and super_admin_password:
            email = super_admin_email.lower()
            existing = await session.execute(select(User).where(User.email == email))
            if existing.scalar_one_or_none():
                print(f"Super admin already exists: {email}")
            else:
                session.add(
                    User(
                        email=email,
                        password_hash=hash_password(super_admin_password),
                        first_name="Super",
                        last_name="Admin",
                        role_id=roles[SUPER_ADMIN_ROLE].id,
                    )
                )
                print(f"Created super admin: {email}")

        await session.commit()


async def seed_demo() -> None:
    """Create a demo organization with an administrator and one building."""
    await seed_default(None, None)

    async with async_session_factory() as session:
        result = await session.execute(
            select(Organization).where(Organization.slug == "demo")
        )
        if result.scalar_one_or_none():
            print("Demo organization already exists")
            return

        roles = await install_default_roles(session)
        plans = await install_default_plans(session)

        organization = Organization(
            name="Asociația Demo",
            slug="demo",
            subscription_plan_id=plans["Professional"].id,
        )
        session.add(organization)
        await session.flush()

        admin = User(
            email=DEMO_ADMIN_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
            first_name="Ana",
            last_name="Popescu",
            role_id=roles[ADMINISTRATOR_ROLE].id,
            organization_id=organization.id,
        )
        session.add(admin)
        await session.flush()

        profile = AdministratorProfile(user_id=admin.id, company_name="Demo Administrare SRL")
        session.add(profile)
        await session.flush()

        building = Building(
            organization_id=organization.id,
            administrator_id=profile.id,
            name="Bloc A1",
            address="Strada Exemplului 10",
            city="Cluj-Napoca",
            floors=4,
            total_apartments=16,
        )
        session.add(building)
        await session.flush()

        for floor in range(4):
            for index in range(1, 5):
                session.add(
                    Apartment(
                        building_id=building.id,
                        number=str(floor * 4 + index),
                        floor=floor,
                    )
                )

        await session.commit()
        print(f"Created demo organization, login {DEMO_ADMIN_EMAIL} / {DEMO_PASSWORD}")


async def main(args: argparse.Namespace) -> None:
    """Run the seeding based on scenario."""
    if args.scenario == "default":
        await seed_default(args.super_admin_email, args.super_admin_password)
    elif args.scenario == "demo":
        await seed_demo()
    else:
        print(f"Unknown scenario: {args.scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with reference data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    parser.add_argument("--super-admin-email", default=None)
    parser.add_argument("--super-admin-password", default=None)
    args = parser.parse_args()

    asyncio.run(main(args))
