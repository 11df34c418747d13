"""Integration tests for building endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.organizations.models import Organization
from tbsa.modules.users.models import User
from tests.factories.building import BuildingFactory


pytestmark = pytest.mark.integration


class TestBuildingCrud:
    """Tests for creating, reading, updating and deleting buildings."""

    async def test_create_building(self, admin_client: AsyncClient, admin_user: User):
        """POST /api/buildings should create a building the caller administers."""
        payload = BuildingFactory.build(name="Bloc B2", city="Iasi")

        response = await admin_client.post("/api/buildings", json=payload.model_dump(mode="json"))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Building created"
        assert body["data"]["name"] == "Bloc B2"
        assert body["data"]["administrator_id"] == str(admin_user.administrator_profile.id)
        assert body["data"]["organization_id"] == str(admin_user.organization_id)
        assert body["data"]["apartment_count"] == 0

    async def test_list_buildings_with_apartment_counts(
        self,
        admin_client: AsyncClient,
        building: Building,
        apartment: Apartment,
        vacant_apartment: Apartment,
    ):
        """GET /api/buildings should page buildings with their apartment counts."""
        response = await admin_client.get("/api/buildings", params={"page_size": 5})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["page"] == 1
        assert data["page_size"] == 5
        assert data["items"][0]["name"] == "Bloc A1"
        assert data["items"][0]["apartment_count"] == 2

    async def test_search_buildings(self, admin_client: AsyncClient, building: Building):
        """GET /api/buildings?search= should filter by name or address."""
        found = await admin_client.get("/api/buildings", params={"search": "a1"})
        missing = await admin_client.get("/api/buildings", params={"search": "Bloc Z"})

        assert found.json()["data"]["total"] == 1
        assert missing.json()["data"]["total"] == 0

    async def test_update_building(self, admin_client: AsyncClient, building: Building):
        """PATCH /api/buildings/{id} should apply a partial update."""
        response = await admin_client.patch(
            f"/api/buildings/{building.id}", json={"reading_day": 20}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["reading_day"] == 20
        assert data["name"] == "Bloc A1"

    async def test_cannot_shrink_below_registered_apartments(
        self,
        admin_client: AsyncClient,
        building: Building,
        apartment: Apartment,
        vacant_apartment: Apartment,
    ):
        """PATCH /api/buildings/{id} should keep total_apartments above the count."""
        response = await admin_client.patch(
            f"/api/buildings/{building.id}", json={"total_apartments": 1}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["details"]["errors"][0]["field"] == "total_apartments"

    async def test_delete_building_cascades(
        self,
        admin_client: AsyncClient,
        db: AsyncSession,
        building: Building,
        apartment: Apartment,
    ):
        """DELETE /api/buildings/{id} should remove the building and its apartments."""
        building_id, apartment_id = building.id, apartment.id

        response = await admin_client.delete(f"/api/buildings/{building_id}")

        assert response.status_code == 200
        assert response.json()["data"] is None
        db.expunge_all()
        assert await db.get(Building, building_id) is None
        assert await db.get(Apartment, apartment_id) is None

    async def test_building_apartments(
        self,
        admin_client: AsyncClient,
        building: Building,
        apartment: Apartment,
        vacant_apartment: Apartment,
    ):
        """GET /api/buildings/{id}/apartments should list apartments by floor and number."""
        response = await admin_client.get(f"/api/buildings/{building.id}/apartments")

        assert response.status_code == 200
        assert [a["number"] for a in response.json()["data"]] == ["1", "2"]

    async def test_water_consumption_report(
        self,
        admin_client: AsyncClient,
        building: Building,
    ):
        """GET /api/buildings/{id}/water-consumption should return an empty report."""
        response = await admin_client.get(f"/api/buildings/{building.id}/water-consumption")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["building_id"] == str(building.id)
        assert data["monthly_breakdown"] == []
        assert data["six_months"]["total"] == 0


class TestBuildingAccess:
    """Tests for building scope and plan limits."""

    async def test_unknown_building(self, admin_client: AsyncClient, building: Building):
        response = await admin_client.get(f"/api/buildings/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "BUILDING_NOT_FOUND"

    async def test_building_of_other_organization_hidden(
        self,
        admin_client: AsyncClient,
        db: AsyncSession,
        other_organization: Organization,
    ):
        """GET /api/buildings/{id} should hide buildings of other organizations."""
        foreign = Building(
            organization_id=other_organization.id,
            **BuildingFactory.build(name="Bloc Strain").model_dump(exclude={"administrator_id"}),
        )
        db.add(foreign)
        await db.commit()

        response = await admin_client.get(f"/api/buildings/{foreign.id}")
        listing = await admin_client.get("/api/buildings")

        assert response.status_code == 404
        assert listing.json()["data"]["total"] == 0

    async def test_owner_cannot_list_buildings(
        self,
        owner_client: AsyncClient,
        building: Building,
        apartment: Apartment,
    ):
        """Owners reach buildings only through their apartments."""
        response = await owner_client.get("/api/buildings")

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"

    async def test_owner_cannot_create_building(self, owner_client: AsyncClient):
        response = await owner_client.post(
            "/api/buildings", json=BuildingFactory.build().model_dump(mode="json")
        )

        assert response.status_code == 403
        assert response.json()["details"]["required_permissions"] == [
            "buildings:create:own"
        ]

    async def test_plan_limit(self, admin_client: AsyncClient, building: Building):
        """POST /api/buildings should stop at the plan's building limit."""
        for _ in range(2):
            created = await admin_client.post(
                "/api/buildings", json=BuildingFactory.build().model_dump(mode="json")
            )
            assert created.status_code == 201

        response = await admin_client.post(
            "/api/buildings", json=BuildingFactory.build().model_dump(mode="json")
        )

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "PLAN_LIMIT_REACHED"
        assert body["details"] == {"resource": "buildings", "limit": 3, "current": 3}
