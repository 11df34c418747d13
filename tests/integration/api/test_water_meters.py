"""Integration tests for water meter and reading endpoints."""

import pytest
from httpx import AsyncClient

from tbsa.modules.apartments.models import Apartment
from tbsa.modules.buildings.models import Building
from tbsa.modules.water_meters.models import WaterMeter
from tests.factories.building import WaterMeterCreateFactory


pytestmark = pytest.mark.integration


class TestMeters:
    """Tests for installing and listing meters."""

    async def test_install_meter(self, admin_client: AsyncClient, apartment: Apartment):
        payload = WaterMeterCreateFactory.build(apartment_id=apartment.id, serial_number="ZN-77")

        response = await admin_client.post(
            "/api/water-meters", json=payload.model_dump(mode="json")
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["serial_number"] == "ZN-77"
        assert data["is_active"] is True

    async def test_bulk_install_rejects_duplicates(
        self,
        admin_client: AsyncClient,
        apartment: Apartment,
        water_meter: WaterMeter,
    ):
        """POST /api/water-meters/bulk should install nothing when a serial is taken."""
        response = await admin_client.post(
            "/api/water-meters/bulk",
            json={
                "apartment_id": str(apartment.id),
                "meters": [{"serial_number": "NEW-1"}, {"serial_number": "WM-0001"}],
            },
        )
        listing = await admin_client.get(
            "/api/water-meters", params={"apartment_id": str(apartment.id)}
        )

        assert response.status_code == 409
        assert response.json()["details"] == {"serial_numbers": ["WM-0001"]}
        assert listing.json()["data"]["total"] == 1

    async def test_bulk_install(self, admin_client: AsyncClient, apartment: Apartment):
        response = await admin_client.post(
            "/api/water-meters/bulk",
            json={
                "apartment_id": str(apartment.id),
                "meters": [{"serial_number": "HOT-9"}, {"serial_number": "COLD-9"}],
            },
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Created 2 water meters"

    async def test_owner_lists_own_meters(
        self,
        owner_client: AsyncClient,
        water_meter: WaterMeter,
    ):
        response = await owner_client.get("/api/water-meters")

        assert response.status_code == 200
        assert [m["serial_number"] for m in response.json()["data"]["items"]] == ["WM-0001"]

    async def test_owner_cannot_install(self, owner_client: AsyncClient, apartment: Apartment):
        payload = WaterMeterCreateFactory.build(apartment_id=apartment.id)

        response = await owner_client.post(
            "/api/water-meters", json=payload.model_dump(mode="json")
        )

        assert response.status_code == 403

    async def test_deactivate_meter(self, admin_client: AsyncClient, water_meter: WaterMeter):
        response = await admin_client.patch(
            f"/api/water-meters/{water_meter.id}", json={"is_active": False}
        )

        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False


class TestReadings:
    """Tests for submitting and validating readings."""

    async def test_reading_lifecycle(
        self,
        owner_client: AsyncClient,
        admin_client: AsyncClient,
        water_meter: WaterMeter,
        building: Building,
    ):
        """Owners submit readings, consumption is derived, administrators validate."""
        url = f"/api/water-meters/{water_meter.id}/readings"
        first = await owner_client.post(
            url, json={"value": 100.0, "reading_date": "2026-02-24T10:00:00Z"}
        )
        second = await owner_client.post(
            url, json={"value": 112.5, "reading_date": "2026-03-24T10:00:00Z"}
        )

        assert first.status_code == 201
        assert first.json()["data"]["consumption"] is None
        assert second.status_code == 201
        assert second.json()["data"]["consumption"] == 12.5
        assert second.json()["data"]["month"] == 3

        listing = await owner_client.get(url)
        assert [r["value"] for r in listing.json()["data"]] == [112.5, 100.0]

        reading_id = second.json()["data"]["id"]
        validated = await admin_client.post(f"/api/water-readings/{reading_id}/validate")
        again = await admin_client.post(f"/api/water-readings/{reading_id}/validate")

        assert validated.status_code == 200
        assert validated.json()["data"]["validated"] is True
        assert again.status_code == 409
        assert again.json()["code"] == "READING_ALREADY_VALIDATED"

    async def test_lower_reading_rejected(
        self,
        owner_client: AsyncClient,
        water_meter: WaterMeter,
    ):
        url = f"/api/water-meters/{water_meter.id}/readings"
        await owner_client.post(url, json={"value": 50})

        response = await owner_client.post(url, json={"value": 49})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["details"]["errors"][0]["field"] == "value"

    async def test_owner_cannot_validate(
        self,
        owner_client: AsyncClient,
        water_meter: WaterMeter,
    ):
        submitted = await owner_client.post(
            f"/api/water-meters/{water_meter.id}/readings", json={"value": 5}
        )

        response = await owner_client.post(
            f"/api/water-readings/{submitted.json()['data']['id']}/validate"
        )

        assert response.status_code == 403
