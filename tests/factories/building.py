"""Building, apartment and water meter payload factories for tests."""

from itertools import count
from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from tbsa.modules.apartments.schemas import ApartmentCreate
from tbsa.modules.buildings.models import BuildingType
from tbsa.modules.buildings.schemas import BuildingCreate
from tbsa.modules.water_meters.schemas import WaterMeterCreate


_apartment_numbers = count(100)


class BuildingFactory(ModelFactory[BuildingCreate]):
    """Factory for building create payloads."""

    __model__ = BuildingCreate

    @classmethod
    def name(cls) -> str:
        return f"Bloc {uuid4().hex[:4].upper()}"

    @classmethod
    def address(cls) -> str:
        return "Strada Memorandumului 28"

    @classmethod
    def city(cls) -> str | None:
        return "Cluj-Napoca"

    @classmethod
    def type(cls) -> BuildingType:
        return BuildingType.RESIDENTIAL

    @classmethod
    def floors(cls) -> int:
        return 4

    @classmethod
    def total_apartments(cls) -> int:
        return 16

    @classmethod
    def description(cls) -> str | None:
        return None

    @classmethod
    def reading_day(cls) -> int:
        return 25

    @classmethod
    def administrator_id(cls) -> None:
        return None


class ApartmentCreateFactory(ModelFactory[ApartmentCreate]):
    """Factory for apartment create payloads.

    ``building_id`` must be passed to ``build``.
    """

    __model__ = ApartmentCreate

    @classmethod
    def number(cls) -> str:
        """Generate a unique apartment number."""
        return str(next(_apartment_numbers))

    @classmethod
    def floor(cls) -> int:
        return 1

    @classmethod
    def occupant_count(cls) -> int:
        return 2

    @classmethod
    def surface(cls) -> float | None:
        return 62.0

    @classmethod
    def description(cls) -> str | None:
        return None


class WaterMeterCreateFactory(ModelFactory[WaterMeterCreate]):
    """Factory for water meter create payloads.

    ``apartment_id`` must be passed to ``build``.
    """

    __model__ = WaterMeterCreate

    @classmethod
    def serial_number(cls) -> str:
        """Generate a unique serial number."""
        return f"SN-{uuid4().hex[:10].upper()}"

    @classmethod
    def location(cls) -> str | None:
        return "Baie"

    @classmethod
    def brand(cls) -> str | None:
        return "Zenner"

    @classmethod
    def model(cls) -> str | None:
        return None

    @classmethod
    def initial_value(cls) -> float:
        return 0
