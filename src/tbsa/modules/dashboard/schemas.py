"""Dashboard statistics schemas.

Keys are serialized in camelCase for the dashboard widgets.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadingActivity(CamelModel):
    """A recent reading shown in the activity feed."""

    id: UUID
    water_meter_id: UUID
    serial_number: str
    apartment_number: str
    building_name: str
    value: float
    consumption: float | None = None
    date: datetime
    validated: bool


class LastReading(CamelModel):
    value: float
    date: datetime


class AdminDashboardStats(CamelModel):
    total_users: int
    total_buildings: int
    total_apartments: int
    total_readings: int
    pending_readings: int
    recent_activity: list[ReadingActivity]


class OwnerDashboardStats(CamelModel):
    """Owner overview.

    ``pending_readings`` counts active meters still missing a reading for
    the current month.
    """

    total_apartments: int
    pending_readings: int
    last_reading: LastReading | None = None
    monthly_consumption: float
    recent_activity: list[ReadingActivity]
