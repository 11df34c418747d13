"""Water meter and reading database models."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from tbsa.modules.apartments.models import Apartment


class WaterMeter(Base, UUIDMixin, TimestampMixin):
    """A water meter installed in an apartment."""

    __tablename__ = "water_meters"

    apartment_id: Mapped[UUID] = mapped_column(
        ForeignKey("apartments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    serial_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    brand: Mapped[str | None] = mapped_column(String(50), nullable=True)
    model: Mapped[str | None] = mapped_column(String(50), nullable=True)
    initial_value: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    apartment: Mapped["Apartment"] = relationship(
        "Apartment",
        back_populates="water_meters",
        lazy="selectin",
    )
    readings: Mapped[list["WaterReading"]] = relationship(
        "WaterReading",
        back_populates="water_meter",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WaterReading.reading_date",
    )

    def __repr__(self) -> str:
        return f"<WaterMeter(serial_number={self.serial_number})>"


class WaterReading(Base, UUIDMixin, TimestampMixin):
    """An index reading of a water meter.

    Attributes:
        value: Meter index at reading_date
        consumption: value minus the previous reading of the same meter
        month: Billing month of the reading (1-12)
        year: Billing year of the reading
        validated: Whether an administrator accepted the reading
    """

    __tablename__ = "water_readings"

    water_meter_id: Mapped[UUID] = mapped_column(
        ForeignKey("water_meters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)
    consumption: Mapped[float | None] = mapped_column(Float, nullable=True)
    reading_date: Mapped[datetime] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    validated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    validated_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    validated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    water_meter: Mapped["WaterMeter"] = relationship(
        "WaterMeter",
        back_populates="readings",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<WaterReading(meter={self.water_meter_id}, value={self.value})>"
