"""Apartment database model."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import MAX_DESCRIPTION_LENGTH
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from tbsa.modules.buildings.models import Building
    from tbsa.modules.users.models import OwnerProfile
    from tbsa.modules.water_meters.models import WaterMeter


class Apartment(Base, UUIDMixin, TimestampMixin):
    """An apartment within a building.

    An apartment without an owner can be claimed with an invite code.

    Attributes:
        building_id: The building containing the apartment
        number: Apartment number, unique within the building
        floor: Floor number (0 is ground floor)
        occupant_count: Number of registered occupants
        surface: Surface in square meters
        owner_id: Owner profile, None while unclaimed
    """

    __tablename__ = "apartments"
    __table_args__ = (
        UniqueConstraint("building_id", "number", name="uq_apartment_building_number"),
    )

    building_id: Mapped[UUID] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    number: Mapped[str] = mapped_column(String(10), nullable=False)
    floor: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    occupant_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    surface: Mapped[float | None] = mapped_column(Float, nullable=True)
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    owner_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("owner_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    building: Mapped["Building"] = relationship(
        "Building",
        back_populates="apartments",
        lazy="selectin",
    )
    owner: Mapped["OwnerProfile | None"] = relationship(
        "OwnerProfile",
        back_populates="apartments",
    )
    water_meters: Mapped[list["WaterMeter"]] = relationship(
        "WaterMeter",
        back_populates="apartment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_owned(self) -> bool:
        return self.owner_id is not None

    def __repr__(self) -> str:
        return f"<Apartment(id={self.id}, number={self.number})>"
