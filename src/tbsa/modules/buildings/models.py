"""Building database model."""

from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH
from tbsa.core.database.base import Base, OrganizationMixin, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from tbsa.modules.apartments.models import Apartment
    from tbsa.modules.users.models import AdministratorProfile


class BuildingType(StrEnum):
    RESIDENTIAL = "RESIDENTIAL"
    COMMERCIAL = "COMMERCIAL"
    MIXED = "MIXED"


class Building(Base, UUIDMixin, TimestampMixin, OrganizationMixin):
    """A building managed by an administrator within an organization.

    Attributes:
        administrator_id: Administrator profile managing the building
        name: Display name
        address: Street address
        city: City
        type: One of BuildingType
        floors: Number of floors
        total_apartments: Declared apartment count
        description: Free-form notes
        reading_day: Day of month when water readings are due
    """

    __tablename__ = "buildings"

    administrator_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("administrator_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(MAX_NAME_LENGTH), nullable=True)
    type: Mapped[str] = mapped_column(
        String(20),
        default=BuildingType.RESIDENTIAL,
        nullable=False,
    )
    floors: Mapped[int] = mapped_column(Integer, nullable=False)
    total_apartments: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    reading_day: Mapped[int] = mapped_column(Integer, default=25, nullable=False)

    administrator: Mapped["AdministratorProfile | None"] = relationship(
        "AdministratorProfile",
        back_populates="buildings",
    )
    apartments: Mapped[list["Apartment"]] = relationship(
        "Apartment",
        back_populates="building",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Building(id={self.id}, name={self.name})>"
