"""Subscription plan database models."""

from typing import Any

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin


plan_modules = Table(
    "plan_modules",
    Base.metadata,
    Column(
        "plan_id",
        Uuid,
        ForeignKey("subscription_plans.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "module_id",
        Uuid,
        ForeignKey("modules.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Module(Base, UUIDMixin, TimestampMixin):
    """A product module that plans can include (e.g. WATER_READING)."""

    __tablename__ = "modules"

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class SubscriptionPlan(Base, UUIDMixin, TimestampMixin):
    """A priced plan with usage limits.

    Attributes:
        name: Unique plan name ("Starter", "Professional", "Enterprise")
        price: Monthly price in whole currency units
        currency: ISO currency code
        max_buildings: Building limit, None for unlimited
        max_apartments: Apartment limit, None for unlimited
        features: Free-form feature flags shown to customers
    """

    __tablename__ = "subscription_plans"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="RON", nullable=False)
    max_buildings: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_apartments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    features: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    modules: Mapped[list["Module"]] = relationship(
        "Module",
        secondary=plan_modules,
        lazy="selectin",
    )

    @property
    def module_codes(self) -> list[str]:
        return sorted(m.code for m in self.modules)

    def __repr__(self) -> str:
        return f"<SubscriptionPlan(name={self.name})>"
