"""Organization (tenant) database model."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tbsa.core.constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from tbsa.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from tbsa.modules.subscriptions.models import SubscriptionPlan


class Organization(Base, UUIDMixin, TimestampMixin):
    """A property management company or owners' association.

    Organizations are the tenant boundary: buildings belong to exactly one
    organization and "all"-scoped permissions reach across it.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    subscription_plan_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("subscription_plans.id", ondelete="SET NULL"),
        nullable=True,
    )

    subscription_plan: Mapped["SubscriptionPlan | None"] = relationship(
        "SubscriptionPlan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug})>"
