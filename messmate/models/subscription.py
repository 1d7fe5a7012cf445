"""Subscription ORM model for mess service plans."""

from datetime import date
from enum import Enum

from sqlalchemy import Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messmate.models import Base, BaseModel


class PlanType(str, Enum):
    """Subscription plan length."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    """Subscription state."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Subscription(Base, BaseModel):
    """A paid plan that keeps a mess active between ``start_date`` and ``end_date``."""

    __tablename__ = "subscriptions"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    plan_type: Mapped[PlanType] = mapped_column(String(20), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    mess: Mapped["Mess"] = relationship("Mess", back_populates="subscriptions")  # noqa: F821

    def is_current(self, today: date) -> bool:
        """True if the subscription is active and has not run out."""
        return self.status == SubscriptionStatus.ACTIVE and self.end_date > today

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, mess_id={self.mess_id}, plan={self.plan_type}, "
            f"status={self.status}, end_date={self.end_date})>"
        )


__all__ = ["Subscription", "PlanType", "SubscriptionStatus"]
