"""Mess ORM model: one tenant (shared household/hostel) isolated from all others."""

from enum import Enum

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messmate.models import Base, BaseModel


class MessStatus(str, Enum):
    """Lifecycle status of a mess."""

    ACTIVE = "active"
    """Subscription is current, manager has full access."""

    INACTIVE = "inactive"
    """No active subscription (read-only for the manager)."""

    SUSPENDED = "suspended"
    """Suspended by an administrator; working data is frozen."""


class Mess(Base, BaseModel):
    """Model representing a mess (tenant).

    A mess owns its members and all meal, bazar, deposit and additional cost rows.
    ``current_month`` is the open accounting period as a ``YYYY-MM`` token; the
    monthly rollover archives that period and advances the token.
    """

    __tablename__ = "messes"

    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name (set by manager after registration)",
    )
    manager_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Identity provider subject of the mess manager",
    )
    current_month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Open accounting period (YYYY-MM)",
    )
    status: Mapped[MessStatus] = mapped_column(
        String(20),
        nullable=False,
        default=MessStatus.INACTIVE,
        comment="Lifecycle status: active, inactive or suspended",
    )
    suspend_reason: Mapped[str | None] = mapped_column(
        nullable=True,
        comment="Reason given by the administrator when suspending",
    )

    # Relationships
    members: Mapped[list["Member"]] = relationship(  # noqa: F821
        "Member",
        back_populates="mess",
        cascade="all, delete-orphan",
    )
    archives: Mapped[list["MonthlyArchive"]] = relationship(  # noqa: F821
        "MonthlyArchive",
        back_populates="mess",
        order_by="MonthlyArchive.month.desc()",
    )
    subscriptions: Mapped[list["Subscription"]] = relationship(  # noqa: F821
        "Subscription",
        back_populates="mess",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_mess_status", "status"),)

    @property
    def is_suspended(self) -> bool:
        return self.status == MessStatus.SUSPENDED

    def __repr__(self) -> str:
        return (
            f"<Mess(id={self.id}, name={self.name}, current_month={self.current_month}, "
            f"status={self.status})>"
        )


__all__ = ["Mess", "MessStatus"]
