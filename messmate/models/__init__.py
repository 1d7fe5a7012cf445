"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from messmate.models.additional_cost import AdditionalCost  # noqa: E402
from messmate.models.audit_log import AuditLog  # noqa: E402
from messmate.models.bazar import Bazar  # noqa: E402
from messmate.models.deposit import Deposit  # noqa: E402
from messmate.models.meal import Meal  # noqa: E402
from messmate.models.member import Member  # noqa: E402
from messmate.models.mess import Mess, MessStatus  # noqa: E402
from messmate.models.monthly_archive import MonthlyArchive  # noqa: E402
from messmate.models.notification import (  # noqa: E402
    Notification,
    NotificationRead,
    SenderType,
    TargetType,
)
from messmate.models.subscription import (  # noqa: E402
    PlanType,
    Subscription,
    SubscriptionStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "Mess",
    "MessStatus",
    "Member",
    "Meal",
    "Bazar",
    "Deposit",
    "AdditionalCost",
    "MonthlyArchive",
    "Subscription",
    "SubscriptionStatus",
    "PlanType",
    "Notification",
    "NotificationRead",
    "SenderType",
    "TargetType",
    "AuditLog",
]
