"""Mess (tenant) lifecycle service: registration, subscriptions, suspension."""

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.errors import (
    MessSuspendedError,
    NotFoundError,
    SubscriptionInactiveError,
    ValidationError,
)
from messmate.models.mess import Mess, MessStatus
from messmate.models.notification import Notification, SenderType, TargetType
from messmate.models.subscription import PlanType, Subscription, SubscriptionStatus
from messmate.services.audit_service import AuditAction, AuditService
from messmate.services.balance_service import current_month, month_bounds

logger = logging.getLogger(__name__)

PLAN_LENGTH_DAYS = {
    PlanType.MONTHLY: 30,
    PlanType.YEARLY: 365,
}


class MessService:
    """Service for mess database operations.

    Encapsulates Mess and Subscription CRUD so API handlers do not touch the
    session directly.
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db
        self.audit = AuditService(db)

    def create_mess(
        self, name: str | None, manager_id: str, month: str | None = None
    ) -> Mess:
        """Register a mess for a manager.

        Args:
            name: Display name (may be set later)
            manager_id: Identity subject of the manager (one mess per manager)
            month: Opening accounting period (default: current month)

        Returns:
            Created Mess (status inactive until a subscription is activated)

        Raises:
            ValidationError: Manager already has a mess or month is malformed
        """
        if not manager_id:
            raise ValidationError("manager_id is required")
        if self.get_mess_for_manager(manager_id):
            raise ValidationError("Manager already has a mess")

        opening_month = month or current_month()
        month_bounds(opening_month)

        mess = Mess(
            name=name.strip() if name else None,
            manager_id=manager_id,
            current_month=opening_month,
            status=MessStatus.INACTIVE,
        )
        self.db.add(mess)
        self.db.commit()

        logger.info("Created mess: id=%d manager=%s month=%s", mess.id, manager_id, opening_month)
        self.audit.record_mess_event(mess.id, AuditAction.CREATE, manager_id)
        self.db.commit()
        return mess

    def get_mess(self, mess_id: int) -> Mess:
        """Get mess by ID.

        Raises:
            NotFoundError: If the mess does not exist
        """
        mess = self.db.get(Mess, mess_id)
        if mess is None:
            raise NotFoundError(f"Mess {mess_id} not found")
        return mess

    def get_mess_for_manager(self, manager_id: str) -> Mess | None:
        return self.db.scalars(select(Mess).filter(Mess.manager_id == manager_id)).first()

    def list_messes(self, status: MessStatus | None = None) -> list[Mess]:
        stmt = select(Mess).order_by(Mess.id)
        if status is not None:
            stmt = stmt.filter(Mess.status == status)
        return list(self.db.scalars(stmt).all())

    def rename_mess(self, mess_id: int, name: str) -> Mess:
        if not name or not name.strip():
            raise ValidationError("Mess name is required")
        mess = self.get_mess(mess_id)
        mess.name = name.strip()
        self.db.commit()
        return mess

    def get_current_subscription(self, mess_id: int, today: date | None = None) -> Subscription | None:
        """Latest subscription that is active and not yet expired."""
        today = today or datetime.now(timezone.utc).date()
        subscriptions = self.db.scalars(
            select(Subscription)
            .filter(Subscription.mess_id == mess_id)
            .order_by(Subscription.end_date.desc())
        ).all()
        return next((s for s in subscriptions if s.is_current(today)), None)

    def activate_subscription(
        self,
        mess_id: int,
        plan_type: PlanType,
        start_date: date | None = None,
        actor: str | None = None,
    ) -> Subscription:
        """Start a subscription and activate the mess (unless suspended).

        Any previously active subscription is marked expired.
        """
        mess = self.get_mess(mess_id)
        plan = PlanType(plan_type)
        start = start_date or datetime.now(timezone.utc).date()

        for previous in mess.subscriptions:
            if previous.status == SubscriptionStatus.ACTIVE:
                previous.status = SubscriptionStatus.EXPIRED

        subscription = Subscription(
            mess_id=mess.id,
            plan_type=plan,
            status=SubscriptionStatus.ACTIVE,
            start_date=start,
            end_date=start + timedelta(days=PLAN_LENGTH_DAYS[plan]),
        )
        self.db.add(subscription)
        if mess.status != MessStatus.SUSPENDED:
            mess.status = MessStatus.ACTIVE
        self.db.flush()

        self.audit.record_mess_event(
            mess.id,
            AuditAction.SUBSCRIBE,
            actor,
            {"plan_type": plan.value, "end_date": subscription.end_date.isoformat()},
        )
        self.db.commit()

        logger.info(
            "Activated %s subscription for mess %d until %s",
            plan.value,
            mess.id,
            subscription.end_date,
        )
        return subscription

    def suspend_mess(self, mess_id: int, reason: str, actor: str | None = None) -> Mess:
        """Suspend a mess and notify its manager.

        Raises:
            ValidationError: Missing reason
            NotFoundError: Unknown mess
        """
        if not reason or not reason.strip():
            raise ValidationError("Suspension reason is required")
        mess = self.get_mess(mess_id)

        mess.status = MessStatus.SUSPENDED
        mess.suspend_reason = reason.strip()
        self._notify_manager(
            mess,
            f"Your mess has been suspended by admin. Reason: {mess.suspend_reason}. "
            "Please contact support for more information.",
            actor,
        )
        self.audit.record_mess_event(
            mess.id, AuditAction.SUSPEND, actor, {"reason": mess.suspend_reason}
        )
        self.db.commit()

        logger.info("Suspended mess %d: %s", mess.id, mess.suspend_reason)
        return mess

    def unsuspend_mess(
        self, mess_id: int, actor: str | None = None, today: date | None = None
    ) -> Mess:
        """Lift a suspension; status follows the subscription state."""
        mess = self.get_mess(mess_id)

        subscription = self.get_current_subscription(mess.id, today)
        mess.status = MessStatus.ACTIVE if subscription else MessStatus.INACTIVE
        mess.suspend_reason = None
        self._notify_manager(
            mess,
            "Your mess has been unsuspended. You can now access your dashboard again.",
            actor,
        )
        self.audit.record_mess_event(
            mess.id, AuditAction.UNSUSPEND, actor, {"status": MessStatus(mess.status).value}
        )
        self.db.commit()

        logger.info("Unsuspended mess %d, status=%s", mess.id, mess.status)
        return mess

    def ensure_writable(self, mess_id: int, today: date | None = None) -> Subscription:
        """Check that the manager may change data of this mess.

        A suspended mess, or one whose subscription has run out, is read-only.

        Returns:
            The current subscription (its start date bounds entry dates)

        Raises:
            NotFoundError: Unknown mess
            MessSuspendedError: Mess is suspended
            SubscriptionInactiveError: No active, unexpired subscription
        """
        mess = self.get_mess(mess_id)
        if mess.is_suspended:
            raise MessSuspendedError(
                f"Mess {mess.id} is suspended: {mess.suspend_reason or 'no reason given'}"
            )
        subscription = self.get_current_subscription(mess.id, today)
        if subscription is None:
            raise SubscriptionInactiveError(
                f"Mess {mess.id} has no active subscription; data is read-only"
            )
        return subscription

    def _notify_manager(self, mess: Mess, message: str, actor: str | None) -> None:
        self.db.add(
            Notification(
                mess_id=mess.id,
                sender_type=SenderType.ADMIN,
                sender_id=actor,
                target_type=TargetType.MANAGER,
                message=message,
            )
        )


__all__ = ["MessService", "PLAN_LENGTH_DAYS"]
