"""Integration tests for mess registration, subscriptions and suspension."""

from datetime import date

import pytest
from sqlalchemy import select

from messmate.errors import (
    MessSuspendedError,
    NotFoundError,
    SubscriptionInactiveError,
    ValidationError,
)
from messmate.models import (
    AuditLog,
    MessStatus,
    Notification,
    PlanType,
    SenderType,
    SubscriptionStatus,
    TargetType,
)
from messmate.services.mess_service import MessService


class TestRegistration:
    """Tests for MessService.create_mess."""

    def test_new_mess_is_inactive(self, db_session):
        mess = MessService(db_session).create_mess("  Sunrise Hostel ", "manager-9", month="2025-04")

        assert mess.name == "Sunrise Hostel"
        assert mess.status == MessStatus.INACTIVE
        assert mess.current_month == "2025-04"

        entry = db_session.scalars(select(AuditLog)).one()
        assert (entry.entity_type, entry.action, entry.actor) == ("mess", "create", "manager-9")

    def test_one_mess_per_manager(self, db_session, mess):
        with pytest.raises(ValidationError, match="already has a mess"):
            MessService(db_session).create_mess("Second", mess.manager_id)

    def test_bad_opening_month(self, db_session):
        with pytest.raises(ValidationError):
            MessService(db_session).create_mess("X", "manager-9", month="April")

    def test_get_unknown_mess(self, db_session):
        with pytest.raises(NotFoundError):
            MessService(db_session).get_mess(404)

    def test_rename(self, db_session, mess):
        assert MessService(db_session).rename_mess(mess.id, " Green Villa ").name == "Green Villa"

    def test_rename_requires_name(self, db_session, mess):
        with pytest.raises(ValidationError):
            MessService(db_session).rename_mess(mess.id, "  ")


class TestSubscriptions:
    """Tests for subscription activation."""

    def test_activation_makes_mess_active(self, db_session):
        service = MessService(db_session)
        mess = service.create_mess("Sunrise", "manager-9", month="2025-04")

        subscription = service.activate_subscription(
            mess.id, PlanType.MONTHLY, start_date=date(2025, 4, 1), actor="admin-1"
        )

        assert subscription.end_date == date(2025, 5, 1)
        assert mess.status == MessStatus.ACTIVE
        assert service.get_current_subscription(mess.id, today=date(2025, 4, 15)) is not None
        assert service.get_current_subscription(mess.id, today=date(2025, 5, 1)) is None

    def test_new_plan_expires_previous(self, db_session, mess):
        service = MessService(db_session)
        first = service.activate_subscription(mess.id, "monthly", start_date=date(2025, 1, 1))
        second = service.activate_subscription(mess.id, "yearly", start_date=date(2025, 1, 20))

        db_session.refresh(first)
        assert first.status == SubscriptionStatus.EXPIRED
        assert second.status == SubscriptionStatus.ACTIVE
        assert second.end_date == date(2026, 1, 20)

    def test_activation_keeps_suspension(self, db_session, mess):
        service = MessService(db_session)
        service.suspend_mess(mess.id, "Unpaid invoice", actor="admin-1")

        service.activate_subscription(mess.id, PlanType.MONTHLY)

        assert mess.status == MessStatus.SUSPENDED


class TestSuspension:
    """Tests for suspend/unsuspend."""

    def test_suspend_requires_reason(self, db_session, mess):
        with pytest.raises(ValidationError, match="reason"):
            MessService(db_session).suspend_mess(mess.id, " ", actor="admin-1")

    def test_suspend_notifies_manager(self, db_session, mess):
        MessService(db_session).suspend_mess(mess.id, "Abuse report", actor="admin-1")

        assert mess.status == MessStatus.SUSPENDED
        assert mess.suspend_reason == "Abuse report"

        notification = db_session.scalars(select(Notification)).one()
        assert notification.sender_type == SenderType.ADMIN
        assert notification.target_type == TargetType.MANAGER
        assert notification.mess_id == mess.id
        assert "Abuse report" in notification.message

    def test_suspended_mess_is_read_only(self, db_session, mess):
        service = MessService(db_session)
        service.suspend_mess(mess.id, "Abuse report", actor="admin-1")

        with pytest.raises(MessSuspendedError):
            service.ensure_writable(mess.id)

    def test_unsuspend_with_subscription(self, db_session, mess):
        service = MessService(db_session)
        service.activate_subscription(mess.id, PlanType.YEARLY, start_date=date(2025, 1, 1))
        service.suspend_mess(mess.id, "Check", actor="admin-1")

        service.unsuspend_mess(mess.id, actor="admin-1", today=date(2025, 6, 1))

        assert mess.status == MessStatus.ACTIVE
        assert mess.suspend_reason is None

    def test_unsuspend_without_subscription(self, db_session):
        service = MessService(db_session)
        mess = service.create_mess("Sunrise", "manager-9", month="2025-01")
        service.suspend_mess(mess.id, "Check", actor="admin-1")

        service.unsuspend_mess(mess.id, actor="admin-1")

        assert mess.status == MessStatus.INACTIVE
        actions = db_session.scalars(select(AuditLog.action).order_by(AuditLog.id)).all()
        assert actions == ["create", "suspend", "unsuspend"]

    def test_list_by_status(self, db_session, mess):
        service = MessService(db_session)
        other = service.create_mess("Other", "manager-9")

        assert [m.id for m in service.list_messes(MessStatus.INACTIVE)] == [other.id]
        assert [m.id for m in service.list_messes()] == [mess.id, other.id]


class TestWriteAccess:
    """Tests for MessService.ensure_writable."""

    def test_current_subscription_is_returned(self, db_session, mess):
        subscription = MessService(db_session).ensure_writable(mess.id)

        assert subscription.mess_id == mess.id
        assert subscription.start_date == date(2024, 1, 1)

    def test_expired_subscription_is_read_only(self, db_session, mess):
        with pytest.raises(SubscriptionInactiveError, match="read-only"):
            MessService(db_session).ensure_writable(mess.id, today=date(2099, 1, 1))

    def test_new_mess_is_read_only_until_subscribed(self, db_session):
        service = MessService(db_session)
        mess = service.create_mess("Sunrise", "manager-9", month="2025-04")

        with pytest.raises(SubscriptionInactiveError):
            service.ensure_writable(mess.id)

        service.activate_subscription(mess.id, PlanType.MONTHLY, start_date=date(2025, 4, 1))

        assert service.ensure_writable(mess.id, today=date(2025, 4, 20)).plan_type == PlanType.MONTHLY

    def test_suspension_is_reported_first(self, db_session):
        service = MessService(db_session)
        mess = service.create_mess("Sunrise", "manager-9")
        service.suspend_mess(mess.id, "Unpaid", actor="admin-1")

        with pytest.raises(MessSuspendedError):
            service.ensure_writable(mess.id)
