"""Unit tests for the mess audit trail."""

import pytest
from sqlalchemy import select

from messmate.models import AuditLog
from messmate.services.audit_service import MESS_ENTITY, AuditAction, AuditService
from messmate.services.mess_service import MessService


class TestAuditService:
    """Tests for AuditService."""

    def test_entry_joins_callers_transaction(self, db_session, mess):
        audit = AuditService(db_session)

        audit.record_mess_event(mess.id, AuditAction.SUSPEND, "admin-1", {"reason": "Unpaid"})
        db_session.rollback()

        assert db_session.scalars(select(AuditLog)).all() == []

    def test_recorded_entry(self, db_session, mess):
        entry = AuditService(db_session).record_mess_event(
            mess.id, "rollover", changes={"archived_month": "2025-01"}
        )
        db_session.commit()

        assert entry.entity_type == MESS_ENTITY
        assert entry.entity_id == mess.id
        assert entry.action == "rollover"
        assert entry.actor is None

    def test_unknown_action_is_rejected(self, db_session, mess):
        with pytest.raises(ValueError):
            AuditService(db_session).record_mess_event(mess.id, "teleport")

    def test_history_is_scoped_and_ordered(self, db_session, mess):
        service = MessService(db_session)
        other = service.create_mess("Other", "manager-9")
        service.suspend_mess(mess.id, "Unpaid", actor="admin-1")
        service.unsuspend_mess(mess.id, actor="admin-1")

        history = AuditService(db_session).mess_history(mess.id)

        assert [e.action for e in history] == ["suspend", "unsuspend"]
        assert [e.action for e in AuditService(db_session).mess_history(other.id)] == ["create"]

    def test_history_filtered_by_action(self, db_session, mess):
        service = MessService(db_session)
        service.suspend_mess(mess.id, "Unpaid", actor="admin-1")
        service.unsuspend_mess(mess.id, actor="admin-1")

        entries = AuditService(db_session).mess_history(mess.id, AuditAction.UNSUSPEND)

        assert len(entries) == 1
        assert entries[0].changes == {"status": "active"}
