"""Unit tests for messmate.services.auth_service."""

import pytest

from messmate.config import reset_settings
from messmate.errors import ForbiddenError, UnauthorizedError
from messmate.services.auth_service import (
    AuthSession,
    Role,
    require_admin,
    require_manager,
    require_member,
    resolve_session,
)


@pytest.fixture(autouse=True)
def admin_env(monkeypatch):
    monkeypatch.setenv("ADMIN_SUBJECTS", "admin-1,admin-2")
    reset_settings()
    yield
    reset_settings()


class TestResolveSession:
    """Tests for resolve_session."""

    @pytest.mark.parametrize("subject", [None, "", "   "])
    def test_missing_subject(self, db_session, subject):
        with pytest.raises(UnauthorizedError):
            resolve_session(db_session, subject)

    def test_admin(self, db_session):
        session = resolve_session(db_session, "admin-2")

        assert session == AuthSession(subject="admin-2", role=Role.ADMIN)

    def test_admin_takes_precedence_over_manager(self, db_session, mess):
        mess.manager_id = "admin-1"
        db_session.commit()

        assert resolve_session(db_session, "admin-1").role == Role.ADMIN

    def test_manager(self, db_session, mess):
        session = resolve_session(db_session, "manager-1")

        assert session.role == Role.MANAGER
        assert session.mess_id == mess.id
        assert session.member_id is None

    def test_member(self, db_session, mess, members):
        alice, _ = members

        session = resolve_session(db_session, "member-1")

        assert session.role == Role.MEMBER
        assert session.mess_id == mess.id
        assert session.member_id == alice.id

    def test_deactivated_member_loses_access(self, db_session, members):
        """Role is re-derived from the database on every call."""
        alice, _ = members
        assert resolve_session(db_session, "member-1").role == Role.MEMBER

        alice.is_active = False
        db_session.commit()

        with pytest.raises(UnauthorizedError):
            resolve_session(db_session, "member-1")

    def test_unknown_subject(self, db_session, mess):
        with pytest.raises(UnauthorizedError):
            resolve_session(db_session, "nobody")


class TestRoleGuards:
    """Tests for the role dependency guards."""

    admin = AuthSession(subject="admin-1", role=Role.ADMIN)
    manager = AuthSession(subject="manager-1", role=Role.MANAGER, mess_id=1)
    member = AuthSession(subject="member-1", role=Role.MEMBER, mess_id=1, member_id=1)

    def test_guards_pass_matching_role(self):
        assert require_admin(self.admin) is self.admin
        assert require_manager(self.manager) is self.manager
        assert require_member(self.member) is self.member

    @pytest.mark.parametrize(
        "guard,session",
        [
            (require_admin, manager),
            (require_admin, member),
            (require_manager, admin),
            (require_manager, member),
            (require_member, manager),
        ],
    )
    def test_guards_reject_other_roles(self, guard, session):
        with pytest.raises(ForbiddenError):
            guard(session)
