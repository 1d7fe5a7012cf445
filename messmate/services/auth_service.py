"""Authorization service for API endpoints.

Identity is verified upstream by the identity provider / gateway, which
forwards the verified subject in the ``X-Auth-Subject`` header. This module
turns that subject into an explicit AuthSession, re-deriving the role from
the database on every request instead of trusting a cached role flag.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.config import get_settings
from messmate.errors import ForbiddenError, UnauthorizedError
from messmate.models.member import Member
from messmate.models.mess import Mess
from messmate.services import get_db

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Caller role, in precedence order."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


@dataclass(frozen=True)
class AuthSession:
    """Authorization context for one request."""

    subject: str
    """Verified identity subject."""

    role: Role
    """Role derived from the database for this request."""

    mess_id: int | None = None
    """Mess the caller manages or belongs to (None for admins)."""

    member_id: int | None = None
    """Member row of the caller (members only)."""


def resolve_session(db: Session, subject: str | None) -> AuthSession:
    """Derive the caller's role and scope.

    Args:
        db: Database session
        subject: Verified identity subject

    Returns:
        AuthSession for the caller

    Raises:
        UnauthorizedError: No subject, or the subject is not an admin, a
            manager or an active member
    """
    subject = (subject or "").strip()
    if not subject:
        raise UnauthorizedError()

    if subject in get_settings().admin_subject_set():
        return AuthSession(subject=subject, role=Role.ADMIN)

    mess = db.scalars(select(Mess).filter(Mess.manager_id == subject)).first()
    if mess is not None:
        return AuthSession(subject=subject, role=Role.MANAGER, mess_id=mess.id)

    member = db.scalars(select(Member).filter(Member.user_id == subject)).first()
    if member is not None and member.is_active:
        return AuthSession(
            subject=subject, role=Role.MEMBER, mess_id=member.mess_id, member_id=member.id
        )

    logger.warning("Unknown or inactive subject: %s", subject)
    raise UnauthorizedError()


def get_session(
    x_auth_subject: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> AuthSession:
    """FastAPI dependency: AuthSession for the current request."""
    return resolve_session(db, x_auth_subject)


def require_admin(session: AuthSession = Depends(get_session)) -> AuthSession:
    if session.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")
    return session


def require_manager(session: AuthSession = Depends(get_session)) -> AuthSession:
    if session.role != Role.MANAGER:
        raise ForbiddenError("Manager access required")
    return session


def require_member(session: AuthSession = Depends(get_session)) -> AuthSession:
    if session.role != Role.MEMBER:
        raise ForbiddenError("Member access required")
    return session


__all__ = [
    "AuthSession",
    "Role",
    "resolve_session",
    "get_session",
    "require_admin",
    "require_manager",
    "require_member",
]
