"""Audit trail of mess lifecycle events: registration, plans, suspension, rollover."""

import logging
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

MESS_ENTITY = "mess"


class AuditAction(str, Enum):
    """Lifecycle events recorded against a mess."""

    CREATE = "create"
    SUBSCRIBE = "subscribe"
    SUSPEND = "suspend"
    UNSUSPEND = "unsuspend"
    ROLLOVER = "rollover"


class AuditService:
    """Append-only audit trail for messes.

    Entries are added to the caller's transaction, so an event is recorded
    only if the change it describes commits.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_mess_event(
        self,
        mess_id: int,
        action: AuditAction,
        actor: str | None = None,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Add an entry for ``mess_id`` (not committed here).

        ``actor`` is the identity subject behind the change, or None for the
        scheduled settlement job.
        """
        entry = AuditLog(
            entity_type=MESS_ENTITY,
            entity_id=mess_id,
            action=AuditAction(action).value,
            actor=actor,
            changes=changes,
        )
        self.db.add(entry)
        logger.debug(
            "audit.%s: mess_id=%d actor=%s", entry.action, mess_id, actor or "scheduler"
        )
        return entry

    def mess_history(self, mess_id: int, action: AuditAction | None = None) -> list[AuditLog]:
        """Entries of one mess, oldest first."""
        stmt = select(AuditLog).filter(
            AuditLog.entity_type == MESS_ENTITY, AuditLog.entity_id == mess_id
        )
        if action is not None:
            stmt = stmt.filter(AuditLog.action == AuditAction(action).value)
        return list(self.db.scalars(stmt.order_by(AuditLog.created_at, AuditLog.id)).all())


__all__ = ["AuditAction", "AuditService", "MESS_ENTITY"]
