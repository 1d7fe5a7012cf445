"""Messaging between admins, managers and members.

Senders and targets are tagged (SenderType, TargetType); who can read a message
is decided in one place, ``resolve_recipients``, instead of string checks in
each handler.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from messmate.errors import ForbiddenError, NotFoundError, ValidationError
from messmate.models.member import Member
from messmate.models.mess import Mess
from messmate.models.notification import Notification, NotificationRead, SenderType, TargetType

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


@dataclass(frozen=True)
class Recipients:
    """Resolved audience of a message."""

    all_managers: bool = False
    manager_mess_ids: frozenset[int] = field(default_factory=frozenset)
    member_ids: frozenset[int] = field(default_factory=frozenset)


def resolve_recipients(
    db: Session,
    target_type: TargetType,
    mess_id: int | None = None,
    member_id: int | None = None,
) -> Recipients:
    """Resolve a tagged target to concrete managers and members.

    - GLOBAL: every mess manager
    - MESS: the mess manager and every active member of the mess
    - MANAGER: the manager of ``mess_id``
    - MEMBER: the single member ``member_id`` of ``mess_id``

    Raises:
        ValidationError: Required id missing for the target type
        NotFoundError: Unknown mess or member
    """
    target = TargetType(target_type)

    if target == TargetType.GLOBAL:
        return Recipients(all_managers=True)

    if mess_id is None:
        raise ValidationError(f"mess_id is required for {target.value} messages")
    if db.get(Mess, mess_id) is None:
        raise NotFoundError(f"Mess {mess_id} not found")

    if target == TargetType.MANAGER:
        return Recipients(manager_mess_ids=frozenset({mess_id}))

    if target == TargetType.MESS:
        member_ids = db.scalars(
            select(Member.id).filter(Member.mess_id == mess_id, Member.is_active.is_(True))
        ).all()
        return Recipients(
            manager_mess_ids=frozenset({mess_id}),
            member_ids=frozenset(member_ids),
        )

    # TargetType.MEMBER
    if member_id is None:
        raise ValidationError("member_id is required for member messages")
    member = db.get(Member, member_id)
    if member is None or member.mess_id != mess_id:
        raise NotFoundError(f"Member {member_id} not found")
    return Recipients(member_ids=frozenset({member_id}))


def _clean_text(message: str) -> str:
    text = (message or "").strip()
    if not text:
        raise ValidationError("Message cannot be empty")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message is longer than {MAX_MESSAGE_LENGTH} characters")
    return text


class MessageService:
    """Send and read in-app messages."""

    def __init__(self, db: Session):
        self.db = db

    def send_admin_message(
        self,
        admin_id: str,
        message: str,
        target_type: TargetType = TargetType.GLOBAL,
        mess_id: int | None = None,
    ) -> Notification:
        """Admin broadcast to all managers or to one mess's manager."""
        target = TargetType(target_type)
        if target not in (TargetType.GLOBAL, TargetType.MANAGER):
            raise ValidationError("Admin messages go to all managers or to one manager")
        resolve_recipients(self.db, target, mess_id)
        return self._store(
            SenderType.ADMIN,
            admin_id,
            target,
            _clean_text(message),
            mess_id=None if target == TargetType.GLOBAL else mess_id,
        )

    def send_manager_notice(
        self,
        manager_id: str,
        mess_id: int,
        message: str,
        member_id: int | None = None,
    ) -> Notification:
        """Manager notice to every member of the mess, or to one member."""
        target = TargetType.MEMBER if member_id is not None else TargetType.MESS
        resolve_recipients(self.db, target, mess_id, member_id)
        return self._store(
            SenderType.MANAGER,
            manager_id,
            target,
            _clean_text(message),
            mess_id=mess_id,
            to_member_id=member_id,
        )

    def send_member_message(self, member_id: int, mess_id: int, message: str) -> Notification:
        """Member message to the mess manager, prefixed with the member's name.

        The length limit applies to the text the member wrote, not the prefix.

        Raises:
            ForbiddenError: Member inactive or not in the mess
        """
        member = self.db.get(Member, member_id)
        if member is None or member.mess_id != mess_id or not member.is_active:
            raise ForbiddenError("Member not found or inactive")
        resolve_recipients(self.db, TargetType.MANAGER, mess_id)
        return self._store(
            SenderType.MEMBER,
            str(member_id),
            TargetType.MANAGER,
            f"[{member.name}]: {_clean_text(message)}",
            mess_id=mess_id,
        )

    def inbox_for_member(self, member_id: int, mess_id: int, limit: int = 50) -> list[Notification]:
        """Mess-wide notices plus messages addressed to the member."""
        stmt = (
            select(Notification)
            .filter(
                Notification.mess_id == mess_id,
                or_(
                    Notification.target_type == TargetType.MESS,
                    (Notification.target_type == TargetType.MEMBER)
                    & (Notification.to_member_id == member_id),
                ),
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt).all())

    def inbox_for_manager(self, mess_id: int, limit: int = 50) -> list[Notification]:
        """Global admin broadcasts plus messages addressed to this mess's manager."""
        stmt = (
            select(Notification)
            .filter(
                or_(
                    Notification.target_type == TargetType.GLOBAL,
                    (Notification.target_type == TargetType.MANAGER)
                    & (Notification.mess_id == mess_id),
                )
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt).all())

    def manager_read_ids(self, mess_id: int) -> set[int]:
        """Ids of GLOBAL broadcasts the manager of ``mess_id`` has read."""
        return set(
            self.db.scalars(
                select(NotificationRead.notification_id).filter(NotificationRead.mess_id == mess_id)
            ).all()
        )

    def mark_read(self, notification_id: int, mess_id: int) -> Notification:
        """Mark a message in the manager's inbox as read by the manager of ``mess_id``.

        GLOBAL broadcasts get a read receipt per mess so one manager reading
        them does not mark them read for every other manager.

        Raises:
            NotFoundError: Unknown message, or one the manager is not addressed by
        """
        notification = self.db.get(Notification, notification_id)
        if notification is None or not self._addressed_to_manager(notification, mess_id):
            raise NotFoundError(f"Message {notification_id} not found")

        if notification.target_type == TargetType.GLOBAL:
            if notification_id not in self.manager_read_ids(mess_id):
                self.db.add(NotificationRead(notification_id=notification_id, mess_id=mess_id))
        else:
            notification.is_read = True
        self.db.commit()
        return notification

    def _addressed_to_manager(self, notification: Notification, mess_id: int) -> bool:
        # Notices the manager sent reach the manager too, but are not in the inbox
        if notification.sender_type == SenderType.MANAGER:
            return False
        recipients = resolve_recipients(
            self.db, notification.target_type, notification.mess_id, notification.to_member_id
        )
        return recipients.all_managers or mess_id in recipients.manager_mess_ids

    def _store(
        self,
        sender_type: SenderType,
        sender_id: str | None,
        target_type: TargetType,
        message: str,
        mess_id: int | None = None,
        to_member_id: int | None = None,
    ) -> Notification:
        notification = Notification(
            mess_id=mess_id,
            sender_type=sender_type,
            sender_id=sender_id,
            target_type=target_type,
            to_member_id=to_member_id,
            message=message,
        )
        self.db.add(notification)
        self.db.commit()
        logger.info(
            "message.sent: id=%d sender=%s target=%s mess_id=%s",
            notification.id,
            sender_type.value,
            target_type.value,
            mess_id,
        )
        return notification


__all__ = ["MessageService", "Recipients", "resolve_recipients", "MAX_MESSAGE_LENGTH"]
