"""Notification ORM model for in-app messages between admins, managers and members."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from messmate.models import Base, BaseModel


class SenderType(str, Enum):
    """Who wrote a message."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class TargetType(str, Enum):
    """Who a message is addressed to."""

    GLOBAL = "global"
    """Every mess manager."""

    MESS = "mess"
    """The manager and all members of one mess."""

    MANAGER = "manager"
    """The manager of one mess."""

    MEMBER = "member"
    """A single member."""


class Notification(Base, BaseModel):
    """A message with a tagged sender and a tagged target.

    ``mess_id`` is null only for GLOBAL messages; ``to_member_id`` is set only
    for MEMBER targets.
    """

    __tablename__ = "notifications"

    mess_id: Mapped[int | None] = mapped_column(
        ForeignKey("messes.id"),
        nullable=True,
        index=True,
    )
    sender_type: Mapped[SenderType] = mapped_column(String(20), nullable=False)
    sender_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Identity subject (admin/manager) or member id as text",
    )
    target_type: Mapped[TargetType] = mapped_column(String(20), nullable=False)
    to_member_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"),
        nullable=True,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Read flag for single-reader targets; GLOBAL reads live in notification_reads",
    )

    __table_args__ = (Index("idx_notification_target", "target_type", "mess_id"),)

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, sender={self.sender_type}, target={self.target_type}, "
            f"mess_id={self.mess_id}, to_member_id={self.to_member_id})>"
        )


class NotificationRead(Base, BaseModel):
    """One manager's read receipt for a GLOBAL broadcast."""

    __tablename__ = "notification_reads"

    notification_id: Mapped[int] = mapped_column(
        ForeignKey("notifications.id"), nullable=False, index=True
    )
    mess_id: Mapped[int] = mapped_column(
        ForeignKey("messes.id"),
        nullable=False,
        comment="Mess whose manager read the broadcast",
    )

    __table_args__ = (
        UniqueConstraint("notification_id", "mess_id", name="uq_notification_read_mess"),
    )


__all__ = ["Notification", "NotificationRead", "SenderType", "TargetType"]
