"""Member roster service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.errors import DuplicateMemberError, NotFoundError, ValidationError
from messmate.models.member import Member

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "room_number", "user_id")


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def normalize_phone(phone: str | None) -> str | None:
    if phone is None:
        return None
    phone = "".join(phone.split())
    return phone or None


class MemberService:
    """Add, edit and (de)activate mess members.

    Contact identifiers are unique across all messes: a person can belong to
    one mess at a time.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_member(
        self,
        mess_id: int,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        room_number: str | None = None,
        user_id: str | None = None,
    ) -> Member:
        """Create an active member.

        Raises:
            ValidationError: Empty name
            DuplicateMemberError: Email, phone or user_id already used by any member
        """
        if not name or not name.strip():
            raise ValidationError("Member name is required")

        email = normalize_email(email)
        phone = normalize_phone(phone)
        self._check_unique(email=email, phone=phone, user_id=user_id)

        member = Member(
            mess_id=mess_id,
            name=name.strip(),
            email=email,
            phone=phone,
            room_number=room_number.strip() if room_number else None,
            user_id=user_id,
            is_active=True,
        )
        self.db.add(member)
        self.db.commit()

        logger.info("Added member: id=%d mess_id=%d", member.id, mess_id)
        return member

    def get_member(self, member_id: int, mess_id: int | None = None) -> Member:
        """Get member, optionally scoped to a mess.

        Raises:
            NotFoundError: Unknown member or member of another mess
        """
        member = self.db.get(Member, member_id)
        if member is None or (mess_id is not None and member.mess_id != mess_id):
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def list_members(self, mess_id: int, active_only: bool = False) -> list[Member]:
        stmt = select(Member).filter(Member.mess_id == mess_id)
        if active_only:
            stmt = stmt.filter(Member.is_active.is_(True))
        return list(self.db.scalars(stmt.order_by(Member.name)).all())

    def update_member(self, member_id: int, mess_id: int, **fields) -> Member:
        """Update editable fields of a member."""
        member = self.get_member(member_id, mess_id)

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown member fields: {', '.join(sorted(unknown))}")

        if "name" in fields:
            name = fields["name"]
            if not name or not name.strip():
                raise ValidationError("Member name is required")
            fields["name"] = name.strip()
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
        if "phone" in fields:
            fields["phone"] = normalize_phone(fields["phone"])

        self._check_unique(
            email=fields.get("email"),
            phone=fields.get("phone"),
            user_id=fields.get("user_id"),
            exclude_id=member.id,
        )

        for key, value in fields.items():
            setattr(member, key, value)
        self.db.commit()
        return member

    def set_active(self, member_id: int, mess_id: int, is_active: bool) -> Member:
        member = self.get_member(member_id, mess_id)
        member.is_active = is_active
        self.db.commit()
        logger.info("Member %d active=%s", member.id, is_active)
        return member

    def _check_unique(
        self,
        email: str | None = None,
        phone: str | None = None,
        user_id: str | None = None,
        exclude_id: int | None = None,
    ) -> None:
        checks = (
            ("email", Member.email, email),
            ("phone", Member.phone, phone),
            ("user_id", Member.user_id, user_id),
        )
        for label, column, value in checks:
            if not value:
                continue
            stmt = select(Member.id).filter(column == value)
            if exclude_id is not None:
                stmt = stmt.filter(Member.id != exclude_id)
            if self.db.scalars(stmt).first() is not None:
                raise DuplicateMemberError(f"A member with this {label} already exists")


__all__ = ["MemberService", "normalize_email", "normalize_phone"]
