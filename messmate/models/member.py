"""Member ORM model for people sharing a mess."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messmate.models import Base, BaseModel


class Member(Base, BaseModel):
    """
    A person belonging to exactly one mess.

    - is_active: gates inclusion in live balances and the additional cost head-count
    - email/phone: contact identifiers, unique across all messes
    - user_id: identity provider subject when the member has portal access
    """

    __tablename__ = "members"

    mess_id: Mapped[int] = mapped_column(
        ForeignKey("messes.id"),
        nullable=False,
        index=True,
        comment="Owning mess",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Contact email (normalised to lower case, unique across messes)",
    )
    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        unique=True,
        comment="Contact phone (unique across messes)",
    )
    room_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Identity provider subject for member portal access",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Included in calculations and head-count when True",
    )

    # Relationships
    mess: Mapped["Mess"] = relationship("Mess", back_populates="members")  # noqa: F821

    __table_args__ = (Index("idx_member_mess_active", "mess_id", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<Member(id={self.id}, mess_id={self.mess_id}, name={self.name}, "
            f"is_active={self.is_active})>"
        )


__all__ = ["Member"]
