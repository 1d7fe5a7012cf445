"""Bazar ORM model for shared grocery purchases."""

import datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from messmate.models import Base, BaseModel


class Bazar(Base, BaseModel):
    """A shared purchase; its cost feeds the mess meal-rate."""

    __tablename__ = "bazars"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Purchase amount",
    )
    person_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Who did the shopping",
    )
    member_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"),
        nullable=True,
        comment="Purchaser when they are a member of the mess",
    )
    items: Mapped[str | None] = mapped_column(nullable=True, comment="What was bought")
    note: Mapped[str | None] = mapped_column(nullable=True)

    __table_args__ = (Index("idx_bazar_mess_date", "mess_id", "date"),)

    def __repr__(self) -> str:
        return f"<Bazar(id={self.id}, mess_id={self.mess_id}, date={self.date}, cost={self.cost})>"


__all__ = ["Bazar"]
