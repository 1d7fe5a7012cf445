"""Deposit ORM model for money paid in by members."""

import datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from messmate.models import Base, BaseModel


class Deposit(Base, BaseModel):
    """Money a member has paid into the mess fund."""

    __tablename__ = "deposits"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    note: Mapped[str | None] = mapped_column(nullable=True)

    __table_args__ = (Index("idx_deposit_mess_date", "mess_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<Deposit(id={self.id}, member_id={self.member_id}, date={self.date}, "
            f"amount={self.amount})>"
        )


__all__ = ["Deposit"]
