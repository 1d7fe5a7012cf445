"""Additional cost ORM model for shared costs split per head."""

import datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from messmate.models import Base, BaseModel


class AdditionalCost(Base, BaseModel):
    """Shared cost (rent, gas, internet...) split evenly across active members.

    Independent of meal consumption.
    """

    __tablename__ = "additional_costs"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    note: Mapped[str | None] = mapped_column(nullable=True)

    __table_args__ = (Index("idx_additional_cost_mess_date", "mess_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<AdditionalCost(id={self.id}, mess_id={self.mess_id}, date={self.date}, "
            f"amount={self.amount})>"
        )


__all__ = ["AdditionalCost"]
