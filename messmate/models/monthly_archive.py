"""Monthly archive ORM model: immutable settlement snapshot per mess per month."""

from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messmate.models import Base, BaseModel


class MonthlyArchive(Base, BaseModel):
    """Settlement snapshot written once at rollover and never updated.

    ``members_data`` holds the per-member breakdown (meals, deposits, meal cost,
    additional cost, balance) with decimals serialised as strings.
    """

    __tablename__ = "monthly_archives"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Archived accounting period (YYYY-MM)",
    )
    total_bazar: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_meals: Mapped[int] = mapped_column(Integer, nullable=False)
    total_additional_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    total_deposits: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    meal_rate: Mapped[Decimal] = mapped_column(
        Numeric(18, 6),
        nullable=False,
        comment="Cost of one meal unit for the month",
    )
    members_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)

    mess: Mapped["Mess"] = relationship("Mess", back_populates="archives")  # noqa: F821

    __table_args__ = (UniqueConstraint("mess_id", "month", name="uq_archive_mess_month"),)

    def __repr__(self) -> str:
        return (
            f"<MonthlyArchive(id={self.id}, mess_id={self.mess_id}, month={self.month}, "
            f"meal_rate={self.meal_rate})>"
        )


__all__ = ["MonthlyArchive"]
