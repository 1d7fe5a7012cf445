"""Meal ORM model: daily meal counts per member."""

import datetime

from sqlalchemy import Date, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from messmate.models import Base, BaseModel


class Meal(Base, BaseModel):
    """Meals eaten by one member on one day.

    A meal unit is one breakfast, lunch or dinner; ``units`` is their sum.
    """

    __tablename__ = "meals"

    mess_id: Mapped[int] = mapped_column(ForeignKey("messes.id"), nullable=False, index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, comment="Day the meals were eaten")
    breakfast: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lunch: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dinner: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("member_id", "date", name="uq_meal_member_date"),
        Index("idx_meal_mess_date", "mess_id", "date"),
    )

    @property
    def units(self) -> int:
        return (self.breakfast or 0) + (self.lunch or 0) + (self.dinner or 0)

    def __repr__(self) -> str:
        return (
            f"<Meal(id={self.id}, member_id={self.member_id}, date={self.date}, "
            f"b={self.breakfast}, l={self.lunch}, d={self.dinner})>"
        )


__all__ = ["Meal"]
