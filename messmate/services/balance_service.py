"""Balance calculation service for live (in-period) member balances.

Reads the working rows for one calendar month and delegates the arithmetic to
settlement_service. Read-only: it may race with a rollover of the same mess and
then reflects either the pre- or post-rollover data.
"""

import calendar
import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.errors import NotFoundError, ValidationError
from messmate.models.additional_cost import AdditionalCost
from messmate.models.bazar import Bazar
from messmate.models.deposit import Deposit
from messmate.models.meal import Meal
from messmate.models.member import Member
from messmate.services.settlement_service import MemberBalance, MessSummary, summarize_mess

logger = logging.getLogger(__name__)


def current_month(today: date | None = None) -> str:
    """Current accounting period token (YYYY-MM, UTC)."""
    today = today or datetime.now(timezone.utc).date()
    return today.strftime("%Y-%m")


def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a YYYY-MM month.

    Raises:
        ValidationError: If the token is malformed
    """
    try:
        year_str, month_str = month.split("-")
        year, month_num = int(year_str), int(month_str)
        first = date(year, month_num, 1)
    except (ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM") from e
    last = date(year, month_num, calendar.monthrange(year, month_num)[1])
    return first, last


class BalanceCalculationService:
    """Calculate live balances for a mess and its members."""

    def __init__(self, db: Session):
        """Initialize with database session.

        Args:
            db: Session for database operations
        """
        self.db = db

    def get_month_summary(self, mess_id: int, month: str) -> MessSummary:
        """Meal-rate, totals and per-member balances for one month.

        Only active members are listed and counted for the additional cost
        split; meals of inactive members still count towards the meal-rate.

        Args:
            mess_id: Mess to summarise
            month: Period token (YYYY-MM)

        Returns:
            MessSummary for the month
        """
        start, end = month_bounds(month)

        members = self.db.scalars(
            select(Member)
            .filter(Member.mess_id == mess_id, Member.is_active.is_(True))
            .order_by(Member.name)
        ).all()
        meals = self.db.scalars(
            select(Meal).filter(Meal.mess_id == mess_id, Meal.date.between(start, end))
        ).all()
        bazar_costs = self.db.scalars(
            select(Bazar.cost).filter(Bazar.mess_id == mess_id, Bazar.date.between(start, end))
        ).all()
        deposits = self.db.scalars(
            select(Deposit).filter(Deposit.mess_id == mess_id, Deposit.date.between(start, end))
        ).all()
        additional = self.db.scalars(
            select(AdditionalCost.amount).filter(
                AdditionalCost.mess_id == mess_id, AdditionalCost.date.between(start, end)
            )
        ).all()

        summary = summarize_mess(members, meals, bazar_costs, deposits, additional)
        logger.debug(
            "balance.summary: mess_id=%d month=%s members=%d meals=%d meal_rate=%s",
            mess_id,
            month,
            len(summary.members),
            summary.total_meals,
            summary.meal_rate,
        )
        return summary

    def get_member_balance(self, mess_id: int, member_id: int, month: str) -> MemberBalance:
        """Balance line for a single active member.

        Raises:
            NotFoundError: Member unknown, inactive or in another mess
        """
        summary = self.get_month_summary(mess_id, month)
        line = summary.member(member_id)
        if line is None:
            raise NotFoundError(f"Member {member_id} not found in mess {mess_id}")
        return line

    def get_available_months(self, mess_id: int, today: date | None = None) -> list[str]:
        """Months with any working data, plus the current month, newest first."""
        months = {current_month(today)}
        for model in (Meal, Bazar, Deposit, AdditionalCost):
            dates = self.db.scalars(select(model.date).filter(model.mess_id == mess_id)).all()
            months.update(d.strftime("%Y-%m") for d in dates)
        return sorted(months, reverse=True)


__all__ = ["BalanceCalculationService", "current_month", "month_bounds"]
