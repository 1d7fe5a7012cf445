"""Ledger service for the manager entry forms: meals, bazar, deposits, additional costs."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from messmate.errors import NotFoundError, ValidationError
from messmate.models.additional_cost import AdditionalCost
from messmate.models.bazar import Bazar
from messmate.models.deposit import Deposit
from messmate.models.meal import Meal
from messmate.models.member import Member
from messmate.services.balance_service import month_bounds
from messmate.services.mess_service import MessService

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Working ledger tables a manager can edit."""

    MEAL = "meals"
    BAZAR = "bazars"
    DEPOSIT = "deposits"
    ADDITIONAL_COST = "additional-costs"


ENTRY_MODELS = {
    EntryKind.MEAL: Meal,
    EntryKind.BAZAR: Bazar,
    EntryKind.DEPOSIT: Deposit,
    EntryKind.ADDITIONAL_COST: AdditionalCost,
}


def parse_amount(value: Any) -> Decimal:
    """Positive monetary amount with at most two decimal places."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("Enter valid amount") from e
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Enter valid amount")
    if amount.as_tuple().exponent < -2:
        raise ValidationError("Amount may have at most two decimal places")
    return amount


def validate_entry_date(
    entry_date: date, today: date | None = None, start_date: date | None = None
) -> date:
    """Entries cannot be dated in the future or before the subscription started.

    A date in an earlier month than ``start_date`` and a date earlier in the
    start month are reported separately.
    """
    today = today or datetime.now(timezone.utc).date()
    if entry_date > today:
        raise ValidationError("Date cannot be in the future")
    if start_date is not None:
        if (entry_date.year, entry_date.month) < (start_date.year, start_date.month):
            raise ValidationError("Cannot enter data for months before subscription start month")
        if entry_date < start_date:
            raise ValidationError(
                f"Cannot enter data before subscription start date ({start_date:%d/%m/%Y})"
            )
    return entry_date


def validate_meal_count(label: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{label} must be a non-negative whole number")
    return value


class LedgerService:
    """Create, list and delete working ledger rows of one mess."""

    def __init__(self, db: Session):
        self.db = db
        self.mess_service = MessService(db)

    def record_meal(
        self,
        mess_id: int,
        member_id: int,
        entry_date: date,
        breakfast: int = 0,
        lunch: int = 0,
        dinner: int = 0,
    ) -> Meal:
        """Create or replace the meal counts of a member for a day."""
        start = self._writable(mess_id)
        self._member_of(mess_id, member_id)
        validate_entry_date(entry_date, start_date=start)
        counts = {
            "breakfast": validate_meal_count("Breakfast", breakfast),
            "lunch": validate_meal_count("Lunch", lunch),
            "dinner": validate_meal_count("Dinner", dinner),
        }

        meal = self.db.scalars(
            select(Meal).filter(Meal.member_id == member_id, Meal.date == entry_date)
        ).first()
        if meal is None:
            meal = Meal(mess_id=mess_id, member_id=member_id, date=entry_date, **counts)
            self.db.add(meal)
        else:
            for key, value in counts.items():
                setattr(meal, key, value)
        self.db.commit()

        logger.debug(
            "ledger.meal: mess_id=%d member_id=%d date=%s units=%d",
            mess_id,
            member_id,
            entry_date,
            meal.units,
        )
        return meal

    def record_bazar(
        self,
        mess_id: int,
        entry_date: date,
        cost: Any,
        person_name: str,
        items: str | None = None,
        note: str | None = None,
        member_id: int | None = None,
    ) -> Bazar:
        """Record a shared purchase."""
        start = self._writable(mess_id)
        if not person_name or not person_name.strip():
            raise ValidationError("Purchaser name is required")
        if member_id is not None:
            self._member_of(mess_id, member_id)

        bazar = Bazar(
            mess_id=mess_id,
            date=validate_entry_date(entry_date, start_date=start),
            cost=parse_amount(cost),
            person_name=person_name.strip(),
            member_id=member_id,
            items=items,
            note=note,
        )
        self.db.add(bazar)
        self.db.commit()
        return bazar

    def record_deposit(
        self,
        mess_id: int,
        member_id: int,
        entry_date: date,
        amount: Any,
        note: str | None = None,
    ) -> Deposit:
        """Record money paid in by a member."""
        start = self._writable(mess_id)
        self._member_of(mess_id, member_id)

        deposit = Deposit(
            mess_id=mess_id,
            member_id=member_id,
            date=validate_entry_date(entry_date, start_date=start),
            amount=parse_amount(amount),
            note=note,
        )
        self.db.add(deposit)
        self.db.commit()
        return deposit

    def record_additional_cost(
        self,
        mess_id: int,
        entry_date: date,
        amount: Any,
        description: str,
        note: str | None = None,
    ) -> AdditionalCost:
        """Record a shared cost split per head."""
        start = self._writable(mess_id)
        if not description or not description.strip():
            raise ValidationError("Description is required")

        cost = AdditionalCost(
            mess_id=mess_id,
            date=validate_entry_date(entry_date, start_date=start),
            amount=parse_amount(amount),
            description=description.strip(),
            note=note,
        )
        self.db.add(cost)
        self.db.commit()
        return cost

    def list_entries(
        self,
        kind: EntryKind,
        mess_id: int,
        month: str | None = None,
        member_id: int | None = None,
    ) -> list:
        """Rows of one kind for a mess, newest first, optionally for one month/member."""
        model = ENTRY_MODELS[EntryKind(kind)]
        stmt = select(model).filter(model.mess_id == mess_id)
        if month:
            start, end = month_bounds(month)
            stmt = stmt.filter(model.date.between(start, end))
        if member_id is not None:
            if not hasattr(model, "member_id"):
                raise ValidationError(f"{EntryKind(kind).value} are not per member")
            stmt = stmt.filter(model.member_id == member_id)
        return list(self.db.scalars(stmt.order_by(model.date.desc(), model.id.desc())).all())

    def delete_entry(self, kind: EntryKind, entry_id: int, mess_id: int) -> None:
        """Delete one row of the mess.

        Raises:
            NotFoundError: Unknown row or row of another mess
        """
        self._writable(mess_id)
        model = ENTRY_MODELS[EntryKind(kind)]
        entry = self.db.get(model, entry_id)
        if entry is None or entry.mess_id != mess_id:
            raise NotFoundError(f"Entry {entry_id} not found")
        self.db.delete(entry)
        self.db.commit()
        logger.info("ledger.delete: kind=%s id=%d mess_id=%d", EntryKind(kind).value, entry_id, mess_id)

    def _writable(self, mess_id: int) -> date:
        """Start date of the current subscription; raises if the mess is read-only."""
        return self.mess_service.ensure_writable(mess_id).start_date

    def _member_of(self, mess_id: int, member_id: int) -> Member:
        member = self.db.get(Member, member_id)
        if member is None or member.mess_id != mess_id:
            raise NotFoundError(f"Member {member_id} not found")
        return member


__all__ = [
    "LedgerService",
    "EntryKind",
    "parse_amount",
    "validate_entry_date",
    "validate_meal_count",
]
