"""Settlement arithmetic: meal-rate, per-member cost allocation and balance netting.

Formulas:
- Meal rate      = total bazar cost / total meal units (0 when there are no meals)
- Meal cost      = member meal units * meal rate
- Additional     = total additional cost / active member count (0 when nobody is active)
- Balance        = deposits - (meal cost + additional share)

Positive balance = credit owed to the member, negative = member owes the mess.
Nothing here rounds; presentation decides how many places to show.

All functions are pure so they can back both the live balance page and the
monthly rollover.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Protocol

from messmate.errors import ValidationError

ZERO = Decimal("0")


class MealCounts(Protocol):
    """Anything carrying the three daily meal counts (ORM Meal, test doubles)."""

    breakfast: int
    lunch: int
    dinner: int


def to_decimal(value: Any) -> Decimal:
    """Convert a monetary value to Decimal without float artefacts."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def meal_units(record: MealCounts) -> int:
    """Number of meal units in one meal record."""
    counts = (record.breakfast or 0, record.lunch or 0, record.dinner or 0)
    if any(c < 0 for c in counts):
        raise ValidationError("Meal counts must be non-negative")
    return sum(counts)


def total_amount(amounts: Iterable[Any]) -> Decimal:
    """Sum non-negative monetary amounts."""
    total = ZERO
    for amount in amounts:
        value = to_decimal(amount)
        if value < 0:
            raise ValidationError(f"Amount must be non-negative, got {value}")
        total += value
    return total


def calculate_meal_rate(bazar_costs: Iterable[Any], meal_records: Iterable[MealCounts]) -> Decimal:
    """Cost of one meal unit for a period.

    Args:
        bazar_costs: Purchase amounts for the period
        meal_records: Meal records for the period

    Returns:
        Non-negative rate; exactly 0 when no meal units were recorded
    """
    total_cost = total_amount(bazar_costs)
    total_units = sum(meal_units(m) for m in meal_records)
    if total_units == 0:
        return ZERO
    return total_cost / Decimal(total_units)


def additional_cost_share(total_additional_cost: Any, active_member_count: int) -> Decimal:
    """Per-head share of the additional costs (0 when there are no active members)."""
    total = to_decimal(total_additional_cost)
    if total < 0:
        raise ValidationError("Additional cost total must be non-negative")
    if active_member_count <= 0:
        return ZERO
    return total / Decimal(active_member_count)


def allocate_member_cost(
    units: int,
    meal_rate: Any,
    total_additional_cost: Any,
    active_member_count: int,
) -> Decimal:
    """Total cost charged to one active member for the period."""
    return to_decimal(meal_rate) * Decimal(units) + additional_cost_share(
        total_additional_cost, active_member_count
    )


def net_balance(total_deposits: Any, allocated_cost: Any) -> Decimal:
    """Deposits minus allocated cost. No clamping: negative means the member owes."""
    return to_decimal(total_deposits) - to_decimal(allocated_cost)


@dataclass
class MemberBalance:
    """Settlement line for one member."""

    member_id: int
    name: str
    is_active: bool
    total_meals: int
    total_deposits: Decimal
    meal_cost: Decimal
    additional_cost: Decimal
    total_cost: Decimal
    balance: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "name": self.name,
            "is_active": self.is_active,
            "total_meals": self.total_meals,
            "total_deposits": str(self.total_deposits),
            "meal_cost": str(self.meal_cost),
            "additional_cost": str(self.additional_cost),
            "total_cost": str(self.total_cost),
            "balance": str(self.balance),
        }


@dataclass
class MessSummary:
    """Mess-wide totals plus the per-member breakdown."""

    total_bazar: Decimal
    total_meals: int
    total_deposits: Decimal
    total_additional_cost: Decimal
    meal_rate: Decimal
    additional_cost_per_head: Decimal
    active_member_count: int
    members: list[MemberBalance] = field(default_factory=list)

    def member(self, member_id: int) -> MemberBalance | None:
        return next((m for m in self.members if m.member_id == member_id), None)

    def to_archive_payload(self) -> list[dict[str, Any]]:
        """Per-member breakdown in a JSON-safe form for the archive row."""
        return [m.to_dict() for m in self.members]


def summarize_mess(
    members: Iterable[Any],
    meals: Iterable[Any],
    bazar_costs: Iterable[Any],
    deposits: Iterable[Any],
    additional_costs: Iterable[Any],
) -> MessSummary:
    """Compute meal-rate, allocations and balances for a set of members.

    Args:
        members: Objects with ``id``, ``name``, ``is_active``
        meals: Objects with ``member_id``, ``breakfast``, ``lunch``, ``dinner``
        bazar_costs: Purchase amounts
        deposits: Objects with ``member_id`` and ``amount``
        additional_costs: Additional cost amounts

    Returns:
        MessSummary; inactive members are reported with no additional cost share
    """
    members = list(members)
    meals = list(meals)
    deposits = list(deposits)

    total_bazar = total_amount(bazar_costs)
    total_additional = total_amount(additional_costs)
    meal_rate = calculate_meal_rate([total_bazar], meals)
    active_count = sum(1 for m in members if m.is_active)
    per_head = additional_cost_share(total_additional, active_count)

    units_by_member: dict[int, int] = {}
    for meal in meals:
        units_by_member[meal.member_id] = units_by_member.get(meal.member_id, 0) + meal_units(meal)

    deposits_by_member: dict[int, Decimal] = {}
    for deposit in deposits:
        amount = to_decimal(deposit.amount)
        if amount < 0:
            raise ValidationError(f"Deposit amount must be non-negative, got {amount}")
        deposits_by_member[deposit.member_id] = (
            deposits_by_member.get(deposit.member_id, ZERO) + amount
        )

    lines = []
    for member in members:
        units = units_by_member.get(member.id, 0)
        member_deposits = deposits_by_member.get(member.id, ZERO)
        meal_cost = meal_rate * Decimal(units)
        if member.is_active:
            extra = per_head
            total_cost = allocate_member_cost(units, meal_rate, total_additional, active_count)
        else:
            extra = ZERO
            total_cost = meal_cost
        lines.append(
            MemberBalance(
                member_id=member.id,
                name=member.name,
                is_active=member.is_active,
                total_meals=units,
                total_deposits=member_deposits,
                meal_cost=meal_cost,
                additional_cost=extra,
                total_cost=total_cost,
                balance=net_balance(member_deposits, total_cost),
            )
        )

    return MessSummary(
        total_bazar=total_bazar,
        total_meals=sum(units_by_member.values()),
        total_deposits=sum(deposits_by_member.values(), ZERO),
        total_additional_cost=total_additional,
        meal_rate=meal_rate,
        additional_cost_per_head=per_head,
        active_member_count=active_count,
        members=lines,
    )


__all__ = [
    "MealCounts",
    "MemberBalance",
    "MessSummary",
    "to_decimal",
    "meal_units",
    "total_amount",
    "calculate_meal_rate",
    "additional_cost_share",
    "allocate_member_cost",
    "net_balance",
    "summarize_mess",
]
