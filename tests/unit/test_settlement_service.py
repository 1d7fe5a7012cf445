"""Unit tests for settlement arithmetic."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from messmate.errors import ValidationError
from messmate.services.settlement_service import (
    additional_cost_share,
    allocate_member_cost,
    calculate_meal_rate,
    meal_units,
    net_balance,
    summarize_mess,
    to_decimal,
    total_amount,
)


@dataclass
class FakeMeal:
    member_id: int
    breakfast: int = 0
    lunch: int = 0
    dinner: int = 0


@dataclass
class FakeMember:
    id: int
    name: str
    is_active: bool = True


@dataclass
class FakeDeposit:
    member_id: int
    amount: Decimal


def meals_totalling(units: int, member_id: int = 1) -> list[FakeMeal]:
    """One meal record per unit (lunch only)."""
    return [FakeMeal(member_id=member_id, lunch=1) for _ in range(units)]


class TestMealUnits:
    """Tests for meal unit counting."""

    def test_sums_three_meals(self):
        assert meal_units(FakeMeal(member_id=1, breakfast=1, lunch=2, dinner=1)) == 4

    def test_none_counts_as_zero(self):
        assert meal_units(FakeMeal(member_id=1, breakfast=None, lunch=1, dinner=None)) == 1

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            meal_units(FakeMeal(member_id=1, lunch=-1))


class TestMealRate:
    """Tests for calculate_meal_rate."""

    def test_two_purchases_over_hundred_units(self):
        """Two purchases totalling 1000 over 100 meal units give a rate of 10."""
        rate = calculate_meal_rate([Decimal("400.00"), Decimal("600.00")], meals_totalling(100))
        assert rate == Decimal("10")

    def test_zero_units_gives_zero_rate(self):
        """No meals recorded: rate is exactly 0 whatever was spent."""
        assert calculate_meal_rate([Decimal("500")], []) == Decimal("0")

    def test_zero_units_from_empty_records(self):
        rate = calculate_meal_rate([Decimal("500")], [FakeMeal(member_id=1)])
        assert rate == Decimal("0")

    def test_no_purchases(self):
        assert calculate_meal_rate([], meals_totalling(10)) == Decimal("0")

    def test_rate_is_not_rounded(self):
        rate = calculate_meal_rate([Decimal("100")], meals_totalling(3))
        assert rate == Decimal("100") / Decimal("3")

    def test_negative_purchase_rejected(self):
        with pytest.raises(ValidationError):
            calculate_meal_rate([Decimal("-1")], meals_totalling(1))

    @pytest.mark.parametrize(
        "costs,units",
        [
            ([Decimal("0")], 0),
            ([Decimal("0")], 7),
            ([Decimal("123.45")], 1),
            ([Decimal("99999.99"), Decimal("0.01")], 250),
        ],
    )
    def test_rate_is_finite_and_non_negative(self, costs, units):
        rate = calculate_meal_rate(costs, meals_totalling(units))
        assert rate.is_finite()
        assert rate >= 0


class TestAllocation:
    """Tests for per-member allocation and netting."""

    def test_additional_share_per_head(self):
        assert additional_cost_share(Decimal("200"), 4) == Decimal("50")

    def test_additional_share_without_active_members(self):
        assert additional_cost_share(Decimal("200"), 0) == Decimal("0")

    def test_member_with_meals_in_credit(self):
        """30 units at 10 plus a 50 share against 400 deposited leaves 50 credit."""
        allocated = allocate_member_cost(30, Decimal("10"), Decimal("200"), 4)
        assert allocated == Decimal("350")
        assert net_balance(Decimal("400"), allocated) == Decimal("50")

    def test_member_without_meals_owes_share(self):
        """No meals and no deposit: the additional share is owed."""
        allocated = allocate_member_cost(0, Decimal("10"), Decimal("200"), 4)
        assert allocated == Decimal("50")
        assert net_balance(Decimal("0"), allocated) == Decimal("-50")

    def test_zero_rate_ignores_meal_count(self):
        assert allocate_member_cost(42, Decimal("0"), Decimal("0"), 3) == Decimal("0")

    @pytest.mark.parametrize("units", [0, 1, 15, 90])
    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("7.5"), Decimal("33.333333")])
    def test_allocation_is_non_negative(self, units, rate):
        assert allocate_member_cost(units, rate, Decimal("120"), 3) >= 0

    def test_balance_is_exact_difference(self):
        assert net_balance(Decimal("100.10"), Decimal("100.105")) == Decimal("-0.005")

    def test_to_decimal_avoids_float_artefacts(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")

    def test_total_amount_rejects_negative(self):
        with pytest.raises(ValidationError):
            total_amount([Decimal("10"), Decimal("-5")])


class TestSummarizeMess:
    """Tests for summarize_mess."""

    def test_full_breakdown(self):
        members = [
            FakeMember(1, "A"),
            FakeMember(2, "B"),
            FakeMember(3, "C"),
            FakeMember(4, "D"),
        ]
        meals = meals_totalling(30, member_id=1) + meals_totalling(70, member_id=3)
        deposits = [FakeDeposit(1, Decimal("400")), FakeDeposit(3, Decimal("500"))]

        summary = summarize_mess(
            members,
            meals,
            [Decimal("400"), Decimal("600")],
            deposits,
            [Decimal("150"), Decimal("50")],
        )

        assert summary.meal_rate == Decimal("10")
        assert summary.total_meals == 100
        assert summary.total_bazar == Decimal("1000")
        assert summary.total_deposits == Decimal("900")
        assert summary.total_additional_cost == Decimal("200")
        assert summary.additional_cost_per_head == Decimal("50")
        assert summary.active_member_count == 4

        a = summary.member(1)
        assert a.total_cost == Decimal("350")
        assert a.balance == Decimal("50")

        b = summary.member(2)
        assert b.total_meals == 0
        assert b.total_cost == Decimal("50")
        assert b.balance == Decimal("-50")

        c = summary.member(3)
        assert c.meal_cost == Decimal("700")
        assert c.balance == Decimal("-250")

    def test_inactive_member_pays_meals_only(self):
        members = [FakeMember(1, "A"), FakeMember(2, "Gone", is_active=False)]
        meals = meals_totalling(5, member_id=1) + meals_totalling(5, member_id=2)

        summary = summarize_mess(members, meals, [Decimal("100")], [], [Decimal("60")])

        assert summary.active_member_count == 1
        assert summary.additional_cost_per_head == Decimal("60")
        gone = summary.member(2)
        assert gone.additional_cost == Decimal("0")
        assert gone.total_cost == Decimal("50")
        assert summary.member(1).total_cost == Decimal("110")

    def test_zero_meals_zero_meal_costs(self):
        members = [FakeMember(1, "A"), FakeMember(2, "B")]

        summary = summarize_mess(members, [], [Decimal("500")], [], [])

        assert summary.meal_rate == Decimal("0")
        assert all(m.meal_cost == Decimal("0") for m in summary.members)
        assert all(m.balance == Decimal("0") for m in summary.members)

    def test_no_members(self):
        summary = summarize_mess([], [], [], [], [Decimal("100")])
        assert summary.members == []
        assert summary.additional_cost_per_head == Decimal("0")

    def test_unknown_member_returns_none(self):
        summary = summarize_mess([FakeMember(1, "A")], [], [], [], [])
        assert summary.member(99) is None

    def test_negative_deposit_rejected(self):
        with pytest.raises(ValidationError):
            summarize_mess([FakeMember(1, "A")], [], [], [FakeDeposit(1, Decimal("-1"))], [])

    def test_archive_payload_is_json_safe(self):
        summary = summarize_mess(
            [FakeMember(1, "A")],
            meals_totalling(4),
            [Decimal("100")],
            [FakeDeposit(1, Decimal("30"))],
            [],
        )

        payload = summary.to_archive_payload()

        assert payload == [
            {
                "member_id": 1,
                "name": "A",
                "is_active": True,
                "total_meals": 4,
                "total_deposits": "30",
                "meal_cost": "100",
                "additional_cost": "0",
                "total_cost": "100",
                "balance": "-70",
            }
        ]
