"""Tests for balance and settle-up computations."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from rentmate.domain.entities import (
    Expense,
    ExpenseShare,
    ShareInput,
    User,
    UserBalance,
    UserRole,
)
from rentmate.domain.errors import ValidationError
from rentmate.domain.settlement import (
    compute_balances,
    split_evenly,
    suggest_settlements,
    to_money,
    validate_share_total,
)

NOW = datetime(2024, 1, 10, tzinfo=UTC)


def balance(user_id: str, net: str) -> UserBalance:
    return UserBalance(
        user_id=user_id,
        name=user_id,
        email=f"{user_id.lower()}@example.com",
        total_paid=Decimal("0"),
        total_owed=Decimal("0"),
        net_balance=Decimal(net),
    )


def member(user_id: str) -> User:
    return User(
        id=user_id,
        email=f"{user_id.lower()}@example.com",
        name=user_id,
        role=UserRole.MEMBER,
        household_id="h1",
        created_at=NOW,
    )


def expense(expense_id: str, paid_by: str, amount: str, shares) -> Expense:
    return Expense(
        id=expense_id,
        household_id="h1",
        description=expense_id,
        amount=Decimal(amount),
        date=date(2024, 1, 1),
        paid_by_id=paid_by,
        created_at=NOW,
        shares=tuple(
            ExpenseShare(
                id=f"{expense_id}-{debtor}",
                expense_id=expense_id,
                owed_by_id=debtor,
                amount_owed=Decimal(owed),
                is_settled=settled,
                settled_at=NOW if settled else None,
            )
            for debtor, owed, settled in shares
        ),
    )


def test_to_money_rounds_half_up():
    assert to_money(Decimal("10.005")) == Decimal("10.01")
    assert to_money("3") == Decimal("3.00")


def test_validate_share_total_accepts_exact_sum():
    validate_share_total(
        Decimal("100"),
        [ShareInput("A", Decimal("50")), ShareInput("B", Decimal("50"))],
    )


def test_validate_share_total_rejects_mismatch():
    with pytest.raises(ValidationError, match="does not match"):
        validate_share_total(
            Decimal("100"),
            [ShareInput("A", Decimal("50")), ShareInput("B", Decimal("49.50"))],
        )


def test_validate_share_total_within_tolerance():
    """Thirds of 10 add up to 9.999 which is within the tolerance."""
    validate_share_total(
        Decimal("10"),
        [ShareInput(x, Decimal("3.333")) for x in "ABC"],
    )


def test_suggest_settlements_largest_first():
    balances = [balance("A", "-30"), balance("B", "10"), balance("C", "20")]

    suggestions = suggest_settlements(balances)

    assert [(s.from_user_id, s.to_user_id, s.amount) for s in suggestions] == [
        ("A", "C", Decimal("20.00")),
        ("A", "B", Decimal("10.00")),
    ]


def test_suggest_settlements_brings_all_balances_to_zero():
    balances = [
        balance("A", "-45.50"),
        balance("B", "-4.50"),
        balance("C", "30"),
        balance("D", "20"),
    ]

    suggestions = suggest_settlements(balances)

    net = {b.user_id: b.net_balance for b in balances}
    for suggestion in suggestions:
        net[suggestion.from_user_id] += suggestion.amount
        net[suggestion.to_user_id] -= suggestion.amount
    assert all(abs(value) <= Decimal("0.01") for value in net.values())
    assert len(suggestions) <= 3


def test_suggest_settlements_ignores_dust():
    assert suggest_settlements([balance("A", "-0.0005"), balance("B", "0.0005")]) == []


def test_suggest_settlements_everyone_even():
    assert suggest_settlements([balance("A", "0"), balance("B", "0")]) == []


def test_suggest_settlements_uses_names():
    suggestions = suggest_settlements([balance("A", "-5"), balance("B", "5")])
    assert suggestions[0].from_user_name == "A"
    assert suggestions[0].to_user_name == "B"


def test_compute_balances_counts_only_unsettled_shares():
    members = [member("A"), member("B"), member("C")]
    expenses = [
        # A paid 90, split three ways; A's own share settled
        expense("e1", "A", "90", [("A", "30", True), ("B", "30", False), ("C", "30", False)]),
        # B paid 20 for C, already paid back
        expense("e2", "B", "20", [("C", "20", True)]),
    ]

    balances = {b.user_id: b for b in compute_balances(members, expenses)}

    assert balances["A"].total_paid == Decimal("90")
    assert balances["A"].total_owed == Decimal("0")
    assert balances["A"].net_balance == Decimal("90")
    assert balances["B"].total_paid == Decimal("20")
    assert balances["B"].total_owed == Decimal("30")
    assert balances["B"].net_balance == Decimal("-10")
    assert balances["C"].net_balance == Decimal("-30")


def test_compute_balances_keeps_member_order_and_skips_former_members():
    members = [member("B"), member("A")]
    expenses = [expense("e1", "Z", "10", [("A", "5", False), ("Z", "5", True)])]

    balances = compute_balances(members, expenses)

    assert [b.user_id for b in balances] == ["B", "A"]
    assert balances[1].total_owed == Decimal("5")
    assert balances[0].total_paid == Decimal("0")


def test_split_evenly_distributes_leftover_cents():
    shares = split_evenly(Decimal("10"), ["A", "B", "C"])

    assert [s.amount_owed for s in shares] == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]
    assert sum(s.amount_owed for s in shares) == Decimal("10.00")


def test_split_evenly_exact():
    shares = split_evenly(Decimal("60"), ["A", "B"])
    assert [(s.owed_by_id, s.amount_owed) for s in shares] == [
        ("A", Decimal("30.00")),
        ("B", Decimal("30.00")),
    ]


def test_split_evenly_needs_members():
    with pytest.raises(ValidationError):
        split_evenly(Decimal("10"), [])


def test_balances_sum_to_zero_while_nothing_is_settled():
    """Test money is conserved when every share is still owed."""
    members = [member("A"), member("B"), member("C")]
    expenses = [
        expense("e1", "A", "60", [("B", "30", False), ("C", "30", False)]),
        expense("e2", "C", "25.50", [("A", "12.75", False), ("B", "12.75", False)]),
    ]

    balances = compute_balances(members, expenses)

    assert sum(b.net_balance for b in balances) == Decimal("0")


def test_settled_shares_leave_balances_unbalanced():
    """Test a settled share drops out of the debtor's owed total only."""
    members = [member("A"), member("B")]
    expenses = [expense("e1", "A", "40", [("A", "20", True), ("B", "20", False)])]

    balances = {b.user_id: b.net_balance for b in compute_balances(members, expenses)}

    # A's own pre-settled share is not subtracted from what A paid
    assert balances == {"A": Decimal("40"), "B": Decimal("-20")}


def test_share_total_mismatch_reports_exact_amounts():
    """A mismatch below half a cent still shows both values unrounded."""
    with pytest.raises(ValidationError) as exc_info:
        validate_share_total(
            Decimal("10.00"),
            [ShareInput("A", Decimal("5.00")), ShareInput("B", Decimal("5.005"))],
        )

    assert str(exc_info.value) == (
        "Sum of share amounts (10.005) does not match total expense amount (10.00)"
    )
