"""Expense balance and settle-up computations.

Balances are recomputed from the full set of expenses on every call; nothing
is cached. Settle-up suggestions use a greedy two-pointer match of the largest
debts against the largest credits. It keeps transfers at most
``debtors + creditors - 1`` but does not search for the optimal count.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from rentmate.domain.entities import Expense, SettleUpSuggestion, ShareInput, User, UserBalance
from rentmate.domain.errors import ValidationError, share_total_mismatch

SHARE_TOLERANCE = Decimal("0.001")
SETTLE_FLOOR = Decimal("0.001")
CENT = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a value to cents."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_share_total(amount: Decimal, shares: Sequence[ShareInput]) -> None:
    """Check that share amounts add up to the expense amount.

    Raises:
        ValidationError: If the sum differs from ``amount`` by more than the tolerance
    """
    total = sum((Decimal(share.amount_owed) for share in shares), Decimal("0"))
    if abs(total - Decimal(amount)) > SHARE_TOLERANCE:
        raise ValidationError(share_total_mismatch(total, Decimal(amount)))


def compute_balances(members: Sequence[User], expenses: Iterable[Expense]) -> list[UserBalance]:
    """Compute each member's net balance.

    ``total_paid`` sums the expenses a member paid, ``total_owed`` sums their
    unsettled shares. A positive net balance means the household owes them.

    Args:
        members: Household members, in the order balances should be returned
        expenses: Household expenses with their shares loaded

    Returns:
        One UserBalance per member
    """
    paid = {member.id: Decimal("0") for member in members}
    owed = {member.id: Decimal("0") for member in members}

    for expense in expenses:
        if expense.paid_by_id in paid:
            paid[expense.paid_by_id] += expense.amount
        for share in expense.shares:
            if not share.is_settled and share.owed_by_id in owed:
                owed[share.owed_by_id] += share.amount_owed

    return [
        UserBalance(
            user_id=member.id,
            name=member.display_name,
            email=member.email,
            total_paid=paid[member.id],
            total_owed=owed[member.id],
            net_balance=paid[member.id] - owed[member.id],
        )
        for member in members
    ]


@dataclass
class _Party:
    balance: UserBalance
    remaining: Decimal


def suggest_settlements(balances: Sequence[UserBalance]) -> list[SettleUpSuggestion]:
    """Suggest transfers that bring every balance to zero.

    Debtors and creditors are each sorted by magnitude, largest first, and
    walked with two pointers. The sort is stable so equal balances keep the
    order they were given in.

    Args:
        balances: Member balances

    Returns:
        Suggested transfers, amounts rounded to cents
    """
    debtors = sorted(
        (_Party(b, -b.net_balance) for b in balances if b.net_balance < 0),
        key=lambda party: party.remaining,
        reverse=True,
    )
    creditors = sorted(
        (_Party(b, b.net_balance) for b in balances if b.net_balance > 0),
        key=lambda party: party.remaining,
        reverse=True,
    )

    suggestions: list[SettleUpSuggestion] = []
    debtor_index = 0
    creditor_index = 0

    while debtor_index < len(debtors) and creditor_index < len(creditors):
        debtor = debtors[debtor_index]
        creditor = creditors[creditor_index]

        amount = min(debtor.remaining, creditor.remaining)
        if amount > SETTLE_FLOOR:
            suggestions.append(
                SettleUpSuggestion(
                    from_user_id=debtor.balance.user_id,
                    from_user_name=debtor.balance.name,
                    to_user_id=creditor.balance.user_id,
                    to_user_name=creditor.balance.name,
                    amount=to_money(amount),
                )
            )
            debtor.remaining -= amount
            creditor.remaining -= amount

        if debtor.remaining <= SETTLE_FLOOR:
            debtor_index += 1
        if creditor.remaining <= SETTLE_FLOOR:
            creditor_index += 1

    return suggestions


def split_evenly(amount: Decimal, member_ids: Sequence[str]) -> list[ShareInput]:
    """Split an amount into equal shares, in cents.

    Leftover cents go one each to the first members, so the shares always add
    up to ``amount`` exactly.

    Raises:
        ValidationError: If there is nobody to split between
    """
    if not member_ids:
        raise ValidationError("Cannot split an expense between zero members")

    total_cents = int(to_money(amount) / CENT)
    base, remainder = divmod(total_cents, len(member_ids))
    return [
        ShareInput(owed_by_id=member_id, amount_owed=CENT * (base + (1 if index < remainder else 0)))
        for index, member_id in enumerate(member_ids)
    ]
