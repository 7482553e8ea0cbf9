"""Expense domain service."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Sequence

from rentmate.database.base import Database
from rentmate.domain import errors
from rentmate.domain.access import require_member, require_own_household
from rentmate.domain.activity_log import ActivityLogService
from rentmate.domain.entities import (
    UNSET,
    ActivityType,
    Expense,
    ExpenseShare,
    Household,
    SettleUpSuggestion,
    ShareInput,
    UserBalance,
)
from rentmate.domain.errors import (
    AuthorizationError,
    DataIntegrityError,
    NotFoundError,
    ValidationError,
)
from rentmate.domain.settlement import (
    compute_balances,
    suggest_settlements,
    validate_share_total,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _positive_decimal(value: Any, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number, got '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than zero, got {value}")
    if amount.as_tuple().exponent < -2:
        raise ValidationError(f"{label} has more than two decimal places, got {value}")
    return amount


class ExpenseService:
    """Service for expenses, their shares and household balances."""

    def __init__(
        self,
        db: Database,
        activity_log: Optional[ActivityLogService] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize expense service.

        Args:
            db: Database instance
            activity_log: Activity log service (one is created if omitted)
            clock: Returns the current UTC time
        """
        self.db = db
        self.activity_log = activity_log or ActivityLogService(db)
        self.clock = clock

    def _load(self, expense_id: str, acting_user_id: str) -> tuple[Expense, Household]:
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(errors.expense_not_found(expense_id))
        household = self.db.get_household(expense.household_id)
        if household is None:
            raise DataIntegrityError(
                f"Expense {expense_id} references missing household {expense.household_id}"
            )
        if not household.has_member(acting_user_id):
            raise AuthorizationError(errors.not_household_member(acting_user_id, household.id))
        return expense, household

    def _check_member(self, household: Household, user_id: Optional[str], role: str) -> None:
        if user_id is None or not household.has_member(user_id):
            raise ValidationError(
                f"{role} {user_id} is not a member of household {household.id}"
            )

    def _normalize_shares(
        self, household: Household, amount: Decimal, shares: Sequence[ShareInput]
    ) -> list[ShareInput]:
        """Validate share lines against the household and the expense amount."""
        if not shares:
            raise ValidationError("An expense needs at least one share")

        normalized = []
        for share in shares:
            self._check_member(household, share.owed_by_id, "Share debtor")
            normalized.append(
                ShareInput(
                    owed_by_id=share.owed_by_id,
                    amount_owed=_positive_decimal(share.amount_owed, "Share amount"),
                )
            )
        validate_share_total(amount, normalized)
        return normalized

    def _write_shares(
        self, expense_id: str, paid_by_id: str, shares: Sequence[ShareInput]
    ) -> None:
        now = self.clock()
        for share in shares:
            own_share = share.owed_by_id == paid_by_id
            self.db.create_expense_share(
                expense_id=expense_id,
                owed_by_id=share.owed_by_id,
                amount_owed=share.amount_owed,
                is_settled=own_share,
                settled_at=now if own_share else None,
            )

    def _reload(self, expense_id: str) -> Expense:
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(errors.expense_not_found(expense_id))
        return expense

    def create_expense(
        self,
        acting_user_id: str,
        description: str,
        amount: Decimal,
        date: date,
        paid_by_id: str,
        shares: Sequence[ShareInput],
    ) -> Expense:
        """Create an expense with its shares in the acting user's household.

        The payer's own share, if any, is created already settled.

        Args:
            acting_user_id: Creating user (must belong to a household)
            description: What was paid for
            amount: Total amount (positive, rounded to cents)
            date: Date of the expense
            paid_by_id: Member who paid
            shares: Who owes what; must add up to ``amount``

        Returns:
            Created expense with shares

        Raises:
            ValidationError: If any field is invalid, a payer or debtor is not
                a member, or the shares do not add up to the amount
        """
        household = require_own_household(self.db, acting_user_id)

        description = (description or "").strip()
        if not description:
            raise ValidationError("Expense description cannot be empty")
        if date is None:
            raise ValidationError("Expense date is required")
        amount = _positive_decimal(amount, "Expense amount")
        self._check_member(household, paid_by_id, "Payer")
        normalized = self._normalize_shares(household, amount, shares)

        with self.db.unit_of_work():
            expense_id = self.db.create_expense(
                household_id=household.id,
                description=description,
                amount=amount,
                date=date,
                paid_by_id=paid_by_id,
            )
            self._write_shares(expense_id, paid_by_id, normalized)

        expense = self._reload(expense_id)
        self.activity_log.record_activity(
            household_id=household.id,
            actor_id=acting_user_id,
            entity_id=expense.id,
            entity_type="expense",
            activity_type=ActivityType.EXPENSE_CREATED,
            details={
                "description": expense.description,
                "amount": expense.amount,
                "paid_by_id": expense.paid_by_id,
                "num_shares": len(expense.shares),
            },
        )
        return expense

    def list_expenses(
        self,
        acting_user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Expense]:
        """List expenses of the acting user's household, newest first."""
        household = require_own_household(self.db, acting_user_id)
        return self.db.list_expenses(household.id, start_date=start_date, end_date=end_date)

    def get_expense(self, expense_id: str, acting_user_id: str) -> Expense:
        """Get an expense the acting user can see."""
        expense, _ = self._load(expense_id, acting_user_id)
        return expense

    def update_expense(
        self,
        expense_id: str,
        acting_user_id: str,
        description: Any = UNSET,
        amount: Any = UNSET,
        date: Any = UNSET,
        paid_by_id: Any = UNSET,
        shares: Any = UNSET,
    ) -> Expense:
        """Update an expense.

        Basic fields change independently. Supplied shares replace the whole
        share set and are validated against the new (or current) amount.
        Changing the amount without supplying shares is rejected.

        Raises:
            ValidationError: If a field is invalid, the payer is None or not a
                member, the shares are empty or do not add up, or the amount
                changes without new shares
        """
        expense, household = self._load(expense_id, acting_user_id)

        if description is not UNSET:
            description = (description or "").strip()
            if not description:
                raise ValidationError("Expense description cannot be empty")
        if date is not UNSET and date is None:
            raise ValidationError("Expense date cannot be cleared")
        if paid_by_id is not UNSET:
            if paid_by_id is None:
                raise ValidationError("An expense must have a payer")
            self._check_member(household, paid_by_id, "Payer")

        new_amount = expense.amount
        if amount is not UNSET:
            new_amount = _positive_decimal(amount, "Expense amount")
            if shares is UNSET and new_amount != expense.amount:
                raise ValidationError(
                    "If the expense amount is updated, new shares must also be provided"
                )

        normalized = None
        if shares is not UNSET:
            if shares is None:
                raise ValidationError("Expense shares cannot be empty")
            normalized = self._normalize_shares(household, new_amount, shares)

        updated_fields = [
            name
            for name, value in (
                ("description", description),
                ("amount", amount),
                ("date", date),
                ("paid_by_id", paid_by_id),
                ("shares", shares),
            )
            if value is not UNSET
        ]
        if not updated_fields:
            return expense

        effective_payer = expense.paid_by_id if paid_by_id is UNSET else paid_by_id
        with self.db.unit_of_work():
            self.db.update_expense(
                expense_id,
                description=None if description is UNSET else description,
                amount=None if amount is UNSET else new_amount,
                date=None if date is UNSET else date,
                paid_by_id=None if paid_by_id is UNSET else paid_by_id,
            )
            if normalized is not None:
                self.db.delete_expense_shares(expense_id)
                self._write_shares(expense_id, effective_payer, normalized)

        updated = self._reload(expense_id)
        self.activity_log.record_activity(
            household_id=household.id,
            actor_id=acting_user_id,
            entity_id=expense_id,
            entity_type="expense",
            activity_type=ActivityType.EXPENSE_UPDATED,
            details={
                "description": updated.description,
                "amount": updated.amount,
                "paid_by_id": updated.paid_by_id,
                "updated_fields": updated_fields,
            },
        )
        return updated

    def delete_expense(self, expense_id: str, acting_user_id: str) -> None:
        """Delete an expense and its shares."""
        expense, household = self._load(expense_id, acting_user_id)
        with self.db.unit_of_work():
            self.db.delete_expense(expense_id)

        self.activity_log.record_activity(
            household_id=household.id,
            actor_id=acting_user_id,
            entity_id=expense_id,
            entity_type="expense",
            activity_type=ActivityType.EXPENSE_DELETED,
            details={"description": expense.description, "amount": expense.amount},
        )

    def toggle_expense_share_settlement(
        self, share_id: str, settle: bool, acting_user_id: str
    ) -> ExpenseShare:
        """Settle or unsettle one share of an expense.

        Only the user who paid the expense may change its shares. Settling
        stamps ``settled_at`` with the current time, also when the share was
        already settled; unsettling clears it.

        Raises:
            NotFoundError: If the share does not exist
            AuthorizationError: If the acting user is not the expense payer
        """
        share = self.db.get_expense_share(share_id)
        if share is None:
            raise NotFoundError(errors.expense_share_not_found(share_id))
        expense = self.db.get_expense(share.expense_id)
        if expense is None:
            raise DataIntegrityError(
                f"Expense share {share_id} references missing expense {share.expense_id}"
            )
        if expense.paid_by_id is None:
            raise DataIntegrityError(f"Expense {expense.id} has no payer")
        if expense.paid_by_id != acting_user_id:
            logger.warning(
                "User %s may not change settlement of share %s (payer is %s)",
                acting_user_id,
                share_id,
                expense.paid_by_id,
            )
            raise AuthorizationError(
                "Only the user who paid the expense can settle or unsettle its shares"
            )

        with self.db.unit_of_work():
            self.db.update_share_settlement(
                share_id, is_settled=settle, settled_at=self.clock() if settle else None
            )

        updated = self.db.get_expense_share(share_id)
        debtor = self.db.get_user(share.owed_by_id)
        self.activity_log.record_activity(
            household_id=expense.household_id,
            actor_id=acting_user_id,
            entity_id=share_id,
            entity_type="expense_share",
            activity_type=(
                ActivityType.EXPENSE_SHARE_SETTLED if settle else ActivityType.EXPENSE_SHARE_UNSETTLED
            ),
            details={
                "expense_description": expense.description,
                "expense_id": expense.id,
                "owed_by_user_id": share.owed_by_id,
                "owed_by_user_name": debtor.display_name if debtor else None,
                "amount": share.amount_owed,
            },
        )
        return updated

    def get_household_balances(self, household_id: str, acting_user_id: str) -> list[UserBalance]:
        """Compute every member's balance from the household's expenses.

        Raises:
            NotFoundError: If the household does not exist
            AuthorizationError: If the acting user is not a member
        """
        household = require_member(self.db, household_id, acting_user_id)
        expenses = self.db.list_expenses(household_id)
        return compute_balances(household.members, expenses)

    def get_settle_up_suggestions(
        self, household_id: str, acting_user_id: str
    ) -> list[SettleUpSuggestion]:
        """Suggest transfers that would settle the household's balances."""
        return suggest_settlements(self.get_household_balances(household_id, acting_user_id))
