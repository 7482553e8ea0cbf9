"""Calendar view over chores and expenses."""

from datetime import date

from rentmate.database.base import Database
from rentmate.domain.access import require_member
from rentmate.domain.entities import CalendarEvent
from rentmate.domain.errors import ValidationError

COMPLETED_CHORE_COLOR = "#A0AEC0"
PENDING_CHORE_COLOR = "#4299E1"
EXPENSE_COLOR = "#48BB78"


class CalendarService:
    """Builds all-day calendar events for a household."""

    def __init__(self, db: Database):
        self.db = db

    def get_events(
        self, household_id: str, start: date, end: date, acting_user_id: str
    ) -> list[CalendarEvent]:
        """Return chore and expense events dated within ``start``..``end`` (inclusive).

        Chores without a due date are left out. Chore events come first, then
        expense events.

        Raises:
            ValidationError: If ``end`` is before ``start``
            NotFoundError: If the household does not exist
            AuthorizationError: If the user is not a member
        """
        if end < start:
            raise ValidationError(f"End date {end} is before start date {start}")

        household = require_member(self.db, household_id, acting_user_id)
        names = {member.id: member.display_name for member in household.members}

        events = []
        for chore in self.db.list_chores(household_id, start_date=start, end_date=end):
            if chore.due_date is None:
                continue
            events.append(
                CalendarEvent(
                    id=f"chore-{chore.id}",
                    title=chore.description or "Chore",
                    start=chore.due_date,
                    end=chore.due_date,
                    all_day=True,
                    type="chore",
                    color=COMPLETED_CHORE_COLOR if chore.is_complete else PENDING_CHORE_COLOR,
                    extended_props={
                        "chore_id": chore.id,
                        "description": chore.description,
                        "is_complete": chore.is_complete,
                        "assigned_to_name": names.get(chore.assigned_to_id),
                    },
                )
            )

        for expense in self.db.list_expenses(household_id, start_date=start, end_date=end):
            events.append(
                CalendarEvent(
                    id=f"expense-{expense.id}",
                    title=expense.description or "Expense",
                    start=expense.date,
                    end=expense.date,
                    all_day=True,
                    type="expense",
                    color=EXPENSE_COLOR,
                    extended_props={
                        "expense_id": expense.id,
                        "description": expense.description,
                        "amount": expense.amount,
                        "paid_by_name": names.get(expense.paid_by_id),
                    },
                )
            )
        return events
