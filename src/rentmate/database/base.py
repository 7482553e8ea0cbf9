"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly; the domain package resolves its services lazily
from rentmate.domain.entities import (
    ActivityLogEntry,
    Chore,
    Expense,
    ExpenseShare,
    Household,
    Invitation,
    Recurrence,
    User,
    UserRole,
)


class Database(ABC):
    """Abstract database interface for rentmate.

    Every write commits immediately unless it runs inside ``unit_of_work()``,
    in which case all writes commit together or are rolled back together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Open a transaction scope.

        Raises:
            TransactionFailure: If the commit fails (everything is rolled back)
        """
        pass

    # User operations
    @abstractmethod
    def create_user(self, email: str, name: Optional[str] = None) -> str:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users."""
        pass

    @abstractmethod
    def set_user_household(
        self, user_id: str, household_id: Optional[str], role: UserRole
    ) -> None:
        """Move a user into (or out of, with None) a household with a role."""
        pass

    # Household operations
    @abstractmethod
    def create_household(self, name: str) -> str:
        """Create a household. Returns household ID."""
        pass

    @abstractmethod
    def get_household(self, household_id: str) -> Optional[Household]:
        """Get household by ID with its members loaded."""
        pass

    @abstractmethod
    def update_household_name(self, household_id: str, name: str) -> None:
        """Rename a household."""
        pass

    @abstractmethod
    def delete_household(self, household_id: str) -> None:
        """Delete a household with its chores, expenses, invitations and logs.

        Members are detached and reset to the member role.
        """
        pass

    # Chore operations
    @abstractmethod
    def create_chore(
        self,
        household_id: str,
        description: str,
        notes: Optional[str] = None,
        due_date: Optional[date] = None,
        recurrence: Recurrence = Recurrence.NONE,
        assigned_to_id: Optional[str] = None,
    ) -> str:
        """Create a chore. Returns chore ID."""
        pass

    @abstractmethod
    def get_chore(self, chore_id: str) -> Optional[Chore]:
        """Get chore by ID."""
        pass

    @abstractmethod
    def save_chore(self, chore: Chore) -> None:
        """Write every mutable field of a chore in one statement."""
        pass

    @abstractmethod
    def delete_chore(self, chore_id: str) -> None:
        """Delete a chore."""
        pass

    @abstractmethod
    def list_chores(
        self,
        household_id: str,
        assigned_to_id: Optional[str] = None,
        unassigned: bool = False,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Chore]:
        """List chores of a household with optional filters.

        Args:
            household_id: Household ID
            assigned_to_id: Only chores assigned to this user
            unassigned: If True, only chores without an assignee
            start_date: Only chores due on or after this date
            end_date: Only chores due on or before this date
        """
        pass

    @abstractmethod
    def count_chores(self, household_id: str, is_complete: Optional[bool] = None) -> int:
        """Count chores of a household, optionally by completion state."""
        pass

    @abstractmethod
    def unassign_chores(self, household_id: str, user_id: str) -> int:
        """Clear the assignee of a user's chores in a household. Returns count."""
        pass

    # Expense operations
    @abstractmethod
    def create_expense(
        self,
        household_id: str,
        description: str,
        amount: Decimal,
        date: date,
        paid_by_id: str,
    ) -> str:
        """Create an expense (without shares). Returns expense ID."""
        pass

    @abstractmethod
    def create_expense_share(
        self,
        expense_id: str,
        owed_by_id: str,
        amount_owed: Decimal,
        is_settled: bool = False,
        settled_at: Optional[datetime] = None,
    ) -> str:
        """Add a share to an expense. Returns share ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """Get expense by ID with its shares."""
        pass

    @abstractmethod
    def update_expense(
        self,
        expense_id: str,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        paid_by_id: Optional[str] = None,
    ) -> None:
        """Update basic expense fields; None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_expense_shares(self, expense_id: str) -> None:
        """Delete every share of an expense."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: str) -> None:
        """Delete an expense and its shares."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        household_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Expense]:
        """List expenses of a household (newest first) with their shares."""
        pass

    @abstractmethod
    def get_expense_share(self, share_id: str) -> Optional[ExpenseShare]:
        """Get expense share by ID."""
        pass

    @abstractmethod
    def update_share_settlement(
        self, share_id: str, is_settled: bool, settled_at: Optional[datetime]
    ) -> None:
        """Set the settlement state of a share."""
        pass

    # Invitation operations
    @abstractmethod
    def create_invitation(
        self,
        household_id: str,
        invited_by_id: str,
        token: str,
        expires_at: datetime,
        email: Optional[str] = None,
        short_code: Optional[str] = None,
    ) -> str:
        """Create a pending invitation. Returns invitation ID."""
        pass

    @abstractmethod
    def get_invitation(self, invitation_id: str) -> Optional[Invitation]:
        """Get invitation by ID."""
        pass

    @abstractmethod
    def get_invitation_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token."""
        pass

    @abstractmethod
    def get_invitation_by_short_code(self, short_code: str) -> Optional[Invitation]:
        """Get invitation by short code (exact match, codes are stored upper-case)."""
        pass

    @abstractmethod
    def find_pending_invitation(self, household_id: str, email: str) -> Optional[Invitation]:
        """Find a pending email invitation for an address to a household."""
        pass

    @abstractmethod
    def list_invitations(
        self, household_id: str, status: Optional[str] = None
    ) -> list[Invitation]:
        """List invitations of a household, newest first."""
        pass

    @abstractmethod
    def update_invitation_status(
        self,
        invitation_id: str,
        status: str,
        accepted_at: Optional[datetime] = None,
        accepted_by_user_id: Optional[str] = None,
    ) -> None:
        """Change the status of an invitation."""
        pass

    # Activity log operations
    @abstractmethod
    def create_activity_log(
        self,
        household_id: str,
        actor_id: Optional[str],
        entity_id: str,
        entity_type: str,
        activity_type: str,
        details: Optional[dict[str, Any]] = None,
    ) -> str:
        """Create an activity log entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_activity_logs(
        self, household_id: str, offset: int = 0, limit: int = 20
    ) -> list[ActivityLogEntry]:
        """List activity log entries of a household, newest first."""
        pass

    @abstractmethod
    def count_activity_logs(self, household_id: str) -> int:
        """Count activity log entries of a household."""
        pass
