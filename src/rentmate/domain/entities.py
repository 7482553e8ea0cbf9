"""Domain model entities for rentmate.

These are pure data classes representing household concepts, independent of
the database schema. Services and the rotation/settlement engines work on
these; the ORM models never leave the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class UserRole(str, Enum):
    """Role of a user within their household."""

    OWNER = "owner"
    MEMBER = "member"


class Recurrence(str, Enum):
    """Repeat cadence of a chore."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


class InvitationStatus(str, Enum):
    """Lifecycle state of an invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ActivityType(str, Enum):
    """Audit log activity classification."""

    CHORE_CREATED = "CHORE_CREATED"
    CHORE_COMPLETED = "CHORE_COMPLETED"
    CHORE_UPDATED = "CHORE_UPDATED"
    CHORE_DELETED = "CHORE_DELETED"
    CHORE_ASSIGNED = "CHORE_ASSIGNED"
    CHORE_UNASSIGNED = "CHORE_UNASSIGNED"
    CHORE_ROTATED = "CHORE_ROTATED"

    EXPENSE_CREATED = "EXPENSE_CREATED"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    EXPENSE_DELETED = "EXPENSE_DELETED"
    EXPENSE_SHARE_SETTLED = "EXPENSE_SHARE_SETTLED"
    EXPENSE_SHARE_UNSETTLED = "EXPENSE_SHARE_UNSETTLED"

    HOUSEHOLD_CREATED = "HOUSEHOLD_CREATED"
    HOUSEHOLD_UPDATED = "HOUSEHOLD_UPDATED"
    HOUSEHOLD_MEMBER_ADDED = "HOUSEHOLD_MEMBER_ADDED"
    HOUSEHOLD_MEMBER_REMOVED = "HOUSEHOLD_MEMBER_REMOVED"


class _Unset:
    """Marker for patch fields the caller did not supply."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class User:
    """Household member domain entity."""

    id: str
    email: str
    name: Optional[str]
    role: UserRole
    household_id: Optional[str]
    created_at: datetime

    @property
    def display_name(self) -> str:
        return self.name or self.email


@dataclass(frozen=True)
class Household:
    """Household domain entity with its (unordered) members."""

    id: str
    name: str
    created_at: datetime
    members: tuple[User, ...] = ()

    def has_member(self, user_id: str) -> bool:
        return any(member.id == user_id for member in self.members)

    def get_member(self, user_id: str) -> Optional[User]:
        for member in self.members:
            if member.id == user_id:
                return member
        return None


@dataclass(frozen=True)
class Chore:
    """Chore domain entity."""

    id: str
    household_id: Optional[str]
    description: str
    notes: Optional[str]
    is_complete: bool
    due_date: Optional[date]
    recurrence: Recurrence
    assigned_to_id: Optional[str]
    completed_by_id: Optional[str]
    completed_at: Optional[datetime]
    created_at: datetime

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != Recurrence.NONE


@dataclass(frozen=True)
class ExpenseShare:
    """A member's portion of an expense."""

    id: str
    expense_id: str
    owed_by_id: str
    amount_owed: Decimal
    is_settled: bool
    settled_at: Optional[datetime]


@dataclass(frozen=True)
class Expense:
    """Expense domain entity with its shares."""

    id: str
    household_id: str
    description: str
    amount: Decimal
    date: date
    paid_by_id: Optional[str]
    created_at: datetime
    shares: tuple[ExpenseShare, ...] = ()


@dataclass(frozen=True)
class ChorePatch:
    """Partial chore update. Fields left as UNSET are not touched.

    ``assigned_to_id=None`` unassigns the chore and ``due_date=None`` clears
    the due date.
    """

    description: Any = UNSET
    notes: Any = UNSET
    due_date: Any = UNSET
    recurrence: Any = UNSET
    assigned_to_id: Any = UNSET
    is_complete: Any = UNSET


@dataclass(frozen=True)
class ShareInput:
    """Caller-supplied share line for creating or replacing expense shares."""

    owed_by_id: str
    amount_owed: Decimal


@dataclass(frozen=True)
class Invitation:
    """Household invitation, either email-targeted or by short code."""

    id: str
    household_id: str
    invited_by_id: Optional[str]
    token: str
    email: Optional[str]
    short_code: Optional[str]
    status: InvitationStatus
    expires_at: datetime
    accepted_at: Optional[datetime]
    accepted_by_user_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class InvitationDetails:
    """Public view of a pending invitation, shown before accepting it."""

    household_id: str
    household_name: str
    invited_by_name: Optional[str]
    email: Optional[str]
    short_code: Optional[str]
    status: InvitationStatus
    expires_at: datetime


@dataclass(frozen=True)
class ActivityLogEntry:
    """Audit log entry."""

    id: str
    household_id: str
    actor_id: Optional[str]
    entity_id: str
    entity_type: str
    activity_type: ActivityType
    details: dict[str, Any]
    created_at: datetime


@dataclass(frozen=True)
class ActivityLogPage:
    """One page of activity log entries, newest first."""

    logs: tuple[ActivityLogEntry, ...]
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass(frozen=True)
class UserBalance:
    """Derived per-member balance (paid minus unsettled owed)."""

    user_id: str
    name: str
    email: str
    total_paid: Decimal
    total_owed: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class SettleUpSuggestion:
    """Suggested transfer from a debtor to a creditor."""

    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    amount: Decimal


@dataclass(frozen=True)
class RotationResult:
    """Outcome of completing a recurring chore.

    ``before`` is the chore as it was when completed, ``after`` the state to
    persist. ``rotated`` is False when the household had no members and the
    chore was left completed instead of starting a new cycle.
    """

    before: Chore
    after: Chore
    rotated: bool
    previous_assignee_id: Optional[str]
    next_assignee_id: Optional[str]


@dataclass(frozen=True)
class CalendarEvent:
    """All-day calendar entry for a chore due date or an expense date."""

    id: str
    title: str
    start: date
    end: date
    all_day: bool
    type: str
    color: str
    extended_props: dict[str, Any] = field(default_factory=dict)
