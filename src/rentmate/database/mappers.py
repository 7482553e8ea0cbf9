"""Mapper functions to convert SQLAlchemy models into domain entities.

SQLite hands timestamps back without timezone information even for
``DateTime(timezone=True)`` columns, so every timestamp is normalized to UTC
here before it reaches the domain layer.
"""

from datetime import datetime, UTC
from typing import Optional

from rentmate.domain import entities as domain
from rentmate.database.models import (
    ActivityLog as ORMActivityLog,
    Chore as ORMChore,
    Expense as ORMExpense,
    ExpenseShare as ORMExpenseShare,
    Household as ORMHousehold,
    Invitation as ORMInvitation,
    User as ORMUser,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps read back from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        email=orm_user.email,
        name=orm_user.name,
        role=domain.UserRole(orm_user.role),
        household_id=orm_user.household_id,
        created_at=as_utc(orm_user.created_at),
    )


def household_to_domain(orm_household: ORMHousehold, include_members: bool = True) -> domain.Household:
    """Convert SQLAlchemy Household model to domain Household entity."""
    members: tuple[domain.User, ...] = ()
    if include_members:
        members = tuple(user_to_domain(member) for member in orm_household.members)
    return domain.Household(
        id=orm_household.id,
        name=orm_household.name,
        created_at=as_utc(orm_household.created_at),
        members=members,
    )


def chore_to_domain(orm_chore: ORMChore) -> domain.Chore:
    """Convert SQLAlchemy Chore model to domain Chore entity."""
    return domain.Chore(
        id=orm_chore.id,
        household_id=orm_chore.household_id,
        description=orm_chore.description,
        notes=orm_chore.notes,
        is_complete=orm_chore.is_complete,
        due_date=orm_chore.due_date,
        recurrence=domain.Recurrence(orm_chore.recurrence),
        assigned_to_id=orm_chore.assigned_to_id,
        completed_by_id=orm_chore.completed_by_id,
        completed_at=as_utc(orm_chore.completed_at),
        created_at=as_utc(orm_chore.created_at),
    )


def expense_share_to_domain(orm_share: ORMExpenseShare) -> domain.ExpenseShare:
    """Convert SQLAlchemy ExpenseShare model to domain ExpenseShare entity."""
    return domain.ExpenseShare(
        id=orm_share.id,
        expense_id=orm_share.expense_id,
        owed_by_id=orm_share.owed_by_id,
        amount_owed=orm_share.amount_owed,
        is_settled=orm_share.is_settled,
        settled_at=as_utc(orm_share.settled_at),
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model (with shares) to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        household_id=orm_expense.household_id,
        description=orm_expense.description,
        amount=orm_expense.amount,
        date=orm_expense.date,
        paid_by_id=orm_expense.paid_by_id,
        created_at=as_utc(orm_expense.created_at),
        shares=tuple(expense_share_to_domain(share) for share in orm_expense.shares),
    )


def invitation_to_domain(orm_invitation: ORMInvitation) -> domain.Invitation:
    """Convert SQLAlchemy Invitation model to domain Invitation entity."""
    return domain.Invitation(
        id=orm_invitation.id,
        household_id=orm_invitation.household_id,
        invited_by_id=orm_invitation.invited_by_id,
        token=orm_invitation.token,
        email=orm_invitation.email,
        short_code=orm_invitation.short_code,
        status=domain.InvitationStatus(orm_invitation.status),
        expires_at=as_utc(orm_invitation.expires_at),
        accepted_at=as_utc(orm_invitation.accepted_at),
        accepted_by_user_id=orm_invitation.accepted_by_user_id,
        created_at=as_utc(orm_invitation.created_at),
    )


def activity_log_to_domain(orm_log: ORMActivityLog) -> domain.ActivityLogEntry:
    """Convert SQLAlchemy ActivityLog model to domain ActivityLogEntry."""
    return domain.ActivityLogEntry(
        id=orm_log.id,
        household_id=orm_log.household_id,
        actor_id=orm_log.actor_id,
        entity_id=orm_log.entity_id,
        entity_type=orm_log.entity_type,
        activity_type=domain.ActivityType(orm_log.activity_type),
        details=dict(orm_log.details or {}),
        created_at=as_utc(orm_log.created_at),
    )
