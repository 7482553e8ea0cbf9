"""Chore rotation engine.

Pure functions that decide what happens when a recurring chore is completed:
the next assignee (round-robin over members sorted by id) and the next due
date. Nothing here touches the database; ``ChoreService`` persists the result.
"""

import dataclasses
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from rentmate.domain.entities import Chore, Recurrence, RotationResult, User


def sort_members(members: Iterable[User]) -> list[User]:
    """Return members in rotation order (string order of their ids)."""
    return sorted(members, key=lambda member: member.id)


def next_assignee(members: Sequence[User], current_assignee_id: Optional[str]) -> Optional[User]:
    """Pick the member after the current assignee in rotation order.

    An unassigned chore, or one whose assignee has left the household, starts
    again at the first member.

    Args:
        members: Household members in any order
        current_assignee_id: Current assignee ID or None

    Returns:
        Next assignee, or None if there are no members
    """
    ordered = sort_members(members)
    if not ordered:
        return None

    current_index = -1
    if current_assignee_id is not None:
        for index, member in enumerate(ordered):
            if member.id == current_assignee_id:
                current_index = index
                break

    return ordered[(current_index + 1) % len(ordered)]


def last_effective_date(chore: Chore, now: datetime) -> date:
    """Return the date the next cycle is counted from."""
    if chore.due_date is not None:
        return chore.due_date
    if chore.completed_at is not None:
        return chore.completed_at.date()
    return now.date()


def next_due_date(
    recurrence: Recurrence, last_effective: date, fallback: Optional[date] = None
) -> Optional[date]:
    """Compute the next due date for a recurrence.

    Monthly recurrence adds one calendar month, clamping to the end of shorter
    months (2024-01-31 becomes 2024-02-29).

    Args:
        recurrence: Chore recurrence
        last_effective: Date the previous cycle was due or completed
        fallback: Value returned for a recurrence without a cadence

    Returns:
        Next due date
    """
    if recurrence == Recurrence.DAILY:
        return last_effective + timedelta(days=1)
    if recurrence == Recurrence.WEEKLY:
        return last_effective + timedelta(weeks=1)
    if recurrence == Recurrence.BI_WEEKLY:
        return last_effective + timedelta(weeks=2)
    if recurrence == Recurrence.MONTHLY:
        return last_effective + relativedelta(months=1)
    return fallback


def rotate_chore(
    chore: Chore, members: Sequence[User], completing_user_id: str, now: datetime
) -> RotationResult:
    """Complete the current cycle of a recurring chore and start the next one.

    With no members the chore cannot rotate, so it is left completed by
    ``completing_user_id``.

    Args:
        chore: Chore being completed
        members: Members of the chore's household, any order
        completing_user_id: User completing the chore
        now: Current time

    Returns:
        RotationResult with the state to persist
    """
    if not members:
        completed = dataclasses.replace(
            chore,
            is_complete=True,
            completed_by_id=completing_user_id,
            completed_at=now,
        )
        return RotationResult(
            before=chore,
            after=completed,
            rotated=False,
            previous_assignee_id=chore.assigned_to_id,
            next_assignee_id=chore.assigned_to_id,
        )

    assignee = next_assignee(members, chore.assigned_to_id)
    due = next_due_date(
        chore.recurrence, last_effective_date(chore, now), fallback=chore.due_date
    )

    rotated = dataclasses.replace(
        chore,
        is_complete=False,
        completed_by_id=None,
        completed_at=None,
        assigned_to_id=assignee.id,
        due_date=due,
    )
    return RotationResult(
        before=chore,
        after=rotated,
        rotated=True,
        previous_assignee_id=chore.assigned_to_id,
        next_assignee_id=assignee.id,
    )
