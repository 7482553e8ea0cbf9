"""Chore domain service."""

import dataclasses
import logging
from datetime import date, datetime, UTC
from typing import Any, Callable, Optional

from rentmate.database.base import Database
from rentmate.domain import errors
from rentmate.domain.access import require_member, require_own_household, require_user
from rentmate.domain.activity_log import ActivityLogService
from rentmate.domain.entities import (
    UNSET,
    ActivityType,
    Chore,
    ChorePatch,
    Household,
    Recurrence,
    UserRole,
)
from rentmate.domain.errors import (
    AuthorizationError,
    DataIntegrityError,
    NotFoundError,
    ValidationError,
)
from rentmate.domain.rotation import rotate_chore

logger = logging.getLogger(__name__)

# (activity type, actor id, details) waiting to be written after the chore is saved
_Entry = tuple[ActivityType, Optional[str], dict[str, Any]]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _parse_recurrence(value: Any) -> Recurrence:
    try:
        return Recurrence(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Recurrence)
        raise ValidationError(f"Invalid recurrence '{value}'. Expected one of: {allowed}")


class ChoreService:
    """Service for chores and their rotation."""

    def __init__(
        self,
        db: Database,
        activity_log: Optional[ActivityLogService] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize chore service.

        Args:
            db: Database instance
            activity_log: Activity log service (one is created if omitted)
            clock: Returns the current UTC time
        """
        self.db = db
        self.activity_log = activity_log or ActivityLogService(db)
        self.clock = clock

    def _load(self, chore_id: str, acting_user_id: str) -> tuple[Chore, Household]:
        """Load a chore and its household, checking the actor is a member."""
        chore = self.db.get_chore(chore_id)
        if chore is None:
            raise NotFoundError(errors.chore_not_found(chore_id))
        if chore.household_id is None:
            raise DataIntegrityError(f"Chore {chore_id} is not linked to a household")

        household = self.db.get_household(chore.household_id)
        if household is None:
            raise DataIntegrityError(
                f"Chore {chore_id} references missing household {chore.household_id}"
            )
        if not household.has_member(acting_user_id):
            raise AuthorizationError(errors.not_household_member(acting_user_id, household.id))
        return chore, household

    def _check_assignee(self, household: Household, assignee_id: str) -> None:
        if not household.has_member(assignee_id):
            raise ValidationError(
                f"Assigned user {assignee_id} not found or does not belong to the same household"
            )

    def _check_can_uncomplete(self, chore: Chore, household: Household, acting_user_id: str) -> None:
        actor = household.get_member(acting_user_id)
        if actor.role == UserRole.OWNER:
            return
        if chore.completed_by_id is None or chore.completed_by_id == acting_user_id:
            return
        logger.warning(
            "User %s may not mark chore %s incomplete (completed by %s)",
            acting_user_id,
            chore.id,
            chore.completed_by_id,
        )
        raise AuthorizationError(
            "Only the household owner or the user who completed the chore "
            "can mark it as incomplete"
        )

    def _complete(
        self, chore: Chore, household: Household, acting_user_id: str, via: str
    ) -> tuple[Chore, list[_Entry]]:
        """Complete a chore, rotating it when it recurs."""
        now = self.clock()

        if not chore.is_recurring:
            completed = dataclasses.replace(
                chore, is_complete=True, completed_by_id=acting_user_id, completed_at=now
            )
            details = {"via": via, "completed_by": acting_user_id}
            return completed, [(ActivityType.CHORE_COMPLETED, acting_user_id, details)]

        result = rotate_chore(chore, household.members, acting_user_id, now)
        completed_details = {
            "via": via,
            "completed_by": acting_user_id,
            "recurrence": chore.recurrence,
            "completed_at": now,
        }
        if not result.rotated:
            completed_details["note"] = "Household has no members; chore was not rotated"
            return result.after, [(ActivityType.CHORE_COMPLETED, acting_user_id, completed_details)]

        logger.info(
            "Rotated chore %s from %s to %s, next due %s",
            chore.id,
            result.previous_assignee_id,
            result.next_assignee_id,
            result.after.due_date,
        )
        rotated_details = {
            "previous_assignee_id": result.previous_assignee_id,
            "new_assignee_id": result.next_assignee_id,
            "next_due_date": result.after.due_date,
            "recurrence": chore.recurrence,
        }
        return result.after, [
            (ActivityType.CHORE_COMPLETED, acting_user_id, completed_details),
            (ActivityType.CHORE_ROTATED, None, rotated_details),
        ]

    def _record(self, chore: Chore, entries: list[_Entry]) -> None:
        for activity_type, actor_id, details in entries:
            self.activity_log.record_activity(
                household_id=chore.household_id,
                actor_id=actor_id,
                entity_id=chore.id,
                entity_type="chore",
                activity_type=activity_type,
                details={**details, "description": chore.description},
            )

    def _reload(self, chore_id: str) -> Chore:
        chore = self.db.get_chore(chore_id)
        if chore is None:
            raise NotFoundError(errors.chore_not_found(chore_id))
        return chore

    def create_chore(
        self,
        acting_user_id: str,
        description: str,
        notes: Optional[str] = None,
        due_date: Optional[date] = None,
        assigned_to_id: Optional[str] = None,
        recurrence: Recurrence | str = Recurrence.NONE,
    ) -> Chore:
        """Create a chore in the acting user's household.

        Args:
            acting_user_id: Creating user (must belong to a household)
            description: What needs doing
            notes: Optional notes
            due_date: Optional due date
            assigned_to_id: Optional assignee (must be a household member)
            recurrence: Repeat cadence

        Returns:
            Created chore

        Raises:
            ValidationError: If the description is empty, the recurrence is
                unknown, the user has no household or the assignee is not a member
        """
        household = require_own_household(self.db, acting_user_id)

        description = (description or "").strip()
        if not description:
            raise ValidationError("Chore description cannot be empty")
        recurrence = _parse_recurrence(recurrence)
        if assigned_to_id is not None:
            self._check_assignee(household, assigned_to_id)

        chore_id = self.db.create_chore(
            household_id=household.id,
            description=description,
            notes=notes,
            due_date=due_date,
            recurrence=recurrence,
            assigned_to_id=assigned_to_id,
        )
        chore = self._reload(chore_id)
        self._record(
            chore,
            [
                (
                    ActivityType.CHORE_CREATED,
                    acting_user_id,
                    {
                        "assigned_to": assigned_to_id,
                        "due_date": due_date,
                        "recurrence": recurrence,
                    },
                )
            ],
        )
        return chore

    def get_chore(self, chore_id: str, acting_user_id: str) -> Chore:
        """Get a chore the acting user can see."""
        chore, _ = self._load(chore_id, acting_user_id)
        return chore

    def list_chores(
        self,
        household_id: str,
        acting_user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Chore]:
        """List a household's chores, newest first, optionally by due date range."""
        require_member(self.db, household_id, acting_user_id)
        return self.db.list_chores(household_id, start_date=start_date, end_date=end_date)

    def get_chore_counts(self, household_id: str, acting_user_id: str) -> dict[str, int]:
        """Count a household's chores.

        Returns:
            Dictionary with ``total``, ``completed`` and ``pending`` counts
        """
        require_member(self.db, household_id, acting_user_id)
        total = self.db.count_chores(household_id)
        completed = self.db.count_chores(household_id, is_complete=True)
        return {"total": total, "completed": completed, "pending": total - completed}

    def get_assigned_chores(self, user_id: str, acting_user_id: str) -> list[Chore]:
        """List chores assigned to a user.

        Members may list their own chores; the owner may list anyone's in
        the household.
        """
        household = require_own_household(self.db, acting_user_id)
        actor = household.get_member(acting_user_id)
        if user_id != acting_user_id and actor.role != UserRole.OWNER:
            raise AuthorizationError("Only the household owner can view other members' chores")

        require_user(self.db, user_id)
        if not household.has_member(user_id):
            raise AuthorizationError(errors.not_household_member(user_id, household.id))
        return self.db.list_chores(household.id, assigned_to_id=user_id)

    def get_unassigned_chores(self, acting_user_id: str) -> list[Chore]:
        """List chores without an assignee in the acting user's household."""
        household = require_own_household(self.db, acting_user_id)
        return self.db.list_chores(household.id, unassigned=True)

    def toggle_chore_completion(self, chore_id: str, acting_user_id: str) -> Chore:
        """Flip a chore between complete and incomplete.

        Completing a recurring chore rotates it to the next member and due
        date instead of leaving it complete. Marking a chore incomplete is
        limited to the household owner and the user who completed it.

        Returns:
            Chore as persisted after the toggle

        Raises:
            NotFoundError: If the chore does not exist
            AuthorizationError: If the actor is not a member, or may not
                revert the completion
            DataIntegrityError: If the chore has no household
        """
        chore, household = self._load(chore_id, acting_user_id)

        if not chore.is_complete:
            updated, entries = self._complete(chore, household, acting_user_id, via="toggle")
        else:
            self._check_can_uncomplete(chore, household, acting_user_id)
            updated = dataclasses.replace(
                chore, is_complete=False, completed_by_id=None, completed_at=None
            )
            entries = [
                (
                    ActivityType.CHORE_UPDATED,
                    acting_user_id,
                    {"uncompleted_by": acting_user_id, "was_completed_at": chore.completed_at},
                )
            ]

        self.db.save_chore(updated)
        saved = self._reload(chore_id)
        self._record(saved, entries)
        return saved

    def update_chore(self, chore_id: str, patch: ChorePatch, acting_user_id: str) -> Chore:
        """Apply a partial update to a chore.

        Field changes are applied first; a completion in the same patch then
        runs on the patched chore, so a recurring chore rotates exactly as it
        would through ``toggle_chore_completion``. Every changed field logs its
        own activity entry.

        Raises:
            NotFoundError: If the chore does not exist
            ValidationError: If the assignee is not a member, or a field is invalid
            AuthorizationError: If the actor is not a member, or may not
                revert the completion
        """
        chore, household = self._load(chore_id, acting_user_id)

        # Validate everything before touching the chore
        if patch.assigned_to_id is not UNSET and patch.assigned_to_id is not None:
            self._check_assignee(household, patch.assigned_to_id)
        if patch.description is not UNSET:
            if not patch.description or not str(patch.description).strip():
                raise ValidationError("Chore description cannot be empty")
        recurrence = UNSET
        if patch.recurrence is not UNSET:
            recurrence = _parse_recurrence(patch.recurrence)
        if patch.is_complete is False and chore.is_complete:
            self._check_can_uncomplete(chore, household, acting_user_id)

        updated = chore
        entries: list[_Entry] = []

        if patch.assigned_to_id is not UNSET and patch.assigned_to_id != chore.assigned_to_id:
            updated = dataclasses.replace(updated, assigned_to_id=patch.assigned_to_id)
            if patch.assigned_to_id is None:
                entries.append(
                    (
                        ActivityType.CHORE_UNASSIGNED,
                        acting_user_id,
                        {"unassigned_from": chore.assigned_to_id},
                    )
                )
            else:
                entries.append(
                    (
                        ActivityType.CHORE_ASSIGNED,
                        acting_user_id,
                        {
                            "assigned_to": patch.assigned_to_id,
                            "previously_assigned_to": chore.assigned_to_id,
                        },
                    )
                )

        plain_fields = {
            "due_date": patch.due_date,
            "description": (
                patch.description.strip() if patch.description is not UNSET else UNSET
            ),
            "notes": patch.notes,
            "recurrence": recurrence,
        }
        for field_name, new_value in plain_fields.items():
            old_value = getattr(chore, field_name)
            if new_value is UNSET or new_value == old_value:
                continue
            updated = dataclasses.replace(updated, **{field_name: new_value})
            entries.append(
                (
                    ActivityType.CHORE_UPDATED,
                    acting_user_id,
                    {"field": field_name, "old": old_value, "new": new_value},
                )
            )

        if patch.is_complete is not UNSET and bool(patch.is_complete) != chore.is_complete:
            if patch.is_complete:
                updated, completion_entries = self._complete(
                    updated, household, acting_user_id, via="update"
                )
                entries.extend(completion_entries)
            else:
                updated = dataclasses.replace(
                    updated, is_complete=False, completed_by_id=None, completed_at=None
                )
                entries.append(
                    (
                        ActivityType.CHORE_UPDATED,
                        acting_user_id,
                        {
                            "field": "is_complete",
                            "uncompleted_by": acting_user_id,
                            "was_completed_at": chore.completed_at,
                        },
                    )
                )

        if updated == chore:
            return chore

        self.db.save_chore(updated)
        saved = self._reload(chore_id)
        self._record(saved, entries)
        return saved

    def delete_chore(self, chore_id: str, acting_user_id: str) -> None:
        """Delete a chore."""
        chore, _ = self._load(chore_id, acting_user_id)
        self.db.delete_chore(chore_id)
        self._record(chore, [(ActivityType.CHORE_DELETED, acting_user_id, {})])
