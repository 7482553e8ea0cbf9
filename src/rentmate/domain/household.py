"""Household domain service."""

import logging
from typing import Optional

from rentmate.database.base import Database
from rentmate.domain import errors
from rentmate.domain.access import require_household, require_member, require_user
from rentmate.domain.activity_log import ActivityLogService
from rentmate.domain.entities import ActivityType, Household, UserRole
from rentmate.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class HouseholdService:
    """Service for managing households and their membership."""

    def __init__(self, db: Database, activity_log: Optional[ActivityLogService] = None):
        """Initialize household service.

        Args:
            db: Database instance
            activity_log: Activity log service (one is created if omitted)
        """
        self.db = db
        self.activity_log = activity_log or ActivityLogService(db)

    def _require_owner(self, household_id: str, acting_user_id: str) -> Household:
        household = require_member(self.db, household_id, acting_user_id)
        actor = household.get_member(acting_user_id)
        if actor.role != UserRole.OWNER:
            logger.warning(
                "User %s attempted an owner-only action on household %s",
                acting_user_id,
                household_id,
            )
            raise AuthorizationError("Only the household owner can perform this action")
        return household

    def create_household(self, name: str, acting_user_id: str) -> str:
        """Create a household with the acting user as its owner.

        Args:
            name: Household name
            acting_user_id: Creating user

        Returns:
            Household ID

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the user does not exist
            ConflictError: If the user already belongs to a household
        """
        name = name.strip()
        if not name:
            raise ValidationError("Household name cannot be empty")

        user = require_user(self.db, acting_user_id)
        if user.household_id is not None:
            current = self.db.get_household(user.household_id)
            current_name = current.name if current is not None else user.household_id
            raise ConflictError(f"User is already in household: {current_name}")

        with self.db.unit_of_work():
            household_id = self.db.create_household(name=name)
            self.db.set_user_household(acting_user_id, household_id, UserRole.OWNER)

        self.activity_log.record_activity(
            household_id=household_id,
            actor_id=acting_user_id,
            entity_id=household_id,
            entity_type="household",
            activity_type=ActivityType.HOUSEHOLD_CREATED,
            details={"household_name": name, "owner_user_id": acting_user_id},
        )
        return household_id

    def get_household(self, household_id: str, acting_user_id: str) -> Household:
        """Get a household with its members (members only)."""
        return require_member(self.db, household_id, acting_user_id)

    def rename_household(self, household_id: str, name: str, acting_user_id: str) -> None:
        """Rename a household (owner only)."""
        name = name.strip()
        if not name:
            raise ValidationError("Household name cannot be empty")

        household = self._require_owner(household_id, acting_user_id)
        self.db.update_household_name(household_id, name)

        self.activity_log.record_activity(
            household_id=household_id,
            actor_id=acting_user_id,
            entity_id=household_id,
            entity_type="household",
            activity_type=ActivityType.HOUSEHOLD_UPDATED,
            details={"old_name": household.name, "new_name": name},
        )

    def remove_member(self, household_id: str, member_id: str, acting_user_id: str) -> None:
        """Remove a member from a household (owner only).

        Chores assigned to the removed member in this household become
        unassigned.

        Raises:
            AuthorizationError: If the acting user is not the owner
            ConflictError: If the owner tries to remove themselves, or the
                target is not in this household
            NotFoundError: If the target user does not exist
        """
        household = self._require_owner(household_id, acting_user_id)
        if member_id == acting_user_id:
            raise ConflictError(
                "Household owner cannot remove themselves; delete the household instead"
            )

        member = self.db.get_user(member_id)
        if member is None:
            raise NotFoundError(errors.user_not_found(member_id))
        if member.household_id != household_id:
            raise ConflictError(errors.not_household_member(member_id, household_id))

        with self.db.unit_of_work():
            self.db.set_user_household(member_id, None, UserRole.MEMBER)
            unassigned = self.db.unassign_chores(household_id, member_id)

        logger.info(
            "Removed user %s from household %s (%d chores unassigned)",
            member_id,
            household_id,
            unassigned,
        )
        self.activity_log.record_activity(
            household_id=household_id,
            actor_id=acting_user_id,
            entity_id=member_id,
            entity_type="user",
            activity_type=ActivityType.HOUSEHOLD_MEMBER_REMOVED,
            details={
                "removed_user_id": member_id,
                "removed_user_name": member.display_name,
                "household_name": household.name,
                "unassigned_chores": unassigned,
            },
        )

    def leave_household(self, acting_user_id: str) -> None:
        """Leave the acting user's household.

        Owners cannot leave; they delete the household instead.
        """
        user = require_user(self.db, acting_user_id)
        if user.household_id is None:
            raise ValidationError(errors.no_household(acting_user_id))
        if user.role == UserRole.OWNER:
            raise ConflictError("Household owner cannot leave; delete the household instead")

        household_id = user.household_id
        household = require_household(self.db, household_id)
        with self.db.unit_of_work():
            self.db.set_user_household(acting_user_id, None, UserRole.MEMBER)
            self.db.unassign_chores(household_id, acting_user_id)

        self.activity_log.record_activity(
            household_id=household_id,
            actor_id=acting_user_id,
            entity_id=acting_user_id,
            entity_type="user",
            activity_type=ActivityType.HOUSEHOLD_MEMBER_REMOVED,
            details={
                "removed_user_id": acting_user_id,
                "removed_user_name": user.display_name,
                "household_name": household.name,
                "left_voluntarily": True,
            },
        )

    def delete_household(self, household_id: str, acting_user_id: str) -> None:
        """Delete a household with all its chores, expenses and history (owner only)."""
        self._require_owner(household_id, acting_user_id)
        with self.db.unit_of_work():
            self.db.delete_household(household_id)
        logger.info("Deleted household %s", household_id)
