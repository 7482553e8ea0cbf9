"""Activity log domain service."""

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from rentmate.database.base import Database
from rentmate.domain.access import require_member
from rentmate.domain.entities import ActivityLogPage, ActivityType
from rentmate.domain.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _to_json(value: Any) -> Any:
    """Convert detail values into JSON-compatible types."""
    if isinstance(value, dict):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


class ActivityLogService:
    """Service for the household activity (audit) log."""

    def __init__(self, db: Database):
        """Initialize activity log service.

        Args:
            db: Database instance
        """
        self.db = db

    def record_activity(
        self,
        household_id: str,
        actor_id: Optional[str],
        entity_id: str,
        entity_type: str,
        activity_type: ActivityType,
        details: Optional[dict[str, Any]] = None,
    ) -> Optional[str]:
        """Record an activity entry.

        Recording is best-effort: a failure is logged and never propagates to
        the operation that triggered it.

        Args:
            household_id: Household the activity belongs to
            actor_id: User who performed it, or None for system activity
            entity_id: ID of the affected entity
            entity_type: Kind of the affected entity ("chore", "expense", ...)
            activity_type: Activity classification
            details: Extra JSON-serializable context

        Returns:
            Entry ID, or None if the entry could not be written
        """
        try:
            return self.db.create_activity_log(
                household_id=household_id,
                actor_id=actor_id,
                entity_id=entity_id,
                entity_type=entity_type,
                activity_type=ActivityType(activity_type).value,
                details=_to_json(details) if details is not None else None,
            )
        except Exception:
            logger.exception(
                "Failed to record %s activity for %s %s in household %s",
                activity_type,
                entity_type,
                entity_id,
                household_id,
            )
            return None

    def list_for_household(
        self, household_id: str, acting_user_id: str, page: int = 1, limit: int = 20
    ) -> ActivityLogPage:
        """List a household's activity, newest first.

        Args:
            household_id: Household ID
            acting_user_id: User requesting the log (must be a member)
            page: 1-based page number
            limit: Entries per page

        Returns:
            One page of entries with pagination totals

        Raises:
            NotFoundError: If the household does not exist
            AuthorizationError: If the user is not a member
            ValidationError: If page or limit is out of range
        """
        if page < 1:
            raise ValidationError(f"Page must be at least 1, got {page}")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")

        require_member(self.db, household_id, acting_user_id)

        total = self.db.count_activity_logs(household_id)
        logs = self.db.list_activity_logs(
            household_id, offset=(page - 1) * limit, limit=limit
        )
        return ActivityLogPage(
            logs=tuple(logs),
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
