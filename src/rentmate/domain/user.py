"""User domain service."""

from typing import Optional

from rentmate.database.base import Database
from rentmate.domain.access import require_member
from rentmate.domain.entities import User
from rentmate.domain.errors import ConflictError, ValidationError


class UserService:
    """Service for managing users."""

    def __init__(self, db: Database):
        self.db = db

    def create_user(self, email: str, name: Optional[str] = None) -> str:
        """Create a new user.

        Args:
            email: Email address (stored lower-cased, must be unique)
            name: Optional display name

        Returns:
            User ID

        Raises:
            ValidationError: If the email is empty or malformed
            ConflictError: If a user with this email already exists
        """
        email = email.strip().lower()
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address '{email}'")
        if self.db.get_user_by_email(email) is not None:
            raise ConflictError(f"User with email '{email}' already exists")

        name = name.strip() if name else None
        return self.db.create_user(email=email, name=name or None)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.get_user_by_email(email)

    def list_users(self) -> list[User]:
        return self.db.list_users()

    def list_household_members(self, household_id: str, acting_user_id: str) -> list[User]:
        """List the members of a household the acting user belongs to."""
        household = require_member(self.db, household_id, acting_user_id)
        return list(household.members)
