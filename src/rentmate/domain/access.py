"""Lookup helpers shared by the domain services.

Each helper loads an entity or raises the matching domain error, so services
can validate everything up front before they mutate anything.
"""

from rentmate.database.base import Database
from rentmate.domain import errors
from rentmate.domain.entities import Household, User
from rentmate.domain.errors import AuthorizationError, NotFoundError, ValidationError


def require_user(db: Database, user_id: str) -> User:
    user = db.get_user(user_id)
    if user is None:
        raise NotFoundError(errors.user_not_found(user_id))
    return user


def require_household(db: Database, household_id: str) -> Household:
    household = db.get_household(household_id)
    if household is None:
        raise NotFoundError(errors.household_not_found(household_id))
    return household


def require_member(db: Database, household_id: str, user_id: str) -> Household:
    """Load a household and check that the user belongs to it.

    Raises:
        NotFoundError: If the household does not exist
        AuthorizationError: If the user is not a member
    """
    household = require_household(db, household_id)
    if not household.has_member(user_id):
        raise AuthorizationError(errors.not_household_member(user_id, household_id))
    return household


def require_own_household(db: Database, user_id: str) -> Household:
    """Load the household the user belongs to.

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If the user is not in a household
    """
    user = require_user(db, user_id)
    if user.household_id is None:
        raise ValidationError(errors.no_household(user_id))
    return require_household(db, user.household_id)
