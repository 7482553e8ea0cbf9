"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthorizationError(DomainError):
    """Acting user lacks the rights for the requested operation."""


class DataIntegrityError(DomainError):
    """An entity is missing a relation it must always have."""


class TransactionFailure(DomainError):
    """A unit of work failed to commit and was rolled back."""


class InvitationExpiredError(ValidationError):
    """Invitation is past its expiry time."""


def user_not_found(user_id: str) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def household_not_found(household_id: str) -> str:
    """Return message for missing household."""
    return f"Household {household_id} not found"


def chore_not_found(chore_id: str) -> str:
    """Return message for missing chore."""
    return f"Chore {chore_id} not found"


def expense_not_found(expense_id: str) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def expense_share_not_found(share_id: str) -> str:
    """Return message for missing expense share."""
    return f"Expense share {share_id} not found"


def invitation_not_found() -> str:
    """Return message for missing or already used invitation."""
    return "Invitation not found, invalid, or already used"


def not_household_member(user_id: str, household_id: str) -> str:
    """Return message when a user is not a member of a household."""
    return f"User {user_id} is not a member of household {household_id}"


def no_household(user_id: str) -> str:
    """Return message when a user does not belong to any household."""
    return f"User {user_id} does not belong to a household"


def share_total_mismatch(total: Decimal, amount: Decimal) -> str:
    """Return message when share amounts do not add up to the expense amount."""
    return (
        f"Sum of share amounts ({total}) does not match "
        f"total expense amount ({amount})"
    )
