"""Utility for resolving user emails to IDs."""

from rentmate.domain.user import UserService


def resolve_user(user_service: UserService, user: str) -> str:
    """Resolve a user email or ID to a user ID.

    Args:
        user_service: UserService instance
        user: Email address or user ID

    Returns:
        User ID

    Raises:
        ValueError: If no user matches
    """
    user = user.strip()
    if "@" in user:
        found = user_service.get_user_by_email(user)
    else:
        found = user_service.get_user(user)
    if found is None:
        raise ValueError(f"User '{user}' not found")
    return found.id
