"""Household invitation domain service."""

import logging
import secrets
from datetime import datetime, timedelta, UTC
from typing import Callable, Optional

from rentmate.database.base import Database
from rentmate.domain import errors
from rentmate.domain.access import require_household, require_member, require_user
from rentmate.domain.activity_log import ActivityLogService
from rentmate.domain.entities import (
    ActivityType,
    Household,
    Invitation,
    InvitationDetails,
    InvitationStatus,
    User,
    UserRole,
)
from rentmate.domain.errors import (
    AuthorizationError,
    ConflictError,
    InvitationExpiredError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# O and 0 are left out so codes can be read aloud without confusion
SHORT_CODE_CHARSET = "ABCDEFGHIJKLMNPQRSTUVWXYZ123456789"
SHORT_CODE_LENGTH = 6
SHORT_CODE_ATTEMPTS = 10
EMAIL_INVITATION_TTL = timedelta(days=7)
SHORT_CODE_TTL = timedelta(hours=24)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def generate_token() -> str:
    """Return a random 32-byte hex invitation token."""
    return secrets.token_hex(32)


def generate_short_code() -> str:
    """Return a random short join code."""
    return "".join(secrets.choice(SHORT_CODE_CHARSET) for _ in range(SHORT_CODE_LENGTH))


class InvitationService:
    """Service for inviting users into households."""

    def __init__(
        self,
        db: Database,
        activity_log: Optional[ActivityLogService] = None,
        clock: Callable[[], datetime] = _utc_now,
        code_generator: Callable[[], str] = generate_short_code,
    ):
        """Initialize invitation service.

        Args:
            db: Database instance
            activity_log: Activity log service (one is created if omitted)
            clock: Returns the current UTC time
            code_generator: Produces candidate short codes
        """
        self.db = db
        self.activity_log = activity_log or ActivityLogService(db)
        self.clock = clock
        self.code_generator = code_generator

    def _unique_short_code(self) -> str:
        for _ in range(SHORT_CODE_ATTEMPTS):
            code = self.code_generator().upper()
            if self.db.get_invitation_by_short_code(code) is None:
                return code
        raise ConflictError("Could not generate a unique invitation code. Please try again.")

    def _expire_if_needed(self, invitation: Invitation) -> None:
        """Mark a lapsed invitation as expired and reject it."""
        if self.clock() > invitation.expires_at:
            self.db.update_invitation_status(invitation.id, InvitationStatus.EXPIRED.value)
            logger.info("Invitation %s has expired", invitation.id)
            raise InvitationExpiredError("Invitation has expired")

    def create_email_invitation(
        self, household_id: str, email: str, acting_user_id: str
    ) -> Invitation:
        """Invite an email address to a household.

        Delivering the invitation is left to the caller; the returned
        invitation carries the token to send.

        Raises:
            NotFoundError: If the household does not exist
            AuthorizationError: If the inviter is not a member
            ValidationError: If the email is malformed
            ConflictError: If the invitee is already a member, or already has
                a pending invitation to this household
        """
        require_member(self.db, household_id, acting_user_id)

        email = email.strip().lower()
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address '{email}'")

        invitee = self.db.get_user_by_email(email)
        if invitee is not None and invitee.household_id == household_id:
            raise ConflictError("This user is already a member of this household")
        if self.db.find_pending_invitation(household_id, email) is not None:
            raise ConflictError(
                "An email invitation for this user to this household is already pending"
            )

        invitation_id = self.db.create_invitation(
            household_id=household_id,
            invited_by_id=acting_user_id,
            token=generate_token(),
            expires_at=self.clock() + EMAIL_INVITATION_TTL,
            email=email,
        )
        logger.info("Created email invitation %s for %s to household %s", invitation_id, email, household_id)
        return self.db.get_invitation(invitation_id)

    def create_short_code_invitation(self, household_id: str, acting_user_id: str) -> Invitation:
        """Create a short join code for a household, valid for 24 hours.

        Raises:
            NotFoundError: If the household does not exist
            AuthorizationError: If the user is not a member
            ConflictError: If no unique code could be generated
        """
        require_member(self.db, household_id, acting_user_id)

        invitation_id = self.db.create_invitation(
            household_id=household_id,
            invited_by_id=acting_user_id,
            token=generate_token(),
            expires_at=self.clock() + SHORT_CODE_TTL,
            short_code=self._unique_short_code(),
        )
        invitation = self.db.get_invitation(invitation_id)
        logger.info(
            "Created short code invitation %s (%s) to household %s",
            invitation_id,
            invitation.short_code,
            household_id,
        )
        return invitation

    def _pending_by_token(self, token: str) -> Invitation:
        invitation = self.db.get_invitation_by_token(token)
        if invitation is None or invitation.status != InvitationStatus.PENDING:
            raise NotFoundError(errors.invitation_not_found())
        return invitation

    def _pending_by_short_code(self, short_code: str) -> Invitation:
        invitation = self.db.get_invitation_by_short_code(short_code.strip().upper())
        if invitation is None or invitation.status != InvitationStatus.PENDING:
            raise NotFoundError(errors.invitation_not_found())
        return invitation

    def _accept(self, invitation: Invitation, user: User) -> Household:
        if invitation.email is not None and invitation.email != user.email.lower():
            raise AuthorizationError("This invitation is for a different email address")
        self._expire_if_needed(invitation)

        household = require_household(self.db, invitation.household_id)
        if user.household_id == invitation.household_id:
            logger.warning("User %s is already a member of household %s", user.id, household.id)
            self.db.update_invitation_status(
                invitation.id,
                InvitationStatus.ACCEPTED.value,
                accepted_at=self.clock(),
                accepted_by_user_id=user.id,
            )
            return household
        if user.household_id is not None:
            raise ConflictError(
                "You are already part of another household. "
                "Leave your current household to accept this invitation."
            )

        with self.db.unit_of_work():
            self.db.set_user_household(user.id, household.id, UserRole.MEMBER)
            self.db.update_invitation_status(
                invitation.id,
                InvitationStatus.ACCEPTED.value,
                accepted_at=self.clock(),
                accepted_by_user_id=user.id,
            )

        logger.info("User %s joined household %s via invitation %s", user.id, household.id, invitation.id)
        self.activity_log.record_activity(
            household_id=household.id,
            actor_id=user.id,
            entity_id=user.id,
            entity_type="user",
            activity_type=ActivityType.HOUSEHOLD_MEMBER_ADDED,
            details={
                "joined_user_id": user.id,
                "joined_user_name": user.display_name,
                "household_name": household.name,
                "method": "short_code" if invitation.short_code else "email_link",
            },
        )
        return require_household(self.db, household.id)

    def accept_by_token(self, token: str, acting_user_id: str) -> Household:
        """Accept an email invitation. Returns the joined household.

        Raises:
            NotFoundError: If the token is unknown or no longer pending
            AuthorizationError: If the invitation targets a different email
            InvitationExpiredError: If the invitation has expired
            ConflictError: If the user already belongs to another household
        """
        user = require_user(self.db, acting_user_id)
        return self._accept(self._pending_by_token(token), user)

    def accept_by_short_code(self, short_code: str, acting_user_id: str) -> Household:
        """Join a household with a short code (case-insensitive)."""
        user = require_user(self.db, acting_user_id)
        return self._accept(self._pending_by_short_code(short_code), user)

    def decline(self, token: str, acting_user_id: str) -> None:
        """Decline a pending email invitation addressed to the acting user."""
        user = require_user(self.db, acting_user_id)
        invitation = self._pending_by_token(token)
        if invitation.email is not None and invitation.email != user.email.lower():
            raise AuthorizationError("This invitation is not for you to decline")
        self._expire_if_needed(invitation)
        self.db.update_invitation_status(invitation.id, InvitationStatus.DECLINED.value)

    def cancel(self, invitation_id: str, acting_user_id: str) -> Invitation:
        """Cancel a pending invitation (the inviter or the household owner)."""
        invitation = self.db.get_invitation(invitation_id)
        if invitation is None:
            raise NotFoundError(errors.invitation_not_found())

        user = require_user(self.db, acting_user_id)
        is_inviter = invitation.invited_by_id == user.id
        is_owner = user.household_id == invitation.household_id and user.role == UserRole.OWNER
        if not (is_inviter or is_owner):
            logger.warning("User %s may not cancel invitation %s", user.id, invitation_id)
            raise AuthorizationError("You are not authorized to cancel this invitation")
        if invitation.status != InvitationStatus.PENDING:
            raise ValidationError(
                f"Only pending invitations can be cancelled. Current status: {invitation.status.value}"
            )

        self.db.update_invitation_status(invitation_id, InvitationStatus.CANCELLED.value)
        return self.db.get_invitation(invitation_id)

    def list_pending(self, household_id: str, acting_user_id: str) -> list[Invitation]:
        """List pending invitations of a household (members only)."""
        require_member(self.db, household_id, acting_user_id)
        return self.db.list_invitations(household_id, status=InvitationStatus.PENDING.value)

    def get_details(
        self, token: Optional[str] = None, short_code: Optional[str] = None
    ) -> InvitationDetails:
        """Describe a pending invitation by token or short code.

        Raises:
            ValidationError: If neither or both lookups are given
            NotFoundError: If no pending invitation matches
            InvitationExpiredError: If the invitation has expired
        """
        if (token is None) == (short_code is None):
            raise ValidationError("Provide exactly one of token or short code")

        if token is not None:
            invitation = self._pending_by_token(token)
        else:
            invitation = self._pending_by_short_code(short_code)
        if self.clock() > invitation.expires_at:
            raise InvitationExpiredError("Invitation has expired")

        household = require_household(self.db, invitation.household_id)
        inviter = self.db.get_user(invitation.invited_by_id) if invitation.invited_by_id else None
        return InvitationDetails(
            household_id=household.id,
            household_name=household.name,
            invited_by_name=inviter.display_name if inviter else None,
            email=invitation.email,
            short_code=invitation.short_code,
            status=invitation.status,
            expires_at=invitation.expires_at,
        )
