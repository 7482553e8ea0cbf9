"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from rentmate.database.models import (
    ActivityLog as ORMActivityLog,
    Chore as ORMChore,
    Expense as ORMExpense,
    ExpenseShare as ORMExpenseShare,
    Household as ORMHousehold,
    Invitation as ORMInvitation,
    User as ORMUser,
)
from rentmate.database.mappers import (
    activity_log_to_domain,
    as_utc,
    chore_to_domain,
    expense_to_domain,
    household_to_domain,
    invitation_to_domain,
    user_to_domain,
)
from rentmate.domain.entities import (
    ActivityType,
    Chore,
    Expense,
    ExpenseShare,
    Household,
    InvitationStatus,
    Recurrence,
    User,
    UserRole,
)


def test_as_utc_attaches_timezone():
    """Test naive timestamps are read as UTC."""
    naive = datetime(2024, 1, 1, 12, 0)

    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    assert as_utc(None) is None
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    assert as_utc(aware) is aware


class TestUserMapper:
    """Tests for User mapper."""

    def test_user_to_domain(self):
        """Test converting ORM User to domain User."""
        orm_user = ORMUser(
            id="u1",
            email="alice@example.com",
            name="Alice",
            role="owner",
            household_id="h1",
            created_at=datetime(2024, 1, 1),
        )

        user = user_to_domain(orm_user)

        assert isinstance(user, User)
        assert user.role == UserRole.OWNER
        assert user.household_id == "h1"
        assert user.created_at == datetime(2024, 1, 1, tzinfo=UTC)


class TestHouseholdMapper:
    """Tests for Household mapper."""

    def test_household_to_domain_with_members(self):
        """Test members are converted along with the household."""
        orm_household = ORMHousehold(id="h1", name="Elm Street", created_at=datetime.now(UTC))
        orm_household.members.append(
            ORMUser(id="u1", email="a@example.com", role="member", created_at=datetime.now(UTC))
        )

        household = household_to_domain(orm_household)

        assert isinstance(household, Household)
        assert [m.id for m in household.members] == ["u1"]
        assert household_to_domain(orm_household, include_members=False).members == ()


class TestChoreMapper:
    """Tests for Chore mapper."""

    def test_chore_to_domain(self):
        """Test converting ORM Chore to domain Chore."""
        orm_chore = ORMChore(
            id="c1",
            household_id="h1",
            description="Bins",
            notes=None,
            is_complete=False,
            due_date=date(2024, 1, 8),
            recurrence="bi-weekly",
            assigned_to_id="u1",
            created_at=datetime.now(UTC),
        )

        chore = chore_to_domain(orm_chore)

        assert isinstance(chore, Chore)
        assert chore.recurrence == Recurrence.BI_WEEKLY
        assert chore.is_recurring is True
        assert chore.due_date == date(2024, 1, 8)
        assert chore.completed_at is None


class TestExpenseMapper:
    """Tests for Expense mapper."""

    def test_expense_to_domain_with_shares(self):
        """Test converting ORM Expense with its shares."""
        orm_expense = ORMExpense(
            id="e1",
            household_id="h1",
            description="Rent",
            amount=Decimal("900.00"),
            date=date(2024, 1, 1),
            paid_by_id="u1",
            created_at=datetime.now(UTC),
        )
        orm_expense.shares.append(
            ORMExpenseShare(
                id="s1",
                expense_id="e1",
                owed_by_id="u2",
                amount_owed=Decimal("450.00"),
                is_settled=False,
                position=0,
            )
        )

        expense = expense_to_domain(orm_expense)

        assert isinstance(expense, Expense)
        assert expense.amount == Decimal("900.00")
        assert len(expense.shares) == 1
        assert isinstance(expense.shares[0], ExpenseShare)
        assert expense.shares[0].amount_owed == Decimal("450.00")
        assert expense.shares[0].settled_at is None


class TestInvitationMapper:
    """Tests for Invitation mapper."""

    def test_invitation_to_domain(self):
        """Test status strings become InvitationStatus values."""
        orm_invitation = ORMInvitation(
            id="i1",
            household_id="h1",
            invited_by_id="u1",
            token="abc",
            short_code="ABC123",
            status="expired",
            expires_at=datetime(2024, 1, 2),
            created_at=datetime(2024, 1, 1),
        )

        invitation = invitation_to_domain(orm_invitation)

        assert invitation.status == InvitationStatus.EXPIRED
        assert invitation.expires_at.tzinfo is UTC
        assert invitation.email is None


class TestActivityLogMapper:
    """Tests for ActivityLog mapper."""

    def test_activity_log_to_domain(self):
        """Test missing details become an empty dict."""
        orm_log = ORMActivityLog(
            id="l1",
            household_id="h1",
            actor_id=None,
            entity_id="c1",
            entity_type="chore",
            activity_type="CHORE_ROTATED",
            details=None,
            created_at=datetime.now(UTC),
        )

        entry = activity_log_to_domain(orm_log)

        assert entry.activity_type == ActivityType.CHORE_ROTATED
        assert entry.details == {}
        assert entry.actor_id is None
