"""Shared pytest fixtures for rentmate tests."""

import tempfile
import os
from datetime import datetime, UTC
import pytest

from rentmate.database.factories import create_sqlite_database
from rentmate.domain.activity_log import ActivityLogService
from rentmate.domain.calendar import CalendarService
from rentmate.domain.chore import ChoreService
from rentmate.domain.entities import UserRole
from rentmate.domain.expense import ExpenseService
from rentmate.domain.household import HouseholdService
from rentmate.domain.invitation import InvitationService
from rentmate.domain.user import UserService


class FakeClock:
    """Settable clock for services that stamp times."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A fixed clock at 2024-01-10 12:00 UTC."""
    return FakeClock(datetime(2024, 1, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def activity_log_service(temp_db):
    """Create an ActivityLogService with a temporary database."""
    return ActivityLogService(temp_db)


@pytest.fixture
def household_service(temp_db):
    """Create a HouseholdService with a temporary database."""
    return HouseholdService(temp_db)


@pytest.fixture
def chore_service(temp_db, clock):
    """Create a ChoreService with a temporary database and fixed clock."""
    return ChoreService(temp_db, clock=clock)


@pytest.fixture
def expense_service(temp_db, clock):
    """Create an ExpenseService with a temporary database and fixed clock."""
    return ExpenseService(temp_db, clock=clock)


@pytest.fixture
def invitation_service(temp_db, clock):
    """Create an InvitationService with a temporary database and fixed clock."""
    return InvitationService(temp_db, clock=clock)


@pytest.fixture
def calendar_service(temp_db):
    """Create a CalendarService with a temporary database."""
    return CalendarService(temp_db)


@pytest.fixture
def household(temp_db, user_service, household_service):
    """Create a household owned by Alice with Bob and Carol as members.

    Returns a dict with the household ID and the member IDs keyed by name.
    """
    alice = user_service.create_user("alice@example.com", name="Alice")
    bob = user_service.create_user("bob@example.com", name="Bob")
    carol = user_service.create_user("carol@example.com", name="Carol")
    household_id = household_service.create_household("Elm Street", acting_user_id=alice)
    temp_db.set_user_household(bob, household_id, UserRole.MEMBER)
    temp_db.set_user_household(carol, household_id, UserRole.MEMBER)
    return {"id": household_id, "alice": alice, "bob": bob, "carol": carol}


@pytest.fixture
def outsider(user_service):
    """Create a user who belongs to no household."""
    return user_service.create_user("dave@example.com", name="Dave")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
