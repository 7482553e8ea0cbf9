"""Tests for Database interface returning domain models."""

import dataclasses
import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from rentmate.database.factories import create_sqlite_database
from rentmate.domain import entities
from rentmate.domain.errors import NotFoundError, TransactionFailure


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_user_returns_domain_model(self, temp_db):
        """Test that get_user returns a domain User entity."""
        user_id = temp_db.create_user(email="Alice@Example.com", name="Alice")

        user = temp_db.get_user(user_id)

        assert isinstance(user, entities.User)
        assert user.email == "alice@example.com"
        assert user.role == entities.UserRole.MEMBER
        assert user.created_at.tzinfo is not None

    def test_get_household_returns_members(self, temp_db):
        """Test that get_household loads its members."""
        household_id = temp_db.create_household(name="Elm Street")
        user_id = temp_db.create_user(email="alice@example.com")
        temp_db.set_user_household(user_id, household_id, entities.UserRole.OWNER)

        household = temp_db.get_household(household_id)

        assert isinstance(household, entities.Household)
        assert [m.id for m in household.members] == [user_id]
        assert household.members[0].role == entities.UserRole.OWNER
        assert temp_db.get_household("missing") is None

    def test_chore_round_trip(self, temp_db):
        """Test that save_chore writes every mutable field."""
        household_id = temp_db.create_household(name="Elm Street")
        user_id = temp_db.create_user(email="alice@example.com")
        chore_id = temp_db.create_chore(
            household_id=household_id,
            description="Bins",
            due_date=date(2024, 1, 1),
            recurrence=entities.Recurrence.WEEKLY,
        )
        chore = temp_db.get_chore(chore_id)
        assert isinstance(chore, entities.Chore)
        assert chore.recurrence == entities.Recurrence.WEEKLY

        completed_at = datetime(2024, 1, 2, 8, 30, tzinfo=UTC)
        temp_db.save_chore(
            dataclasses.replace(
                chore,
                is_complete=True,
                completed_by_id=user_id,
                completed_at=completed_at,
                notes="Green bin",
            )
        )

        saved = temp_db.get_chore(chore_id)
        assert saved.is_complete is True
        assert saved.completed_by_id == user_id
        assert saved.completed_at == completed_at
        assert saved.notes == "Green bin"

    def test_save_missing_chore(self, temp_db):
        """Test saving a chore that does not exist raises NotFoundError."""
        chore = entities.Chore(
            id="missing",
            household_id=None,
            description="x",
            notes=None,
            is_complete=False,
            due_date=None,
            recurrence=entities.Recurrence.NONE,
            assigned_to_id=None,
            completed_by_id=None,
            completed_at=None,
            created_at=datetime.now(UTC),
        )
        with pytest.raises(NotFoundError):
            temp_db.save_chore(chore)

    def test_expense_shares_keep_order(self, temp_db):
        """Test that shares come back in the order they were added."""
        household_id = temp_db.create_household(name="Elm Street")
        users = [temp_db.create_user(email=f"user{i}@example.com") for i in range(3)]
        expense_id = temp_db.create_expense(
            household_id=household_id,
            description="Rent",
            amount=Decimal("900.00"),
            date=date(2024, 1, 1),
            paid_by_id=users[0],
        )
        for user_id in reversed(users):
            temp_db.create_expense_share(expense_id=expense_id, owed_by_id=user_id, amount_owed=Decimal("300"))

        expense = temp_db.get_expense(expense_id)

        assert isinstance(expense, entities.Expense)
        assert isinstance(expense.amount, Decimal)
        assert [s.owed_by_id for s in expense.shares] == list(reversed(users))
        assert all(isinstance(s, entities.ExpenseShare) for s in expense.shares)

    def test_unassign_chores_returns_count(self, temp_db):
        """Test that unassign_chores only touches the user's chores."""
        household_id = temp_db.create_household(name="Elm Street")
        alice = temp_db.create_user(email="alice@example.com")
        bob = temp_db.create_user(email="bob@example.com")
        for assignee in (alice, alice, bob):
            temp_db.create_chore(household_id=household_id, description="x", assigned_to_id=assignee)

        assert temp_db.unassign_chores(household_id, alice) == 2
        assert len(temp_db.list_chores(household_id, unassigned=True)) == 2
        assert len(temp_db.list_chores(household_id, assigned_to_id=bob)) == 1


class TestUnitOfWork:
    """Tests for transactional scopes."""

    def test_commits_on_success(self, temp_db):
        """Test that writes inside a unit of work are committed together."""
        with temp_db.unit_of_work():
            household_id = temp_db.create_household(name="Elm Street")
            user_id = temp_db.create_user(email="alice@example.com")
            temp_db.set_user_household(user_id, household_id, entities.UserRole.OWNER)

        temp_db.disconnect()
        assert temp_db.get_user(user_id).household_id == household_id

    def test_rolls_back_on_error(self, temp_db):
        """Test that an exception discards every write in the scope."""
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                temp_db.create_household(name="Elm Street")
                temp_db.create_user(email="alice@example.com")
                raise RuntimeError("boom")

        assert temp_db.list_users() == []

    def test_nested_scope_joins_outer(self, temp_db):
        """Test that an inner scope does not commit on its own."""
        with pytest.raises(RuntimeError):
            with temp_db.unit_of_work():
                with temp_db.unit_of_work():
                    temp_db.create_user(email="alice@example.com")
                raise RuntimeError("boom")

        assert temp_db.get_user_by_email("alice@example.com") is None

    def test_database_error_becomes_transaction_failure(self, temp_db):
        """Test that constraint violations surface as TransactionFailure."""
        temp_db.create_user(email="alice@example.com")

        with pytest.raises(TransactionFailure):
            with temp_db.unit_of_work():
                temp_db.create_user(email="bob@example.com")
                temp_db.create_user(email="alice@example.com")

        assert [u.email for u in temp_db.list_users()] == ["alice@example.com"]

    def test_single_write_failure_rolls_back(self, temp_db):
        """Test that a failing commit outside a scope raises TransactionFailure."""
        temp_db.create_user(email="alice@example.com")

        with pytest.raises(TransactionFailure):
            temp_db.create_user(email="alice@example.com")

        # Session is usable again
        assert temp_db.create_user(email="bob@example.com")


def test_create_sqlite_database_uses_env(monkeypatch, tmp_path):
    """Test that RENTMATE_DB_PATH picks the database file."""
    path = tmp_path / "env.db"
    monkeypatch.setenv("RENTMATE_DB_PATH", str(path))

    db = create_sqlite_database()

    assert db.database_url == f"sqlite:///{path}"
    db.disconnect()
