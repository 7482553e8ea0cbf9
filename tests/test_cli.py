"""Tests for the command line interface."""

from datetime import date
from decimal import Decimal

from rentmate.cli.main import cli
from rentmate.domain.entities import ShareInput


def run(cli_runner, temp_db, *args, as_user=None):
    command = ["--db-path", temp_db.database_path]
    if as_user is not None:
        command += ["--as", as_user]
    return cli_runner.invoke(cli, command + list(args))


def extract_id(output: str) -> str:
    # Output looks like "Created chore 'Bins' (ID: 1234-...)"
    return output.split("ID:")[1].split(")")[0].strip()


def test_help_does_not_need_database(cli_runner):
    """Test showing help without a database."""
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "chore" in result.output
    assert "expense" in result.output


def test_user_create_and_list(cli_runner, temp_db):
    """Test creating and listing users."""
    result = run(cli_runner, temp_db, "user", "create", "Alice@Example.com", "--name", "Alice")
    assert result.exit_code == 0
    assert "Created user 'alice@example.com'" in result.output

    result = run(cli_runner, temp_db, "user", "create", "alice@example.com")
    assert result.exit_code == 1
    assert "already exists" in result.output

    result = run(cli_runner, temp_db, "user", "list")
    assert result.exit_code == 0
    assert "alice@example.com" in result.output


def test_acting_user_required(cli_runner, temp_db, household):
    """Test commands acting on a household need --as."""
    result = run(cli_runner, temp_db, "chore", "list")
    assert result.exit_code == 1
    assert "No acting user" in result.output

    result = run(cli_runner, temp_db, "chore", "list", as_user="nobody@example.com")
    assert result.exit_code == 1
    assert "nobody@example.com" in result.output


def test_acting_user_from_environment(cli_runner, temp_db, household, monkeypatch):
    """Test RENTMATE_USER picks the acting user."""
    monkeypatch.setenv("RENTMATE_USER", "bob@example.com")

    result = run(cli_runner, temp_db, "household", "show")

    assert result.exit_code == 0
    assert "Elm Street" in result.output
    assert "Alice <alice@example.com> (owner)" in result.output


def test_household_create_and_rename(cli_runner, temp_db, outsider):
    """Test creating a household and renaming it as the owner."""
    result = run(cli_runner, temp_db, "household", "create", "Oak Road", as_user="dave@example.com")
    assert result.exit_code == 0
    assert "Created household 'Oak Road'" in result.output

    result = run(cli_runner, temp_db, "household", "rename", "Pine Lane", as_user="dave@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "household", "show", as_user="dave@example.com")
    assert "Pine Lane" in result.output


def test_household_commands_need_household(cli_runner, temp_db, outsider):
    """Test users without a household get a clear error."""
    result = run(cli_runner, temp_db, "expense", "balances", as_user="dave@example.com")

    assert result.exit_code == 1
    assert "do not belong to a household" in result.output


def test_chore_add_toggle_rotates(cli_runner, temp_db, household):
    """Test completing a recurring chore from the CLI moves it on."""
    result = run(
        cli_runner,
        temp_db,
        "chore",
        "add",
        "Bins",
        "--due",
        "2024-01-01",
        "--recurrence",
        "weekly",
        "--assign",
        "alice@example.com",
        as_user="alice@example.com",
    )
    assert result.exit_code == 0
    chore_id = extract_id(result.output)

    result = run(cli_runner, temp_db, "chore", "toggle", chore_id, as_user="bob@example.com")
    assert result.exit_code == 0
    assert "Completed 'Bins'; next due 2024-01-08" in result.output

    result = run(cli_runner, temp_db, "chore", "list", as_user="carol@example.com")
    assert result.exit_code == 0
    assert "Bins (weekly)" in result.output
    assert "1 pending, 0 completed" in result.output


def test_chore_toggle_back(cli_runner, temp_db, household):
    """Test a one-off chore can be completed and reopened."""
    result = run(cli_runner, temp_db, "chore", "add", "Fix tap", as_user="alice@example.com")
    chore_id = extract_id(result.output)

    result = run(cli_runner, temp_db, "chore", "toggle", chore_id, as_user="bob@example.com")
    assert "Completed 'Fix tap'" in result.output

    result = run(cli_runner, temp_db, "chore", "toggle", chore_id, as_user="carol@example.com")
    assert result.exit_code == 1
    assert "owner" in result.output

    result = run(cli_runner, temp_db, "chore", "toggle", chore_id, as_user="bob@example.com")
    assert result.exit_code == 0
    assert "Marked 'Fix tap' as not done" in result.output


def test_chore_update_and_filters(cli_runner, temp_db, household):
    """Test updating assignment and the list filters."""
    result = run(
        cli_runner, temp_db, "chore", "add", "Mop", "--due", "2024-01-05", as_user="alice@example.com"
    )
    chore_id = extract_id(result.output)

    result = run(
        cli_runner, temp_db, "chore", "update", chore_id, "--assign", "bob@example.com", "--due", "",
        as_user="alice@example.com",
    )
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "chore", "list", "--mine", as_user="bob@example.com")
    assert "Mop" in result.output
    assert "no due date" in result.output

    result = run(cli_runner, temp_db, "chore", "list", "--unassigned", as_user="bob@example.com")
    assert "No chores found." in result.output

    result = run(cli_runner, temp_db, "chore", "list", "--mine", "--unassigned", as_user="bob@example.com")
    assert result.exit_code == 1

    result = run(cli_runner, temp_db, "chore", "update", chore_id, "--assign", "dave@example.com", as_user="alice@example.com")
    assert result.exit_code == 1


def test_chore_delete(cli_runner, temp_db, household):
    """Test deleting a chore."""
    result = run(cli_runner, temp_db, "chore", "add", "Mop", as_user="alice@example.com")
    chore_id = extract_id(result.output)

    result = run(cli_runner, temp_db, "chore", "delete", chore_id, as_user="carol@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "chore", "list", as_user="carol@example.com")
    assert "No chores found." in result.output


def test_expense_split_evenly_and_settle_up(cli_runner, temp_db, household):
    """Test adding an even split and the resulting suggestions."""
    result = run(
        cli_runner,
        temp_db,
        "expense",
        "add",
        "Groceries",
        "--amount",
        "$90.00",
        "--date",
        "2024-01-08",
        "--split-evenly",
        as_user="alice@example.com",
    )
    assert result.exit_code == 0
    assert "Added expense 'Groceries' of 90.00" in result.output

    result = run(cli_runner, temp_db, "expense", "list", as_user="bob@example.com")
    assert result.exit_code == 0
    assert "Groceries | 90.00 paid by Alice" in result.output
    assert result.output.count("settled") == 1

    result = run(cli_runner, temp_db, "expense", "balances", as_user="bob@example.com")
    assert "+90.00" in result.output
    assert "-30.00" in result.output

    result = run(cli_runner, temp_db, "expense", "settle-up", as_user="carol@example.com")
    assert "Bob pays Alice 30.00" in result.output
    assert "Carol pays Alice 30.00" in result.output


def test_expense_add_with_shares(cli_runner, temp_db, household):
    """Test explicit shares must add up."""
    result = run(
        cli_runner, temp_db, "expense", "add", "Internet", "--amount", "45",
        "--share", "alice@example.com=25", "--share", "bob@example.com=19",
        as_user="alice@example.com",
    )
    assert result.exit_code == 1
    assert "does not match" in result.output

    result = run(
        cli_runner, temp_db, "expense", "add", "Internet", "--amount", "45",
        "--share", "alice@example.com=25", "--share", "bob@example.com=20",
        "--paid-by", "bob@example.com",
        as_user="alice@example.com",
    )
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "expense", "add", "Nothing", "--amount", "10", as_user="alice@example.com")
    assert result.exit_code == 1
    assert "--split-evenly" in result.output


def test_expense_settle_payer_only(cli_runner, temp_db, expense_service, household):
    """Test only the payer can settle a share from the CLI."""
    expense = expense_service.create_expense(
        acting_user_id=household["alice"],
        description="Rent",
        amount=Decimal("60"),
        date=date(2024, 1, 1),
        paid_by_id=household["alice"],
        shares=[ShareInput(household["bob"], Decimal("60"))],
    )
    share_id = expense.shares[0].id

    result = run(cli_runner, temp_db, "expense", "settle", share_id, as_user="bob@example.com")
    assert result.exit_code == 1
    assert "Only the user who paid" in result.output

    result = run(cli_runner, temp_db, "expense", "settle", share_id, as_user="alice@example.com")
    assert result.exit_code == 0
    assert "as settled" in result.output

    result = run(cli_runner, temp_db, "expense", "settle-up", as_user="bob@example.com")
    assert "Everyone is settled up." in result.output


def test_expense_update_and_delete(cli_runner, temp_db, household):
    """Test updating and deleting an expense."""
    result = run(
        cli_runner, temp_db, "expense", "add", "Gas", "--amount", "30", "--split-evenly",
        as_user="bob@example.com",
    )
    expense_id = extract_id(result.output)

    result = run(cli_runner, temp_db, "expense", "update", expense_id, "--amount", "60", as_user="bob@example.com")
    assert result.exit_code == 1
    assert "new shares" in result.output

    result = run(
        cli_runner, temp_db, "expense", "update", expense_id, "--amount", "60", "--split-evenly",
        as_user="bob@example.com",
    )
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "expense", "delete", expense_id, "--yes", as_user="bob@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "expense", "list", as_user="bob@example.com")
    assert "No expenses found." in result.output


def test_invite_code_join(cli_runner, temp_db, household, outsider):
    """Test joining a household with a short code."""
    result = run(cli_runner, temp_db, "invite", "code", as_user="bob@example.com")
    assert result.exit_code == 0
    code = result.output.split("Join code:")[1].split()[0]

    result = run(cli_runner, temp_db, "invite", "show", "--code", code.lower())
    assert "Household: Elm Street" in result.output
    assert "Invited by: Bob" in result.output

    result = run(cli_runner, temp_db, "invite", "join", code.lower(), as_user="dave@example.com")
    assert result.exit_code == 0
    assert "Joined household 'Elm Street'" in result.output

    result = run(cli_runner, temp_db, "household", "show", as_user="dave@example.com")
    assert "dave@example.com" in result.output


def test_invite_email_accept(cli_runner, temp_db, household, outsider):
    """Test accepting an email invitation by token."""
    result = run(cli_runner, temp_db, "invite", "email", "dave@example.com", as_user="alice@example.com")
    assert result.exit_code == 0
    token = result.output.split("Token:")[1].split()[0]

    result = run(cli_runner, temp_db, "invite", "pending", as_user="carol@example.com")
    assert "dave@example.com" in result.output

    result = run(cli_runner, temp_db, "invite", "accept", token, as_user="dave@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "invite", "pending", as_user="carol@example.com")
    assert "No pending invitations." in result.output


def test_activity_command(cli_runner, temp_db, household):
    """Test the activity log listing."""
    run(cli_runner, temp_db, "chore", "add", "Bins", as_user="alice@example.com")

    result = run(cli_runner, temp_db, "activity", "--limit", "1", as_user="bob@example.com")
    assert result.exit_code == 0
    assert "page 1 of 2" in result.output
    assert "CHORE_CREATED" in result.output

    result = run(cli_runner, temp_db, "activity", "--limit", "500", as_user="bob@example.com")
    assert result.exit_code == 1


def test_calendar_command(cli_runner, temp_db, household):
    """Test the calendar listing for a date range."""
    run(
        cli_runner, temp_db, "chore", "add", "Bins", "--due", "2024-01-12", "--assign", "bob@example.com",
        as_user="alice@example.com",
    )

    result = run(
        cli_runner, temp_db, "calendar", "--start", "2024-01-01", "--end", "2024-01-31",
        as_user="carol@example.com",
    )
    assert result.exit_code == 0
    assert "2024-01-12 | chore   [ ] Bins (Bob)" in result.output

    result = run(
        cli_runner, temp_db, "calendar", "--start", "2024-03-01", "--end", "2024-03-31",
        as_user="carol@example.com",
    )
    assert "Nothing scheduled" in result.output

    result = run(cli_runner, temp_db, "calendar", "--start", "2024-03-01", as_user="carol@example.com")
    assert result.exit_code == 1


def test_household_remove_leave_delete(cli_runner, temp_db, household):
    """Test membership changes from the CLI."""
    result = run(cli_runner, temp_db, "household", "remove-member", "bob@example.com", as_user="carol@example.com")
    assert result.exit_code == 1

    result = run(cli_runner, temp_db, "household", "remove-member", "bob@example.com", as_user="alice@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "household", "leave", as_user="carol@example.com")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "household", "delete", "--yes", as_user="alice@example.com")
    assert result.exit_code == 0

    temp_db.disconnect()
    assert temp_db.get_household(household["id"]) is None
