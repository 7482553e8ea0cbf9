"""Main CLI entry point."""

import logging

import click
from rentmate.database.factories import create_sqlite_database
from rentmate.domain.user import UserService
from rentmate.utils.user_resolver import resolve_user

# Import and register all commands at module level
from rentmate.cli.commands import (
    activity,
    calendar,
    chore,
    expense,
    household,
    invite,
    user,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides RENTMATE_DB_PATH environment variable)",
    envvar="RENTMATE_DB_PATH",
)
@click.option(
    "--as",
    "acting_user",
    help="Email or ID of the user running the command (or set RENTMATE_USER)",
    envvar="RENTMATE_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log informational messages")
@click.pass_context
def cli(ctx, db_path: str | None, acting_user: str | None, verbose: bool):
    """Rentmate - Shared household chores and expenses.

    Rotate recurring chores between housemates, split expenses and work out
    who owes whom.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format=LOG_FORMAT)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)

        ctx.obj["acting_user_id"] = None
        if acting_user:
            try:
                ctx.obj["acting_user_id"] = resolve_user(UserService(db), acting_user)
            except ValueError as e:
                click.echo(f"Error: {e}", err=True)
                ctx.exit(1)


# Register all commands
user.register_commands(cli)
household.register_commands(cli)
invite.register_commands(cli)
chore.register_commands(cli)
expense.register_commands(cli)
activity.register_commands(cli)
calendar.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
