"""User management commands."""

import click
from rentmate.domain.user import UserService
from rentmate.cli.error_handling import handle_domain_error


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("email")
@click.option("--name", help="Display name")
@click.pass_context
def create_user(ctx, email: str, name: str | None):
    """Create a new user.

    Examples:
        rentmate user create alice@example.com --name Alice
    """
    service = UserService(ctx.obj["db"])
    try:
        user_id = service.create_user(email=email, name=name)
        click.echo(f"Created user '{email.strip().lower()}' (ID: {user_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 90)
    for u in users:
        household = u.household_id or "-"
        click.echo(f"{u.id} | {u.email:30s} | {u.name or '':15s} | {u.role.value:6s} | {household}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
