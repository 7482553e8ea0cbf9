"""Household management commands."""

import click
from rentmate.domain.household import HouseholdService
from rentmate.domain.user import UserService
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit
from rentmate.cli.user_resolution import resolve_user_or_exit


@click.group()
def household_group():
    """Manage your household."""
    pass


@household_group.command("create")
@click.argument("name")
@click.pass_context
def create_household(ctx, name: str):
    """Create a household and become its owner.

    Examples:
        rentmate --as alice@example.com household create "Elm Street"
    """
    user_id = acting_user_or_exit(ctx)
    service = HouseholdService(ctx.obj["db"])
    try:
        household_id = service.create_household(name=name, acting_user_id=user_id)
        click.echo(f"Created household '{name.strip()}' (ID: {household_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@household_group.command("show")
@click.pass_context
def show_household(ctx):
    """Show your household and its members."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    service = HouseholdService(ctx.obj["db"])
    try:
        household = service.get_household(household_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{household.name} (ID: {household.id})")
    click.echo("-" * 60)
    for member in sorted(household.members, key=lambda m: m.email):
        marker = " (owner)" if member.role.value == "owner" else ""
        click.echo(f"  {member.display_name} <{member.email}>{marker}")


@household_group.command("rename")
@click.argument("name")
@click.pass_context
def rename_household(ctx, name: str):
    """Rename your household (owner only)."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    service = HouseholdService(ctx.obj["db"])
    try:
        service.rename_household(household_id, name=name, acting_user_id=user_id)
        click.echo(f"Renamed household to '{name.strip()}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@household_group.command("remove-member")
@click.argument("member", metavar="USER")
@click.pass_context
def remove_member(ctx, member: str):
    """Remove a member from your household (owner only).

    USER can be an email or user ID. Their chores become unassigned.
    """
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    member_id = resolve_user_or_exit(ctx, UserService(db), member)
    try:
        HouseholdService(db).remove_member(household_id, member_id, acting_user_id=user_id)
        click.echo(f"Removed {member} from the household")
    except ValueError as e:
        handle_domain_error(ctx, e)


@household_group.command("leave")
@click.pass_context
def leave_household(ctx):
    """Leave your household."""
    user_id = acting_user_or_exit(ctx)
    try:
        HouseholdService(ctx.obj["db"]).leave_household(acting_user_id=user_id)
        click.echo("You have left the household")
    except ValueError as e:
        handle_domain_error(ctx, e)


@household_group.command("delete")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_household(ctx, yes: bool):
    """Delete your household with all its chores and expenses (owner only)."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)

    if not yes and not click.confirm("Are you sure you want to delete the household?"):
        click.echo("Deletion cancelled.")
        return

    try:
        HouseholdService(ctx.obj["db"]).delete_household(household_id, acting_user_id=user_id)
        click.echo("Deleted household")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register household commands with main CLI."""
    cli.add_command(household_group, name="household")
