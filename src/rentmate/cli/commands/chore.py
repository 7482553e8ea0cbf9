"""Chore commands."""

import click
from rentmate.domain.chore import ChoreService
from rentmate.domain.entities import UNSET, ChorePatch, Recurrence
from rentmate.domain.user import UserService
from rentmate.utils.date_parser import parse_date
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit
from rentmate.cli.user_resolution import resolve_user_or_exit

RECURRENCE_CHOICES = click.Choice([r.value for r in Recurrence], case_sensitive=False)


def _format_chore(chore, names: dict[str, str]) -> str:
    status = "[x]" if chore.is_complete else "[ ]"
    due = chore.due_date.isoformat() if chore.due_date else "no due date"
    assignee = names.get(chore.assigned_to_id, "unassigned") if chore.assigned_to_id else "unassigned"
    repeat = f" ({chore.recurrence.value})" if chore.is_recurring else ""
    return f"{status} {chore.id} | {chore.description}{repeat} | {due} | {assignee}"


@click.group()
def chore_group():
    """Manage household chores."""
    pass


@chore_group.command("add")
@click.argument("description")
@click.option("--due", help="Due date (YYYY-MM-DD or relative like 'tomorrow', 'next friday')")
@click.option("--assign", help="Assignee email or ID")
@click.option("--recurrence", type=RECURRENCE_CHOICES, default="none", help="Repeat cadence")
@click.option("--notes", help="Notes")
@click.pass_context
def add_chore(ctx, description: str, due: str | None, assign: str | None, recurrence: str, notes: str | None):
    """Add a chore to your household.

    Examples:
        rentmate chore add "Take out bins" --due tomorrow --recurrence weekly
        rentmate chore add "Clean kitchen" --assign bob@example.com
    """
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)

    due_date = None
    if due is not None:
        try:
            due_date = parse_date(due)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    assignee_id = None
    if assign is not None:
        assignee_id = resolve_user_or_exit(ctx, UserService(db), assign)

    try:
        chore = ChoreService(db).create_chore(
            acting_user_id=user_id,
            description=description,
            notes=notes,
            due_date=due_date,
            assigned_to_id=assignee_id,
            recurrence=recurrence.lower(),
        )
        click.echo(f"Created chore '{chore.description}' (ID: {chore.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@chore_group.command("list")
@click.option("--mine", is_flag=True, help="Only chores assigned to you")
@click.option("--user", "user", help="Only chores assigned to this user (owner only)")
@click.option("--unassigned", is_flag=True, help="Only chores without an assignee")
@click.pass_context
def list_chores(ctx, mine: bool, user: str | None, unassigned: bool):
    """List chores of your household."""
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    service = ChoreService(db)

    if sum(1 for flag in (mine, user is not None, unassigned) if flag) > 1:
        click.echo("Error: Use only one of --mine, --user and --unassigned.", err=True)
        ctx.exit(1)

    try:
        if mine:
            chores = service.get_assigned_chores(user_id, acting_user_id=user_id)
        elif user is not None:
            target_id = resolve_user_or_exit(ctx, UserService(db), user)
            chores = service.get_assigned_chores(target_id, acting_user_id=user_id)
        elif unassigned:
            chores = service.get_unassigned_chores(acting_user_id=user_id)
        else:
            chores = service.list_chores(household_id, acting_user_id=user_id)
        counts = service.get_chore_counts(household_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not chores:
        click.echo("No chores found.")
        return

    household = db.get_household(household_id)
    names = {member.id: member.display_name for member in household.members}

    click.echo(f"\nChores ({counts['pending']} pending, {counts['completed']} completed):")
    click.echo("-" * 100)
    for chore in chores:
        click.echo(_format_chore(chore, names))


@chore_group.command("toggle")
@click.argument("chore_id")
@click.pass_context
def toggle_chore(ctx, chore_id: str):
    """Mark a chore done, or not done again.

    Completing a recurring chore hands it to the next housemate and moves
    its due date forward.
    """
    user_id = acting_user_or_exit(ctx)
    service = ChoreService(ctx.obj["db"])
    try:
        was_complete = service.get_chore(chore_id, acting_user_id=user_id).is_complete
        chore = service.toggle_chore_completion(chore_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if was_complete:
        click.echo(f"Marked '{chore.description}' as not done")
    elif chore.is_complete:
        click.echo(f"Completed '{chore.description}'")
    else:
        due = chore.due_date.isoformat() if chore.due_date else "no due date"
        click.echo(f"Completed '{chore.description}'; next due {due}")


@chore_group.command("update")
@click.argument("chore_id")
@click.option("--description", help="New description")
@click.option("--notes", help="Notes (empty string to clear)")
@click.option("--due", help="Due date (empty string to clear)")
@click.option("--assign", help="Assignee email or ID (empty string to unassign)")
@click.option("--recurrence", type=RECURRENCE_CHOICES, help="Repeat cadence")
@click.option("--complete/--incomplete", "is_complete", default=None, help="Completion state")
@click.pass_context
def update_chore(
    ctx,
    chore_id: str,
    description: str | None,
    notes: str | None,
    due: str | None,
    assign: str | None,
    recurrence: str | None,
    is_complete: bool | None,
) -> None:
    """Update a chore.

    Updates only the fields that are provided.

    Examples:
        rentmate chore update ID --assign bob@example.com
        rentmate chore update ID --due ""  # Clear due date
    """
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)

    due_date = UNSET
    if due is not None:
        if due == "":
            due_date = None
        else:
            try:
                due_date = parse_date(due)
            except ValueError as e:
                click.echo(f"Error: Invalid date format: {e}", err=True)
                ctx.exit(1)

    assignee_id = UNSET
    if assign is not None:
        assignee_id = None if assign == "" else resolve_user_or_exit(ctx, UserService(db), assign)

    patch = ChorePatch(
        description=UNSET if description is None else description,
        notes=UNSET if notes is None else (notes or None),
        due_date=due_date,
        recurrence=UNSET if recurrence is None else recurrence.lower(),
        assigned_to_id=assignee_id,
        is_complete=UNSET if is_complete is None else is_complete,
    )

    try:
        ChoreService(db).update_chore(chore_id, patch, acting_user_id=user_id)
        click.echo(f"Updated chore {chore_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@chore_group.command("delete")
@click.argument("chore_id")
@click.pass_context
def delete_chore(ctx, chore_id: str):
    """Delete a chore."""
    user_id = acting_user_or_exit(ctx)
    try:
        ChoreService(ctx.obj["db"]).delete_chore(chore_id, acting_user_id=user_id)
        click.echo(f"Deleted chore {chore_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register chore commands with main CLI."""
    cli.add_command(chore_group, name="chore")
