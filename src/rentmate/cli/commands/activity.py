"""Activity log command."""

import click
from rentmate.domain.activity_log import ActivityLogService
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit


@click.command("activity")
@click.option("--page", type=int, default=1, show_default=True, help="Page number")
@click.option("--limit", type=int, default=20, show_default=True, help="Entries per page")
@click.pass_context
def show_activity(ctx, page: int, limit: int):
    """Show recent household activity, newest first."""
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)

    try:
        result = ActivityLogService(db).list_for_household(
            household_id, acting_user_id=user_id, page=page, limit=limit
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not result.logs:
        click.echo("No activity found.")
        return

    names = {m.id: m.display_name for m in db.get_household(household_id).members}
    click.echo(f"\nActivity (page {result.page} of {result.total_pages}, {result.total} entries):")
    click.echo("-" * 90)
    for entry in result.logs:
        actor = names.get(entry.actor_id, "system") if entry.actor_id else "system"
        description = entry.details.get("description") or entry.details.get("household_name") or ""
        click.echo(
            f"{entry.created_at:%Y-%m-%d %H:%M} | {entry.activity_type.value:24s} | {actor:20s} | {description}"
        )


def register_commands(cli):
    """Register activity command with main CLI."""
    cli.add_command(show_activity, name="activity")
