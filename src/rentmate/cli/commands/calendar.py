"""Calendar command."""

import click
from rentmate.domain.calendar import CalendarService
from rentmate.utils.date_parser import get_date_range
from rentmate.cli.date_filters import PERIODS, resolve_cli_date_range
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit


@click.command("calendar")
@click.option("--start", "start_date", help="First day (YYYY-MM-DD or relative)")
@click.option("--end", "end_date", help="Last day (YYYY-MM-DD or relative)")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of dates")
@click.pass_context
def show_calendar(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Show chore due dates and expenses day by day (defaults to this month)."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=get_date_range("this-month"),
    )
    if start is None or end is None:
        click.echo("Error: Both --start and --end are required when either is given.", err=True)
        ctx.exit(1)

    try:
        events = CalendarService(ctx.obj["db"]).get_events(household_id, start, end, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not events:
        click.echo(f"Nothing scheduled between {start} and {end}.")
        return

    for event in sorted(events, key=lambda e: (e.start, e.type)):
        if event.type == "chore":
            mark = "[x]" if event.extended_props["is_complete"] else "[ ]"
            who = event.extended_props.get("assigned_to_name") or "unassigned"
            click.echo(f"{event.start} | chore   {mark} {event.title} ({who})")
        else:
            amount = event.extended_props["amount"]
            click.echo(f"{event.start} | expense {event.title} {amount:.2f}")


def register_commands(cli):
    """Register calendar command with main CLI."""
    cli.add_command(show_calendar, name="calendar")
