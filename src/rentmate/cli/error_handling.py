"""CLI error handling helpers."""

import click

from rentmate.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def acting_user_or_exit(ctx: click.Context) -> str:
    """Return the acting user ID resolved from --as / RENTMATE_USER, or exit."""
    user_id = ctx.obj.get("acting_user_id")
    if user_id is None:
        click.echo(
            "Error: No acting user. Pass --as EMAIL or set RENTMATE_USER.", err=True
        )
        ctx.exit(1)
    return user_id


def household_or_exit(ctx: click.Context) -> str:
    """Return the acting user's household ID, or exit if they have none."""
    user_id = acting_user_or_exit(ctx)
    user = ctx.obj["db"].get_user(user_id)
    if user is None or user.household_id is None:
        click.echo("Error: You do not belong to a household.", err=True)
        ctx.exit(1)
    return user.household_id
