"""Invitation commands."""

import click
from rentmate.domain.invitation import InvitationService
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit


@click.group()
def invite_group():
    """Invite people to your household or join one."""
    pass


@invite_group.command("email")
@click.argument("email")
@click.pass_context
def invite_email(ctx, email: str):
    """Invite someone by email.

    Prints the invitation token for the invitee to accept.
    """
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    service = InvitationService(ctx.obj["db"])
    try:
        invitation = service.create_email_invitation(household_id, email, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Invited {invitation.email} (ID: {invitation.id})")
    click.echo(f"Token: {invitation.token}")
    click.echo(f"Expires: {invitation.expires_at:%Y-%m-%d %H:%M} UTC")


@invite_group.command("code")
@click.pass_context
def invite_code(ctx):
    """Generate a short join code, valid for 24 hours."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    service = InvitationService(ctx.obj["db"])
    try:
        invitation = service.create_short_code_invitation(household_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Join code: {invitation.short_code}")
    click.echo(f"Expires: {invitation.expires_at:%Y-%m-%d %H:%M} UTC")


@invite_group.command("accept")
@click.argument("token")
@click.pass_context
def accept_invitation(ctx, token: str):
    """Accept an email invitation by its token."""
    user_id = acting_user_or_exit(ctx)
    try:
        household = InvitationService(ctx.obj["db"]).accept_by_token(token, acting_user_id=user_id)
        click.echo(f"Joined household '{household.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invite_group.command("join")
@click.argument("code")
@click.pass_context
def join_by_code(ctx, code: str):
    """Join a household with a short code."""
    user_id = acting_user_or_exit(ctx)
    try:
        household = InvitationService(ctx.obj["db"]).accept_by_short_code(code, acting_user_id=user_id)
        click.echo(f"Joined household '{household.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invite_group.command("decline")
@click.argument("token")
@click.pass_context
def decline_invitation(ctx, token: str):
    """Decline an email invitation."""
    user_id = acting_user_or_exit(ctx)
    try:
        InvitationService(ctx.obj["db"]).decline(token, acting_user_id=user_id)
        click.echo("Invitation declined")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invite_group.command("cancel")
@click.argument("invitation_id")
@click.pass_context
def cancel_invitation(ctx, invitation_id: str):
    """Cancel a pending invitation you sent (or any, as the owner)."""
    user_id = acting_user_or_exit(ctx)
    try:
        InvitationService(ctx.obj["db"]).cancel(invitation_id, acting_user_id=user_id)
        click.echo(f"Cancelled invitation {invitation_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invite_group.command("show")
@click.option("--token", help="Invitation token")
@click.option("--code", help="Short join code")
@click.pass_context
def show_invitation(ctx, token: str | None, code: str | None):
    """Show which household an invitation is for."""
    try:
        details = InvitationService(ctx.obj["db"]).get_details(token=token, short_code=code)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Household: {details.household_name}")
    if details.invited_by_name:
        click.echo(f"Invited by: {details.invited_by_name}")
    if details.email:
        click.echo(f"For: {details.email}")
    click.echo(f"Expires: {details.expires_at:%Y-%m-%d %H:%M} UTC")


@invite_group.command("pending")
@click.pass_context
def pending_invitations(ctx):
    """List pending invitations of your household."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    try:
        invitations = InvitationService(ctx.obj["db"]).list_pending(household_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not invitations:
        click.echo("No pending invitations.")
        return

    click.echo("\nPending invitations:")
    click.echo("-" * 80)
    for inv in invitations:
        target = inv.email or f"code {inv.short_code}"
        click.echo(f"{inv.id} | {target:30s} | expires {inv.expires_at:%Y-%m-%d %H:%M}")


def register_commands(cli):
    """Register invitation commands with main CLI."""
    cli.add_command(invite_group, name="invite")
