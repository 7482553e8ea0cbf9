"""Expense commands."""

from datetime import date

import click
from rentmate.domain.entities import UNSET, ShareInput
from rentmate.domain.expense import ExpenseService
from rentmate.domain import settlement
from rentmate.domain.user import UserService
from rentmate.utils.amount_parser import parse_amount, parse_share
from rentmate.utils.date_parser import parse_date
from rentmate.cli.date_filters import PERIODS, resolve_cli_date_range
from rentmate.cli.error_handling import acting_user_or_exit, handle_domain_error, household_or_exit
from rentmate.cli.user_resolution import resolve_user_or_exit


def _build_shares(ctx, shares: tuple[str, ...], split: bool, amount):
    """Turn --share / --split-evenly options into share lines."""
    db = ctx.obj["db"]
    if shares and split:
        click.echo("Error: Use either --share or --split-evenly, not both.", err=True)
        ctx.exit(1)

    if split:
        household = db.get_household(household_or_exit(ctx))
        member_ids = sorted(member.id for member in household.members)
        return settlement.split_evenly(amount, member_ids)

    user_service = UserService(db)
    lines = []
    for share in shares:
        try:
            user, share_amount = parse_share(share)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        lines.append(ShareInput(resolve_user_or_exit(ctx, user_service, user), share_amount))
    return lines


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _parse_date_or_exit(ctx, value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.group()
def expense_group():
    """Manage shared expenses and balances."""
    pass


@expense_group.command("add")
@click.argument("description")
@click.option("--amount", required=True, help="Total amount (e.g., 123.45)")
@click.option("--date", "expense_date", default="today", help="Expense date (defaults to today)")
@click.option("--paid-by", help="Payer email or ID (defaults to you)")
@click.option("--share", "shares", multiple=True, help="USER=AMOUNT, repeatable")
@click.option("--split-evenly", is_flag=True, help="Split equally between all members")
@click.pass_context
def add_expense(
    ctx,
    description: str,
    amount: str,
    expense_date: str,
    paid_by: str | None,
    shares: tuple[str, ...],
    split_evenly: bool,
):
    """Add an expense.

    Shares must add up to the amount. The payer's own share is recorded as
    already settled.

    Examples:
        rentmate expense add "Groceries" --amount 60 --split-evenly
        rentmate expense add "Internet" --amount 45 --share alice@example.com=25 --share bob@example.com=20
    """
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)

    if not shares and not split_evenly:
        click.echo("Error: Provide --share USER=AMOUNT or --split-evenly.", err=True)
        ctx.exit(1)

    total = _parse_amount_or_exit(ctx, amount)
    when = _parse_date_or_exit(ctx, expense_date)
    payer_id = resolve_user_or_exit(ctx, UserService(db), paid_by) if paid_by else user_id
    lines = _build_shares(ctx, shares, split_evenly, total)

    try:
        expense = ExpenseService(db).create_expense(
            acting_user_id=user_id,
            description=description,
            amount=total,
            date=when,
            paid_by_id=payer_id,
            shares=lines,
        )
        click.echo(f"Added expense '{expense.description}' of {expense.amount:.2f} (ID: {expense.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@expense_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of dates")
@click.pass_context
def list_expenses(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """List expenses of your household with their shares."""
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        expenses = ExpenseService(db).list_expenses(user_id, start_date=start, end_date=end)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not expenses:
        click.echo("No expenses found.")
        return

    names = {m.id: m.display_name for m in db.get_household(household_id).members}
    click.echo(f"\nFound {len(expenses)} expense(s):")
    click.echo("=" * 100)
    for expense in expenses:
        payer = names.get(expense.paid_by_id, "unknown")
        click.echo(f"\n{expense.date} | {expense.description} | {expense.amount:.2f} paid by {payer}")
        click.echo(f"  ID: {expense.id}")
        for share in expense.shares:
            status = "settled" if share.is_settled else "owed"
            debtor = names.get(share.owed_by_id, share.owed_by_id)
            click.echo(f"  - {share.id} | {debtor:20s} | {share.amount_owed:>10.2f} | {status}")


@expense_group.command("update")
@click.argument("expense_id")
@click.option("--description", help="New description")
@click.option("--amount", help="New total amount (requires new shares)")
@click.option("--date", "expense_date", help="New date")
@click.option("--paid-by", help="New payer email or ID")
@click.option("--share", "shares", multiple=True, help="USER=AMOUNT, replaces all shares")
@click.option("--split-evenly", is_flag=True, help="Replace shares with an equal split")
@click.pass_context
def update_expense(
    ctx,
    expense_id: str,
    description: str | None,
    amount: str | None,
    expense_date: str | None,
    paid_by: str | None,
    shares: tuple[str, ...],
    split_evenly: bool,
) -> None:
    """Update an expense.

    Updates only the fields that are provided. Changing the amount requires
    new shares.
    """
    db = ctx.obj["db"]
    user_id = acting_user_or_exit(ctx)
    service = ExpenseService(db)

    new_amount = UNSET if amount is None else _parse_amount_or_exit(ctx, amount)
    new_date = UNSET if expense_date is None else _parse_date_or_exit(ctx, expense_date)
    payer_id = UNSET if paid_by is None else resolve_user_or_exit(ctx, UserService(db), paid_by)

    new_shares = UNSET
    if shares or split_evenly:
        if new_amount is UNSET:
            try:
                base_amount = service.get_expense(expense_id, acting_user_id=user_id).amount
            except ValueError as e:
                handle_domain_error(ctx, e)
                return
        else:
            base_amount = new_amount
        new_shares = _build_shares(ctx, shares, split_evenly, base_amount)

    try:
        service.update_expense(
            expense_id,
            acting_user_id=user_id,
            description=UNSET if description is None else description,
            amount=new_amount,
            date=new_date,
            paid_by_id=payer_id,
            shares=new_shares,
        )
        click.echo(f"Updated expense {expense_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@expense_group.command("delete")
@click.argument("expense_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_expense(ctx, expense_id: str, yes: bool):
    """Delete an expense and its shares."""
    user_id = acting_user_or_exit(ctx)

    if not yes and not click.confirm(f"Are you sure you want to delete expense {expense_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        ExpenseService(ctx.obj["db"]).delete_expense(expense_id, acting_user_id=user_id)
        click.echo(f"Deleted expense {expense_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def _toggle_share(ctx, share_id: str, settle: bool) -> None:
    user_id = acting_user_or_exit(ctx)
    try:
        share = ExpenseService(ctx.obj["db"]).toggle_expense_share_settlement(
            share_id, settle=settle, acting_user_id=user_id
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    state = "settled" if share.is_settled else "unsettled"
    click.echo(f"Marked share {share_id} ({share.amount_owed:.2f}) as {state}")


@expense_group.command("settle")
@click.argument("share_id")
@click.pass_context
def settle_share(ctx, share_id: str):
    """Mark a share as paid back (expense payer only)."""
    _toggle_share(ctx, share_id, settle=True)


@expense_group.command("unsettle")
@click.argument("share_id")
@click.pass_context
def unsettle_share(ctx, share_id: str):
    """Mark a share as still owed (expense payer only)."""
    _toggle_share(ctx, share_id, settle=False)


@expense_group.command("balances")
@click.pass_context
def show_balances(ctx):
    """Show what each member has paid and still owes."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    try:
        balances = ExpenseService(ctx.obj["db"]).get_household_balances(household_id, acting_user_id=user_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{'Member':25s} {'Paid':>12s} {'Owes':>12s} {'Net':>12s}")
    click.echo("-" * 64)
    for balance in balances:
        click.echo(
            f"{balance.name:25s} {balance.total_paid:>12.2f} "
            f"{balance.total_owed:>12.2f} {balance.net_balance:>+12.2f}"
        )


@expense_group.command("settle-up")
@click.pass_context
def settle_up(ctx):
    """Suggest transfers that would settle everyone's balance."""
    user_id = acting_user_or_exit(ctx)
    household_id = household_or_exit(ctx)
    try:
        suggestions = ExpenseService(ctx.obj["db"]).get_settle_up_suggestions(
            household_id, acting_user_id=user_id
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not suggestions:
        click.echo("Everyone is settled up.")
        return

    for suggestion in suggestions:
        click.echo(f"{suggestion.from_user_name} pays {suggestion.to_user_name} {suggestion.amount:.2f}")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(expense_group, name="expense")
