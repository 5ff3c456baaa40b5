"""Savings account commands."""

from decimal import Decimal

import click

from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.savings import SavingsAccountService
from pocketledger.utils.amount_parser import parse_amount


def _parse_balance(ctx, value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid balance format: {e}", err=True)
        ctx.exit(1)


def _format_balance(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


@click.group("savings")
def savings_group():
    """Manage savings accounts."""
    pass


@savings_group.command("create")
@click.option("--name", required=True, help="Account name")
@click.option("--balance", required=True, help="Current balance")
@click.pass_context
def create_account(ctx, name: str, balance: str):
    """Create a savings account."""
    service = SavingsAccountService(ctx.obj["db"])
    amount = _parse_balance(ctx, balance)
    try:
        account = service.create_account(name, amount)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created savings account {account.name} (ID: {account.id})")


@savings_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List savings accounts by name."""
    service = SavingsAccountService(ctx.obj["db"])
    accounts = service.list_accounts()

    if not accounts:
        click.echo("No savings accounts found.")
        return

    click.echo(f"{'ID':<34} {'Name':<30} {'Balance':>14}")
    click.echo("-" * 80)
    for account in accounts:
        click.echo(f"{account.id:<34} {account.name:<30} {_format_balance(account.balance):>14}")
    total = sum((a.balance for a in accounts), Decimal(0))
    click.echo(f"\nTotal savings: {_format_balance(total)}")


@savings_group.command("update")
@click.argument("account_id")
@click.option("--name", help="New account name")
@click.option("--balance", help="New balance")
@click.pass_context
def update_account(ctx, account_id: str, name: str | None, balance: str | None):
    """Rename a savings account or set its balance."""
    if name is None and balance is None:
        click.echo("Error: Nothing to update; pass --name or --balance", err=True)
        ctx.exit(1)

    service = SavingsAccountService(ctx.obj["db"])
    amount = _parse_balance(ctx, balance)
    try:
        account = service.update_account(account_id, name=name, balance=amount)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated savings account {account.name}: {_format_balance(account.balance)}")


@savings_group.command("delete")
@click.argument("account_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account_id: str, yes: bool):
    """Delete a savings account."""
    service = SavingsAccountService(ctx.obj["db"])
    if not yes:
        click.confirm(f"Delete savings account {account_id}?", abort=True)
    try:
        service.delete_account(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted savings account {account_id}")


def register_commands(cli):
    """Register savings commands with main CLI."""
    cli.add_command(savings_group)
