"""Transaction management commands."""

import click

from pocketledger.cli.date_filters import period_options, resolve_cli_date_range
from pocketledger.cli.display import echo_transaction, format_amount
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.analytics import calculate_balance
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


@click.group("transaction")
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_options
@click.option("--pending", is_flag=True, help="Show only transactions awaiting an amount")
@click.option("--template", "template_id", help="Show only transactions generated by a template")
@click.option("--verbose", "-v", is_flag=True, help="Show IDs, tags, template and notes")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    pending: bool,
    template_id: str | None,
    verbose: bool,
    **period_flags: bool,
):
    """View transactions with optional filters, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags,
    )

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        pending_only=pending,
        template_id=template_id,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        echo_transaction(txn, verbose=verbose)

    total = calculate_balance(transactions)
    click.echo(f"\n{len(transactions)} transactions, net {format_amount(total)}")


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a single transaction."""
    service = TransactionService(ctx.obj["db"])
    try:
        txn = service.require_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    echo_transaction(txn, verbose=True)


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option(
    "--type",
    "type_",
    type=click.Choice([t.value for t in TransactionType]),
    help="Transaction type",
)
@click.option("--amount", help="Transaction amount (e.g., 123.45)")
@click.option("--company", help="Payee or payer")
@click.option("--paid/--unpaid", default=None, help="Mark as paid or unpaid")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    date: str | None,
    type_: str | None,
    amount: str | None,
    company: str | None,
    paid: bool | None,
    tags: tuple[str, ...],
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Setting an amount on a
    pending transaction resolves it.

    Examples:
        pocketledger transaction update 3f2a... --amount 82.17
        pocketledger transaction update 3f2a... --paid
    """
    service = TransactionService(ctx.obj["db"])

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        txn = service.update_transaction(
            transaction_id=transaction_id,
            date=txn_date,
            type=type_,
            amount=txn_amount,
            company=company,
            paid=paid,
            tags=tags or None,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {txn.id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str) -> None:
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group)
