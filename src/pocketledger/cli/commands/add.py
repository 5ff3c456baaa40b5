"""Add transaction command."""

import click

from pocketledger.cli.display import format_amount
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.transaction import REPEAT_STEPS, TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--type",
    "type_",
    required=True,
    type=click.Choice([t.value for t in TransactionType]),
    help="Transaction type",
)
@click.option("--company", required=True, help="Payee or payer")
@click.option(
    "--amount",
    required=True,
    help="Transaction amount (e.g., 123.45). The sign is taken from --type",
)
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--paid/--unpaid", default=True, show_default=True, help="Whether it has been paid")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--notes", help="Notes")
@click.option(
    "--repeat-frequency",
    type=click.Choice(list(REPEAT_STEPS)),
    help="Create one transaction per step until --repeat-until",
)
@click.option("--repeat-until", help="Last date of the repeat series (inclusive)")
@click.pass_context
def add_transaction(
    ctx,
    type_: str,
    company: str,
    amount: str,
    date: str,
    paid: bool,
    tags: tuple[str, ...],
    notes: str | None,
    repeat_frequency: str | None,
    repeat_until: str | None,
):
    """Add a transaction manually.

    Examples:
        pocketledger add --type Expense --company "Grocer" --amount 54.20
        pocketledger add --type Expense --company Gym --amount 30 --date 2024-01-05 \\
            --repeat-frequency monthly --repeat-until 2024-06-30
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    if bool(repeat_frequency) != bool(repeat_until):
        click.echo("Error: --repeat-frequency and --repeat-until must be used together", err=True)
        ctx.exit(1)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        if repeat_frequency:
            until = parse_date(repeat_until)
            created = transaction_service.create_repeated_transactions(
                date=txn_date,
                type=type_,
                amount=txn_amount,
                company=company,
                paid=paid,
                repeat_frequency=repeat_frequency,
                repeat_until=until,
                tags=tags,
                notes=notes,
            )
            click.echo(f"Created {len(created)} transactions for {company}")
            click.echo(f"  From: {created[0].date}")
            click.echo(f"  Until: {created[-1].date}")
            click.echo(f"  Amount: {format_amount(created[0].amount)} ({repeat_frequency})")
            return

        txn = transaction_service.create_transaction(
            date=txn_date,
            type=type_,
            amount=txn_amount,
            company=company,
            paid=paid,
            tags=tags,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Company: {txn.company}")
    click.echo(f"  Amount: {format_amount(txn.amount)}")
    if txn.tags:
        click.echo(f"  Tags: {', '.join(txn.tags)}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
