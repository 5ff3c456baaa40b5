"""Process due recurring transactions."""

import click

from pocketledger.cli.display import echo_transaction
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.recurring import RecurringService
from pocketledger.utils.date_parser import parse_date


@click.command("process")
@click.option(
    "--as-of",
    default="today",
    show_default=True,
    help="Generate occurrences due on or before this date",
)
@click.option("--verbose", "-v", is_flag=True, help="List every created transaction")
@click.pass_context
def process_recurring(ctx, as_of: str, verbose: bool):
    """Create transactions for every due occurrence of active templates.

    Safe to run repeatedly: occurrences that already exist are detected and
    skipped, and each template remembers the last date it generated.
    """
    service = RecurringService(ctx.obj["db"])

    try:
        now = parse_date(as_of)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        result = service.process_due(now)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Processed recurring templates as of {now}")
    click.echo(f"  Created: {len(result.created)}")
    click.echo(f"  Duplicates: {result.duplicates}")
    click.echo(f"  Skipped: {result.skipped}")
    click.echo(f"  Templates advanced: {len(result.watermarks)}")

    if verbose:
        for txn in result.created:
            echo_transaction(txn)

    if not result.success:
        click.echo(f"{len(result.failures)} occurrences could not be saved:", err=True)
        for failure in result.failures:
            click.echo(f"  - {failure.template_id} {failure.date}: {failure.error}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register process command with main CLI."""
    cli.add_command(process_recurring)
