"""Shared output formatting for CLI commands."""

from decimal import Decimal

import click

from pocketledger.domain.entities import RecurrenceTemplate, Transaction
from pocketledger.domain.recurrence import describe_recurrence
from pocketledger.utils.date_parser import format_date


def format_amount(amount: Decimal) -> str:
    """Signed currency string, e.g. ``+$1,200.00`` or ``-$45.10``."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}${abs(amount):,.2f}"


def echo_transaction(txn: Transaction, verbose: bool = False) -> None:
    flags = []
    if txn.is_pending:
        flags.append("pending")
    if not txn.paid:
        flags.append("unpaid")
    if txn.is_auto_generated:
        flags.append("auto")
    line = (
        f"{format_date(txn.date)} | {txn.type.value:8s} | {format_amount(txn.amount):>12s} | "
        f"{txn.company:24s}"
    )
    if flags:
        line += f" [{', '.join(flags)}]"
    click.echo(line)
    if verbose:
        click.echo(f"    ID: {txn.id}")
        if txn.tags:
            click.echo(f"    Tags: {', '.join(txn.tags)}")
        if txn.template_id:
            click.echo(f"    Template: {txn.template_id}")
        if txn.notes:
            click.echo(f"    Notes: {txn.notes}")


def echo_template(template: RecurrenceTemplate) -> None:
    if template.amount is not None:
        amount = f"${template.amount:,.2f}"
    elif template.estimated_amount is not None:
        amount = f"~${template.estimated_amount:,.2f}"
    else:
        amount = "variable"
    status = "active" if template.is_active else "inactive"
    click.echo(
        f"{template.id} | {template.type.value:8s} | {template.company:24s} | "
        f"{amount:>12s} | {describe_recurrence(template.recurrence)} ({status})"
    )
