"""Recurring template commands."""

from datetime import date, timedelta
from decimal import Decimal
from itertools import islice

import click

from pocketledger.cli.display import echo_template, echo_transaction, format_amount
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.entities import AmountType, ExceptionType, TransactionType
from pocketledger.domain.recurrence import (
    describe_recurrence,
    iter_rule_dates,
    next_occurrence,
    occurrences_between,
    parse_recurrence,
)
from pocketledger.domain.recurring import apply_exception, materialize
from pocketledger.domain.template import TemplateService
from pocketledger.domain.validation import TEMPLATE_FREQUENCIES
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


def _parse_optional_date(ctx, value: str | None, label: str) -> date | None:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _parse_optional_amount(ctx, value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _pattern(ctx, frequency: str | None, interval: int | None) -> dict | None:
    if interval is not None and frequency != "custom":
        click.echo("Error: --interval requires --frequency custom", err=True)
        ctx.exit(1)
    if frequency is None:
        return None
    pattern = {"frequency": frequency}
    if frequency == "custom":
        pattern["interval"] = interval
    return pattern


@click.group("template")
def template_group():
    """Manage recurring transaction templates."""
    pass


@template_group.command("create")
@click.option(
    "--type",
    "type_",
    required=True,
    type=click.Choice([t.value for t in TransactionType]),
    help="Transaction type",
)
@click.option("--company", required=True, help="Payee or payer")
@click.option(
    "--amount-type",
    type=click.Choice([a.value for a in AmountType]),
    default=AmountType.FIXED.value,
    show_default=True,
    help="Fixed amounts are known up front; variable ones are filled in later",
)
@click.option("--amount", help="Amount for fixed templates")
@click.option("--estimated-amount", help="Expected amount for variable templates")
@click.option(
    "--frequency",
    required=True,
    type=click.Choice(list(TEMPLATE_FREQUENCIES)),
    help="Recurrence frequency",
)
@click.option("--interval", type=int, help="Days between occurrences (custom frequency)")
@click.option("--start-date", required=True, help="First occurrence (YYYY-MM-DD)")
@click.option("--end-date", help="No occurrences after this date")
@click.option("--paid/--unpaid", default=False, show_default=True, help="Paid status of generated transactions")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.pass_context
def create_template(
    ctx,
    type_: str,
    company: str,
    amount_type: str,
    amount: str | None,
    estimated_amount: str | None,
    frequency: str,
    interval: int | None,
    start_date: str,
    end_date: str | None,
    paid: bool,
    tags: tuple[str, ...],
):
    """Create a recurring template.

    Examples:
        pocketledger template create --type Expense --company Rent --amount 1200 \\
            --frequency monthly --start-date 2024-01-31
        pocketledger template create --type Expense --company Electric \\
            --amount-type variable --frequency custom --interval 30 --start-date 2024-01-10
    """
    service = TemplateService(ctx.obj["db"])

    start = _parse_optional_date(ctx, start_date, "start date")
    end = _parse_optional_date(ctx, end_date, "end date")
    fixed_amount = _parse_optional_amount(ctx, amount)
    estimate = _parse_optional_amount(ctx, estimated_amount)

    try:
        template = service.create_template(
            type=type_,
            company=company,
            amount_type=amount_type,
            start_date=start,
            recurrence_pattern=_pattern(ctx, frequency, interval),
            amount=fixed_amount,
            estimated_amount=estimate,
            tags=tags,
            paid=paid,
            end_date=end,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created template {template.id}")
    click.echo(f"  Company: {template.company}")
    click.echo(f"  Schedule: {describe_recurrence(template.recurrence)} from {template.start_date}")


@template_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Show only active templates")
@click.pass_context
def list_templates(ctx, active_only: bool):
    """List templates with their schedule and next due date."""
    service = TemplateService(ctx.obj["db"])
    templates = service.list_templates(active_only=active_only)

    if not templates:
        click.echo("No templates found.")
        return

    today = date.today()
    for template in templates:
        echo_template(template)
        if template.is_active:
            upcoming = next_occurrence(template, today - timedelta(days=1))
            if upcoming is not None:
                click.echo(f"    Next: {upcoming}")


@template_group.command("show")
@click.argument("template_id")
@click.pass_context
def show_template(ctx, template_id: str):
    """Show a template in detail."""
    service = TemplateService(ctx.obj["db"])
    try:
        template = service.require_template(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Template {template.id}")
    click.echo(f"  Type: {template.type.value}")
    click.echo(f"  Company: {template.company}")
    click.echo(f"  Amount type: {template.amount_type.value}")
    if template.amount is not None:
        click.echo(f"  Amount: ${template.amount:,.2f}")
    if template.estimated_amount is not None:
        click.echo(f"  Estimated amount: ${template.estimated_amount:,.2f}")
    click.echo(f"  Schedule: {describe_recurrence(template.recurrence)}")
    click.echo(f"  Start date: {template.start_date}")
    if template.end_date:
        click.echo(f"  End date: {template.end_date}")
    click.echo(f"  Last generated: {template.last_generated or 'never'}")
    click.echo(f"  Active: {'yes' if template.is_active else 'no'}")
    if template.tags:
        click.echo(f"  Tags: {', '.join(template.tags)}")
    exceptions = service.list_exceptions(template.id)
    if exceptions:
        click.echo(f"  Exceptions: {len(exceptions)}")


@template_group.command("update")
@click.argument("template_id")
@click.option("--type", "type_", type=click.Choice([t.value for t in TransactionType]), help="Transaction type")
@click.option("--company", help="Payee or payer")
@click.option("--amount-type", type=click.Choice([a.value for a in AmountType]), help="Amount type")
@click.option("--amount", help="Amount for fixed templates")
@click.option("--estimated-amount", help="Expected amount for variable templates")
@click.option("--frequency", type=click.Choice(list(TEMPLATE_FREQUENCIES)), help="Recurrence frequency")
@click.option("--interval", type=int, help="Days between occurrences (custom frequency)")
@click.option("--start-date", help="First occurrence (YYYY-MM-DD)")
@click.option("--end-date", help="No occurrences after this date")
@click.option("--no-end-date", "clear_end_date", is_flag=True, help="Remove the end date")
@click.option("--paid/--unpaid", default=None, help="Paid status of generated transactions")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.pass_context
def update_template(
    ctx,
    template_id: str,
    type_: str | None,
    company: str | None,
    amount_type: str | None,
    amount: str | None,
    estimated_amount: str | None,
    frequency: str | None,
    interval: int | None,
    start_date: str | None,
    end_date: str | None,
    clear_end_date: bool,
    paid: bool | None,
    tags: tuple[str, ...],
):
    """Update a template. Only the given fields change.

    Renaming the company means transactions generated before the rename
    are no longer recognized as duplicates of future occurrences.
    """
    service = TemplateService(ctx.obj["db"])

    if end_date and clear_end_date:
        click.echo("Error: --end-date cannot be combined with --no-end-date", err=True)
        ctx.exit(1)

    try:
        template = service.update_template(
            template_id,
            clear_end_date=clear_end_date,
            type=type_,
            company=company,
            amount_type=amount_type,
            amount=_parse_optional_amount(ctx, amount),
            estimated_amount=_parse_optional_amount(ctx, estimated_amount),
            recurrence_pattern=_pattern(ctx, frequency, interval),
            start_date=_parse_optional_date(ctx, start_date, "start date"),
            end_date=_parse_optional_date(ctx, end_date, "end date"),
            paid=paid,
            tags=list(tags) if tags else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated template {template.id}")


@template_group.command("activate")
@click.argument("template_id")
@click.pass_context
def activate_template(ctx, template_id: str):
    """Resume generating transactions from a template."""
    service = TemplateService(ctx.obj["db"])
    try:
        service.set_active(template_id, True)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Activated template {template_id}")


@template_group.command("deactivate")
@click.argument("template_id")
@click.pass_context
def deactivate_template(ctx, template_id: str):
    """Stop generating transactions from a template."""
    service = TemplateService(ctx.obj["db"])
    try:
        service.set_active(template_id, False)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated template {template_id}")


@template_group.command("delete")
@click.argument("template_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_template(ctx, template_id: str, yes: bool):
    """Delete a template. Generated transactions are kept."""
    service = TemplateService(ctx.obj["db"])
    if not yes:
        click.confirm(f"Delete template {template_id}?", abort=True)
    try:
        service.delete_template(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted template {template_id}")


@template_group.command("preview")
@click.argument("template_id")
@click.option("--start-date", help="First day of the window (defaults to today)")
@click.option("--end-date", help="Last day of the window (defaults to 90 days after start)")
@click.pass_context
def preview_template(ctx, template_id: str, start_date: str | None, end_date: str | None):
    """Show the transactions a template would produce in a window.

    Exceptions are applied; nothing is saved.
    """
    service = TemplateService(ctx.obj["db"])
    try:
        template = service.require_template(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    start = _parse_optional_date(ctx, start_date, "start date") or date.today()
    end = _parse_optional_date(ctx, end_date, "end date") or start + timedelta(days=90)

    overrides = {e.occurrence_date: e for e in service.list_exceptions(template.id)}
    shown = 0
    for occurrence in occurrences_between(template, start, end):
        exception = overrides.get(occurrence)
        if exception is not None and exception.exception_type == ExceptionType.SKIP:
            click.echo(f"{occurrence} | skipped")
            continue
        draft = materialize(template, occurrence)
        if exception is not None:
            draft = apply_exception(draft, exception)
        echo_transaction(draft)
        shown += 1

    if shown == 0:
        click.echo("No occurrences in this window.")


@template_group.command("schedule")
@click.option(
    "--frequency",
    required=True,
    type=click.Choice(["monthly", "biweekly", "weekly", "custom"]),
    help="Recurrence frequency",
)
@click.option("--start-date", default="today", show_default=True, help="Anchor date")
@click.option("--interval", type=int, help="Days between occurrences (custom frequency)")
@click.option("--day-of-month", type=click.IntRange(1, 31), help="Anchor day for monthly")
@click.option("--day-of-week", type=click.IntRange(0, 6), help="Weekday for weekly (0 = Sunday)")
@click.option("--day", "days", type=click.IntRange(1, 31), multiple=True, help="Day of month for custom dates (repeatable)")
@click.option("--count", type=click.IntRange(1, 366), default=12, show_default=True, help="Number of dates to show")
@click.pass_context
def schedule(
    ctx,
    frequency: str,
    start_date: str,
    interval: int | None,
    day_of_month: int | None,
    day_of_week: int | None,
    days: tuple[int, ...],
    count: int,
):
    """Print the dates a recurrence pattern produces, without a template.

    Examples:
        pocketledger template schedule --frequency monthly --start-date 2024-01-31
        pocketledger template schedule --frequency weekly --day-of-week 5
        pocketledger template schedule --frequency custom --day 1 --day 15
    """
    start = _parse_optional_date(ctx, start_date, "start date")
    pattern = {
        "frequency": frequency,
        "interval": interval,
        "day_of_month": day_of_month,
        "day_of_week": day_of_week,
        "custom_dates": list(days),
    }
    try:
        rule = parse_recurrence(pattern)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(describe_recurrence(rule))
    for occurrence in islice(iter_rule_dates(rule, start), count):
        click.echo(f"  {occurrence} ({occurrence:%a})")


@template_group.group("exception")
def exception_group():
    """Override single occurrences of a template."""
    pass


@exception_group.command("add")
@click.argument("template_id")
@click.argument("occurrence_date")
@click.option(
    "--type",
    "exception_type",
    required=True,
    type=click.Choice([e.value for e in ExceptionType]),
    help="skip drops the occurrence, amount changes it, date moves it",
)
@click.option("--amount", help="New amount (amount exceptions)")
@click.option("--date", "new_date", help="New date (date exceptions)")
@click.pass_context
def add_exception(
    ctx,
    template_id: str,
    occurrence_date: str,
    exception_type: str,
    amount: str | None,
    new_date: str | None,
):
    """Add or replace the exception for one occurrence.

    Examples:
        pocketledger template exception add 3f2a... 2024-03-31 --type skip
        pocketledger template exception add 3f2a... 2024-04-30 --type amount --amount 1250
    """
    service = TemplateService(ctx.obj["db"])
    occurrence = _parse_optional_date(ctx, occurrence_date, "occurrence date")
    try:
        exception = service.add_exception(
            template_id,
            occurrence,
            exception_type,
            modified_amount=_parse_optional_amount(ctx, amount),
            modified_date=_parse_optional_date(ctx, new_date, "date"),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Added {exception.exception_type.value} exception for {exception.occurrence_date}"
    )


@exception_group.command("remove")
@click.argument("template_id")
@click.argument("occurrence_date")
@click.pass_context
def remove_exception(ctx, template_id: str, occurrence_date: str):
    """Remove the exception for one occurrence."""
    service = TemplateService(ctx.obj["db"])
    occurrence = _parse_optional_date(ctx, occurrence_date, "occurrence date")
    try:
        service.remove_exception(template_id, occurrence)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed exception for {occurrence}")


@exception_group.command("list")
@click.argument("template_id")
@click.pass_context
def list_exceptions(ctx, template_id: str):
    """List the exceptions of a template."""
    service = TemplateService(ctx.obj["db"])
    try:
        service.require_template(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    exceptions = service.list_exceptions(template_id)
    if not exceptions:
        click.echo("No exceptions.")
        return
    for exception in exceptions:
        detail = ""
        if exception.modified_amount is not None:
            detail = f" -> {format_amount(exception.modified_amount)}"
        elif exception.modified_date is not None:
            detail = f" -> {exception.modified_date}"
        click.echo(f"{exception.occurrence_date} | {exception.exception_type.value}{detail}")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group)
