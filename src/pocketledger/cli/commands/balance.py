"""Balance and forecast commands."""

from datetime import date, timedelta

import click

from pocketledger.cli.date_filters import period_options, resolve_cli_date_range
from pocketledger.cli.display import echo_transaction, format_amount
from pocketledger.domain.analytics import AnalyticsService, calculate_balance
from pocketledger.domain.recurring import RecurringService
from pocketledger.utils.date_parser import parse_date


@click.command("balance")
@click.option("--end-date", default="today", show_default=True, help="Include transactions up to this date")
@click.option("--include-unpaid", is_flag=True, help="Count unpaid transactions too")
@click.option("--include-savings", is_flag=True, help="Add current savings account balances")
@click.pass_context
def balance(ctx, end_date: str, include_unpaid: bool, include_savings: bool):
    """Show the account balance as of a date."""
    service = AnalyticsService(ctx.obj["db"])

    try:
        end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid end date: {e}", err=True)
        ctx.exit(1)

    summary = service.balance(end, include_unpaid=include_unpaid, include_savings=include_savings)
    scope = "all" if summary.include_unpaid else "paid"
    click.echo(f"Balance as of {summary.end_date}: {format_amount(summary.balance)}")
    click.echo(f"  ({summary.count} {scope} transactions)")
    if summary.savings is not None:
        click.echo(f"  (includes {format_amount(summary.savings)} in savings)")


@click.command("totals")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.pass_context
def totals(ctx, start_date: str | None, end_date: str | None, **period_flags: bool):
    """Show income, expenses and net for a period (defaults to this month)."""
    service = AnalyticsService(ctx.obj["db"])
    today = date.today()
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags,
        default_range=(today.replace(day=1), today),
    )
    start = start or date.min
    end = end or today

    result = service.period_totals(start, end)
    click.echo(f"Income:   {format_amount(result['income'])}")
    click.echo(f"Expenses: {format_amount(result['expenses'])}")
    click.echo(f"Net:      {format_amount(result['net'])}")


@click.command("forecast")
@click.option("--start-date", help="First day of the forecast (defaults to tomorrow)")
@click.option("--days", type=click.IntRange(1, 3660), default=30, show_default=True, help="Forecast length")
@click.pass_context
def forecast(ctx, start_date: str | None, days: int):
    """Project upcoming transactions from active templates.

    Nothing is saved; variable templates show as pending zero amounts.
    """
    service = RecurringService(ctx.obj["db"])

    start = date.today() + timedelta(days=1)
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)
    end = start + timedelta(days=days - 1)

    drafts = service.forecast(start, end)
    if not drafts:
        click.echo("No upcoming recurring transactions.")
        return

    for draft in drafts:
        echo_transaction(draft)
    click.echo(f"\n{len(drafts)} transactions from {start} to {end}, net {format_amount(calculate_balance(drafts))}")


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance)
    cli.add_command(totals)
    cli.add_command(forecast)
