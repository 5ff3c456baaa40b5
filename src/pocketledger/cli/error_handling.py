"""CLI error handling helpers."""

import click

from pocketledger.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Validation errors list every violated rule on its own line.
    """
    if isinstance(error, ValidationError) and len(error.errors) > 1:
        click.echo("Error: Validation failed", err=True)
        for message in error.errors:
            click.echo(f"  - {message}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
