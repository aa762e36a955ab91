"""CLI error handling helpers."""

import logging

import click

from stmtimport.domain.errors import ConfigurationError, DomainError

logger = logging.getLogger(__name__)


def handle_import_error(ctx: click.Context, error: DomainError | FileNotFoundError) -> None:
    """Report a request-level failure and exit with status 1.

    Configuration errors abort before any record is stored, so the user
    is told that nothing was imported.
    """
    logger.debug("Import aborted", exc_info=error)
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ConfigurationError):
        click.echo("No transactions were imported.", err=True)
    ctx.exit(1)
