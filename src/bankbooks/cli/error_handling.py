"""Turning bookkeeping failures into CLI exit messages.

Every command reports a failure on stderr with one ``Error:`` line and
exits with status 1. Storage failures get a hint to rerun with ``-vv``,
where the traceback is logged.
"""

import logging

import click

from bankbooks.domain.errors import DomainError, ParseError, PersistenceError, UnbalancedEntryError

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1

_KIND_LABELS = (
    (ParseError, "statement could not be read"),
    (UnbalancedEntryError, "journal entry does not balance"),
)


def describe_error(error: Exception) -> str:
    """One-line description of a failure for the terminal."""
    if isinstance(error, PersistenceError):
        return f"Error: database operation failed: {error} (rerun with -vv for details)"
    for kind, label in _KIND_LABELS:
        if isinstance(error, kind):
            return f"Error: {label}: {error}"
    return f"Error: {error}"


def handle_domain_error(ctx: click.Context, error: DomainError | PersistenceError | ValueError) -> None:
    """Report a failed command and exit with status 1."""
    logger.debug("Command %s failed", ctx.command_path, exc_info=error)
    click.echo(describe_error(error), err=True)
    ctx.exit(EXIT_FAILURE)
