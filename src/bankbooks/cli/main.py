"""Main CLI entry point."""

import logging

import click

from bankbooks.config import ConfigValidationError, load_settings
from bankbooks.database.factories import create_sqlite_database

# Import and register all commands at module level
from bankbooks.cli.commands import company, statement, rules, classify, journal


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKBOOKS_DB_PATH environment variable)",
    envvar="BANKBOOKS_DB_PATH",
)
@click.option("-v", "--verbose", count=True, help="Log more (-v for INFO, -vv for DEBUG)")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: int):
    """Bankbooks - bank statements to double-entry journals.

    Import bank statement text, classify transactions with pattern rules and
    generate balanced journal entries.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ConfigValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    level = settings.log_level.upper()
    if verbose == 1:
        level = "INFO"
    elif verbose > 1:
        level = "DEBUG"
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path or settings.database_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
statement.register_commands(cli)
rules.register_commands(cli)
classify.register_commands(cli)
journal.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
