"""Statement import command."""

import click

from bankbooks.cli.company_resolution import resolve_company_or_exit
from bankbooks.cli.error_handling import handle_domain_error
from bankbooks.domain.errors import DomainError, PersistenceError
from bankbooks.domain.statement_import import StatementImportService
from bankbooks.utils.text_extractor import PlainTextExtractor


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--company", required=True, help="Company name or ID")
@click.option("--period", "statement_period", help="Statement period, e.g. '01 January 2024 to 31 January 2024'")
@click.pass_context
def import_statement(ctx, statement_file: str, company: str, statement_period: str | None):
    """Import transactions from an extracted bank statement text file.

    The statement period and account number are read from the text; --period
    overrides the detected period.

    Examples:
        bankbooks import statement.txt --company "Acme Trading"
    """
    found = resolve_company_or_exit(ctx, company)
    service = StatementImportService(ctx.obj["db"])
    extractor = PlainTextExtractor()

    try:
        if statement_period is None:
            result = service.import_document(extractor, statement_file, found)
        else:
            lines = extractor.extract_lines(statement_file)
            transactions = service.parse_statement(
                lines,
                found,
                statement_period=statement_period,
                source_file=click.format_filename(statement_file, shorten=True),
                account_number=extractor.account_number(),
            )
            result = {
                "imported": len(transactions),
                "account_number": extractor.account_number(),
                "statement_period": statement_period,
            }
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']}")
    if result["account_number"]:
        click.echo(f"  Account number: {result['account_number']}")
    if result["statement_period"]:
        click.echo(f"  Statement period: {result['statement_period']}")


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(import_statement)
