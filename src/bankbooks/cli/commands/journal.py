"""Journal entry commands."""

import click

from bankbooks.cli.company_resolution import resolve_company_or_exit
from bankbooks.cli.error_handling import handle_domain_error
from bankbooks.domain.errors import DomainError, PersistenceError
from bankbooks.domain.journal import JournalEntryGenerator


def _generator(ctx) -> JournalEntryGenerator:
    settings = ctx.obj["settings"]
    return JournalEntryGenerator(ctx.obj["db"], settings.bank_account_code, settings.equity_account_code)


@click.group()
def journal_group():
    """Generate and view journal entries."""
    pass


@journal_group.command("generate")
@click.argument("company", metavar="COMPANY")
@click.option("--period", "fiscal_period_id", type=int, help="Only transactions of this fiscal period")
@click.pass_context
def generate_entries(ctx, company: str, fiscal_period_id: int | None):
    """Create journal entries for classified transactions that have none."""
    found = resolve_company_or_exit(ctx, company)
    transactions = ctx.obj["db"].list_transactions(found.id, fiscal_period_id=fiscal_period_id)
    created = _generator(ctx).generate_journal_entries(transactions, ctx.obj["settings"].created_by)
    click.echo(f"Created {created} journal entries")


@journal_group.command("opening-balance")
@click.argument("company", metavar="COMPANY")
@click.argument("fiscal_period_id", type=int)
@click.pass_context
def opening_balance(ctx, company: str, fiscal_period_id: int):
    """Create (or replace) the opening balance entry of a fiscal period."""
    found = resolve_company_or_exit(ctx, company)
    try:
        entry = _generator(ctx).create_opening_balance_entry(
            found.id, fiscal_period_id, ctx.obj["settings"].created_by
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    if entry is None:
        click.echo("No opening balance to record")
        return
    click.echo(f"Created {entry.reference}: {entry.total_debits}")


@journal_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.option("--period", "fiscal_period_id", type=int, help="Fiscal period ID")
@click.pass_context
def list_entries(ctx, company: str, fiscal_period_id: int | None):
    """List journal entries with their lines."""
    found = resolve_company_or_exit(ctx, company)
    entries = ctx.obj["db"].list_journal_entries(found.id, fiscal_period_id=fiscal_period_id)
    if not entries:
        click.echo("No journal entries found.")
        return
    for entry in entries:
        click.echo(f"\n{entry.reference} | {entry.entry_date} | {entry.description}")
        for line in entry.lines:
            debit = f"{line.debit_amount}" if line.debit_amount is not None else ""
            credit = f"{line.credit_amount}" if line.credit_amount is not None else ""
            click.echo(f"    {line.account_code:10s} {debit:>12s} {credit:>12s}  {line.description}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
