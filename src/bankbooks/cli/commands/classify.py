"""Classification and batch processing commands."""

import click

from bankbooks.cli.company_resolution import resolve_company_or_exit
from bankbooks.cli.error_handling import handle_domain_error
from bankbooks.domain.batch import TransactionBatchProcessor
from bankbooks.domain.classification import ClassificationService
from bankbooks.domain.errors import DomainError
from bankbooks.domain.journal import JournalEntryGenerator


@click.command("classify")
@click.argument("company", metavar="COMPANY")
@click.option("--all", "reclassify", is_flag=True, help="Re-run the rules over every transaction")
@click.pass_context
def classify_transactions(ctx, company: str, reclassify: bool):
    """Classify a company's transactions with its rules.

    Without --all only unclassified transactions are touched.
    """
    found = resolve_company_or_exit(ctx, company)
    service = ClassificationService(ctx.obj["db"])
    if reclassify:
        updated = service.reclassify_all(found.id)
        click.echo(f"Reclassified {updated} transactions")
    else:
        classified = service.auto_classify(found.id)
        remaining = len(ctx.obj["db"].list_transactions(found.id, unclassified_only=True))
        click.echo(f"Classified {classified} transactions ({remaining} still unclassified)")


@click.command("process")
@click.argument("company", metavar="COMPANY")
@click.option("--validate", is_flag=True, help="Reject the batch if any transaction is incomplete")
@click.option("--time-budget", type=float, help="Stop starting new transactions after this many seconds")
@click.option("--dry-run", is_flag=True, help="Only report how many transactions would classify")
@click.pass_context
def process_batch(ctx, company: str, validate: bool, time_budget: float | None, dry_run: bool):
    """Classify and journal a company's unclassified transactions."""
    found = resolve_company_or_exit(ctx, company)
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    processor = TransactionBatchProcessor(
        ClassificationService(db),
        JournalEntryGenerator(db, settings.bank_account_code, settings.equity_account_code),
    )
    transactions = db.list_transactions(found.id, unclassified_only=True)

    if dry_run:
        stats = processor.process_batch_with_statistics(transactions, found.id)
        click.echo(f"Processed: {stats.processed}")
        click.echo(f"Would classify: {stats.classified}")
        click.echo(f"Unclassified: {stats.unclassified}")
        return

    try:
        if validate:
            result = processor.process_batch_validated(transactions, found.id, settings.created_by, time_budget)
        else:
            result = processor.process_batch(transactions, found.id, settings.created_by, time_budget)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nBatch complete:")
    click.echo(f"  Processed: {result.processed}")
    click.echo(f"  Classified: {result.classified}")
    click.echo(f"  Failed: {result.failed}")
    if result.aborted:
        click.echo(f"  Not started (time budget): {result.aborted}")
    for error in result.errors[:10]:
        click.echo(f"    - {error}")
    if len(result.errors) > 10:
        click.echo(f"    ... and {len(result.errors) - 10} more")


@click.command("transactions")
@click.argument("company", metavar="COMPANY")
@click.option("--unclassified", is_flag=True, help="Only show unclassified transactions")
@click.option("--period", "fiscal_period_id", type=int, help="Fiscal period ID")
@click.pass_context
def list_transactions(ctx, company: str, unclassified: bool, fiscal_period_id: int | None):
    """List a company's transactions."""
    found = resolve_company_or_exit(ctx, company)
    transactions = ctx.obj["db"].list_transactions(
        found.id, fiscal_period_id=fiscal_period_id, unclassified_only=unclassified
    )
    if not transactions:
        click.echo("No transactions found.")
        return
    for txn in transactions:
        amount = f"-{txn.debit_amount}" if txn.is_expense else f"+{txn.credit_amount}"
        account = txn.account_code or "-"
        click.echo(f"{txn.id:5d} | {txn.transaction_date} | {amount:>12s} | {account:10s} | {txn.details}")


def register_commands(cli):
    """Register classification commands with main CLI."""
    cli.add_command(classify_transactions)
    cli.add_command(process_batch)
    cli.add_command(list_transactions)
