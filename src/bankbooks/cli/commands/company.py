"""Company, fiscal period and account commands."""

import click

from bankbooks.cli.company_resolution import resolve_company_or_exit
from bankbooks.cli.error_handling import handle_domain_error
from bankbooks.domain.company import CompanyService
from bankbooks.domain.entities import AccountType
from bankbooks.domain.errors import DomainError
from bankbooks.domain.rules import RuleService
from bankbooks.utils.date_parser import parse_date


@click.group()
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name", metavar="COMPANY_NAME")
@click.pass_context
def create_company(ctx, name: str):
    """Create a new company.

    Examples:
        bankbooks company create "Acme Trading"
    """
    service = CompanyService(ctx.obj["db"])
    try:
        company_id = service.create_company(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created company '{name}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List all companies."""
    companies = CompanyService(ctx.obj["db"]).list_companies()
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\nCompanies:")
    click.echo("-" * 60)
    for company in companies:
        click.echo(f"ID: {company.id:3d} | {company.name}")


@company_group.command("setup")
@click.argument("company", metavar="COMPANY")
@click.option("--no-rules", is_flag=True, help="Skip installing the standard classification rules")
@click.pass_context
def setup_company(ctx, company: str, no_rules: bool):
    """Create the bank and equity accounts and the standard rules.

    COMPANY can be a company name or ID.
    """
    found = resolve_company_or_exit(ctx, company)
    settings = ctx.obj["settings"]
    try:
        accounts = CompanyService(ctx.obj["db"]).ensure_core_accounts(
            found.id, settings.bank_account_code, settings.equity_account_code
        )
        rules = 0 if no_rules else RuleService(ctx.obj["db"]).seed_standard_rules(found.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created {accounts} accounts and {rules} rules for '{found.name}'")


@click.group()
def period_group():
    """Manage fiscal periods."""
    pass


@period_group.command("add")
@click.argument("company", metavar="COMPANY")
@click.argument("name", metavar="PERIOD_NAME")
@click.argument("start", metavar="START_DATE")
@click.argument("end", metavar="END_DATE")
@click.pass_context
def add_period(ctx, company: str, name: str, start: str, end: str):
    """Add a fiscal period (both dates inclusive).

    Examples:
        bankbooks period add "Acme Trading" FY2024 2024-03-01 2025-02-28
    """
    found = resolve_company_or_exit(ctx, company)
    try:
        period_id = CompanyService(ctx.obj["db"]).add_fiscal_period(
            found.id, name, parse_date(start), parse_date(end)
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created fiscal period '{name}' (ID: {period_id})")


@period_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def list_periods(ctx, company: str):
    """List a company's fiscal periods."""
    found = resolve_company_or_exit(ctx, company)
    periods = CompanyService(ctx.obj["db"]).list_fiscal_periods(found.id)
    if not periods:
        click.echo("No fiscal periods found.")
        return
    for period in periods:
        click.echo(f"ID: {period.id:3d} | {period.name:12s} | {period.start_date} to {period.end_date}")


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("add")
@click.argument("company", metavar="COMPANY")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    help="Account type (inferred from the code if omitted)",
)
@click.option("--category", help="Reporting category (inferred from the code if omitted)")
@click.pass_context
def add_account(ctx, company: str, code: str, name: str, account_type: str | None, category: str | None):
    """Add an account to a company's chart."""
    found = resolve_company_or_exit(ctx, company)
    try:
        account_id = CompanyService(ctx.obj["db"]).add_account(
            found.id,
            code,
            name,
            AccountType(account_type.upper()) if account_type else None,
            category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created account {code} '{name}' (ID: {account_id})")


@account_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def list_accounts(ctx, company: str):
    """List a company's chart of accounts."""
    found = resolve_company_or_exit(ctx, company)
    accounts = CompanyService(ctx.obj["db"]).list_accounts(found.id)
    if not accounts:
        click.echo("No accounts found.")
        return
    for account in accounts:
        click.echo(f"{account.code:10s} | {account.name:30s} | {account.account_type.value:9s} | {account.category}")


def register_commands(cli):
    """Register company, period and account commands with main CLI."""
    cli.add_command(company_group, name="company")
    cli.add_command(period_group, name="period")
    cli.add_command(account_group, name="account")
