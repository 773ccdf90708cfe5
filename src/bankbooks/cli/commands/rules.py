"""Classification rule and manual categorisation commands."""

import click

from bankbooks.cli.company_resolution import resolve_company_or_exit
from bankbooks.cli.error_handling import handle_domain_error
from bankbooks.domain.entities import MatchType
from bankbooks.domain.errors import DomainError
from bankbooks.domain.rules import RuleService


@click.group()
def rules_group():
    """Manage classification rules."""
    pass


@rules_group.command("seed")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def seed_rules(ctx, company: str):
    """Install the standard rules for a company."""
    found = resolve_company_or_exit(ctx, company)
    try:
        created = RuleService(ctx.obj["db"]).seed_standard_rules(found.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Installed {created} standard rules for '{found.name}'")


@rules_group.command("add")
@click.argument("company", metavar="COMPANY")
@click.argument("pattern")
@click.argument("account_code")
@click.argument("account_name")
@click.option(
    "--match-type",
    type=click.Choice([m.value for m in MatchType], case_sensitive=False),
    default=MatchType.CONTAINS.value,
    show_default=True,
)
@click.option("--priority", type=int, default=0, show_default=True)
@click.option("--name", "rule_name", help="Rule label")
@click.pass_context
def add_rule(
    ctx,
    company: str,
    pattern: str,
    account_code: str,
    account_name: str,
    match_type: str,
    priority: int,
    rule_name: str | None,
):
    """Add a classification rule.

    Examples:
        bankbooks rules add "Acme Trading" "KING PRICE" 8800-001 "Vehicle Insurance" --priority 9
        bankbooks rules add 1 "IMMEDIATE PAYMENT \\d+ .*" 8100 "Employee Costs" --match-type REGEX
    """
    found = resolve_company_or_exit(ctx, company)
    try:
        rule_id = RuleService(ctx.obj["db"]).add_rule(
            found.id, pattern, account_code, account_name, MatchType(match_type.upper()), priority, rule_name
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created rule {rule_id}: '{pattern}' -> {account_code}")


@rules_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def list_rules(ctx, company: str):
    """List a company's rules in the order they are tried."""
    found = resolve_company_or_exit(ctx, company)
    rules = RuleService(ctx.obj["db"]).list_rules(found.id)
    if not rules:
        click.echo("No rules found.")
        return
    for rule in rules:
        status = "" if rule.is_active else " (inactive)"
        click.echo(
            f"ID: {rule.id:3d} | P{rule.priority:<3d} | {rule.match_type.value:11s} | "
            f"{rule.pattern:30s} -> {rule.account_code} {rule.account_name} "
            f"[used {rule.usage_count}]{status}"
        )


@click.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("account_code")
@click.argument("account_name")
@click.option("--no-learn", is_flag=True, help="Do not turn the description into a rule")
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, account_code: str, account_name: str, no_learn: bool):
    """Classify a transaction by hand and learn a rule from it.

    Examples:
        bankbooks categorize 12 8800-001 "Vehicle Insurance"
    """
    db = ctx.obj["db"]
    try:
        if no_learn:
            if db.get_transaction(transaction_id) is None:
                click.echo(f"Error: Transaction {transaction_id} not found", err=True)
                ctx.exit(1)
            db.update_transaction_classification(transaction_id, account_code, account_name)
            rule = None
        else:
            rule = RuleService(db).learn_from_manual_classification(transaction_id, account_code, account_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Transaction {transaction_id} classified as {account_code} '{account_name}'")
    if rule is not None:
        click.echo(f"Learned rule '{rule.pattern}' (used {rule.usage_count} times)")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rules_group, name="rules")
    cli.add_command(categorize_transaction)
