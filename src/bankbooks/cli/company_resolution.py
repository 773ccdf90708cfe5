"""CLI helpers for company resolution."""

from __future__ import annotations

import click

from bankbooks.domain.entities import Company
from bankbooks.utils.company_resolver import resolve_company


def resolve_company_or_exit(ctx: click.Context, company: str | int) -> Company:
    """Resolve company name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    db = ctx.obj["db"]
    try:
        return db.get_company(resolve_company(db, company))
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
