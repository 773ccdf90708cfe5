"""Utility functions for bankbooks."""

from bankbooks.utils.date_parser import parse_date
from bankbooks.utils.amount_parser import parse_amount
from bankbooks.utils.company_resolver import resolve_company

__all__ = ["parse_date", "parse_amount", "resolve_company"]
