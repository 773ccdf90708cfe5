"""Utility for resolving company names to IDs."""

from bankbooks.database.base import Database


def resolve_company(db: Database, company: str | int) -> int:
    """Resolve company name or ID to company ID.

    Args:
        db: Database instance
        company: Company name (str) or ID (int or string representation of int)

    Returns:
        Company ID

    Raises:
        ValueError: If company is not found
    """
    if isinstance(company, int):
        if db.get_company(company) is None:
            raise ValueError(f"Company ID {company} not found")
        return company

    # Numeric strings are treated as IDs
    try:
        company_id = int(company)
    except (ValueError, TypeError):
        company_id = None
    if company_id is not None:
        if db.get_company(company_id) is None:
            raise ValueError(f"Company ID {company_id} not found")
        return company_id

    found = db.get_company_by_name(company)
    if found is None:
        raise ValueError(f"Company '{company}' not found")
    return found.id
