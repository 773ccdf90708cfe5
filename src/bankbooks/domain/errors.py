"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ParseError(DomainError):
    """A statement line could not be interpreted."""


class UnbalancedEntryError(DomainError):
    """Journal entry debits and credits differ."""


class LookupFailure(NotFoundError):
    """A well-known account (bank, equity) is missing from the chart."""


class PersistenceError(RuntimeError):
    """Storage failed; the enclosing unit of work was rolled back."""


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def fiscal_period_not_found(fiscal_period_id: int) -> str:
    """Return message for missing fiscal period."""
    return f"Fiscal period {fiscal_period_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def account_code_not_found(company_id: int, code: str) -> str:
    """Return message for missing account code in a company's chart."""
    return f"Account '{code}' not found for company {company_id}"


def duplicate_account_code(company_id: int, code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account '{code}' already exists for company {company_id}"


def unbalanced_entry(reference: str, debits, credits) -> str:
    """Return message for a journal entry whose sides differ."""
    return f"Journal entry {reference} is unbalanced: debits {debits} != credits {credits}"
