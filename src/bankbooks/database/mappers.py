"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay stable
when the database schema changes.
"""

from bankbooks.domain import entities as domain
from bankbooks.database.models import (
    Company as ORMCompany,
    FiscalPeriod as ORMFiscalPeriod,
    Account as ORMAccount,
    BankTransaction as ORMBankTransaction,
    ClassificationRule as ORMClassificationRule,
    JournalEntry as ORMJournalEntry,
    JournalEntryLine as ORMJournalEntryLine,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        created_at=orm_company.created_at,
    )


def fiscal_period_to_domain(orm_period: ORMFiscalPeriod) -> domain.FiscalPeriod:
    """Convert SQLAlchemy FiscalPeriod model to domain FiscalPeriod entity."""
    return domain.FiscalPeriod(
        id=orm_period.id,
        company_id=orm_period.company_id,
        name=orm_period.name,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        category=orm_account.category,
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMBankTransaction) -> domain.Transaction:
    """Convert SQLAlchemy BankTransaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        fiscal_period_id=orm_transaction.fiscal_period_id,
        transaction_date=orm_transaction.transaction_date,
        details=orm_transaction.details,
        debit_amount=orm_transaction.debit_amount,
        credit_amount=orm_transaction.credit_amount,
        balance=orm_transaction.balance,
        account_code=orm_transaction.account_code,
        account_name=orm_transaction.account_name,
        reference=orm_transaction.reference,
        source_file=orm_transaction.source_file,
        account_number=orm_transaction.account_number,
        created_at=orm_transaction.created_at,
    )


def transaction_to_orm(transaction: domain.Transaction) -> ORMBankTransaction:
    """Convert a domain Transaction into a new SQLAlchemy row (id is assigned on flush)."""
    return ORMBankTransaction(
        company_id=transaction.company_id,
        fiscal_period_id=transaction.fiscal_period_id,
        transaction_date=transaction.transaction_date,
        details=transaction.details,
        debit_amount=transaction.debit_amount,
        credit_amount=transaction.credit_amount,
        balance=transaction.balance,
        account_code=transaction.account_code,
        account_name=transaction.account_name,
        reference=transaction.reference,
        source_file=transaction.source_file,
        account_number=transaction.account_number,
    )


def rule_to_domain(orm_rule: ORMClassificationRule) -> domain.ClassificationRule:
    """Convert SQLAlchemy ClassificationRule model to domain ClassificationRule entity."""
    return domain.ClassificationRule(
        id=orm_rule.id,
        company_id=orm_rule.company_id,
        pattern=orm_rule.pattern,
        match_type=domain.MatchType(orm_rule.match_type),
        account_code=orm_rule.account_code,
        account_name=orm_rule.account_name,
        priority=orm_rule.priority,
        usage_count=orm_rule.usage_count,
        rule_name=orm_rule.rule_name,
        is_active=orm_rule.is_active,
        is_learned=orm_rule.is_learned,
        created_at=orm_rule.created_at,
    )


def journal_line_to_domain(orm_line: ORMJournalEntryLine) -> domain.JournalEntryLine:
    """Convert SQLAlchemy JournalEntryLine model to domain JournalEntryLine entity."""
    return domain.JournalEntryLine(
        id=orm_line.id,
        account_id=orm_line.account_id,
        account_code=orm_line.account.code,
        description=orm_line.description,
        debit_amount=orm_line.debit_amount,
        credit_amount=orm_line.credit_amount,
        source_transaction_id=orm_line.source_transaction_id,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with lines) to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        reference=orm_entry.reference,
        entry_date=orm_entry.entry_date,
        description=orm_entry.description,
        company_id=orm_entry.company_id,
        fiscal_period_id=orm_entry.fiscal_period_id,
        created_by=orm_entry.created_by,
        created_at=orm_entry.created_at,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
    )
