"""Shared pytest fixtures for bankbooks tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest
from click.testing import CliRunner

from bankbooks.database.factories import create_sqlite_database
from bankbooks.domain.classification import ClassificationService
from bankbooks.domain.company import CompanyService
from bankbooks.domain.entities import Transaction
from bankbooks.domain.journal import JournalEntryGenerator
from bankbooks.domain.rules import RuleService
from bankbooks.domain.statement_import import StatementImportService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a RuleService with a temporary database."""
    return RuleService(temp_db)


@pytest.fixture
def classification_service(temp_db):
    """Create a ClassificationService with a temporary database."""
    return ClassificationService(temp_db)


@pytest.fixture
def journal_generator(temp_db):
    """Create a JournalEntryGenerator with a temporary database."""
    return JournalEntryGenerator(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def sample_company(company_service):
    """Create a sample company for testing."""
    company_id = company_service.create_company("Acme Trading")
    return company_service.get_company(company_id)


@pytest.fixture
def sample_period(company_service, sample_company):
    """Create a calendar-2024 fiscal period."""
    period_id = company_service.add_fiscal_period(
        sample_company.id, "FY2024", date(2024, 1, 1), date(2024, 12, 31)
    )
    return company_service.db.get_fiscal_period(period_id)


@pytest.fixture
def core_accounts(company_service, sample_company):
    """Create the bank (1100) and opening balance equity (3900) accounts."""
    company_service.ensure_core_accounts(sample_company.id)
    return company_service.list_accounts(sample_company.id)


@pytest.fixture
def make_transactions(temp_db, sample_company, sample_period):
    """Store transactions given as (details, debit, credit) or (details, debit, credit, balance, date)."""

    def _make(*rows):
        transactions = []
        for index, row in enumerate(rows):
            details, debit, credit = row[:3]
            balance = row[3] if len(row) > 3 else None
            txn_date = row[4] if len(row) > 4 else date(2024, 1, 10 + index)
            transactions.append(
                Transaction(
                    id=None,
                    company_id=sample_company.id,
                    fiscal_period_id=sample_period.id,
                    transaction_date=txn_date,
                    details=details,
                    debit_amount=Decimal(debit),
                    credit_amount=Decimal(credit),
                    balance=Decimal(balance) if balance is not None else None,
                    reference=f"REF{index:04d}",
                )
            )
        return temp_db.create_transactions(transactions)

    return _make


@pytest.fixture
def statement_lines():
    """Extracted lines of a small January 2024 statement."""
    return [
        "BANK STATEMENT",
        "Account Number: 12-345-678",
        "Statement Period: 01 January 2024 to 31 January 2024",
        "Date Details Debits Credits Balance",
        "02 01 BALANCE BROUGHT FORWARD 5,000.00",
        "05 01 DEBIT ORDER KINGPRICE INSURANCE 500.00 4,500.00",
        "POLICY 77881234",
        "10 01 IB PAYMENT FROM CLIENT ABC 2,500.00 7,000.00",
        "PAGE 2",
        "CONTINUED",
        "15 01 SERVICE FEE 45.00 6,955.00",
        "16 01 SALARY PAYMENT FROM ACME 10,000.00 15,000.00",
        "CLOSING BALANCE: 15,000.00",
    ]


@pytest.fixture
def statement_file(tmp_path, statement_lines):
    """Write the sample statement to a text file."""
    path = tmp_path / "statement_jan_2024.txt"
    path.write_text("\n".join(statement_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()
