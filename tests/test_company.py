"""Tests for the company service."""

from datetime import date

import pytest

from bankbooks.domain.entities import AccountType
from bankbooks.domain.errors import ConflictError, NotFoundError, ValidationError


class TestCompanies:
    """Tests for company management."""

    def test_create_and_get(self, company_service):
        """Test creating a company."""
        company_id = company_service.create_company("  Acme Trading ")
        assert company_service.get_company(company_id).name == "Acme Trading"

    def test_empty_name(self, company_service):
        """Test that a blank name is rejected."""
        with pytest.raises(ValidationError):
            company_service.create_company("   ")

    def test_duplicate_name(self, company_service, sample_company):
        """Test that company names are unique."""
        with pytest.raises(ConflictError):
            company_service.create_company("Acme Trading")

    def test_require_missing_company(self, company_service):
        """Test that require_company raises for an unknown ID."""
        with pytest.raises(NotFoundError):
            company_service.require_company(999)


class TestFiscalPeriods:
    """Tests for fiscal periods."""

    def test_end_before_start(self, company_service, sample_company):
        """Test that a period must not end before it starts."""
        with pytest.raises(ValidationError):
            company_service.add_fiscal_period(sample_company.id, "Bad", date(2024, 2, 1), date(2024, 1, 1))

    def test_overlapping_period(self, company_service, sample_period):
        """Test that overlapping periods are rejected."""
        with pytest.raises(ConflictError, match="FY2024"):
            company_service.add_fiscal_period(
                sample_period.company_id, "Mid", date(2024, 12, 31), date(2025, 6, 30)
            )

    def test_adjacent_period(self, company_service, sample_period):
        """Test that a period starting the day after another is fine."""
        company_service.add_fiscal_period(sample_period.company_id, "FY2025", date(2025, 1, 1), date(2025, 12, 31))
        assert len(company_service.list_fiscal_periods(sample_period.company_id)) == 2


class TestAccounts:
    """Tests for the chart of accounts."""

    def test_type_and_category_inferred(self, company_service, sample_company):
        """Test that type and category follow the account code."""
        company_service.add_account(sample_company.id, "8600-002", "Fuel")

        account = company_service.db.get_account_by_code(sample_company.id, "8600-002")
        assert account.account_type is AccountType.EXPENSE
        assert account.category == "Fuel Expenses"

    def test_explicit_type(self, company_service, sample_company):
        """Test that an explicit type overrides inference."""
        company_service.add_account(sample_company.id, "2100", "Overdraft", AccountType.LIABILITY, "Bank")
        account = company_service.db.get_account_by_code(sample_company.id, "2100")
        assert account.category == "Bank"

    def test_uninferable_code(self, company_service, sample_company):
        """Test that codes not starting with 1-9 need an explicit type."""
        with pytest.raises(ValidationError):
            company_service.add_account(sample_company.id, "X100", "Mystery")

    def test_duplicate_code(self, company_service, sample_company):
        """Test that a code can only be added once."""
        company_service.add_account(sample_company.id, "9600", "Bank Charges")
        with pytest.raises(ConflictError):
            company_service.add_account(sample_company.id, "9600", "Bank Charges")

    def test_ensure_core_accounts_is_idempotent(self, company_service, sample_company):
        """Test that core accounts are only created once."""
        assert company_service.ensure_core_accounts(sample_company.id) == 2
        assert company_service.ensure_core_accounts(sample_company.id) == 0

        codes = [a.code for a in company_service.list_accounts(sample_company.id)]
        assert codes == ["1100", "3900"]
        equity = company_service.db.get_account_by_code(sample_company.id, "3900")
        assert equity.account_type is AccountType.EQUITY
