"""Company, fiscal period and chart-of-accounts domain service."""

from datetime import date
from typing import Optional

from bankbooks.database.base import Database
from bankbooks.domain.chart import (
    BANK_ACCOUNT_CODE,
    BANK_ACCOUNT_NAME,
    OPENING_BALANCE_EQUITY_CODE,
    OPENING_BALANCE_EQUITY_NAME,
    infer_account_type,
    infer_category,
)
from bankbooks.domain.entities import Account, AccountType, Company, FiscalPeriod
from bankbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    company_not_found,
    duplicate_account_code,
)


class CompanyService:
    """Service for managing companies and their books."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_company(self, name: str) -> int:
        """Create a new company.

        Args:
            name: Company name

        Returns:
            Company ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a company with that name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Company name must not be empty")
        if self.db.get_company_by_name(name) is not None:
            raise ConflictError(f"Company '{name}' already exists")
        return self.db.create_company(name)

    def get_company(self, company_id: int) -> Optional[Company]:
        return self.db.get_company(company_id)

    def require_company(self, company_id: int) -> Company:
        """Get company by ID or raise NotFoundError."""
        company = self.db.get_company(company_id)
        if company is None:
            raise NotFoundError(company_not_found(company_id))
        return company

    def list_companies(self) -> list[Company]:
        return self.db.list_companies()

    def add_fiscal_period(self, company_id: int, name: str, start_date: date, end_date: date) -> int:
        """Add a fiscal period to a company.

        Returns:
            Fiscal period ID

        Raises:
            ValidationError: If the end date is before the start date
            ConflictError: If the period overlaps an existing one
        """
        self.require_company(company_id)
        if end_date < start_date:
            raise ValidationError(f"Fiscal period ends ({end_date}) before it starts ({start_date})")
        for period in self.db.list_fiscal_periods(company_id):
            if start_date <= period.end_date and period.start_date <= end_date:
                raise ConflictError(f"Fiscal period overlaps '{period.name}'")
        return self.db.create_fiscal_period(company_id, name, start_date, end_date)

    def list_fiscal_periods(self, company_id: int) -> list[FiscalPeriod]:
        return self.db.list_fiscal_periods(company_id)

    def add_account(
        self,
        company_id: int,
        code: str,
        name: str,
        account_type: Optional[AccountType] = None,
        category: Optional[str] = None,
    ) -> int:
        """Add an account to a company's chart.

        Type and category are inferred from the code unless given.

        Returns:
            Account ID

        Raises:
            ValidationError: If the code is empty or the type cannot be inferred
            ConflictError: If the code already exists for the company
        """
        self.require_company(company_id)
        code = code.strip()
        if not code:
            raise ValidationError("Account code must not be empty")
        if self.db.get_account_by_code(company_id, code) is not None:
            raise ConflictError(duplicate_account_code(company_id, code))
        return self.db.create_account(
            company_id=company_id,
            code=code,
            name=name,
            account_type=account_type or infer_account_type(code),
            category=category or infer_category(code),
        )

    def list_accounts(self, company_id: int) -> list[Account]:
        return self.db.list_accounts(company_id)

    def ensure_core_accounts(
        self,
        company_id: int,
        bank_account_code: str = BANK_ACCOUNT_CODE,
        equity_account_code: str = OPENING_BALANCE_EQUITY_CODE,
    ) -> int:
        """Make sure the bank and opening balance equity accounts exist.

        Returns:
            Number of accounts created
        """
        created = 0
        if self.db.get_account_by_code(company_id, bank_account_code) is None:
            self.add_account(company_id, bank_account_code, BANK_ACCOUNT_NAME, AccountType.ASSET)
            created += 1
        if self.db.get_account_by_code(company_id, equity_account_code) is None:
            self.add_account(company_id, equity_account_code, OPENING_BALANCE_EQUITY_NAME, AccountType.EQUITY)
            created += 1
        return created
