"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from bankbooks.domain.entities import (
    Account,
    AccountType,
    ClassificationRule,
    Company,
    FiscalPeriod,
    JournalEntry,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for bankbooks.

    Lookup caches register themselves here; implementations call
    ``_rules_changed`` and ``_accounts_changed`` after every write that
    affects a company's rules or chart of accounts.
    """

    _caches: list

    def register_cache(self, cache) -> None:
        """Register a cache to be invalidated when rules or accounts change."""
        if not hasattr(self, "_caches"):
            self._caches = []
        if cache not in self._caches:
            self._caches.append(cache)

    def _rules_changed(self, company_id: int) -> None:
        for cache in getattr(self, "_caches", []):
            cache.invalidate_rules(company_id)

    def _accounts_changed(self, company_id: int) -> None:
        for cache in getattr(self, "_caches", []):
            cache.invalidate_accounts(company_id)

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company operations
    @abstractmethod
    def create_company(self, name: str) -> int:
        """Create a new company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def get_company_by_name(self, name: str) -> Optional[Company]:
        """Get company by name."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Fiscal period operations
    @abstractmethod
    def create_fiscal_period(self, company_id: int, name: str, start_date: date, end_date: date) -> int:
        """Create a fiscal period. Returns fiscal period ID."""
        pass

    @abstractmethod
    def get_fiscal_period(self, fiscal_period_id: int) -> Optional[FiscalPeriod]:
        """Get fiscal period by ID."""
        pass

    @abstractmethod
    def list_fiscal_periods(self, company_id: int) -> list[FiscalPeriod]:
        """List a company's fiscal periods ordered by start date."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self, company_id: int, code: str, name: str, account_type: AccountType, category: str
    ) -> int:
        """Create a chart-of-accounts entry. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, company_id: int, code: str) -> Optional[Account]:
        """Get a company's account by code."""
        pass

    @abstractmethod
    def list_accounts(self, company_id: int) -> list[Account]:
        """List a company's accounts ordered by code."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transactions(self, transactions: Sequence[Transaction]) -> list[Transaction]:
        """Insert transactions in one unit of work. Returns them with IDs assigned."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        unclassified_only: bool = False,
    ) -> list[Transaction]:
        """List a company's transactions ordered by date, then ID."""
        pass

    @abstractmethod
    def update_transaction_classification(
        self, transaction_id: int, account_code: Optional[str], account_name: Optional[str]
    ) -> None:
        """Set (or clear) the account a transaction is classified to."""
        pass

    # Classification rule operations
    @abstractmethod
    def create_rule(self, rule: ClassificationRule) -> int:
        """Create a classification rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        """Get rule by ID."""
        pass

    @abstractmethod
    def get_rule_by_pattern(self, company_id: int, pattern: str) -> Optional[ClassificationRule]:
        """Get a company's rule by pattern (case-insensitive)."""
        pass

    @abstractmethod
    def list_rules(self, company_id: int, active_only: bool = True) -> list[ClassificationRule]:
        """List a company's rules."""
        pass

    @abstractmethod
    def update_rule_account(self, rule_id: int, account_code: str, account_name: str) -> None:
        """Point a rule at a different account."""
        pass

    @abstractmethod
    def increment_rule_usage(self, rule_id: int, amount: int = 1) -> None:
        """Increase a rule's usage count."""
        pass

    # Journal entry operations
    @abstractmethod
    def create_journal_entry(self, entry: JournalEntry, new_accounts: Sequence[Account] = ()) -> JournalEntry:
        """Persist an entry, its lines and any missing accounts in one unit of work.

        Lines reference accounts by code; the returned entry carries IDs.
        """
        pass

    @abstractmethod
    def replace_journal_entries(
        self,
        company_id: int,
        fiscal_period_id: int,
        reference_prefix: str,
        entry: JournalEntry,
        new_accounts: Sequence[Account] = (),
    ) -> JournalEntry:
        """Delete entries whose reference starts with a prefix and create ``entry``, atomically."""
        pass

    @abstractmethod
    def journal_entry_exists_for_transaction(self, transaction_id: int) -> bool:
        """Whether any journal line references the transaction."""
        pass

    @abstractmethod
    def get_journal_entry_by_reference(self, company_id: int, reference: str) -> Optional[JournalEntry]:
        """Get journal entry by reference."""
        pass

    @abstractmethod
    def list_journal_entries(
        self, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> list[JournalEntry]:
        """List a company's journal entries ordered by date, then ID."""
        pass
