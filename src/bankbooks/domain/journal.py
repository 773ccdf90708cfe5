"""Double-entry journal generation.

Every classified bank transaction becomes a two-line entry against the bank
account: money in credits the classified account and debits the bank, money
out does the reverse. Entries are checked for balance before they are
stored, and each entry (with any account it needs created) is stored in one
unit of work.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

from bankbooks.database.base import Database
from bankbooks.domain.cache import LookupCache
from bankbooks.domain.chart import (
    BANK_ACCOUNT_CODE,
    OPENING_BALANCE_EQUITY_CODE,
    OPENING_BALANCE_EQUITY_NAME,
    infer_account_type,
    infer_category,
    is_debit_normal,
)
from bankbooks.domain.entities import (
    Account,
    AccountType,
    ClassificationResult,
    JournalEntry,
    JournalEntryLine,
    Transaction,
    ZERO,
)
from bankbooks.domain.errors import (
    DomainError,
    LookupFailure,
    NotFoundError,
    PersistenceError,
    UnbalancedEntryError,
    ValidationError,
    account_code_not_found,
    fiscal_period_not_found,
    unbalanced_entry,
)

logger = logging.getLogger(__name__)


JOURNAL_REFERENCE_PREFIX = "JE-"
OPENING_BALANCE_PREFIX = "OB-"
DEFAULT_CREATED_BY = "SYSTEM"


def assert_balanced(entry: JournalEntry) -> None:
    """Raise UnbalancedEntryError unless debits equal credits exactly.

    Also rejects lines that set both sides, or neither.
    """
    for line in entry.lines:
        has_debit = line.debit_amount is not None and line.debit_amount != ZERO
        has_credit = line.credit_amount is not None and line.credit_amount != ZERO
        if has_debit == has_credit:
            raise UnbalancedEntryError(
                f"Journal entry {entry.reference}: line for {line.account_code} must set exactly one side"
            )
    if len(entry.lines) < 2 or not entry.is_balanced:
        raise UnbalancedEntryError(unbalanced_entry(entry.reference, entry.total_debits, entry.total_credits))


class JournalEntryGenerator:
    """Builds and stores journal entries for classified transactions."""

    def __init__(
        self,
        db: Database,
        bank_account_code: str = BANK_ACCOUNT_CODE,
        equity_account_code: str = OPENING_BALANCE_EQUITY_CODE,
        cache: Optional[LookupCache] = None,
    ):
        """Initialize journal entry generator.

        Args:
            db: Database instance
            bank_account_code: Code of the bank account every entry posts against
            equity_account_code: Code of the opening balance equity account
            cache: Lookup cache for account IDs; a private one is created and registered when omitted
        """
        self.db = db
        self.bank_account_code = bank_account_code
        self.equity_account_code = equity_account_code
        self.cache = cache if cache is not None else LookupCache()
        db.register_cache(self.cache)

    def _load_account_id(self, company_id: int, code: str) -> Optional[int]:
        account = self.db.get_account_by_code(company_id, code)
        return account.id if account is not None else None

    def account_id(self, company_id: int, code: str) -> Optional[int]:
        """ID of a chart account by code, or None when the company has no such account."""
        return self.cache.account_id_for(company_id, code, self._load_account_id)

    def _require_bank_account(self, company_id: int) -> int:
        bank_id = self.account_id(company_id, self.bank_account_code)
        if bank_id is None:
            raise LookupFailure(account_code_not_found(company_id, self.bank_account_code))
        return bank_id

    def _account_to_create(self, company_id: int, code: str, name: str) -> Optional[Account]:
        """Return an unsaved Account when the code is not in the chart yet."""
        if self.account_id(company_id, code) is not None:
            return None
        return Account(
            id=None,
            company_id=company_id,
            code=code,
            name=name,
            account_type=infer_account_type(code),
            category=infer_category(code),
        )

    def build_entry(
        self,
        transaction: Transaction,
        result: ClassificationResult,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> JournalEntry:
        """Build (but do not store) the entry for a classified transaction.

        Raises:
            ValidationError: If the transaction has no ID or no amount
            UnbalancedEntryError: If the built entry does not balance
        """
        if transaction.id is None:
            raise ValidationError("Journal entries need a stored transaction")

        details = transaction.details
        if transaction.is_income:
            amount = transaction.credit_amount
            lines = (
                JournalEntryLine(
                    account_code=result.account_code,
                    description=f"Income - {details}",
                    credit_amount=amount,
                    source_transaction_id=transaction.id,
                ),
                JournalEntryLine(
                    account_code=self.bank_account_code,
                    description=f"Bank account - {details}",
                    debit_amount=amount,
                    source_transaction_id=transaction.id,
                ),
            )
        elif transaction.is_expense:
            amount = transaction.debit_amount
            lines = (
                JournalEntryLine(
                    account_code=result.account_code,
                    description=f"Expense - {details}",
                    debit_amount=amount,
                    source_transaction_id=transaction.id,
                ),
                JournalEntryLine(
                    account_code=self.bank_account_code,
                    description=f"Bank account - {details}",
                    credit_amount=amount,
                    source_transaction_id=transaction.id,
                ),
            )
        else:
            raise ValidationError(f"Transaction {transaction.id} has no debit or credit amount")

        entry = JournalEntry(
            reference=f"{JOURNAL_REFERENCE_PREFIX}{transaction.id}",
            entry_date=transaction.transaction_date,
            description=details,
            company_id=transaction.company_id,
            fiscal_period_id=transaction.fiscal_period_id,
            created_by=created_by,
            lines=lines,
        )
        assert_balanced(entry)
        return entry

    def generate(
        self,
        transaction: Transaction,
        result: ClassificationResult,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> JournalEntry:
        """Create and store the journal entry for one classified transaction.

        A classified account missing from the chart is created with its type
        inferred from the code, in the same unit of work as the entry.

        Args:
            transaction: Stored transaction
            result: Classification to post against
            created_by: User recorded on the entry

        Returns:
            Stored JournalEntry

        Raises:
            LookupFailure: If the bank account is missing
            ValidationError: If the transaction cannot be journalled
            UnbalancedEntryError: If the entry does not balance
            PersistenceError: If storing fails (nothing is stored)
        """
        self._require_bank_account(transaction.company_id)
        entry = self.build_entry(transaction, result, created_by)

        new_accounts = []
        mapped = self._account_to_create(transaction.company_id, result.account_code, result.account_name)
        if mapped is not None:
            logger.info("Creating account %s (%s) for transaction %s", mapped.code, mapped.name, transaction.id)
            new_accounts.append(mapped)
        else:
            self._warn_contra_posting(transaction, result)

        return self.db.create_journal_entry(entry, new_accounts)

    def _warn_contra_posting(self, transaction: Transaction, result: ClassificationResult) -> None:
        account_id = self.account_id(transaction.company_id, result.account_code)
        if account_id is None:
            return
        account = self.db.get_account(account_id)
        posts_debit = transaction.is_expense
        if account.account_type in (AccountType.INCOME, AccountType.EXPENSE) and posts_debit != is_debit_normal(
            account.account_type
        ):
            logger.debug(
                "Transaction %s posts against the normal balance of %s %s",
                transaction.id,
                account.account_type.value,
                account.code,
            )

    def generate_journal_entries(
        self, transactions: Sequence[Transaction], created_by: str = DEFAULT_CREATED_BY
    ) -> int:
        """Create entries for classified transactions that have none yet.

        Failures are logged and the transaction is skipped.

        Returns:
            Number of entries created
        """
        created = 0
        for txn in transactions:
            if not txn.is_classified:
                continue
            if self.db.journal_entry_exists_for_transaction(txn.id):
                continue
            try:
                self.generate(txn, ClassificationResult.from_transaction(txn), created_by)
            except (DomainError, PersistenceError) as e:
                logger.warning("Skipping journal entry for transaction %s: %s", txn.id, e)
                continue
            created += 1
        logger.info("Created %s journal entries", created)
        return created

    def create_opening_balance_entry(
        self, company_id: int, fiscal_period_id: int, created_by: str = DEFAULT_CREATED_BY
    ) -> Optional[JournalEntry]:
        """Post the bank's opening balance for a fiscal period against equity.

        The opening balance is worked back from the first transaction of the
        period: its balance plus its debit minus its credit. A previous
        opening balance entry for the period is replaced.

        Returns:
            Stored entry, or None when there is no (non-zero) opening balance

        Raises:
            NotFoundError: If the fiscal period does not exist
            LookupFailure: If the bank account is missing
        """
        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None or period.company_id != company_id:
            raise NotFoundError(fiscal_period_not_found(fiscal_period_id))
        self._require_bank_account(company_id)

        transactions = self.db.list_transactions(company_id, fiscal_period_id=fiscal_period_id)
        if not transactions:
            logger.info("No transactions in period %s, no opening balance", period.name)
            return None
        first = transactions[0]
        if first.balance is None:
            logger.warning("First transaction %s of period %s has no balance", first.id, period.name)
            return None

        opening = first.balance + (first.debit_amount or ZERO) - (first.credit_amount or ZERO)
        if opening == ZERO:
            logger.info("Opening balance for period %s is zero", period.name)
            return None

        amount = abs(opening)
        bank_line = JournalEntryLine(account_code=self.bank_account_code, description="Bank - Current Account")
        equity_line = JournalEntryLine(
            account_code=self.equity_account_code,
            description=f"{OPENING_BALANCE_EQUITY_NAME} - Cash Flow Statement Only",
        )
        if opening > ZERO:
            lines = (replace(bank_line, debit_amount=amount), replace(equity_line, credit_amount=amount))
        else:
            # Overdrawn: the bank starts as a liability
            lines = (replace(bank_line, credit_amount=amount), replace(equity_line, debit_amount=amount))

        entry = JournalEntry(
            reference=f"{OPENING_BALANCE_PREFIX}{fiscal_period_id}",
            entry_date=period.start_date,
            description=f"Opening Balance - {period.name}",
            company_id=company_id,
            fiscal_period_id=fiscal_period_id,
            created_by=created_by,
            lines=lines,
        )
        assert_balanced(entry)

        new_accounts = []
        equity = self._account_to_create(company_id, self.equity_account_code, OPENING_BALANCE_EQUITY_NAME)
        if equity is not None:
            new_accounts.append(replace(equity, account_type=AccountType.EQUITY))
        return self.db.replace_journal_entries(
            company_id, fiscal_period_id, OPENING_BALANCE_PREFIX, entry, new_accounts
        )

