"""Domain model entities for bankbooks.

These are pure data classes representing business concepts, independent of
database schema. Services pass them around; the database layer converts its
ORM rows into them through the mapper functions.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


ZERO = Decimal("0")


class TransactionType(str, Enum):
    """Direction of a parsed statement transaction."""

    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    SERVICE_FEE = "SERVICE_FEE"


class MatchType(str, Enum):
    """How a classification rule pattern is compared to transaction details."""

    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    EQUALS = "EQUALS"
    REGEX = "REGEX"


class AccountType(str, Enum):
    """Chart-of-accounts account type."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


@dataclass(frozen=True)
class RawLine:
    """One line of extracted statement text and its position in the document."""

    text: str
    position: int


@dataclass(frozen=True)
class ParsedTransaction:
    """Transaction reconstructed from statement lines, before persistence."""

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    balance: Optional[Decimal] = None
    reference: Optional[str] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"Parsed amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class Company:
    """Company domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class FiscalPeriod:
    """Fiscal period domain entity. Both bounds are inclusive."""

    id: int
    company_id: int
    name: str
    start_date: date
    end_date: date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry for a company."""

    id: Optional[int]
    company_id: int
    code: str
    name: str
    account_type: AccountType
    category: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Bank transaction domain entity.

    Exactly one of ``debit_amount`` and ``credit_amount`` carries the value of
    the transaction; the other side is ``Decimal("0")``.
    """

    id: Optional[int]
    company_id: int
    fiscal_period_id: Optional[int]
    transaction_date: date
    details: str
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    balance: Optional[Decimal] = None
    account_code: Optional[str] = None
    account_name: Optional[str] = None
    reference: Optional[str] = None
    source_file: Optional[str] = None
    account_number: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_classified(self) -> bool:
        return self.account_code is not None

    @property
    def is_income(self) -> bool:
        return self.credit_amount is not None and self.credit_amount > 0

    @property
    def is_expense(self) -> bool:
        return self.debit_amount is not None and self.debit_amount > 0


@dataclass(frozen=True)
class ClassificationRule:
    """Pattern rule mapping transaction details to an account."""

    id: Optional[int]
    company_id: int
    pattern: str
    match_type: MatchType
    account_code: str
    account_name: str
    priority: int = 0
    usage_count: int = 0
    rule_name: Optional[str] = None
    is_active: bool = True
    is_learned: bool = False
    created_at: Optional[datetime] = None

    @property
    def specificity(self) -> int:
        return len(self.pattern.strip())


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one transaction description."""

    account_code: str
    account_name: str
    confidence_score: float
    matching_rule: str
    is_auto_classified: bool
    rule_id: Optional[int] = None

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence_score >= 0.9

    @property
    def is_medium_confidence(self) -> bool:
        return self.confidence_score >= 0.6

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "ClassificationResult":
        """Build a result from a classification already stored on a transaction."""
        return cls(
            account_code=transaction.account_code,
            account_name=transaction.account_name or transaction.account_code,
            confidence_score=1.0,
            matching_rule="stored classification",
            is_auto_classified=False,
        )


@dataclass(frozen=True)
class JournalEntryLine:
    """One side of a journal entry. Exactly one amount is set."""

    account_code: str
    description: str
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None
    source_transaction_id: Optional[int] = None
    account_id: Optional[int] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class JournalEntry:
    """Double-entry journal entry with its ordered lines."""

    reference: str
    entry_date: date
    description: str
    company_id: int
    fiscal_period_id: Optional[int]
    created_by: str
    lines: tuple[JournalEntryLine, ...] = field(default_factory=tuple)
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit_amount or ZERO for line in self.lines), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit_amount or ZERO for line in self.lines), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits
