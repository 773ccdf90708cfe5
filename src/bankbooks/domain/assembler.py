"""Turns parsed statement transactions into storable transactions."""

import hashlib
import logging
from typing import Optional, Sequence

from bankbooks.database.base import Database
from bankbooks.domain.entities import (
    Company,
    FiscalPeriod,
    ParsedTransaction,
    Transaction,
    TransactionType,
    ZERO,
)

logger = logging.getLogger(__name__)


def resolve_fiscal_period(periods: Sequence[FiscalPeriod], day) -> Optional[FiscalPeriod]:
    """Return the first period whose inclusive range contains the date."""
    for period in periods:
        if period.contains(day):
            return period
    return None


def generate_reference(parsed: ParsedTransaction) -> str:
    """Build a stable reference from date, description and amount."""
    key = f"{parsed.date.isoformat()}|{parsed.description}|{parsed.amount}"
    return "TXN-" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:12].upper()


class TransactionAssembler:
    """Maps ParsedTransaction values onto Transaction entities."""

    def __init__(self, db: Database):
        """Initialize transaction assembler.

        Args:
            db: Database instance, used to look up fiscal periods
        """
        self.db = db

    def assemble(
        self,
        parsed: ParsedTransaction,
        company: Company,
        fiscal_periods: Optional[Sequence[FiscalPeriod]] = None,
        source_file: Optional[str] = None,
        account_number: Optional[str] = None,
    ) -> Transaction:
        """Build an unsaved Transaction from a parsed one.

        Credits land in ``credit_amount`` and debits or service fees in
        ``debit_amount``; the other side is zero.

        Args:
            parsed: Parsed transaction
            company: Owning company
            fiscal_periods: Company periods; loaded from the database when omitted
            source_file: Statement file name, if any
            account_number: Bank account number from the statement

        Returns:
            Transaction without an ID
        """
        if fiscal_periods is None:
            fiscal_periods = self.db.list_fiscal_periods(company.id)

        if parsed.type is TransactionType.CREDIT:
            debit, credit = ZERO, parsed.amount
        else:
            debit, credit = parsed.amount, ZERO

        period = resolve_fiscal_period(fiscal_periods, parsed.date)
        if period is None:
            logger.warning(
                "No fiscal period for company %s covers %s (%s)",
                company.id,
                parsed.date,
                parsed.description,
            )

        return Transaction(
            id=None,
            company_id=company.id,
            fiscal_period_id=period.id if period is not None else None,
            transaction_date=parsed.date,
            details=parsed.description,
            debit_amount=debit,
            credit_amount=credit,
            balance=parsed.balance,
            reference=parsed.reference or generate_reference(parsed),
            source_file=source_file,
            account_number=account_number,
        )

    def assemble_all(
        self,
        parsed_transactions: Sequence[ParsedTransaction],
        company: Company,
        source_file: Optional[str] = None,
        account_number: Optional[str] = None,
    ) -> list[Transaction]:
        """Assemble many transactions, loading the company's periods once."""
        periods = self.db.list_fiscal_periods(company.id)
        return [
            self.assemble(p, company, periods, source_file=source_file, account_number=account_number)
            for p in parsed_transactions
        ]
