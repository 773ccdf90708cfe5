"""Statement import domain service."""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from bankbooks.database.base import Database
from bankbooks.domain.assembler import TransactionAssembler
from bankbooks.domain.entities import Company, RawLine, Transaction
from bankbooks.domain.statement_parser import DEFAULT_FORMAT, StatementFormat, StatementParser
from bankbooks.utils.text_extractor import TextExtractor

logger = logging.getLogger(__name__)


class StatementImportService:
    """Parses statement text and stores the resulting transactions."""

    def __init__(self, db: Database, statement_format: StatementFormat = DEFAULT_FORMAT):
        """Initialize statement import service.

        Args:
            db: Database instance
            statement_format: Layout of the statements being imported
        """
        self.db = db
        self.parser = StatementParser(statement_format)
        self.assembler = TransactionAssembler(db)

    def parse_statement(
        self,
        lines: Iterable[Union[str, RawLine]],
        company: Company,
        statement_period: Optional[str] = None,
        source_file: Optional[str] = None,
        account_number: Optional[str] = None,
        persist: bool = True,
    ) -> list[Transaction]:
        """Parse statement lines into transactions for a company.

        Args:
            lines: Extracted statement lines
            company: Owning company
            statement_period: Statement period text used to date the lines
            source_file: Statement file name, if any
            account_number: Bank account number from the statement
            persist: Store the transactions (IDs are assigned) or only return them

        Returns:
            Transactions in statement order
        """
        report = self.parser.parse(lines, statement_period=statement_period)
        transactions = self.assembler.assemble_all(
            report.transactions, company, source_file=source_file, account_number=account_number
        )
        if persist and transactions:
            transactions = self.db.create_transactions(transactions)
        return transactions

    def import_document(self, extractor: TextExtractor, document: Any, company: Company) -> dict[str, Any]:
        """Extract, parse and store one statement document.

        Args:
            extractor: Text extraction collaborator
            document: Whatever the extractor accepts (a path for PlainTextExtractor)
            company: Owning company

        Returns:
            Dictionary with 'imported', 'account_number', 'statement_period' and 'transactions'
        """
        lines = extractor.extract_lines(document)
        account_number = extractor.account_number()
        statement_period = extractor.statement_period()
        if statement_period is None:
            logger.warning("No statement period found in %s; dates use the current year", document)

        source_file = Path(document).name if isinstance(document, (str, Path)) else None
        transactions = self.parse_statement(
            lines,
            company,
            statement_period=statement_period,
            source_file=source_file,
            account_number=account_number,
        )
        logger.info("Imported %s transactions from %s", len(transactions), source_file or "document")
        return {
            "imported": len(transactions),
            "account_number": account_number,
            "statement_period": statement_period,
            "transactions": transactions,
        }
