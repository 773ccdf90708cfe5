"""Batch classification and journal generation."""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from bankbooks.domain.classification import ClassificationService
from bankbooks.domain.entities import Transaction
from bankbooks.domain.errors import ValidationError
from bankbooks.domain.journal import DEFAULT_CREATED_BY, JournalEntryGenerator

logger = logging.getLogger(__name__)


@dataclass
class BatchProcessingResult:
    """Counts from one batch run."""

    processed: int = 0
    classified: int = 0
    failed: int = 0
    aborted: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.aborted == 0


@dataclass(frozen=True)
class BatchProcessingStatistics:
    """Classification coverage for a batch, without journalling."""

    processed: int
    classified: int
    unclassified: int


def validate_transactions(transactions: Sequence[Transaction]) -> list[str]:
    """Check every transaction and collect all problems.

    Positions in the messages are 1-based.
    """
    errors = []
    for index, txn in enumerate(transactions, start=1):
        if not txn.reference or not txn.reference.strip():
            errors.append(f"Transaction {index}: Missing reference number")
        if not txn.details or not txn.details.strip():
            errors.append(f"Transaction {index}: Missing transaction details")
        if txn.debit_amount is None and txn.credit_amount is None:
            errors.append(f"Transaction {index}: Missing transaction amount")
        if txn.transaction_date is None:
            errors.append(f"Transaction {index}: Missing transaction date")
    return errors


class TransactionBatchProcessor:
    """Classifies transactions and journals them one at a time.

    A failure on one transaction is counted and logged; the rest of the
    batch carries on.
    """

    def __init__(self, classifier: ClassificationService, journal_generator: JournalEntryGenerator):
        """Initialize batch processor.

        Args:
            classifier: Classification service (supplies rules and stores results)
            journal_generator: Journal entry generator
        """
        self.classifier = classifier
        self.journal_generator = journal_generator

    def process_batch(
        self,
        transactions: Sequence[Transaction],
        company_id: int,
        created_by: str = DEFAULT_CREATED_BY,
        time_budget: Optional[float] = None,
    ) -> BatchProcessingResult:
        """Classify and journal each transaction.

        Args:
            transactions: Stored transactions
            company_id: Company whose rules apply
            created_by: User recorded on journal entries
            time_budget: Seconds after which no new transaction is started

        Returns:
            BatchProcessingResult; unclassified transactions count as failed
        """
        result = BatchProcessingResult()
        rules = self.classifier.rules_for(company_id)
        deadline = time.monotonic() + time_budget if time_budget is not None else None

        for index, txn in enumerate(transactions):
            if deadline is not None and time.monotonic() > deadline:
                result.aborted = len(transactions) - index
                logger.warning("Time budget exhausted, %s transactions not processed", result.aborted)
                break

            result.processed += 1
            try:
                classification = self.classifier.engine.classify(txn.details, rules)
                if classification is None:
                    result.failed += 1
                    result.errors.append(f"Transaction {txn.id}: no matching rule")
                    logger.warning("Could not classify transaction %s: %r", txn.id, txn.details)
                    continue

                result.classified += 1
                if txn.id is not None:
                    self.classifier.apply_classification(txn.id, classification)
                self.journal_generator.generate(txn, classification, created_by)
            except Exception as e:
                result.failed += 1
                result.errors.append(f"Transaction {txn.id}: {e}")
                logger.warning("Failed to process transaction %s: %s", txn.id, e)

        logger.info(
            "Batch complete: %s processed, %s classified, %s failed",
            result.processed,
            result.classified,
            result.failed,
        )
        return result

    def process_batch_validated(
        self,
        transactions: Sequence[Transaction],
        company_id: int,
        created_by: str = DEFAULT_CREATED_BY,
        time_budget: Optional[float] = None,
    ) -> BatchProcessingResult:
        """Validate the whole batch first, then process it.

        Raises:
            ValidationError: With every validation message, if any check fails
        """
        errors = validate_transactions(transactions)
        if errors:
            raise ValidationError("Transaction validation failed: " + "; ".join(errors))
        return self.process_batch(transactions, company_id, created_by, time_budget)

    def process_batch_with_statistics(
        self, transactions: Sequence[Transaction], company_id: int
    ) -> BatchProcessingStatistics:
        """Report how many transactions the current rules would classify."""
        results = self.classifier.classify_batch(transactions, company_id)
        classified = sum(1 for txn in transactions if txn.id in results)
        return BatchProcessingStatistics(
            processed=len(transactions),
            classified=classified,
            unclassified=len(transactions) - classified,
        )
