"""Rule-based transaction classification.

Each active rule is scored against the lower-cased transaction details; the
best score at or above ``MINIMUM_CONFIDENCE`` wins. Rules are tried in
priority order (then longest pattern first, then oldest), and a later rule
only wins with a strictly higher score, so results are deterministic for a
given rule set.

Vendor detectors add a bonus on top of the base score when the details
mention a known vendor of the rule's kind (an insurer for an insurance rule,
a filling station for a fuel rule).
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from bankbooks.database.base import Database
from bankbooks.domain.cache import LookupCache
from bankbooks.domain.entities import (
    ClassificationResult,
    ClassificationRule,
    MatchType,
    Transaction,
)
from bankbooks.domain.errors import NotFoundError, PersistenceError, transaction_not_found

logger = logging.getLogger(__name__)


HIGH_CONFIDENCE_THRESHOLD = 0.9
AUTO_CLASSIFY_THRESHOLD = 0.6
MINIMUM_CONFIDENCE = 0.5
EXACT_MATCH_SCORE = 1.0
PARTIAL_MATCH_SCORE = 0.8
SIGNIFICANT_PATTERN_LENGTH = 4
MAX_SCORE = 1.0


def _regex_fullmatch(pattern: str, details: str) -> bool:
    try:
        return re.fullmatch(pattern, details, re.IGNORECASE) is not None
    except re.error as e:
        logger.warning("Ignoring invalid rule regex %r: %s", pattern, e)
        return False


def rule_matches(details: str, rule: ClassificationRule) -> bool:
    """Check a rule's pattern against details according to its match type.

    CONTAINS also accepts details that contain every word of the pattern, in
    any order; learned keyword rules rely on that.
    """
    text = " ".join(details.lower().split())
    pattern = " ".join(rule.pattern.lower().split())
    if not pattern:
        return False

    if rule.match_type is MatchType.CONTAINS:
        return pattern in text or all(word in text for word in pattern.split())
    if rule.match_type is MatchType.STARTS_WITH:
        return text.startswith(pattern)
    if rule.match_type is MatchType.ENDS_WITH:
        return text.endswith(pattern)
    if rule.match_type is MatchType.EQUALS:
        return text == pattern
    if rule.match_type is MatchType.REGEX:
        return _regex_fullmatch(rule.pattern.strip(), text)
    return False


def base_score(details: str, rule: ClassificationRule) -> float:
    """Score a rule against details, 0.0 when it does not match."""
    if not rule.is_active or not rule_matches(details, rule):
        return 0.0

    text = " ".join(details.lower().split())
    pattern = " ".join(rule.pattern.lower().split())
    if pattern in text:
        return EXACT_MATCH_SCORE if len(pattern) > SIGNIFICANT_PATTERN_LENGTH else PARTIAL_MATCH_SCORE

    if rule.match_type in (MatchType.STARTS_WITH, MatchType.EQUALS, MatchType.REGEX):
        return EXACT_MATCH_SCORE
    return PARTIAL_MATCH_SCORE


@dataclass(frozen=True)
class VendorDetector:
    """Adds a bonus when details name a known vendor for the rule's kind of account."""

    name: str
    rule_keywords: tuple[str, ...]
    vendor_names: tuple[str, ...]
    bonus: float = 0.6

    def applies_to(self, rule: ClassificationRule) -> bool:
        target = f"{rule.pattern} {rule.account_name} {rule.rule_name or ''}".lower()
        return any(keyword in target for keyword in self.rule_keywords)

    def mentions_vendor(self, details: str) -> bool:
        text = details.lower()
        return any(re.search(rf"\b{re.escape(vendor)}\b", text) for vendor in self.vendor_names)

    def __call__(self, details: str, rule: ClassificationRule) -> float:
        if self.applies_to(rule) and self.mentions_vendor(details):
            return self.bonus
        return 0.0


INSURER_DETECTOR = VendorDetector(
    name="insurer",
    rule_keywords=("insur",),
    vendor_names=(
        "king price",
        "kingprice",
        "dotsure",
        "outsurance",
        "miway",
        "liberty",
        "badger",
        "hollard",
        "santam",
        "momentum",
    ),
)

FUEL_STATION_DETECTOR = VendorDetector(
    name="fuel station",
    rule_keywords=("fuel", "petrol"),
    vendor_names=("bp", "shell", "sasol", "engen", "caltex", "astron", "totalenergies"),
)

TELECOM_DETECTOR = VendorDetector(
    name="telecom",
    rule_keywords=("telephone", "cell", "internet", "communication"),
    vendor_names=("telkom", "mtn", "vodacom", "cell c", "afrihost"),
)

VEHICLE_TRACKING_DETECTOR = VendorDetector(
    name="vehicle tracking",
    rule_keywords=("tracking", "motor vehicle"),
    vendor_names=("cartrack", "netstar", "tracker", "matrix"),
)

DEFAULT_DETECTORS = (
    INSURER_DETECTOR,
    FUEL_STATION_DETECTOR,
    TELECOM_DETECTOR,
    VEHICLE_TRACKING_DETECTOR,
)

Detector = Callable[[str, ClassificationRule], float]


def rank_rules(rules: Sequence[ClassificationRule]) -> list[ClassificationRule]:
    """Order rules by priority, then specificity, then ID (oldest first)."""
    return sorted(
        (r for r in rules if r.is_active),
        key=lambda r: (-r.priority, -r.specificity, r.id if r.id is not None else float("inf")),
    )


class ClassificationEngine:
    """Scores rules against transaction details."""

    def __init__(self, detectors: Sequence[Detector] = DEFAULT_DETECTORS):
        self.detectors = tuple(detectors)

    def score(self, details: str, rule: ClassificationRule) -> float:
        """Base score plus detector bonuses, capped at 1.0.

        Bonuses only lift a rule that already matches.
        """
        score = base_score(details, rule)
        if score == 0.0:
            return 0.0
        for detector in self.detectors:
            score += detector(details, rule)
        return min(MAX_SCORE, score)

    def classify(self, details: str, rules: Sequence[ClassificationRule]) -> Optional[ClassificationResult]:
        """Classify transaction details against a rule set.

        Args:
            details: Transaction details text
            rules: Candidate rules (inactive ones are ignored)

        Returns:
            Best ClassificationResult, or None when no rule reaches the minimum confidence
        """
        if not details or not details.strip():
            return None

        best_rule: Optional[ClassificationRule] = None
        best_score = 0.0
        for rule in rank_rules(rules):
            score = self.score(details, rule)
            if score > best_score:
                best_rule, best_score = rule, score

        if best_rule is None or best_score < MINIMUM_CONFIDENCE:
            logger.debug("No rule classifies %r (best score %.2f)", details, best_score)
            return None

        return ClassificationResult(
            account_code=best_rule.account_code,
            account_name=best_rule.account_name,
            confidence_score=best_score,
            matching_rule=best_rule.rule_name or best_rule.pattern,
            is_auto_classified=best_score >= AUTO_CLASSIFY_THRESHOLD,
            rule_id=best_rule.id,
        )


class ClassificationService:
    """Classifies stored transactions with a company's rules."""

    def __init__(
        self,
        db: Database,
        cache: Optional[LookupCache] = None,
        engine: Optional[ClassificationEngine] = None,
    ):
        """Initialize classification service.

        Args:
            db: Database instance
            cache: Lookup cache; a private one is created and registered when omitted
            engine: Scoring engine
        """
        self.db = db
        self.cache = cache or LookupCache()
        self.engine = engine or ClassificationEngine()
        db.register_cache(self.cache)

    def rules_for(self, company_id: int) -> list[ClassificationRule]:
        """Active rules for a company, cached until they change."""
        return self.cache.rules_for(company_id, lambda cid: self.db.list_rules(cid, active_only=True))

    def classify(self, details: str, company_id: int) -> Optional[ClassificationResult]:
        """Classify free text with a company's rules."""
        return self.engine.classify(details, self.rules_for(company_id))

    def classify_transaction(self, transaction: Transaction) -> Optional[ClassificationResult]:
        """Classify one transaction without storing the result."""
        return self.classify(transaction.details, transaction.company_id)

    def classify_batch(
        self, transactions: Sequence[Transaction], company_id: int
    ) -> dict[int, ClassificationResult]:
        """Classify many transactions against one rule load.

        Args:
            transactions: Stored transactions
            company_id: Company whose rules apply

        Returns:
            Results keyed by transaction ID; unclassified transactions are absent
        """
        rules = self.rules_for(company_id)
        results = {}
        for txn in transactions:
            result = self.engine.classify(txn.details, rules)
            if result is not None:
                results[txn.id] = result
        logger.info("Classified %s of %s transactions", len(results), len(transactions))
        return results

    def apply_classification(self, transaction_id: int, result: ClassificationResult) -> None:
        """Store a classification on a transaction and count the rule's use.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self.db.update_transaction_classification(transaction_id, result.account_code, result.account_name)
        if result.rule_id is not None:
            self.db.increment_rule_usage(result.rule_id)

    def auto_classify(self, company_id: int) -> int:
        """Classify the company's unclassified transactions.

        Returns:
            Number of transactions classified
        """
        transactions = self.db.list_transactions(company_id, unclassified_only=True)
        results = self.classify_batch(transactions, company_id)
        classified = 0
        for transaction_id, result in results.items():
            try:
                self.apply_classification(transaction_id, result)
            except PersistenceError as e:
                logger.warning("Could not store classification for transaction %s: %s", transaction_id, e)
                continue
            classified += 1
        return classified

    def reclassify_all(self, company_id: int) -> int:
        """Re-run classification over every transaction of a company.

        Only transactions whose account code changes are written, each in its
        own unit of work. Usage counts are left alone, so running this twice
        with the same rules updates nothing the second time.

        Returns:
            Number of transactions updated
        """
        self.cache.invalidate_rules(company_id)
        rules = self.rules_for(company_id)
        updated = 0
        for txn in self.db.list_transactions(company_id):
            result = self.engine.classify(txn.details, rules)
            if result is None or result.account_code == txn.account_code:
                continue
            try:
                self.db.update_transaction_classification(txn.id, result.account_code, result.account_name)
            except PersistenceError as e:
                logger.warning("Could not reclassify transaction %s: %s", txn.id, e)
                continue
            updated += 1
        logger.info("Reclassified %s transactions for company %s", updated, company_id)
        return updated
