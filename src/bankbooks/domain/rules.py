"""Classification rule management and learning."""

import logging
import re
from typing import Optional

from bankbooks.database.base import Database
from bankbooks.domain.chart import STANDARD_RULES
from bankbooks.domain.entities import ClassificationRule, MatchType
from bankbooks.domain.errors import NotFoundError, ValidationError, company_not_found, transaction_not_found

logger = logging.getLogger(__name__)


STOP_WORDS = frozenset({"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"})
MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 3
LEARNED_RULE_PRIORITY = 7


def extract_keywords(details: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Pick the words of a description worth matching on.

    Lower-cased words of at least three letters, without digits or stop
    words, first occurrence only, in their original order.
    """
    keywords: list[str] = []
    for word in re.split(r"\W+", details.lower()):
        if len(word) < MIN_KEYWORD_LENGTH or word in STOP_WORDS:
            continue
        if any(ch.isdigit() for ch in word) or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) == limit:
            break
    return keywords


class RuleService:
    """Service for managing classification rules."""

    def __init__(self, db: Database):
        """Initialize rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_company(self, company_id: int) -> None:
        if self.db.get_company(company_id) is None:
            raise NotFoundError(company_not_found(company_id))

    def add_rule(
        self,
        company_id: int,
        pattern: str,
        account_code: str,
        account_name: str,
        match_type: MatchType = MatchType.CONTAINS,
        priority: int = 0,
        rule_name: Optional[str] = None,
    ) -> int:
        """Create a classification rule.

        Args:
            company_id: Owning company
            pattern: Text (or regular expression) to match
            account_code: Account the rule classifies to
            account_name: Display name of that account
            match_type: How the pattern is compared
            priority: Higher priorities are tried first
            rule_name: Optional label

        Returns:
            Rule ID

        Raises:
            ValidationError: If the pattern is empty or an invalid regex
            NotFoundError: If the company does not exist
        """
        pattern = pattern.strip()
        if not pattern:
            raise ValidationError("Rule pattern must not be empty")
        if not account_code.strip():
            raise ValidationError("Rule account code must not be empty")
        match_type = MatchType(match_type)
        if match_type is MatchType.REGEX:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValidationError(f"Invalid regular expression '{pattern}': {e}") from e
        self._require_company(company_id)

        return self.db.create_rule(
            ClassificationRule(
                id=None,
                company_id=company_id,
                pattern=pattern,
                match_type=match_type,
                account_code=account_code.strip(),
                account_name=account_name,
                priority=priority,
                rule_name=rule_name,
            )
        )

    def list_rules(self, company_id: int, active_only: bool = False) -> list[ClassificationRule]:
        return self.db.list_rules(company_id, active_only=active_only)

    def seed_standard_rules(self, company_id: int) -> int:
        """Install the standard rule chart for a company.

        Patterns the company already has are left untouched.

        Returns:
            Number of rules created
        """
        self._require_company(company_id)
        created = 0
        for rule_name, pattern, match_type, code, name, priority in STANDARD_RULES:
            if self.db.get_rule_by_pattern(company_id, pattern) is not None:
                continue
            self.add_rule(company_id, pattern, code, name, match_type, priority, rule_name)
            created += 1
        logger.info("Seeded %s standard rules for company %s", created, company_id)
        return created

    def learn_from_manual_classification(
        self, transaction_id: int, account_code: str, account_name: str
    ) -> Optional[ClassificationRule]:
        """Classify a transaction by hand and remember its keywords as a rule.

        An existing rule with the same keywords is re-pointed at the account
        (if needed) and its usage count increased.

        Returns:
            The learned or reinforced rule, or None when the details yield no keywords

        Raises:
            NotFoundError: If the transaction does not exist
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.update_transaction_classification(transaction_id, account_code, account_name)

        keywords = extract_keywords(transaction.details)
        if not keywords:
            logger.info("No keywords in %r, nothing learned", transaction.details)
            return None
        pattern = " ".join(keywords)

        existing = self.db.get_rule_by_pattern(transaction.company_id, pattern)
        if existing is not None:
            if existing.account_code != account_code:
                self.db.update_rule_account(existing.id, account_code, account_name)
            self.db.increment_rule_usage(existing.id)
            return self.db.get_rule(existing.id)

        rule_id = self.db.create_rule(
            ClassificationRule(
                id=None,
                company_id=transaction.company_id,
                pattern=pattern,
                match_type=MatchType.CONTAINS,
                account_code=account_code,
                account_name=account_name,
                priority=LEARNED_RULE_PRIORITY,
                usage_count=1,
                rule_name=f"Learned: {pattern}",
                is_learned=True,
            )
        )
        logger.info("Learned rule %r -> %s", pattern, account_code)
        return self.db.get_rule(rule_id)
