"""Tests for rule-based classification."""

import pytest

from bankbooks.domain.classification import (
    ClassificationEngine,
    INSURER_DETECTOR,
    base_score,
    rank_rules,
    rule_matches,
)
from bankbooks.domain.entities import ClassificationRule, MatchType


def rule(pattern, code="9000", match_type=MatchType.CONTAINS, priority=0, rule_id=1, name="Account", active=True):
    return ClassificationRule(
        id=rule_id,
        company_id=1,
        pattern=pattern,
        match_type=match_type,
        account_code=code,
        account_name=name,
        priority=priority,
        is_active=active,
    )


@pytest.fixture
def engine():
    return ClassificationEngine()


class TestRuleMatching:
    """Tests for rule_matches and base_score."""

    @pytest.mark.parametrize(
        "match_type, pattern, details, expected",
        [
            (MatchType.CONTAINS, "insurance", "DEBIT ORDER KINGPRICE INSURANCE", True),
            (MatchType.CONTAINS, "salary acme", "SALARY PAYMENT FROM ACME", True),
            (MatchType.CONTAINS, "rent", "WITHDRAWAL", False),
            (MatchType.STARTS_WITH, "debit order", "DEBIT ORDER MTN", True),
            (MatchType.STARTS_WITH, "mtn", "DEBIT ORDER MTN", False),
            (MatchType.ENDS_WITH, "mtn", "DEBIT ORDER MTN", True),
            (MatchType.EQUALS, "service fee", "  SERVICE   FEE ", True),
            (MatchType.EQUALS, "service fee", "SERVICE FEE REVERSAL", False),
            (MatchType.REGEX, r"immediate payment \d+ .*", "IMMEDIATE PAYMENT 123 J SMITH", True),
            (MatchType.REGEX, r"payment \d+", "IMMEDIATE PAYMENT 123", False),
        ],
    )
    def test_match_types(self, match_type, pattern, details, expected):
        """Test each match type, case-insensitively."""
        assert rule_matches(details, rule(pattern, match_type=match_type)) is expected

    def test_invalid_regex_does_not_match(self, caplog):
        """Test that a broken regex is ignored with a warning."""
        assert rule_matches("anything", rule("([", match_type=MatchType.REGEX)) is False
        assert "invalid rule regex" in caplog.text

    def test_long_contained_pattern_scores_full(self):
        """Test that a contained pattern longer than four characters scores 1.0."""
        assert base_score("DEBIT ORDER INSURANCE", rule("insurance")) == 1.0

    def test_short_contained_pattern_scores_partial(self):
        """Test that a short contained pattern scores 0.8."""
        assert base_score("ATM CASH WITHDRAWAL", rule("atm")) == 0.8

    def test_keyword_match_scores_partial(self):
        """Test that all-keywords CONTAINS matches score 0.8."""
        assert base_score("SALARY PAYMENT FROM ACME", rule("salary acme")) == 0.8

    def test_regex_scores_full(self):
        """Test that a regex full match scores 1.0."""
        assert base_score("IMMEDIATE PAYMENT 123", rule(r"immediate payment \d+", match_type=MatchType.REGEX)) == 1.0

    def test_inactive_rule_scores_zero(self):
        """Test that inactive rules never score."""
        assert base_score("INSURANCE", rule("insurance", active=False)) == 0.0


class TestClassificationEngine:
    """Tests for ClassificationEngine.classify."""

    def test_best_rule_wins(self, engine):
        """Test that the higher score wins regardless of order."""
        rules = [rule("fee", code="9600", rule_id=1), rule("service fee", code="9610", rule_id=2)]

        result = engine.classify("SERVICE FEE", rules)

        assert result.account_code == "9610"
        assert result.confidence_score == 1.0
        assert result.is_auto_classified
        assert result.is_high_confidence

    def test_priority_breaks_ties(self, engine):
        """Test that a higher priority wins an equal score."""
        rules = [
            rule("salary", code="8100", priority=1, rule_id=1),
            rule("acme salary", code="8110", priority=5, rule_id=2, match_type=MatchType.CONTAINS),
        ]
        result = engine.classify("ACME SALARY RUN", rules)
        assert result.account_code == "8110"

    def test_specificity_breaks_ties(self, engine):
        """Test that the longer pattern wins at equal priority and score."""
        rules = [rule("wages", code="A", rule_id=1), rule("weekly wages", code="B", rule_id=2)]
        assert engine.classify("WEEKLY WAGES", rules).account_code == "B"

    def test_no_match_returns_none(self, engine):
        """Test that unmatched details return None."""
        assert engine.classify("QWERTY ZXCV", [rule("insurance")]) is None

    def test_empty_details_return_none(self, engine):
        """Test that blank details are not classified."""
        assert engine.classify("   ", [rule("insurance")]) is None

    def test_classify_is_idempotent(self, engine):
        """Test that the same input gives the same result."""
        rules = [rule("fee", code="9600"), rule("atm", code="9601", rule_id=2)]
        assert engine.classify("ATM FEE", rules) == engine.classify("ATM FEE", rules)

    def test_insurer_bonus_boosts_insurance_rule(self, engine):
        """Test that a known insurer lifts an insurance rule that already matches."""
        rules = [rule("debit dotsure", code="8800-001", name="Vehicle Insurance")]

        plain = ClassificationEngine(detectors=()).classify("DEBIT ORDER DOTSURE 1234", rules)
        boosted = engine.classify("DEBIT ORDER DOTSURE 1234", rules)

        assert plain.confidence_score == pytest.approx(0.8)
        assert boosted.account_code == "8800-001"
        assert boosted.confidence_score == pytest.approx(1.0)
        assert boosted.is_high_confidence

    def test_vendor_alone_does_not_classify(self, engine):
        """Test that a vendor name without a matching rule pattern is not classified."""
        rules = [rule("insurance", code="8800", name="Insurance")]

        assert engine.classify("BADGER HARDWARE SUPPLIES", rules) is None
        assert engine.classify("DEBIT ORDER DOTSURE 1234", rules) is None

    def test_bonus_is_capped(self, engine):
        """Test that score never exceeds 1.0."""
        rules = [rule("insurance", code="8800")]
        assert engine.classify("KING PRICE INSURANCE", rules).confidence_score == 1.0

    def test_engine_without_detectors(self):
        """Test that detectors are pluggable."""
        plain = ClassificationEngine(detectors=())
        assert plain.classify("DEBIT ORDER DOTSURE", [rule("insurance")]) is None

    def test_fuel_station_detector_needs_whole_word(self, engine):
        """Test that 'bp' does not match inside other words."""
        fuel = rule("gar", code="8600", name="Fuel")
        assert engine.score("BP GARAGE SANDTON", fuel) == pytest.approx(1.0)
        assert engine.score("BPX GARAGE SANDTON", fuel) == pytest.approx(0.8)


def test_rank_rules_orders_by_priority_specificity_id():
    """Test the rule ordering."""
    rules = [
        rule("a", rule_id=3),
        rule("abc", rule_id=2),
        rule("x", priority=9, rule_id=4),
        rule("abc", rule_id=1),
        rule("zzz", priority=99, rule_id=5, active=False),
    ]
    assert [r.id for r in rank_rules(rules)] == [4, 1, 2, 3]


def test_insurer_detector_applies_to_insurance_rules_only():
    """Test the detector's rule filter."""
    assert INSURER_DETECTOR("KINGPRICE", rule("insurance")) > 0
    assert INSURER_DETECTOR("KINGPRICE", rule("rent", name="Rent")) == 0


class TestClassificationService:
    """Tests for ClassificationService against the database."""

    def test_classify_batch_keys_matches_by_id(
        self, classification_service, rule_service, sample_company, make_transactions
    ):
        """Test that batch results contain only classified transactions."""
        rule_service.add_rule(sample_company.id, "insurance", "8800", "Insurance")
        txns = make_transactions(("KINGPRICE INSURANCE", "500.00", "0"), ("QWERTY", "10.00", "0"))

        results = classification_service.classify_batch(txns, sample_company.id)

        assert set(results) == {txns[0].id}
        assert results[txns[0].id].account_code == "8800"

    def test_auto_classify_counts_usage(
        self, classification_service, rule_service, temp_db, sample_company, make_transactions
    ):
        """Test that auto classification stores results and bumps rule usage."""
        rule_id = rule_service.add_rule(sample_company.id, "insurance", "8800", "Insurance")
        txns = make_transactions(("KINGPRICE INSURANCE", "500.00", "0"), ("QWERTY", "10.00", "0"))

        assert classification_service.auto_classify(sample_company.id) == 1
        assert temp_db.get_transaction(txns[0].id).account_code == "8800"
        assert temp_db.get_transaction(txns[1].id).account_code is None
        assert temp_db.get_rule(rule_id).usage_count == 1

    def test_reclassify_all_twice(
        self, classification_service, rule_service, sample_company, make_transactions
    ):
        """Test that a second reclassify with unchanged rules updates nothing."""
        rule_service.seed_standard_rules(sample_company.id)
        make_transactions(
            ("KINGPRICE INSURANCE", "500.00", "0"),
            ("SERVICE FEE", "45.00", "0"),
            ("QWERTY", "10.00", "0"),
        )

        assert classification_service.reclassify_all(sample_company.id) == 2
        assert classification_service.reclassify_all(sample_company.id) == 0

    def test_cache_sees_new_rules(self, classification_service, rule_service, sample_company):
        """Test that adding a rule invalidates the cached rule list."""
        assert classification_service.classify("MONTHLY RENT", sample_company.id) is None

        rule_service.add_rule(sample_company.id, "rent", "8200", "Rent Expense")

        assert classification_service.classify("MONTHLY RENT", sample_company.id).account_code == "8200"
