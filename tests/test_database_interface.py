"""Tests for Database interface returning domain models."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from bankbooks.domain import entities
from bankbooks.domain.cache import LookupCache
from bankbooks.domain.errors import ConflictError, LookupFailure, NotFoundError
from bankbooks.domain.entities import AccountType, JournalEntry, JournalEntryLine, MatchType


def rule(company_id, pattern="FEE", priority=5, **kwargs):
    return entities.ClassificationRule(
        id=None,
        company_id=company_id,
        pattern=pattern,
        match_type=kwargs.pop("match_type", MatchType.CONTAINS),
        account_code=kwargs.pop("account_code", "9600"),
        account_name=kwargs.pop("account_name", "Bank Charges"),
        priority=priority,
        **kwargs,
    )


class TestCompanies:
    """Tests for company and fiscal period storage."""

    def test_get_company_returns_domain_model(self, temp_db):
        """Test that get_company returns a domain Company entity."""
        company_id = temp_db.create_company("Acme")

        company = temp_db.get_company(company_id)

        assert isinstance(company, entities.Company)
        assert company.name == "Acme"
        assert isinstance(company.created_at, datetime)
        assert temp_db.get_company_by_name("Acme") == company

    def test_duplicate_company(self, temp_db):
        """Test that company names are unique."""
        temp_db.create_company("Acme")
        with pytest.raises(ConflictError):
            temp_db.create_company("Acme")

    def test_list_companies_sorted_by_name(self, temp_db):
        """Test that companies are listed alphabetically."""
        temp_db.create_company("Zeta")
        temp_db.create_company("Alpha")
        assert [c.name for c in temp_db.list_companies()] == ["Alpha", "Zeta"]

    def test_fiscal_periods(self, temp_db):
        """Test that fiscal periods come back ordered by start date."""
        company_id = temp_db.create_company("Acme")
        temp_db.create_fiscal_period(company_id, "FY2025", date(2025, 1, 1), date(2025, 12, 31))
        temp_db.create_fiscal_period(company_id, "FY2024", date(2024, 1, 1), date(2024, 12, 31))

        periods = temp_db.list_fiscal_periods(company_id)

        assert [p.name for p in periods] == ["FY2024", "FY2025"]
        assert all(isinstance(p, entities.FiscalPeriod) for p in periods)


class TestAccounts:
    """Tests for chart-of-accounts storage."""

    def test_account_round_trip(self, temp_db, sample_company):
        """Test that accounts are stored with their type as an enum."""
        account_id = temp_db.create_account(sample_company.id, "8800", "Insurance", AccountType.EXPENSE, "Insurance")

        account = temp_db.get_account(account_id)

        assert account.account_type is AccountType.EXPENSE
        assert temp_db.get_account_by_code(sample_company.id, "8800").id == account_id

    def test_duplicate_code_per_company(self, temp_db, sample_company):
        """Test that an account code is unique within a company."""
        temp_db.create_account(sample_company.id, "8800", "Insurance", AccountType.EXPENSE, "Insurance")
        with pytest.raises(ConflictError):
            temp_db.create_account(sample_company.id, "8800", "Other", AccountType.EXPENSE, "Insurance")

    def test_same_code_in_other_company(self, temp_db, sample_company):
        """Test that codes only clash within one company."""
        other = temp_db.create_company("Other Co")
        temp_db.create_account(sample_company.id, "8800", "Insurance", AccountType.EXPENSE, "Insurance")
        temp_db.create_account(other, "8800", "Insurance", AccountType.EXPENSE, "Insurance")
        assert len(temp_db.list_accounts(other)) == 1


class TestTransactions:
    """Tests for bank transaction storage."""

    def test_create_transactions_assigns_ids(self, make_transactions):
        """Test that stored transactions get IDs and keep their amounts."""
        txns = make_transactions(("FEE", "45.00", "0", "100.00"))

        assert txns[0].id is not None
        assert txns[0].debit_amount == Decimal("45.00")
        assert txns[0].balance == Decimal("100.00")

    def test_list_filters(self, temp_db, sample_company, make_transactions):
        """Test unclassified and ordering filters."""
        txns = make_transactions(
            ("B", "1.00", "0", None, date(2024, 2, 1)),
            ("A", "1.00", "0", None, date(2024, 1, 1)),
        )
        temp_db.update_transaction_classification(txns[1].id, "9600", "Bank Charges")

        assert [t.details for t in temp_db.list_transactions(sample_company.id)] == ["A", "B"]
        unclassified = temp_db.list_transactions(sample_company.id, unclassified_only=True)
        assert [t.details for t in unclassified] == ["B"]

    def test_update_unknown_transaction(self, temp_db):
        """Test that classifying a missing transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            temp_db.update_transaction_classification(999, "9600", "Bank Charges")


class TestRules:
    """Tests for classification rule storage."""

    def test_list_rules_orders_by_priority(self, temp_db, sample_company):
        """Test that rules come back highest priority first."""
        temp_db.create_rule(rule(sample_company.id, "FEE", 5))
        temp_db.create_rule(rule(sample_company.id, "SERVICE FEE", 9))

        assert [r.pattern for r in temp_db.list_rules(sample_company.id)] == ["SERVICE FEE", "FEE"]

    def test_inactive_rules_hidden(self, temp_db, sample_company):
        """Test that inactive rules only show when asked for."""
        temp_db.create_rule(rule(sample_company.id, is_active=False))

        assert temp_db.list_rules(sample_company.id) == []
        assert len(temp_db.list_rules(sample_company.id, active_only=False)) == 1

    def test_get_rule_by_pattern_ignores_case(self, temp_db, sample_company):
        """Test pattern lookup is case-insensitive."""
        rule_id = temp_db.create_rule(rule(sample_company.id, "Service Fee"))
        assert temp_db.get_rule_by_pattern(sample_company.id, " SERVICE FEE ").id == rule_id

    def test_usage_and_account_updates(self, temp_db, sample_company):
        """Test usage increments and account changes."""
        rule_id = temp_db.create_rule(rule(sample_company.id))

        temp_db.increment_rule_usage(rule_id)
        temp_db.increment_rule_usage(rule_id, 2)
        temp_db.update_rule_account(rule_id, "8900", "Administrative Expenses")

        stored = temp_db.get_rule(rule_id)
        assert stored.usage_count == 3
        assert stored.account_code == "8900"

    def test_rule_writes_invalidate_registered_cache(self, temp_db, sample_company):
        """Test that a registered cache is dropped when rules change."""
        cache = LookupCache()
        temp_db.register_cache(cache)
        loads = []

        def loader(company_id):
            loads.append(company_id)
            return temp_db.list_rules(company_id)

        cache.rules_for(sample_company.id, loader)
        cache.rules_for(sample_company.id, loader)
        temp_db.create_rule(rule(sample_company.id))
        rules = cache.rules_for(sample_company.id, loader)

        assert len(loads) == 2
        assert len(rules) == 1


class TestJournalEntries:
    """Tests for journal entry storage."""

    def entry(self, company_id, reference="JE-1", bank="1100", other="8800", source=None):
        return JournalEntry(
            reference=reference,
            entry_date=date(2024, 1, 5),
            description="Test",
            company_id=company_id,
            fiscal_period_id=None,
            created_by="SYSTEM",
            lines=(
                JournalEntryLine(other, "Expense", debit_amount=Decimal("10.00"), source_transaction_id=source),
                JournalEntryLine(bank, "Bank", credit_amount=Decimal("10.00"), source_transaction_id=source),
            ),
        )

    def test_create_with_new_account(self, temp_db, sample_company, core_accounts):
        """Test that missing accounts are created together with the entry."""
        new_account = entities.Account(
            id=None,
            company_id=sample_company.id,
            code="8800",
            name="Insurance",
            account_type=AccountType.EXPENSE,
            category="Insurance",
        )

        created = temp_db.create_journal_entry(self.entry(sample_company.id), [new_account])

        assert created.id is not None
        assert [line.account_code for line in created.lines] == ["8800", "1100"]
        assert all(line.account_id is not None for line in created.lines)
        assert temp_db.get_journal_entry_by_reference(sample_company.id, "JE-1").id == created.id

    def test_unknown_account_rolls_back(self, temp_db, sample_company, core_accounts):
        """Test that an entry against an unknown account stores nothing."""
        with pytest.raises(LookupFailure):
            temp_db.create_journal_entry(self.entry(sample_company.id))

        assert temp_db.list_journal_entries(sample_company.id) == []

    def test_exists_for_transaction(self, temp_db, sample_company, core_accounts, make_transactions):
        """Test the per-transaction existence check."""
        txn = make_transactions(("FEE", "10.00", "0"))[0]
        temp_db.create_journal_entry(self.entry(sample_company.id, other="3900", source=txn.id))

        assert temp_db.journal_entry_exists_for_transaction(txn.id)
        assert not temp_db.journal_entry_exists_for_transaction(txn.id + 1)

    def test_replace_by_prefix(self, temp_db, sample_company, sample_period, core_accounts):
        """Test that entries matching the prefix in the period are replaced."""
        first = self.entry(sample_company.id, reference="OB-1", other="3900")
        temp_db.replace_journal_entries(sample_company.id, None, "OB-", first)
        kept = temp_db.create_journal_entry(self.entry(sample_company.id, reference="JE-5", other="3900"))

        temp_db.replace_journal_entries(sample_company.id, None, "OB-", first)

        references = sorted(e.reference for e in temp_db.list_journal_entries(sample_company.id))
        assert references == ["JE-5", "OB-1"]
        assert temp_db.get_journal_entry_by_reference(sample_company.id, "JE-5").id == kept.id
