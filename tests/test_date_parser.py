"""Tests for date parsing helpers."""

from datetime import date, timedelta

import pytest

from bankbooks.utils.date_parser import (
    parse_date,
    parse_statement_period,
    resolve_day_month,
    statement_end_year,
)


def test_parse_absolute_date():
    """Test parsing ISO dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_day_first_date():
    """Test that numeric dates are read day-first."""
    assert parse_date("05/01/2024") == date(2024, 1, 5)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_start_of_year():
    """Test parsing 'start of year'."""
    assert parse_date("start of year") == date(date.today().year, 1, 1)


def test_parse_invalid_date():
    """Test that nonsense raises ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date")


class TestStatementPeriod:
    """Tests for statement period helpers."""

    def test_parse_named_month_period(self):
        """Test '01 January 2024 to 31 January 2024'."""
        assert parse_statement_period("01 January 2024 to 31 January 2024") == (
            date(2024, 1, 1),
            date(2024, 1, 31),
        )

    def test_parse_numeric_period(self):
        """Test day-first numeric bounds."""
        assert parse_statement_period("01/02/2024 to 29/02/2024") == (date(2024, 2, 1), date(2024, 2, 29))

    def test_unparseable_period(self):
        """Test that garbage gives None."""
        assert parse_statement_period("whenever") is None
        assert parse_statement_period(None) is None

    def test_end_year_from_to_clause(self):
        """Test that the 'to <date>' year is preferred."""
        assert statement_end_year("15 December 2023 to 14 January 2024") == 2024

    def test_end_year_falls_back_to_last_year(self):
        """Test the four-digit-year fallback."""
        assert statement_end_year("Tax year 2023/2024") == 2024

    def test_end_year_missing(self):
        """Test that no year gives None."""
        assert statement_end_year("January") is None


class TestResolveDayMonth:
    """Tests for resolve_day_month."""

    def test_plain_year(self):
        """Test building a date in the given year."""
        assert resolve_day_month(16, 1, 2024) == date(2024, 1, 16)

    def test_invalid_day_raises(self):
        """Test that 30 February raises."""
        with pytest.raises(ValueError):
            resolve_day_month(30, 2, 2024)

    def test_start_year_used_inside_period(self):
        """Test that a date outside the period tries the start year."""
        bounds = (date(2023, 12, 15), date(2024, 1, 14))
        assert resolve_day_month(20, 12, 2024, bounds) == date(2023, 12, 20)

    def test_leap_day_only_valid_in_start_year(self):
        """Test that a date invalid in the end year is built in the start year."""
        bounds = (date(2024, 2, 1), date(2025, 1, 31))
        assert resolve_day_month(29, 2, 2025, bounds) == date(2024, 2, 29)

    def test_invalid_in_both_years_raises(self):
        """Test that a date valid in neither year still raises."""
        bounds = (date(2022, 12, 1), date(2023, 11, 30))
        with pytest.raises(ValueError):
            resolve_day_month(29, 2, 2023, bounds)


def test_parse_date_iso_with_small_day():
    """Test that ISO dates are not read day-first."""
    assert parse_date("2024-03-01") == date(2024, 3, 1)
