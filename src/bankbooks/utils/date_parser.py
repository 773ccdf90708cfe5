"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


_PERIOD_END_PATTERN = re.compile(r"to\s*(\d{1,2}\s+[A-Za-z]+\s+(\d{4}))", re.IGNORECASE)
_YEAR_PATTERN = re.compile(r"\b((?:19|20)\d{2})\b")
_PERIOD_SPLIT_PATTERN = re.compile(r"\s+(?:to|-)\s+", re.IGNORECASE)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15 January 2024") and the
    relative forms "today", "yesterday", "start of year" and "end of year".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "start of year": today.replace(month=1, day=1),
        "end of year": today.replace(month=1, day=1) + relativedelta(years=1, days=-1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO dates are year-month-day whatever dayfirst says
    try:
        return date_parser.isoparse(date_str).date()
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def parse_statement_period(period: Optional[str]) -> Optional[tuple[date, date]]:
    """Parse a statement period such as "01 January 2024 to 31 January 2024".

    Numeric dates are read day-first ("01/01/2024 to 31/01/2024").

    Returns:
        (start, end) tuple, or None when either bound does not parse
    """
    if not period:
        return None
    parts = _PERIOD_SPLIT_PATTERN.split(period.strip(), maxsplit=1)
    if len(parts) != 2:
        return None
    try:
        start = date_parser.parse(parts[0], dayfirst=True).date()
        end = date_parser.parse(parts[1], dayfirst=True).date()
    except (ValueError, OverflowError):
        return None
    if start > end:
        return None
    return start, end


def statement_end_year(period: Optional[str]) -> Optional[int]:
    """Return the year a statement period ends in.

    Looks for "to <day> <month> <year>" first, then falls back to the last
    four-digit year in the text.
    """
    if not period:
        return None
    match = _PERIOD_END_PATTERN.search(period)
    if match:
        return int(match.group(2))
    years = _YEAR_PATTERN.findall(period)
    if years:
        return int(years[-1])
    return None


def resolve_day_month(
    day: int,
    month: int,
    year: int,
    period_bounds: Optional[tuple[date, date]] = None,
) -> date:
    """Build a date from a day/month pair printed without a year.

    When period bounds are known and the date in ``year`` is invalid or falls
    outside them, the start year of the period is tried (statements spanning
    New Year, where 29 February may only exist in the start year).

    Raises:
        ValueError: If day/month form a valid date in neither year
    """
    years = [year]
    if period_bounds is not None and period_bounds[0].year != year:
        years.append(period_bounds[0].year)

    candidates = []
    for candidate_year in years:
        try:
            candidates.append(date(candidate_year, month, day))
        except ValueError:
            continue
    if not candidates:
        raise ValueError(f"{day:02d} {month:02d} is not a valid date in {' or '.join(map(str, years))}")

    if period_bounds is not None:
        start, end = period_bounds
        for candidate in candidates:
            if start <= candidate <= end:
                return candidate
    return candidates[0]
