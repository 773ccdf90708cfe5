"""Noise filtering for extracted statement lines.

Headers, footers, page markers and summary labels carry no transaction data.
A new bank layout usually only needs its extra labels appended to
``NOISE_PATTERNS`` (or passed in as ``patterns``).
"""

import re
from typing import Iterable, Pattern


def _compile(*patterns: str) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


NOISE_PATTERNS = _compile(
    r"^\s*BANK\s+STATEMENT\b",
    r"^\s*STATEMENT\s+OF\s+ACCOUNT\b",
    r"^\s*PAGE\s+\d+(\s+OF\s+\d+)?\s*$",
    r"^\s*\d+\s*$",
    r"^\s*CONTINUED\s*$",
    r"^\s*STATEMENT\s+PERIOD\s*:",
    r"^\s*STATEMENT\s+FROM\b",
    r"^\s*ACCOUNT\s+NUMBER\s*:",
    r"^\s*BRANCH\s+CODE\s*:",
    r"^\s*VAT\s+REG",
    r"^\s*MONTH-END\s+BALANCE\b",
    r"^\s*DATE\s+(DETAILS|DESCRIPTION)\s+DEBITS?\s+CREDITS?\s+BALANCE\s*$",
    r"^\s*DETAILS\s+SERVICE\s+FEE\s+DEBITS\s+CREDITS\s+DATE\s+BALANCE\s*$",
    r"^\s*TOTAL\s+(DEBITS|CREDITS)\s*:",
    r"^\s*OPENING\s+BALANCE\s*:",
    r"^\s*CLOSING\s+BALANCE\s*:",
)


def is_noise(line: str, patterns: Iterable[Pattern[str]] = NOISE_PATTERNS) -> bool:
    """Return True if the line is a header, footer or label with no transaction data."""
    return any(pattern.search(line) for pattern in patterns)
