"""Text extraction collaborators.

PDF and OCR extraction live outside this package. Anything that can hand
back statement lines plus the account number and statement period satisfies
the ``TextExtractor`` protocol; ``PlainTextExtractor`` covers text that has
already been extracted to a file.
"""

import re
from pathlib import Path
from typing import Optional, Protocol, Union


ACCOUNT_NUMBER_PATTERNS = (
    re.compile(r"Account\s+Number\s*:?\s*([0-9][0-9\- ]*[0-9])", re.IGNORECASE),
    re.compile(r"Account\s*#\s*:?\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"Acc(?:ount)?\s+No\.?\s*:?\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"Account\s*:\s*([0-9][0-9\-]*)", re.IGNORECASE),
    re.compile(r"\b(\d{4}[\s\-]\d{4}[\s\-]\d{4}[\s\-]\d{4})\b"),
)

_DAY_MONTH_YEAR = r"\d{1,2}\s+[A-Za-z]+\s+\d{4}"
_NUMERIC_DATE = r"\d{1,2}/\d{1,2}/\d{4}"

STATEMENT_PERIOD_PATTERNS = (
    re.compile(rf"Statement\s+Period\s*:?\s*((?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR})\s+to\s+(?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR}))", re.IGNORECASE),
    re.compile(rf"Period\s*:\s*((?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR})\s+to\s+(?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR}))", re.IGNORECASE),
    re.compile(rf"From\s+((?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR})\s+to\s+(?:{_NUMERIC_DATE}|{_DAY_MONTH_YEAR}))", re.IGNORECASE),
    re.compile(rf"({_DAY_MONTH_YEAR}\s+to\s+{_DAY_MONTH_YEAR})", re.IGNORECASE),
)


class TextExtractor(Protocol):
    """Source of statement text and metadata."""

    def extract_lines(self, document) -> list[str]:
        ...

    def account_number(self) -> Optional[str]:
        ...

    def statement_period(self) -> Optional[str]:
        ...


def detect_account_number(text: str) -> Optional[str]:
    """Find the bank account number in statement text."""
    for pattern in ACCOUNT_NUMBER_PATTERNS:
        match = pattern.search(text)
        if match:
            return re.sub(r"[\s\-]", "", match.group(1))
    return None


def detect_statement_period(text: str) -> Optional[str]:
    """Find the statement period ("<start> to <end>") in statement text."""
    for pattern in STATEMENT_PERIOD_PATTERNS:
        match = pattern.search(text)
        if match:
            return " ".join(match.group(1).split())
    return None


class PlainTextExtractor:
    """Reads already-extracted statement text from a UTF-8 file."""

    def __init__(self):
        self._text = ""

    def extract_lines(self, document: Union[str, Path]) -> list[str]:
        """Read the document and return its lines.

        Args:
            document: Path to a text file

        Returns:
            Lines without trailing newlines

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self._text = Path(document).read_text(encoding="utf-8", errors="replace")
        return self._text.splitlines()

    def account_number(self) -> Optional[str]:
        return detect_account_number(self._text)

    def statement_period(self) -> Optional[str]:
        return detect_statement_period(self._text)
