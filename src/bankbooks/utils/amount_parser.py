"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


# Statement amounts: optional thousands commas, exactly two decimals.
AMOUNT_PATTERN = re.compile(r"(?<![\d.,])(\d{1,3}(?:,\d{3})+|\d+)\.\d{2}(?![\d])")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"^R\s*|[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def find_amounts(text: str) -> list[tuple[Decimal, tuple[int, int]]]:
    """Find every statement amount in a line of text.

    Tokens that look like amounts but fail to parse are skipped.

    Args:
        text: Line text

    Returns:
        List of (amount, (start, end)) in order of appearance
    """
    found = []
    for match in AMOUNT_PATTERN.finditer(text):
        try:
            found.append((parse_amount(match.group(0)), match.span()))
        except ValueError:
            continue
    return found


def strip_amounts(text: str) -> str:
    """Remove amount tokens from text and collapse whitespace."""
    return " ".join(AMOUNT_PATTERN.sub(" ", text).split())
