"""Statement line parser.

Bank statements spread one transaction over a dated primary line and any
number of continuation lines. The parser folds a state machine over the
lines: each step takes the current state and a line and returns the next
state plus an outcome (``Emit``, ``Skip`` or ``LineError``). Which step
applies is decided by an ordered list of ``LineRule`` entries, first match
wins.

Dates are printed as ``DD MM`` without a year; the year comes from the
statement period when one is known.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import Callable, Iterable, Optional, Pattern, Union

from bankbooks.domain.entities import ParsedTransaction, RawLine, TransactionType, ZERO
from bankbooks.domain.errors import ParseError
from bankbooks.domain.line_filter import NOISE_PATTERNS, is_noise
from bankbooks.utils.amount_parser import AMOUNT_PATTERN, find_amounts, strip_amounts
from bankbooks.utils.date_parser import (
    parse_statement_period,
    resolve_day_month,
    statement_end_year,
)

logger = logging.getLogger(__name__)


DATE_PATTERN = re.compile(r"^\s*(\d{2})\s+(\d{2})(?!\d)(?=\s|$)")
REFERENCE_PATTERN = re.compile(r"\b(\d{8,})\b")
BALANCE_BROUGHT_FORWARD = "BALANCE BROUGHT FORWARD"

# Skip reasons that do not represent a discarded line
_NOT_SKIPPED = frozenset({"continuation", "nothing to finalize"})

CREDIT_PATTERNS = (
    "CREDIT TRANSFER",
    "DEPOSIT",
    "IB PAYMENT FROM",
    "EXCESS INTEREST",
    "INTEREST CAPITALISED",
    "REVERSAL",
    "REFUND",
    "RTD-NOT PROVIDED FOR",
    "IB TRANSFER FROM",
)

DEBIT_PATTERNS = (
    "SERVICE FEE",
    "WITHDRAWAL",
    "TRANSFER TO",
    "PAYMENT",
    "DEBIT ORDER",
    "ATM WITHDRAWAL",
    "CARD PURCHASE",
    "CHEQUE",
)

FEE_MARKERS = ("SERVICE FEE", "##")


@dataclass(frozen=True)
class StatementFormat:
    """Keyword sets and switches for one bank's statement layout.

    When a line carries both a credit and a debit keyword the credit keyword
    wins. ``continuation_credit_override`` lets a continuation line of the
    form "<credit keyword> ... <amount>" turn the transaction into a credit.
    """

    name: str = "default"
    credit_patterns: tuple[str, ...] = CREDIT_PATTERNS
    debit_patterns: tuple[str, ...] = DEBIT_PATTERNS
    fee_markers: tuple[str, ...] = FEE_MARKERS
    noise_patterns: tuple[Pattern[str], ...] = NOISE_PATTERNS
    continuation_credit_override: bool = True


DEFAULT_FORMAT = StatementFormat()


# Parser states

@dataclass(frozen=True)
class NoCurrentTransaction:
    """No dated line seen yet, or the last transaction was finalized."""


NO_TRANSACTION = NoCurrentTransaction()


@dataclass(frozen=True)
class Accumulating:
    """A transaction whose dated line has been read; continuation lines may follow."""

    day: int
    month: int
    position: int
    details: tuple[str, ...] = ()
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    credit_override_applied: bool = False


ParserState = Union[NoCurrentTransaction, Accumulating]


# Step outcomes

@dataclass(frozen=True)
class Emit:
    transaction: ParsedTransaction


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class LineError:
    position: int
    reason: str


Outcome = Union[Emit, Skip, LineError]


@dataclass(frozen=True)
class ParseContext:
    """Per-call values needed to turn day/month pairs into dates."""

    year: int
    today: date
    period_bounds: Optional[tuple[date, date]] = None


@dataclass
class ParseReport:
    """Result of parsing one statement."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    errors: list[LineError] = field(default_factory=list)
    skipped: int = 0


@dataclass(frozen=True)
class LineRule:
    """Predicate plus handler; the first rule whose predicate holds handles the line."""

    name: str
    applies: Callable[[str, ParserState, StatementFormat], bool]
    handle: Callable[[str, ParserState, StatementFormat, ParseContext, int], tuple[ParserState, Outcome]]


@lru_cache(maxsize=32)
def _credit_amount_pattern(credit_patterns: tuple[str, ...]) -> Pattern[str]:
    keywords = "|".join(re.escape(p) for p in credit_patterns)
    return re.compile(rf"(?:{keywords}).*?({AMOUNT_PATTERN.pattern})", re.IGNORECASE)


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def resolve_direction(text: str, statement_format: StatementFormat = DEFAULT_FORMAT) -> TransactionType:
    """Decide whether a line describes money in or out.

    Credit keywords are checked first; no keyword at all means debit.
    """
    upper = text.upper()
    if _contains_any(upper, statement_format.credit_patterns):
        return TransactionType.CREDIT
    if not _contains_any(upper, statement_format.debit_patterns):
        logger.debug("No direction keyword in %r, defaulting to debit", text)
    return TransactionType.DEBIT


def finalize(state: ParserState, statement_format: StatementFormat, context: ParseContext) -> Outcome:
    """Turn an accumulated transaction into an outcome.

    Transactions with no details left after cleaning are dropped.
    """
    if not isinstance(state, Accumulating):
        return Skip("nothing to finalize")

    details = " ".join(" ".join(state.details).split())
    if not details:
        logger.debug("Dropping transaction at line %s with empty details", state.position)
        return Skip("empty details")

    try:
        txn_date = resolve_day_month(state.day, state.month, context.year, context.period_bounds)
    except ValueError:
        logger.warning(
            "Invalid date %02d %02d at line %s, using %s",
            state.day,
            state.month,
            state.position,
            context.today,
        )
        txn_date = context.today

    if state.credit is not None:
        txn_type, amount = TransactionType.CREDIT, state.credit
    elif state.debit is not None:
        amount = state.debit
        if _contains_any(details.upper(), statement_format.fee_markers):
            txn_type = TransactionType.SERVICE_FEE
        else:
            txn_type = TransactionType.DEBIT
    else:
        # Balance-only or details-only record
        txn_type, amount = TransactionType.DEBIT, Decimal("0.00")

    reference = REFERENCE_PATTERN.search(details)
    return Emit(
        ParsedTransaction(
            date=txn_date,
            description=details,
            amount=amount,
            type=txn_type,
            balance=state.balance,
            reference=reference.group(1) if reference else None,
        )
    )


def _start_transaction(text: str, position: int, statement_format: StatementFormat) -> Accumulating:
    match = DATE_PATTERN.match(text)
    if match is None:
        raise ParseError(f"Line {position} has no leading date")
    remainder = text[match.end():]
    amounts = [amount for amount, _ in find_amounts(remainder)]
    state = Accumulating(
        day=int(match.group(1)),
        month=int(match.group(2)),
        position=position,
        details=(strip_amounts(remainder),),
    )

    if BALANCE_BROUGHT_FORWARD in remainder.upper():
        return replace(state, balance=amounts[-1] if amounts else ZERO)
    if len(amounts) >= 2:
        amount, balance = amounts[-2], amounts[-1]
        if resolve_direction(remainder, statement_format) is TransactionType.CREDIT:
            return replace(state, credit=amount, balance=balance)
        return replace(state, debit=amount, balance=balance)
    if len(amounts) == 1:
        return replace(state, balance=amounts[0])
    return state


def _append_continuation(state: Accumulating, text: str, statement_format: StatementFormat) -> Accumulating:
    state = replace(state, details=state.details + (" ".join(text.split()),))
    if not statement_format.continuation_credit_override or state.credit_override_applied:
        return state

    combined = " ".join(state.details)
    match = _credit_amount_pattern(statement_format.credit_patterns).search(combined)
    if match is None:
        return state
    found = find_amounts(match.group(1))
    if not found:
        return state
    return replace(state, credit=found[0][0], debit=None, credit_override_applied=True)


def _is_dated(text: str, state: ParserState, statement_format: StatementFormat) -> bool:
    match = DATE_PATTERN.match(text)
    if match is None:
        return False
    day, month = int(match.group(1)), int(match.group(2))
    return 1 <= day <= 31 and 1 <= month <= 12


def _handle_blank(text, state, statement_format, context, position):
    return state, Skip("blank")


def _handle_noise(text, state, statement_format, context, position):
    return state, Skip("noise")


def _handle_dated(text, state, statement_format, context, position):
    new_state = _start_transaction(text, position, statement_format)
    return new_state, finalize(state, statement_format, context)


def _handle_continuation(text, state, statement_format, context, position):
    return _append_continuation(state, text, statement_format), Skip("continuation")


def _handle_orphan(text, state, statement_format, context, position):
    logger.debug("Ignoring line %s outside any transaction: %r", position, text)
    return state, Skip("orphan")


LINE_RULES: tuple[LineRule, ...] = (
    LineRule("blank", lambda text, state, fmt: not text.strip(), _handle_blank),
    LineRule("noise", lambda text, state, fmt: is_noise(text, fmt.noise_patterns), _handle_noise),
    LineRule("dated", _is_dated, _handle_dated),
    LineRule("continuation", lambda text, state, fmt: isinstance(state, Accumulating), _handle_continuation),
    LineRule("orphan", lambda text, state, fmt: True, _handle_orphan),
)


def step(
    state: ParserState,
    line: RawLine,
    statement_format: StatementFormat,
    context: ParseContext,
    rules: tuple[LineRule, ...] = LINE_RULES,
) -> tuple[ParserState, Outcome]:
    """Advance the parser by one line.

    Failures inside a handler become a ``LineError`` and leave the state as it was.
    """
    for rule in rules:
        if rule.applies(line.text, state, statement_format):
            try:
                return rule.handle(line.text, state, statement_format, context, line.position)
            except (ParseError, ValueError, ArithmeticError) as e:
                return state, LineError(line.position, f"{rule.name}: {e}")
    return state, Skip("no rule")


class StatementParser:
    """Reconstructs transactions from extracted statement lines.

    Instances hold only configuration, so one parser can be reused for any
    number of statements.
    """

    def __init__(
        self,
        statement_format: StatementFormat = DEFAULT_FORMAT,
        today: Optional[Callable[[], date]] = None,
    ):
        """Initialize statement parser.

        Args:
            statement_format: Keyword sets and switches for the bank layout
            today: Clock used for the year default and invalid-date fallback
        """
        self.statement_format = statement_format
        self._today = today or date.today

    def _context(self, statement_period: Optional[str]) -> ParseContext:
        today = self._today()
        bounds = parse_statement_period(statement_period)
        if bounds is not None:
            year = bounds[1].year
        else:
            year = statement_end_year(statement_period) or today.year
        return ParseContext(year=year, today=today, period_bounds=bounds)

    def parse(
        self,
        lines: Iterable[Union[str, RawLine]],
        statement_period: Optional[str] = None,
    ) -> ParseReport:
        """Parse statement lines into transactions.

        Args:
            lines: Extracted lines, as strings or RawLine values
            statement_period: Statement period text, e.g. "01 January 2024 to 31 January 2024"

        Returns:
            ParseReport with transactions in statement order
        """
        context = self._context(statement_period)
        report = ParseReport()
        state: ParserState = NO_TRANSACTION

        for position, line in enumerate(lines):
            raw = line if isinstance(line, RawLine) else RawLine(text=line, position=position)
            state, outcome = step(state, raw, self.statement_format, context)
            self._record(report, outcome)

        self._record(report, finalize(state, self.statement_format, context))
        logger.info(
            "Parsed %s transactions (%s lines skipped, %s errors)",
            len(report.transactions),
            report.skipped,
            len(report.errors),
        )
        return report

    @staticmethod
    def _record(report: ParseReport, outcome: Outcome) -> None:
        if isinstance(outcome, Emit):
            report.transactions.append(outcome.transaction)
        elif isinstance(outcome, LineError):
            logger.warning("Could not parse line %s: %s", outcome.position, outcome.reason)
            report.errors.append(outcome)
        elif outcome.reason not in _NOT_SKIPPED:
            report.skipped += 1
