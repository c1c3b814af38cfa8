"""
Statement Parser Module
Parses rendered bank statement text into structured transactions.

Each transaction starts on an anchor line carrying two dates, the start of
the narration, debit, credit and a running balance ending in CR. Narration
that wraps onto the following physical lines is buffered and merged into
the transaction once the next anchor (or the end of input) is reached.
"""

import re
import logging
from enum import Enum
from typing import Callable, Iterable, NamedTuple, Optional

from .categorizer import UNCATEGORIZED, categorize_transaction
from .financial_rules import TransactionType, format_amount_display, parse_amount, parse_date

logger = logging.getLogger(__name__)

UNKNOWN_DESCRIPTION = "Unknown Transaction"

# First line of the transaction section on the supported statement layout
DEFAULT_START_MARKER = "BALANCE B/F"

WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return WHITESPACE_PATTERN.sub(' ', text).strip()


class Transaction:
    """Represents a single financial transaction."""

    def __init__(
        self,
        owner_id,
        date: str,
        description: str,
        amount: float,
        transaction_type: TransactionType,
        category: str = UNCATEGORIZED,
        receipt_source: Optional[str] = None
    ):
        self.owner_id = owner_id
        self.date = date
        self.description = description
        self.amount = amount
        self.type = transaction_type.value
        self.category = category
        self.receipt_source = receipt_source

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE.value

    @property
    def amount_display(self) -> str:
        return format_amount_display(self.amount, TransactionType(self.type))

    def finalize(
        self,
        continuation_lines: list[str],
        categorizer: Callable[[str, bool], str] = categorize_transaction
    ):
        """
        Merge wrapped narration lines into the description and categorize.

        Args:
            continuation_lines: Buffered lines, in the order they were read
            categorizer: Function mapping (description, is_expense) to a category
        """
        parts = [self.description or ""] + list(continuation_lines)
        self.description = normalize_whitespace(' '.join(parts))
        self.category = categorizer(self.description, self.is_expense)

    def to_dict(self) -> dict:
        """Convert transaction to dictionary."""
        return {
            "owner_id": self.owner_id,
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "date": self.date,
            "receipt_source": self.receipt_source
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Transaction(date={self.date}, desc={self.description[:30]}..., amount={self.amount_display})"


class AnchorMatch(NamedTuple):
    """Fields decomposed from a transaction anchor line."""
    date: str
    value_date: str
    description: str
    debit: str
    credit: str
    balance: str


class AnchorPattern:
    """
    Describes the column layout of a transaction anchor line.

    Layout, in order: transaction date, value date, narration, optional
    debit, optional credit, balance immediately followed by the balance
    suffix. Lines missing any component (e.g. no CR balance) are not anchors.

    An empty debit or credit column shows up as one extra whitespace
    character, so "NARRATION 500.00  900.00CR" is a debit and
    "NARRATION  500.00 900.00CR" is a credit.

    The line is split into whitespace-separated tokens once and every
    token is inspected a bounded number of times, so matching is linear in
    the line length. The shortest narration wins; for a given narration
    the order of preference is debit and credit, debit only, credit only,
    neither.
    """

    TOKEN_PATTERN = re.compile(r'\S+')
    DATE_PATTERN = re.compile(r'\d{2}/\d{2}/\d{4}')
    AMOUNT_PATTERN = re.compile(r'[\d,.]+')

    def __init__(self, balance_suffix: str = "CR"):
        self.balance_suffix = balance_suffix
        self.balance_pattern = re.compile(rf'[\d,.]+{re.escape(balance_suffix)}')

    def match(self, line: str) -> Optional[AnchorMatch]:
        """Decompose an anchor line, or return None if the line is not one."""
        tokens = [(m.start(), m.end(), m.group()) for m in self.TOKEN_PATTERN.finditer(line)]
        if len(tokens) < 3:
            return None

        # gaps[i]: whitespace characters between token i-1 and token i
        gaps = [tokens[0][0]] + [tokens[i][0] - tokens[i - 1][1] for i in range(1, len(tokens))]

        # first_end[k]: earliest narration end at or after token k, with its amounts
        first_end = [None] * (len(tokens) + 1)
        for k in range(len(tokens) - 1, -1, -1):
            run = gaps[k + 1] if k + 1 < len(tokens) else 0
            amounts = self._amounts_after(line, tokens, gaps, k, run)
            first_end[k] = (k, amounts) if amounts else first_end[k + 1]

        for i in range(len(tokens) - 2):
            date, value_date = tokens[i][2][-10:], tokens[i + 1][2]
            if not (self.DATE_PATTERN.fullmatch(date) and self.DATE_PATTERN.fullmatch(value_date)):
                continue

            if first_end[i + 2]:
                end, (debit, credit, balance) = first_end[i + 2]
                description = line[tokens[i + 2][0]:tokens[end][1]]
            else:
                # Empty narration: one whitespace character stays with the value date
                amounts = self._amounts_after(line, tokens, gaps, i + 1, gaps[i + 2] - 1)
                if not amounts:
                    continue
                debit, credit, balance = amounts
                description = ""

            return AnchorMatch(date, value_date, description, debit, credit, balance)

        return None

    def _is_amount(self, tokens: list, index: int) -> bool:
        return index < len(tokens) and self.AMOUNT_PATTERN.fullmatch(tokens[index][2]) is not None

    def _balance_at(self, line: str, tokens: list, index: int) -> Optional[str]:
        """Balance text starting at token `index` ("900.00CR" or "900.00 CR")."""
        if index >= len(tokens):
            return None

        found = self.balance_pattern.match(tokens[index][2])
        if found:
            return found.group()

        if self._is_amount(tokens, index) and index + 1 < len(tokens):
            start, _, _ = tokens[index]
            suffix_start, _, suffix_token = tokens[index + 1]
            if suffix_token.startswith(self.balance_suffix):
                return line[start:suffix_start + len(self.balance_suffix)]

        return None

    def _amounts_after(self, line: str, tokens: list, gaps: list, k: int, run: int) -> Optional[tuple]:
        """
        Debit, credit and balance following a narration that ends at token k.

        Args:
            run: Whitespace characters available between the narration and
                 the first amount token

        Returns:
            (debit, credit, balance) or None
        """
        first = k + 1
        if first >= len(tokens):
            return None

        if run >= 1 and self._is_amount(tokens, first):
            if self._is_amount(tokens, first + 1):
                balance = self._balance_at(line, tokens, first + 2)
                if balance:
                    return tokens[first][2], tokens[first + 1][2], balance

            if first + 1 < len(tokens) and gaps[first + 1] >= 2:
                balance = self._balance_at(line, tokens, first + 1)
                if balance:
                    return tokens[first][2], "", balance

        if run >= 2 and self._is_amount(tokens, first):
            balance = self._balance_at(line, tokens, first + 1)
            if balance:
                return "", tokens[first][2], balance

        if run >= 3:
            balance = self._balance_at(line, tokens, first)
            if balance:
                return "", "", balance

        return None


class ParserState(Enum):
    """Description accumulator states."""
    IDLE = "idle"            # no transaction produced yet
    BUFFERING = "buffering"  # continuation lines collect for the latest transaction


class StatementParser:
    """
    Line-by-line statement parser.

    Driven as a two-state machine: header noise is ignored while IDLE; once
    the first transaction exists, non-anchor lines are buffered and merged
    into the most recent transaction when it is finalized.
    """

    LEADING_DATE_PATTERN = re.compile(r'^\d{2}/\d{2}/\d{4}')
    PAGE_BREAK_PATTERN = re.compile(r'Page No:', re.IGNORECASE)

    def __init__(
        self,
        owner_id,
        anchor_pattern: Optional[AnchorPattern] = None,
        categorizer: Callable[[str, bool], str] = categorize_transaction
    ):
        self.owner_id = owner_id
        self.anchor_pattern = anchor_pattern or AnchorPattern()
        self.categorizer = categorizer
        self.state = ParserState.IDLE
        self.transactions: list[Transaction] = []
        self.description_buffer: list[str] = []
        self.stats = {
            "lines_processed": 0,
            "anchors_matched": 0,
            "anchors_skipped": 0,
            "continuation_lines": 0,
            "noise_lines": 0
        }

    def parse_lines(self, lines: Iterable[str]) -> list[Transaction]:
        """
        Parse the transaction section of a statement.

        Args:
            lines: Ordered lines, starting at the transaction section

        Returns:
            Transactions in statement order
        """
        for line in lines:
            self.stats["lines_processed"] += 1
            self._process_line(line.strip())

        self._finish()

        logger.info(
            f"State-machine parser extracted {len(self.transactions)} transactions "
            f"({self.stats['anchors_skipped']} anchors skipped, "
            f"{self.stats['continuation_lines']} continuation lines merged)"
        )
        return self.transactions

    def _process_line(self, line: str):
        """Process a single line of statement text."""
        match = self.anchor_pattern.match(line)
        if match:
            self._on_anchor(match)
            return

        if self.state is ParserState.IDLE:
            return

        if self._is_noise(line):
            self.stats["noise_lines"] += 1
            logger.debug(f"Skipping noise line: {line[:50]}")
            return

        self.description_buffer.append(line)
        self.stats["continuation_lines"] += 1

    def _on_anchor(self, match: AnchorMatch):
        """Finalize the previous transaction and open a new one from an anchor."""
        self.stats["anchors_matched"] += 1

        if self.state is ParserState.BUFFERING:
            self._finalize_last()
        self.description_buffer = []

        date = parse_date(match.date)
        if not date:
            self.stats["anchors_skipped"] += 1
            logger.debug(f"Skipping anchor with invalid date: {match.date}")
            return

        debit = parse_amount(match.debit)
        credit = parse_amount(match.credit)

        if debit <= 0 and credit <= 0:
            self.stats["anchors_skipped"] += 1
            logger.debug(f"Skipping anchor without a positive amount: {match.date} {match.description[:30]}")
            return

        is_expense = debit > 0
        transaction = Transaction(
            owner_id=self.owner_id,
            date=date,
            description=match.description or UNKNOWN_DESCRIPTION,
            amount=debit if is_expense else credit,
            transaction_type=TransactionType.EXPENSE if is_expense else TransactionType.INCOME
        )
        self.transactions.append(transaction)
        self.state = ParserState.BUFFERING

        logger.debug(f"Parsed anchor: {date} | {transaction.description[:30]} | {transaction.amount_display}")

    def _is_noise(self, line: str) -> bool:
        """Lines that never belong to a description."""
        if len(line) <= 1:
            return True

        # Unrecognized anchor fragments
        if self.LEADING_DATE_PATTERN.match(line):
            return True

        return bool(self.PAGE_BREAK_PATTERN.search(line))

    def _finalize_last(self):
        """Merge buffered lines into the most recent transaction."""
        self.transactions[-1].finalize(self.description_buffer, self.categorizer)
        self.description_buffer = []

    def _finish(self):
        """
        End of input: finalize the last transaction.

        This also runs with an empty buffer so that every emitted transaction
        carries a category from the closed set instead of the placeholder.
        """
        if self.state is ParserState.BUFFERING:
            self._finalize_last()

    def get_stats(self) -> dict:
        """Get parsing statistics."""
        return self.stats.copy()


def split_lines(text: str) -> list[str]:
    """Split rendered text into trimmed lines."""
    return [line.strip() for line in text.split('\n')]


def find_transaction_start(lines: list[str], marker: Optional[str] = None) -> list[str]:
    """
    Drop the statement header.

    Args:
        lines: All lines of the document
        marker: Case-insensitive start marker (defaults to DEFAULT_START_MARKER)

    Returns:
        Lines from the first one containing the marker, or [] if it never occurs
    """
    marker = (marker or DEFAULT_START_MARKER).upper()

    for index, line in enumerate(lines):
        if marker in line.upper():
            return lines[index:]

    return []


def parse_transaction_statement(text: str, owner_id, marker: Optional[str] = None) -> list[Transaction]:
    """
    Convenience function to parse transactions from statement text.

    Args:
        text: Rendered statement text
        owner_id: Identifier copied onto every transaction
        marker: Optional override of the start marker

    Returns:
        List of Transaction objects (empty if the transaction section is missing)
    """
    if not text or not isinstance(text, str):
        return []

    section = find_transaction_start(split_lines(text), marker)
    if not section:
        logger.warning("Could not find the start of transaction data")
        return []

    parser = StatementParser(owner_id)
    return parser.parse_lines(section)
