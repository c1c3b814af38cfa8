"""
Financial Rules Module
Defines transaction direction and the safe date/amount parsing rules
used when reading statement columns.
"""

import logging
import math
import re
from datetime import date
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

# Currency symbols and thousands separators stripped before numeric parsing
AMOUNT_NOISE_PATTERN = re.compile(r'[$₹€£,]')
# Balance suffix marking a credit balance, matched case-insensitively
CREDIT_MARKER = "CR"


class TransactionType(Enum):
    """Transaction direction enumeration."""
    EXPENSE = "expense"
    INCOME = "income"


def parse_date(date_str: Optional[str]) -> Optional[str]:
    """
    Parse a DD/MM/YYYY statement date into ISO format.

    Anything after the first whitespace-separated token is ignored, so
    "05/01/2024 10:32" parses the same as "05/01/2024".

    Args:
        date_str: Raw date text from a statement column

    Returns:
        Date as YYYY-MM-DD, or None if the text is not a valid calendar date
    """
    if not date_str or not isinstance(date_str, str):
        return None

    tokens = date_str.split()
    if not tokens:
        return None

    parts = tokens[0].split('/')
    if len(parts) != 3:
        logger.debug(f"Date '{date_str}' does not have three components")
        return None

    day, month, year = parts
    if not (day.isdigit() and month.isdigit() and year.isdigit()):
        logger.debug(f"Date '{date_str}' has non-numeric components")
        return None

    try:
        parsed = date(int(year), int(month), int(day))
    except ValueError as e:
        logger.debug(f"Invalid calendar date '{date_str}': {e}")
        return None

    return parsed.isoformat()


def parse_amount(amount_str: Optional[str]) -> float:
    """
    Parse an amount column into a float.

    Strips currency symbols, thousands separators and a trailing CR
    balance marker. Never raises; anything unparseable is 0.

    Args:
        amount_str: Raw amount text (e.g. "1,234.50 CR")

    Returns:
        Parsed amount, or 0.0
    """
    if not amount_str or not isinstance(amount_str, str):
        return 0.0

    clean = AMOUNT_NOISE_PATTERN.sub('', amount_str).strip()
    if clean.upper().endswith(CREDIT_MARKER):
        clean = clean[:-len(CREDIT_MARKER)].rstrip()

    # float() would read "1_000" as 1000
    if '_' in clean:
        return 0.0

    try:
        amount = float(clean)
    except ValueError:
        return 0.0

    if math.isnan(amount) or math.isinf(amount):
        return 0.0

    return amount


def format_amount_display(amount: float, transaction_type: TransactionType) -> str:
    """
    Format amount for display with explicit sign.

    Income: +1600.00
    Expense: -250.00

    Args:
        amount: Unsigned amount
        transaction_type: Direction of the transaction

    Returns:
        Formatted string with explicit sign
    """
    amount = abs(amount)

    if transaction_type == TransactionType.EXPENSE:
        return f"-{amount:.2f}"
    return f"+{amount:.2f}"
