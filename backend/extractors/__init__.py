"""
Extractors Module - Transaction parsing and categorization.
"""

from .statement_parser import (
    Transaction,
    AnchorPattern,
    AnchorMatch,
    ParserState,
    StatementParser,
    find_transaction_start,
    parse_transaction_statement
)

from .financial_rules import (
    TransactionType,
    parse_date,
    parse_amount,
    format_amount_display
)

from .categorizer import (
    CATEGORIES,
    CATEGORY_RULES,
    CategoryRule,
    categorize_transaction
)

__all__ = [
    'Transaction',
    'AnchorPattern',
    'AnchorMatch',
    'ParserState',
    'StatementParser',
    'find_transaction_start',
    'parse_transaction_statement',
    'TransactionType',
    'parse_date',
    'parse_amount',
    'format_amount_display',
    'CATEGORIES',
    'CATEGORY_RULES',
    'CategoryRule',
    'categorize_transaction',
]
