"""
Categorizer Module
Assigns a spending/income category to a transaction from its description.

Rules are evaluated in order against the lower-cased description and the
first match wins, so a "salary" credit that also mentions "netflix" is
still Salary.
"""

import re
import logging
from typing import NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

SALARY = "Salary"
INVESTMENT = "Investment"
FOOD_AND_DINING = "Food & Dining"
TRANSPORTATION = "Transportation"
SHOPPING = "Shopping"
ENTERTAINMENT = "Entertainment"
BILLS_AND_UTILITIES = "Bills & Utilities"
HEALTHCARE = "Healthcare"
TRAVEL = "Travel"
OTHER_EXPENSES = "Other Expenses"
OTHER_INCOME = "Other Income"

# Placeholder held by a transaction until its description is finalized
UNCATEGORIZED = "Uncategorized"

CATEGORIES = (
    SALARY,
    INVESTMENT,
    FOOD_AND_DINING,
    TRANSPORTATION,
    SHOPPING,
    ENTERTAINMENT,
    BILLS_AND_UTILITIES,
    HEALTHCARE,
    TRAVEL,
    OTHER_EXPENSES,
    OTHER_INCOME,
)


class CategoryRule(NamedTuple):
    """A keyword pattern and the category it assigns."""
    category: str
    pattern: re.Pattern


def _rule(category: str, *keywords: str) -> CategoryRule:
    return CategoryRule(category, re.compile('|'.join(keywords)))


# Order matters: earlier rules win.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    _rule(SALARY, r'salary', r'payroll'),
    _rule(INVESTMENT, r'interest', r'credit\s*rfnd', r'refund'),
    _rule(FOOD_AND_DINING, r'restaurant', r'cafe', r'food', r'dhaba', r'milk',
          r'grocery', r'supermarket'),
    _rule(TRANSPORTATION, r'fuel', r'gas', r'transport', r'uber', r'ola'),
    _rule(SHOPPING, r'amazon', r'flipkart', r'walmart', r'shopping', r'paytm', r'upi'),
    _rule(ENTERTAINMENT, r'netflix', r'spotify', r'movie'),
    _rule(BILLS_AND_UTILITIES, r'electric', r'utility', r'internet', r'wifi',
          r'recharge', r'bill'),
    _rule(HEALTHCARE, r'medical', r'pharmacy', r'doctor'),
    _rule(TRAVEL, r'hotel', r'flight', r'travel'),
)


def default_category(is_expense: bool) -> str:
    """Fallback bucket for descriptions no rule recognizes."""
    return OTHER_EXPENSES if is_expense else OTHER_INCOME


def categorize_transaction(
    description: Optional[str],
    is_expense: bool,
    rules: Sequence[CategoryRule] = CATEGORY_RULES
) -> str:
    """
    Pick a category for a transaction description.

    Args:
        description: Final transaction description
        is_expense: True for debits, False for credits
        rules: Ordered rule table (defaults to CATEGORY_RULES)

    Returns:
        Category label; the direction-specific "Other" bucket if nothing matches
    """
    if not description or not isinstance(description, str):
        return default_category(is_expense)

    lower_desc = description.lower()

    for rule in rules:
        if rule.pattern.search(lower_desc):
            return rule.category

    return default_category(is_expense)
