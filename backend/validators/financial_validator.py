"""
Financial Validator Module
Validates transaction records for correctness and completeness.
"""

import logging
from datetime import datetime
from extractors.categorizer import CATEGORIES
from extractors.financial_rules import TransactionType
from extractors.statement_parser import Transaction

logger = logging.getLogger(__name__)

VALID_TYPES = {t.value for t in TransactionType}


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class TransactionValidator:
    """Validates transaction data."""

    def __init__(
        self,
        strict_mode: bool = False,
        min_description_length: int = 1
    ):
        """
        Initialize validator with configurable settings.

        Args:
            strict_mode: If True, raise exceptions on invalid data.
                        If False, log warnings and skip invalid transactions.
            min_description_length: Minimum characters required in description.
        """
        self.strict_mode = strict_mode
        self.min_description_length = min_description_length
        self.reset_stats()

    def validate_transaction(self, transaction: Transaction) -> bool:
        """
        Validate a single transaction.

        Args:
            transaction: Transaction object to validate

        Returns:
            True if valid, False if invalid

        Raises:
            ValidationError: If strict_mode is True and validation fails
        """
        self.validation_stats["total_validated"] += 1

        checks = (
            ("invalid_date", self._validate_date(transaction.date),
             f"Invalid date: {transaction.date}"),
            ("invalid_amount", self._validate_amount(transaction.amount),
             f"Invalid amount: {transaction.amount}"),
            ("invalid_description", self._validate_description(transaction.description),
             "Invalid description: empty or too short"),
            ("invalid_category", self._validate_type_and_category(transaction.type, transaction.category),
             f"Invalid type/category: {transaction.type}/{transaction.category}"),
        )

        for stat, passed, msg in checks:
            if passed:
                continue
            self.validation_stats[stat] += 1
            self.validation_stats["invalid"] += 1
            if self.strict_mode:
                raise ValidationError(msg)
            logger.warning(f"{msg} in transaction: {transaction}")
            return False

        self.validation_stats["valid"] += 1
        return True

    def validate_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        """
        Validate a list of transactions.

        Args:
            transactions: List of Transaction objects

        Returns:
            List of valid transactions (invalid ones filtered out)
        """
        valid_transactions = [txn for txn in transactions if self.validate_transaction(txn)]

        logger.info(
            f"Validation complete: {self.validation_stats['valid']} valid, "
            f"{self.validation_stats['invalid']} invalid out of "
            f"{self.validation_stats['total_validated']} total"
        )

        return valid_transactions

    def _validate_date(self, date_str: str) -> bool:
        """Dates must be ISO formatted (YYYY-MM-DD)."""
        if not date_str or not isinstance(date_str, str):
            return False

        try:
            datetime.strptime(date_str, '%Y-%m-%d')
            return True
        except ValueError:
            return False

    def _validate_amount(self, amount: float) -> bool:
        """Amounts are unsigned; direction lives in the type."""
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            return False

        return amount > 0

    def _validate_description(self, description: str) -> bool:
        if not isinstance(description, str):
            return False

        return len(description.strip()) >= self.min_description_length

    def _validate_type_and_category(self, txn_type: str, category: str) -> bool:
        """
        Validate transaction type and category.

        Type must be 'expense' or 'income'; category must come from the
        closed category set (placeholders are rejected).
        """
        if txn_type not in VALID_TYPES:
            return False

        return category in CATEGORIES

    def get_stats(self) -> dict:
        """Get validation statistics."""
        return self.validation_stats.copy()

    def reset_stats(self):
        """Reset validation statistics."""
        self.validation_stats = {
            "total_validated": 0,
            "valid": 0,
            "invalid": 0,
            "invalid_date": 0,
            "invalid_amount": 0,
            "invalid_description": 0,
            "invalid_category": 0
        }


def validate_transactions(transactions: list[Transaction], strict_mode: bool = False) -> list[Transaction]:
    """
    Convenience function to validate a list of transactions.

    Args:
        transactions: List of Transaction objects
        strict_mode: If True, raise exceptions on invalid data

    Returns:
        List of valid transactions
    """
    validator = TransactionValidator(strict_mode=strict_mode)
    return validator.validate_transactions(transactions)
