"""
AI Module - Generative-model fallback extractors for statements and receipts.
"""

from .gemini_client import (
    GeminiClient,
    AIConfigurationError,
    AIExtractionError
)

from .statement_ai import parse_statement_with_ai

from .receipt_ai import (
    parse_receipt_with_ai,
    receipt_to_transaction
)

__all__ = [
    'GeminiClient',
    'AIConfigurationError',
    'AIExtractionError',
    'parse_statement_with_ai',
    'parse_receipt_with_ai',
    'receipt_to_transaction',
]
