"""
AI Statement Parser Module
Fallback extraction of statement transactions with a generative model.
Results are mapped into the same Transaction shape as the rule-based parser.
"""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from config import config
from extractors.categorizer import categorize_transaction
from extractors.financial_rules import TransactionType, parse_amount
from extractors.statement_parser import UNKNOWN_DESCRIPTION, Transaction
from .gemini_client import AIExtractionError, GeminiClient, parse_json_reply

logger = logging.getLogger(__name__)

STATEMENT_PROMPT = """
You are an expert financial data extraction tool. Extract all transactions.

Text:
---
{text}
---

Return JSON array with:
- date (YYYY-MM-DD)
- description
- amount (number)
- type ("expense" or "income")

Rules:
- Only valid transactions
- Ignore summaries, balances
- Return only JSON
- If none, return []

Example:
[
  {{
    "date": "2025-07-21",
    "description": "UPI Debit Paytm",
    "amount": 1500,
    "type": "expense"
  }}
]
"""


def normalize_iso_date(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date().isoformat()
    except ValueError:
        return None


def coerce_amount(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
        return amount if math.isfinite(amount) else 0.0
    if isinstance(value, str):
        return parse_amount(value)
    return 0.0


def map_ai_transaction(item: Any, owner_id) -> Optional[Transaction]:
    """
    Map one model-produced record into a Transaction.

    Records with a bad date, a non-positive amount or an unknown type
    are rejected (None).
    """
    if not isinstance(item, dict):
        return None

    date = normalize_iso_date(item.get("date"))
    amount = coerce_amount(item.get("amount"))
    txn_type = item.get("type")

    if not date or amount <= 0 or txn_type not in {t.value for t in TransactionType}:
        logger.debug(f"Dropping AI record: {item}")
        return None

    description = item.get("description")
    if not isinstance(description, str) or not description.strip():
        description = UNKNOWN_DESCRIPTION
    description = description.strip()

    transaction_type = TransactionType(txn_type)
    return Transaction(
        owner_id=owner_id,
        date=date,
        description=description,
        amount=amount,
        transaction_type=transaction_type,
        category=categorize_transaction(description, transaction_type == TransactionType.EXPENSE)
    )


def parse_statement_with_ai(text: str, owner_id, client: GeminiClient) -> list[Transaction]:
    """
    Extract statement transactions with Gemini.

    Args:
        text: Rendered statement text
        owner_id: Identifier copied onto every transaction
        client: Configured GeminiClient

    Returns:
        Transactions in the order the model listed them

    Raises:
        AIExtractionError: If the model is unreachable or its reply is unusable
    """
    logger.info("Sending statement to Gemini...")

    reply = client.generate(
        [{"text": STATEMENT_PROMPT.format(text=text)}],
        model=config.GEMINI_STATEMENT_MODEL
    )
    records = parse_json_reply(reply)

    if not isinstance(records, list):
        raise AIExtractionError("AI could not process the statement.")

    transactions = []
    for item in records:
        transaction = map_ai_transaction(item, owner_id)
        if transaction is not None:
            transactions.append(transaction)

    logger.info(f"AI extracted {len(transactions)} of {len(records)} records")
    return transactions
