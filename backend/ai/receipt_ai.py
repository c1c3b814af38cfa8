"""
AI Receipt Parser Module
Extracts total, date and merchant from a receipt image with Gemini.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Optional

from config import config
from extractors.categorizer import categorize_transaction
from extractors.financial_rules import TransactionType
from extractors.statement_parser import Transaction
from .gemini_client import AIExtractionError, GeminiClient, parse_json_reply
from .statement_ai import coerce_amount, normalize_iso_date

logger = logging.getLogger(__name__)

RECEIPT_PROMPT = """
You are an expert system for extracting structured data from receipts.

Extract these fields:
- totalAmount (number)
- transactionDate (YYYY-MM-DD)
- description (merchant/store name)

Rules:
- Respond with ONLY valid JSON
- If a value is unclear, use null
- Do not include markdown or extra text

Example:
{ "totalAmount": 249.50, "transactionDate": "2025-07-28", "description": "Reliance Fresh" }
"""

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


def file_to_base64(file_path: str) -> str:
    return base64.b64encode(Path(file_path).read_bytes()).decode("ascii")


def get_mime_type(file_path: str) -> str:
    return MIME_TYPES.get(Path(file_path).suffix.lower(), "application/octet-stream")


def normalize_receipt(data: Any) -> dict:
    """Coerce the model's receipt fields; unclear values become None."""
    if not isinstance(data, dict):
        raise AIExtractionError("The AI model could not process the receipt image.")

    amount = coerce_amount(data.get("totalAmount"))
    description = data.get("description")

    return {
        "totalAmount": amount if amount > 0 else None,
        "transactionDate": normalize_iso_date(data.get("transactionDate")),
        "description": description.strip() if isinstance(description, str) and description.strip() else None,
    }


def parse_receipt_with_ai(image_path: str, client: GeminiClient) -> dict:
    """
    Extract receipt fields from an image.

    Args:
        image_path: Path to a JPEG/PNG/WEBP receipt
        client: Configured GeminiClient

    Returns:
        {"success": True, "data": {totalAmount, transactionDate, description}}

    Raises:
        AIExtractionError: If the image cannot be read or the reply is unusable
    """
    logger.info("Sending receipt image to Gemini...")

    try:
        encoded = file_to_base64(image_path)
    except OSError as e:
        logger.error(f"Cannot read receipt image {image_path}: {e}")
        raise AIExtractionError(f"Cannot read receipt image: {image_path}") from e

    reply = client.generate(
        [
            {"text": RECEIPT_PROMPT},
            {"inlineData": {"mimeType": get_mime_type(image_path), "data": encoded}},
        ],
        model=config.GEMINI_RECEIPT_MODEL
    )

    return {
        "success": True,
        "data": normalize_receipt(parse_json_reply(reply)),
    }


def receipt_to_transaction(data: dict, owner_id, receipt_source: Optional[str] = None) -> Optional[Transaction]:
    """
    Turn extracted receipt fields into an expense Transaction.

    Returns None when the amount or date could not be read.
    """
    if not data.get("totalAmount") or not data.get("transactionDate"):
        return None

    description = data.get("description") or "Receipt"
    return Transaction(
        owner_id=owner_id,
        date=data["transactionDate"],
        description=description,
        amount=data["totalAmount"],
        transaction_type=TransactionType.EXPENSE,
        category=categorize_transaction(description, True),
        receipt_source=receipt_source
    )
