"""
Bank Statement Transaction Extractor - Main Pipeline
Orchestrates rendering, rule-based parsing and the optional AI fallback,
and always answers with a success/failure envelope.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from config import config
from extractors.statement_parser import Transaction, parse_transaction_statement

logger = logging.getLogger(__name__)

METHOD_RULES = "rules"
METHOD_AI = "ai"


def failure_envelope(error: str) -> dict:
    return {
        "success": False,
        "error": error,
        "transactions": [],
        "count": 0,
        "raw_text": None
    }


def result_to_dict(result: dict) -> dict:
    """Envelope with transactions converted to plain dictionaries."""
    serialized = dict(result)
    serialized["transactions"] = [txn.to_dict() for txn in result["transactions"]]
    return serialized


class StatementProcessor:
    """Main orchestrator for the statement extraction pipeline."""

    def __init__(self, ai_client=None):
        """
        Initialize processor.

        Args:
            ai_client: Optional GeminiClient used when the rule-based parser finds nothing
        """
        self.ai_client = ai_client

    def process_text(self, text: Optional[str], owner_id) -> dict:
        """
        Parse already-rendered statement text.

        Args:
            text: Rendered statement text
            owner_id: Identifier copied onto every transaction

        Returns:
            {success, transactions, count} or {success: False, error, ...}
        """
        if not text or not isinstance(text, str) or not text.strip():
            logger.error("No statement text supplied")
            return failure_envelope("No statement text supplied")

        try:
            transactions = parse_transaction_statement(text, owner_id, marker=config.START_MARKER)
        except Exception as e:
            logger.error(f"Statement parsing failed: {e}", exc_info=True)
            return failure_envelope(str(e))

        return {
            "success": True,
            "transactions": transactions,
            "count": len(transactions),
            "method": METHOD_RULES
        }

    def process_statement(self, pdf_path: str, owner_id, use_ai_fallback: bool = False) -> dict:
        """
        Full pipeline: render the PDF, parse it, optionally fall back to AI.

        Args:
            pdf_path: Path to the statement PDF
            owner_id: Identifier copied onto every transaction
            use_ai_fallback: Ask the AI extractor when the rules find nothing

        Returns:
            Envelope with a raw_text preview on success; never raises
        """
        logger.info("=" * 80)
        logger.info(f"Starting statement extraction: {pdf_path}")
        logger.info("=" * 80)

        try:
            if not pdf_path or not Path(pdf_path).exists():
                raise ValueError("PDF file not found")

            from loaders.pdf_loader import load_pdf
            text = load_pdf(pdf_path)

            if not text or not text.strip():
                raise ValueError("No text could be extracted from the PDF")

            logger.info(f"Extracted {len(text)} characters from PDF")

            result = self.process_text(text, owner_id)
            if not result["success"]:
                return result

            if not result["transactions"] and use_ai_fallback:
                result = self._ai_fallback(text, owner_id, result)

            result["raw_text"] = text[:config.RAW_TEXT_PREVIEW_CHARS] + "..."
            logger.info(f"Pipeline completed: {result['count']} transactions via {result['method']}")
            return result

        except Exception as e:
            logger.error(f"PDF statement processing failed: {e}", exc_info=True)
            return failure_envelope(str(e))

    def _ai_fallback(self, text: str, owner_id, rules_result: dict) -> dict:
        """Retry extraction with the AI client; keeps the rules result if that fails."""
        if self.ai_client is None:
            logger.warning("AI fallback requested but no AI client is configured")
            return rules_result

        from ai.gemini_client import AIExtractionError
        from ai.statement_ai import parse_statement_with_ai
        from validators.financial_validator import validate_transactions

        logger.info("Rule-based parser found no transactions, trying AI fallback")
        try:
            transactions = validate_transactions(parse_statement_with_ai(text, owner_id, self.ai_client))
        except AIExtractionError as e:
            logger.error(f"AI fallback failed: {e}")
            return rules_result

        return {
            "success": True,
            "transactions": transactions,
            "count": len(transactions),
            "method": METHOD_AI
        }


def _print_summary(result: dict):
    """Print extraction summary."""
    transactions: list[Transaction] = result["transactions"]
    print("=" * 80)
    print("EXTRACTION SUMMARY")
    print("=" * 80)
    for txn in transactions:
        print(f"{txn.date}  {txn.amount_display:>12}  {txn.category:<18}  {txn.description[:40]}")
    print("-" * 80)
    print(f"Total transactions extracted:    {result['count']}")
    print(f"Extraction method:               {result.get('method', METHOD_RULES)}")
    print("=" * 80)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statement-extractor",
        description="Extract transactions from a bank statement PDF"
    )
    parser.add_argument("pdf_path", help="Path to the statement PDF")
    parser.add_argument("--owner-id", required=True, help="Owner identifier stored on each transaction")
    parser.add_argument("--report", help="Write a PDF summary report to this path")
    parser.add_argument("--json", action="store_true", help="Print the result envelope as JSON")
    parser.add_argument("--ai-fallback", action="store_true",
                        help="Use the AI extractor when no transactions are found")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Command line entry point."""
    from logging_config import setup_logging

    args = build_arg_parser().parse_args(argv)
    setup_logging(log_level="WARNING" if args.json else None)

    ai_client = None
    if args.ai_fallback:
        is_valid, error = config.validate_ai_settings()
        if not is_valid:
            print(f"\n❌ AI fallback unavailable: {error}")
            return 1
        from ai.gemini_client import GeminiClient
        ai_client = GeminiClient()

    processor = StatementProcessor(ai_client=ai_client)
    result = processor.process_statement(args.pdf_path, args.owner_id, use_ai_fallback=args.ai_fallback)

    if not result["success"]:
        if args.json:
            print(json.dumps(result_to_dict(result), indent=2))
        else:
            print(f"\n❌ Error: {result['error']}")
        return 1

    if args.report:
        from output.writer import generate_pdf_report
        try:
            generate_pdf_report(args.report, result["transactions"], args.owner_id)
        except OSError as e:
            logger.error(f"PDF report generation failed: {e}", exc_info=True)
            print(f"\n❌ Error: cannot write report to {args.report}: {e}")
            return 1

    if args.json:
        print(json.dumps(result_to_dict(result), indent=2))
    else:
        _print_summary(result)
        if args.report:
            print(f"\n✅ Report generated: {args.report}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
