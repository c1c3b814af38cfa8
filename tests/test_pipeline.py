"""Tests for the pipeline orchestrator and command line."""

import json
from unittest.mock import Mock

import pytest

import pipeline
from ai.gemini_client import AIExtractionError
from config import Config
from pipeline import StatementProcessor, main, result_to_dict


class TestProcessText:
    """Test suite for StatementProcessor.process_text."""

    def test_success_envelope(self, statement_text):
        result = StatementProcessor().process_text(statement_text, "user-1")

        assert result["success"] is True
        assert result["count"] == 3
        assert len(result["transactions"]) == 3
        assert "error" not in result

    @pytest.mark.parametrize("text", ["", "   \n  ", None])
    def test_empty_text_is_a_failure(self, text):
        result = StatementProcessor().process_text(text, "user-1")

        assert result["success"] is False
        assert result["transactions"] == []
        assert result["count"] == 0
        assert result["error"]

    def test_missing_marker_is_an_empty_success(self):
        result = StatementProcessor().process_text("Some letter\nwith no transactions", "user-1")

        assert result["success"] is True
        assert result["transactions"] == []
        assert result["count"] == 0
        assert "error" not in result

    def test_configured_start_marker(self, monkeypatch):
        monkeypatch.setattr(Config, "START_MARKER", "OPENING BALANCE")
        text = "Opening Balance 100.00CR\n01/01/2024 01/01/2024 NETFLIX 649.00  9351.00CR"

        result = StatementProcessor().process_text(text, "user-1")

        assert result["count"] == 1
        assert result["transactions"][0].description == "NETFLIX"

    def test_unexpected_errors_become_failure_envelope(self, monkeypatch, statement_text):
        def explode(text, owner_id, marker=None):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(pipeline, "parse_transaction_statement", explode)
        result = StatementProcessor().process_text(statement_text, "user-1")

        assert result == {
            "success": False,
            "error": "parser exploded",
            "transactions": [],
            "count": 0,
            "raw_text": None,
        }


class TestProcessStatement:
    """Test suite for StatementProcessor.process_statement."""

    def test_full_pipeline(self, statement_pdf):
        result = StatementProcessor().process_statement(str(statement_pdf), "user-1")

        assert result["success"] is True
        assert result["method"] == "rules"
        assert [t.to_dict() for t in result["transactions"]] == [
            {
                "owner_id": "user-1",
                "amount": 500.00,
                "type": "expense",
                "category": "Shopping",
                "description": "UPI Debit Paytm Ref: XYZ123",
                "date": "2024-01-01",
                "receipt_source": None,
            },
            {
                "owner_id": "user-1",
                "amount": 25000.00,
                "type": "income",
                "category": "Salary",
                "description": "NEFT SALARY ACME CORP LTD",
                "date": "2024-01-02",
                "receipt_source": None,
            },
            {
                "owner_id": "user-1",
                "amount": 1200.00,
                "type": "expense",
                "category": "Bills & Utilities",
                "description": "ELECTRICITY BILL BESCOM ONLINE",
                "date": "2024-01-03",
                "receipt_source": None,
            },
        ]
        assert result["raw_text"].startswith("STATEMENT OF ACCOUNT")
        assert result["raw_text"].endswith("...")

    def test_raw_text_preview_is_truncated(self, statement_pdf, monkeypatch):
        monkeypatch.setattr(Config, "RAW_TEXT_PREVIEW_CHARS", 9)
        result = StatementProcessor().process_statement(str(statement_pdf), "user-1")

        assert result["raw_text"] == "STATEMENT..."

    def test_missing_file(self, tmp_path):
        result = StatementProcessor().process_statement(str(tmp_path / "nope.pdf"), "user-1")

        assert result["success"] is False
        assert result["error"] == "PDF file not found"
        assert result["count"] == 0

    def test_pdf_without_text(self, blank_pdf):
        result = StatementProcessor().process_statement(str(blank_pdf), "user-1")

        assert result["success"] is False
        assert result["error"] == "No text could be extracted from the PDF"
        assert result["transactions"] == []

    def test_corrupted_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"garbage")

        result = StatementProcessor().process_statement(str(path), "user-1")
        assert result["success"] is False

    def test_no_marker_pdf(self, no_marker_pdf):
        result = StatementProcessor().process_statement(str(no_marker_pdf), "user-1")

        assert result["success"] is True
        assert result["count"] == 0


class TestAIFallback:

    AI_REPLY = (
        "```json\n"
        '[{"date": "2024-01-05", "description": "Swiggy food order", "amount": 250, "type": "expense"},'
        ' {"date": "not a date", "description": "bad", "amount": 1, "type": "expense"}]\n'
        "```"
    )

    def test_fallback_used_when_rules_find_nothing(self, no_marker_pdf):
        client = Mock()
        client.generate.return_value = self.AI_REPLY

        result = StatementProcessor(ai_client=client).process_statement(
            str(no_marker_pdf), "user-1", use_ai_fallback=True
        )

        assert result["success"] is True
        assert result["method"] == "ai"
        assert result["count"] == 1
        txn = result["transactions"][0]
        assert txn.category == "Food & Dining"
        assert txn.owner_id == "user-1"

    def test_fallback_not_used_when_rules_succeed(self, statement_pdf):
        client = Mock()

        result = StatementProcessor(ai_client=client).process_statement(
            str(statement_pdf), "user-1", use_ai_fallback=True
        )

        assert result["method"] == "rules"
        client.generate.assert_not_called()

    def test_fallback_failure_keeps_rules_result(self, no_marker_pdf):
        client = Mock()
        client.generate.side_effect = AIExtractionError("Invalid Gemini response")

        result = StatementProcessor(ai_client=client).process_statement(
            str(no_marker_pdf), "user-1", use_ai_fallback=True
        )

        assert result["success"] is True
        assert result["method"] == "rules"
        assert result["count"] == 0

    def test_fallback_without_client(self, no_marker_pdf):
        result = StatementProcessor().process_statement(str(no_marker_pdf), "user-1", use_ai_fallback=True)

        assert result["success"] is True
        assert result["count"] == 0


def test_result_to_dict_serializes_transactions(statement_text):
    result = StatementProcessor().process_text(statement_text, "user-1")
    serialized = result_to_dict(result)

    assert json.loads(json.dumps(serialized))["count"] == 3
    assert serialized["transactions"][0]["description"] == "UPI Debit Paytm Ref: XYZ123"
    # original envelope untouched
    assert not isinstance(result["transactions"][0], dict)


class TestMain:

    def test_summary_output(self, statement_pdf, capsys):
        assert main([str(statement_pdf), "--owner-id", "user-1"]) == 0

        out = capsys.readouterr().out
        assert "EXTRACTION SUMMARY" in out
        assert "NEFT SALARY ACME CORP LTD" in out

    def test_json_output(self, statement_pdf, capsys):
        assert main([str(statement_pdf), "--owner-id", "user-1", "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert payload["count"] == 3

    def test_report_is_written(self, statement_pdf, tmp_path):
        report = tmp_path / "reports" / "summary.pdf"

        assert main([str(statement_pdf), "--owner-id", "user-1", "--report", str(report)]) == 0
        assert report.read_bytes().startswith(b"%PDF")

    def test_failure_exit_code(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.pdf"), "--owner-id", "user-1"]) == 1
        assert "PDF file not found" in capsys.readouterr().out

    def test_ai_fallback_requires_key(self, statement_pdf, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
        assert main([str(statement_pdf), "--owner-id", "user-1", "--ai-fallback"]) == 1
