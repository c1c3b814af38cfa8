"""Tests for configuration helpers."""

import pytest

from config import Config


class TestValidateFile:

    def test_accepts_pdf(self):
        assert Config.validate_file("statement.PDF", 2048) == (True, None)

    @pytest.mark.parametrize("filename", ["statement.docx", "receipt.png", "", None])
    def test_rejects_other_types(self, filename):
        is_valid, error = Config.validate_file(filename, 2048)
        assert is_valid is False
        assert "Invalid file type" in error

    def test_rejects_empty_file(self):
        assert Config.validate_file("statement.pdf", 0) == (False, "File is empty")

    def test_rejects_large_file(self):
        is_valid, error = Config.validate_file("statement.pdf", Config.MAX_FILE_SIZE_BYTES + 1)
        assert is_valid is False
        assert "too large" in error


def test_validate_receipt_file():
    assert Config.validate_receipt_file("receipt.jpeg", 100) == (True, None)
    assert Config.validate_receipt_file("statement.pdf", 100)[0] is False


class TestValidateAISettings:

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
        assert Config.validate_ai_settings() == (False, "GEMINI_API_KEY is not configured")

    def test_blank_key(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "   ")
        assert Config.validate_ai_settings()[0] is False

    def test_bad_timeout(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "secret")
        monkeypatch.setattr(Config, "AI_REQUEST_TIMEOUT", 0)
        is_valid, error = Config.validate_ai_settings()
        assert is_valid is False
        assert "AI_REQUEST_TIMEOUT" in error

    def test_configured(self, monkeypatch):
        monkeypatch.setattr(Config, "GEMINI_API_KEY", "secret")
        assert Config.validate_ai_settings() == (True, None)


def test_to_dict_hides_secrets(monkeypatch):
    monkeypatch.setattr(Config, "GEMINI_API_KEY", "secret")
    settings = Config.to_dict()

    assert settings["ai_configured"] is True
    assert "secret" not in settings.values()
    assert settings["start_marker"] == "BALANCE B/F"
