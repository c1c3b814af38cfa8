"""
Configuration settings for the Bank Statement Extractor.
Centralized configuration management for the application.
"""

import os
from pathlib import Path
from typing import Optional

class Config:
    """Application configuration class."""

    # Application Settings
    APP_NAME = "Bank Statement Transaction Extractor"
    VERSION = "1.0.0"

    # File Upload Settings
    MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
    MAX_FILE_SIZE_BYTES: int = MAX_FILE_SIZE_MB * 1024 * 1024
    ALLOWED_FILE_TYPES: list[str] = [".pdf"]
    ALLOWED_RECEIPT_TYPES: list[str] = [".jpg", ".jpeg", ".png", ".webp"]

    # Output Settings
    OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", "./output"))
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))

    # Parsing Settings
    START_MARKER: str = os.getenv("START_MARKER", "BALANCE B/F")
    RAW_TEXT_PREVIEW_CHARS: int = int(os.getenv("RAW_TEXT_PREVIEW_CHARS", "1500"))

    # AI Fallback Settings
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GEMINI_BASE_URL: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1/models"
    )
    GEMINI_STATEMENT_MODEL: str = os.getenv("GEMINI_STATEMENT_MODEL", "gemini-1.5-flash")
    GEMINI_RECEIPT_MODEL: str = os.getenv("GEMINI_RECEIPT_MODEL", "gemini-2.5-flash")
    AI_REQUEST_TIMEOUT: float = float(os.getenv("AI_REQUEST_TIMEOUT", "60"))

    # Logging Settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    # API Settings
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    @classmethod
    def ensure_directories(cls):
        """Ensure required directories exist."""
        cls.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_output_path(cls, filename: str) -> Path:
        """Get full path for output file."""
        cls.ensure_directories()
        return cls.OUTPUT_DIR / filename

    @classmethod
    def get_log_path(cls, filename: str) -> Path:
        """Get full path for log file."""
        cls.ensure_directories()
        return cls.LOG_DIR / filename

    @classmethod
    def validate_file(cls, filename: str, file_size: int) -> tuple[bool, Optional[str]]:
        """
        Validate an uploaded statement file.

        Returns:
            tuple: (is_valid, error_message)
        """
        return cls._validate_upload(filename, file_size, cls.ALLOWED_FILE_TYPES)

    @classmethod
    def validate_receipt_file(cls, filename: str, file_size: int) -> tuple[bool, Optional[str]]:
        """Validate an uploaded receipt image."""
        return cls._validate_upload(filename, file_size, cls.ALLOWED_RECEIPT_TYPES)

    @classmethod
    def _validate_upload(
        cls,
        filename: str,
        file_size: int,
        allowed_types: list[str]
    ) -> tuple[bool, Optional[str]]:
        # Check file type
        if not filename or not any(filename.lower().endswith(ext) for ext in allowed_types):
            return False, f"Invalid file type. Allowed types: {', '.join(allowed_types)}"

        # Check file size
        if file_size > cls.MAX_FILE_SIZE_BYTES:
            size_mb = file_size / (1024 * 1024)
            return False, f"File too large ({size_mb:.2f} MB). Maximum: {cls.MAX_FILE_SIZE_MB} MB"

        # Check if empty
        if file_size == 0:
            return False, "File is empty"

        return True, None

    @classmethod
    def validate_ai_settings(cls) -> tuple[bool, Optional[str]]:
        """
        Check that the AI fallback extractors can be used.

        Called once at process start. A missing key disables the AI
        endpoints; the rule-based parser needs no credentials.

        Returns:
            tuple: (is_valid, error_message)
        """
        if not cls.GEMINI_API_KEY or not cls.GEMINI_API_KEY.strip():
            return False, "GEMINI_API_KEY is not configured"

        if cls.AI_REQUEST_TIMEOUT <= 0:
            return False, f"AI_REQUEST_TIMEOUT must be positive, got {cls.AI_REQUEST_TIMEOUT}"

        return True, None

    @classmethod
    def to_dict(cls) -> dict:
        """Convert configuration to dictionary (secrets excluded)."""
        return {
            "app_name": cls.APP_NAME,
            "version": cls.VERSION,
            "max_file_size_mb": cls.MAX_FILE_SIZE_MB,
            "output_dir": str(cls.OUTPUT_DIR),
            "log_dir": str(cls.LOG_DIR),
            "start_marker": cls.START_MARKER,
            "ai_configured": bool(cls.GEMINI_API_KEY),
            "gemini_statement_model": cls.GEMINI_STATEMENT_MODEL,
            "gemini_receipt_model": cls.GEMINI_RECEIPT_MODEL,
            "log_level": cls.LOG_LEVEL,
        }


# Create a singleton instance
config = Config()
