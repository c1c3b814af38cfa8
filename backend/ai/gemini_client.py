"""
Gemini Client Module
Thin client for the Gemini generateContent REST endpoint, shared by the
statement and receipt fallback extractors.
"""

import json
import logging
import re
from typing import Any, Optional

import requests

from config import config

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r'```json|```')


class AIConfigurationError(Exception):
    """Raised when the AI extractors are used without credentials."""
    pass


class AIExtractionError(Exception):
    """Raised when the model cannot be reached or returns an unusable reply."""
    pass


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes wraps JSON in."""
    return CODE_FENCE_PATTERN.sub('', text).strip()


def parse_json_reply(text: str) -> Any:
    """
    Decode a JSON model reply.

    Raises:
        AIExtractionError: If the reply is not valid JSON
    """
    try:
        return json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error(f"Model reply is not valid JSON: {text[:200]}")
        raise AIExtractionError("Model reply is not valid JSON") from e


class GeminiClient:
    """Posts prompts to Gemini and returns the first candidate's text."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise AIConfigurationError("GEMINI_API_KEY is not configured")

        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip('/')
        self.timeout = timeout or config.AI_REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def generate(self, parts: list[dict], model: str) -> str:
        """
        Run a single generateContent call.

        Args:
            parts: Content parts (text and/or inlineData)
            model: Gemini model name

        Returns:
            Text of the first candidate

        Raises:
            AIExtractionError: On transport errors, HTTP errors or an empty reply
        """
        url = f"{self.base_url}/{model}:generateContent"
        payload = {"contents": [{"parts": parts}]}

        logger.info(f"Sending request to Gemini model {model}")

        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise AIExtractionError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            logger.error("Gemini returned a non-JSON body")
            raise AIExtractionError("Invalid Gemini response") from e

        text = self._candidate_text(data)
        if not text:
            logger.error(f"Raw Gemini response: {data}")
            raise AIExtractionError("Invalid Gemini response")

        return text

    @staticmethod
    def _candidate_text(data: Any) -> Optional[str]:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
