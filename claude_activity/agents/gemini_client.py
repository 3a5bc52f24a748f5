"""Gemini generateContent client used for day summaries."""

from __future__ import annotations

import asyncio
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_TIMEOUT_SECONDS = 60


class SummaryError(Exception):
    """Base error for a failed summary request."""


class InvalidResponseError(SummaryError):
    """No usable HTTP response (connection failure, timeout)."""

    def __init__(self, message: str = "Invalid response from Gemini API"):
        super().__init__(message)


class ApiError(SummaryError):
    """The endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error ({status_code}): {body[:100]}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class ParseError(SummaryError):
    """A 200 response without ``candidates[0].content.parts[0].text``."""

    def __init__(self, message: str = "Failed to parse API response"):
        super().__init__(message)


def extract_reply_text(payload: object) -> str:
    """Pull the first candidate's text out of a generateContent body."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError() from exc
    if not isinstance(text, str):
        raise ParseError()
    return text


class GeminiClient:
    """Single-prompt client for the Gemini REST API.

    The API key travels as the ``key`` query parameter.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_output_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.timeout = timeout

    @property
    def url(self) -> str:
        return GEMINI_ENDPOINT.format(model=self.model)

    def build_body(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.max_output_tokens,
                "temperature": self.temperature,
            },
        }

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the reply text.

        Raises:
            InvalidResponseError: the request never produced a response
            ApiError: non-200 status, carrying the status code and raw body
            ParseError: 200 status with a body of the wrong shape
        """
        try:
            response = requests.post(
                self.url,
                params={"key": self.api_key},
                json=self.build_body(prompt),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise InvalidResponseError(str(exc) or "Invalid response from Gemini API") from exc

        if response.status_code != 200:
            raise ApiError(response.status_code, response.text or "Unknown error")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError() from exc
        return extract_reply_text(payload)

    async def agenerate(self, prompt: str) -> str:
        """Run ``generate`` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.generate, prompt)
