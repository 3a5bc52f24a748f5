"""External text-generation clients."""

from .gemini_client import (
    ApiError,
    GeminiClient,
    InvalidResponseError,
    ParseError,
    SummaryError,
)

__all__ = [
    "ApiError",
    "GeminiClient",
    "InvalidResponseError",
    "ParseError",
    "SummaryError",
]
