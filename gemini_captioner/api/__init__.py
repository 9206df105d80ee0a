"""Gemini API client package — async HTTP interface to the transcription model.

WHY: The captioner needs to send media to Gemini, unwrap the response,
and survive overload and rate-limit errors. This package encapsulates
all Gemini communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. prompt.py builds the
request body, models.py parses responses, retry.py holds the backoff
policy used by GeminiClient.transcribe().

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Authentication is via the x-goog-api-key header from config
"""

from gemini_captioner.api.client import GeminiAPIError, GeminiClient
from gemini_captioner.api.retry import RetryPolicy, call_with_retry

__all__ = ["GeminiAPIError", "GeminiClient", "RetryPolicy", "call_with_retry"]
