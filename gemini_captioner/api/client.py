"""Async HTTP client for the Gemini generateContent API.

WHY: The captioner needs to send an audio/video file to Gemini with a
transcription prompt and get back the model's text. This module wraps
that single request behind a client class so callers (CLI, tests) don't
need to know HTTP details, error envelopes, or the retry policy.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager — enter it to get an authenticated client, exit to
close the connection pool. generate_content() performs exactly one
attempt; transcribe() wraps it in call_with_retry().

RULES:
- Always use the async context manager (async with GeminiClient(...) as client:)
- Default model is gemini-2.5-flash (override via GEMINI_MODEL)
- Non-200 responses raise GeminiAPIError with status_code, status, message
- A 200 response without candidate text raises EmptyResponseError
- Network errors propagate as httpx exceptions (not retried)
- Status callback (on_status) is optional; when provided, called with status strings
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import httpx

from gemini_captioner.api.models import ErrorDetails, GenerateContentResponse
from gemini_captioner.api.prompt import build_request_body
from gemini_captioner.api.retry import DEFAULT_POLICY, RetryPolicy, call_with_retry
from gemini_captioner.config import GEMINI_BASE_URL, GEMINI_MODEL, load_api_key, media_type_for
from gemini_captioner.core.ir import TranscriptionSettings

logger = logging.getLogger(__name__)


class GeminiAPIError(Exception):
    """Raised when the Gemini API returns an error response.

    WHY: The retry policy and callers need a typed exception carrying
    both the HTTP status code and Google's symbolic status.

    HOW: Wraps the HTTP status code and the fields of the error envelope.

    RULES:
    - status_code is the HTTP status code
    - status is the symbolic code ("UNAVAILABLE", "RESOURCE_EXHAUSTED") or None
    - message is the API's error message or the raw response body
    """

    def __init__(self, status_code: int, message: str, status: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.status = status
        super().__init__(f"Gemini API error {status_code}: {message}")


class EmptyResponseError(GeminiAPIError):
    """Raised when a 200 response carries no transcript text.

    Happens when the prompt is blocked or generation stops for safety.
    """


class UnsupportedMediaError(ValueError):
    """Raised when a file's extension is not an accepted media type."""


class GeminiClient:
    """Async client for Gemini transcription requests.

    WHY: Provides a typed interface for one logical transcription:
    build the request, send it, unwrap the response, retry transient
    failures.

    HOW: Wraps httpx.AsyncClient with the x-goog-api-key header. Use as
    an async context manager so the connection pool is closed.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model default to the values in config
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        policy: RetryPolicy = DEFAULT_POLICY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._policy = policy
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(600.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    async def generate_content(
        self,
        settings: TranscriptionSettings,
        media: bytes,
        mime_type: str,
        duration_s: float | None = None,
    ) -> str:
        """Send one transcription request and return the model's raw text.

        Args:
            settings: Granularity and punctuation options for the prompt.
            media: Raw audio/video bytes.
            mime_type: MIME type of the media.
            duration_s: Optional duration hint forwarded to the prompt.

        Returns:
            The concatenated text of the first candidate.

        Raises:
            GeminiAPIError: On a non-200 response.
            EmptyResponseError: If the response has no text.
        """
        client = self._ensure_client()
        body = build_request_body(settings, media, mime_type, duration_s)

        resp = await client.post(f"/models/{self._model}:generateContent", json=body)

        if resp.status_code != 200:
            raise _error_from_response(resp)

        parsed = GenerateContentResponse.from_dict(resp.json())
        text = parsed.text
        if not text:
            reason = parsed.block_reason or (
                parsed.candidates[0].finish_reason if parsed.candidates else None
            )
            raise EmptyResponseError(
                resp.status_code,
                f"Response contained no text (reason: {reason or 'unknown'})",
            )
        logger.debug("Received %d characters from %s", len(text), self._model)
        return text

    async def transcribe(
        self,
        settings: TranscriptionSettings,
        media: bytes,
        mime_type: str,
        duration_s: float | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Transcribe media, retrying overload and rate-limit failures.

        RULES:
        - One logical request; up to policy.max_attempts HTTP calls
        - Terminal errors and the last transient error propagate unchanged
        """
        if on_status:
            on_status("Transcribing with {}...".format(self._model))

        async def _attempt() -> str:
            return await self.generate_content(settings, media, mime_type, duration_s)

        return await call_with_retry(_attempt, policy=self._policy, on_status=on_status)

    async def transcribe_file(
        self,
        file_path: Path,
        settings: TranscriptionSettings,
        duration_s: float | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Read a media file and transcribe it.

        Raises:
            UnsupportedMediaError: If the extension is not supported.
        """
        file_path = Path(file_path)
        mime_type = media_type_for(file_path.suffix)
        if mime_type is None:
            raise UnsupportedMediaError(
                "Unsupported file type '{}'".format(file_path.suffix)
            )
        if on_status:
            on_status("Reading {}...".format(file_path.name))
        media = file_path.read_bytes()
        return await self.transcribe(settings, media, mime_type, duration_s, on_status)


def _error_from_response(resp: httpx.Response) -> GeminiAPIError:
    """Build a GeminiAPIError from a Google error envelope, or the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return GeminiAPIError(resp.status_code, resp.text)
    if not isinstance(data, dict):
        return GeminiAPIError(resp.status_code, resp.text)
    details = ErrorDetails.from_dict(data)
    return GeminiAPIError(
        resp.status_code,
        details.message or resp.text,
        status=details.status,
    )
