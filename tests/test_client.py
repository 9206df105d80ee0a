"""Tests for the Gemini HTTP client.

WHY: The client is where HTTP responses become either transcript text
or typed errors. The retry policy depends on those errors carrying the
right status code and symbolic status.

HOW: GeminiClient is given an httpx.MockTransport so no request leaves
the process. Handlers return canned generateContent bodies or Google
error envelopes. Sleeping is patched out of the retry module.

RULES:
- Gemini is never called (all traffic goes through MockTransport)
- Async code is driven with asyncio.run()
"""

import asyncio
import base64
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from gemini_captioner.api.client import (
    EmptyResponseError,
    GeminiAPIError,
    GeminiClient,
    UnsupportedMediaError,
)
from gemini_captioner.api.models import ErrorDetails, GenerateContentResponse
from gemini_captioner.api.prompt import build_request_body
from gemini_captioner.core.ir import Punctuation, TimestampMode, TranscriptionSettings

from conftest import JSON_RESPONSE, gemini_body, gemini_error


SETTINGS = TranscriptionSettings()


def _client(handler, **kwargs):
    return GeminiClient(
        api_key="test-key",
        base_url="https://example.test/v1beta",
        model="test-model",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _run(coro_fn, handler, **kwargs):
    async def _go():
        async with _client(handler, **kwargs) as client:
            return await coro_fn(client)
    return asyncio.run(_go())


class TestGenerateContent:

    def test_returns_candidate_text(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body(JSON_RESPONSE))

        text = _run(
            lambda c: c.generate_content(SETTINGS, b"audio", "audio/mpeg"),
            handler,
        )
        assert text == JSON_RESPONSE
        assert seen["url"] == "https://example.test/v1beta/models/test-model:generateContent"
        assert seen["key"] == "test-key"
        inline = seen["body"]["contents"][0]["parts"][1]["inlineData"]
        assert inline["mimeType"] == "audio/mpeg"
        assert base64.b64decode(inline["data"]) == b"audio"

    def test_error_envelope_is_parsed(self):
        def handler(request):
            return httpx.Response(
                503, json=gemini_error(503, "The model is overloaded.", "UNAVAILABLE")
            )

        with pytest.raises(GeminiAPIError) as exc_info:
            _run(lambda c: c.generate_content(SETTINGS, b"a", "audio/wav"), handler)
        err = exc_info.value
        assert err.status_code == 503
        assert err.status == "UNAVAILABLE"
        assert err.message == "The model is overloaded."

    def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(GeminiAPIError) as exc_info:
            _run(lambda c: c.generate_content(SETTINGS, b"a", "audio/wav"), handler)
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"
        assert exc_info.value.status is None

    def test_empty_candidate_raises(self):
        def handler(request):
            return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        with pytest.raises(EmptyResponseError, match="SAFETY"):
            _run(lambda c: c.generate_content(SETTINGS, b"a", "audio/wav"), handler)

    def test_requires_context_manager(self):
        client = GeminiClient(api_key="k", transport=httpx.MockTransport(lambda r: None))
        with pytest.raises(RuntimeError, match="async context manager"):
            asyncio.run(client.generate_content(SETTINGS, b"a", "audio/wav"))


class TestTranscribe:

    def test_retries_overload_then_succeeds(self):
        responses = [
            httpx.Response(503, json=gemini_error(503, "The model is overloaded.", "UNAVAILABLE")),
            httpx.Response(429, json=gemini_error(429, "Quota exceeded. Please retry in 1.5s.", "RESOURCE_EXHAUSTED")),
            httpx.Response(200, json=gemini_body("[]")),
        ]

        def handler(request):
            return responses.pop(0)

        with patch("gemini_captioner.api.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            text = _run(lambda c: c.transcribe(SETTINGS, b"a", "audio/wav"), handler)

        assert text == "[]"
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 3.0]

    def test_bad_request_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json=gemini_error(400, "Invalid argument", "INVALID_ARGUMENT"))

        with patch("gemini_captioner.api.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(GeminiAPIError):
                _run(lambda c: c.transcribe(SETTINGS, b"a", "audio/wav"), handler)

        assert len(calls) == 1
        sleep.assert_not_awaited()

    def test_transcribe_file(self, tmp_path):
        media = tmp_path / "clip.MP3"
        media.write_bytes(b"id3")
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body("ok"))

        text = _run(lambda c: c.transcribe_file(media, SETTINGS), handler)
        assert text == "ok"
        inline = seen["body"]["contents"][0]["parts"][1]["inlineData"]
        assert inline["mimeType"] == "audio/mpeg"

    def test_transcribe_file_rejects_unknown_extension(self, tmp_path):
        doc = tmp_path / "notes.xyz"
        doc.write_bytes(b"x")
        with pytest.raises(UnsupportedMediaError):
            _run(lambda c: c.transcribe_file(doc, SETTINGS), lambda r: httpx.Response(200))


class TestRequestBody:

    def test_word_mode_with_punctuation(self):
        body = build_request_body(SETTINGS, b"x", "audio/wav")
        instruction = body["systemInstruction"]["parts"][0]["text"]
        assert "One object per single word." in instruction
        assert "Include standard punctuation" in instruction
        config = body["generationConfig"]
        assert config["temperature"] == 0.0
        assert config["responseMimeType"] == "application/json"
        assert config["responseSchema"]["items"]["required"] == ["start", "end", "text"]

    def test_sentence_mode_without_punctuation(self):
        settings = TranscriptionSettings(
            timestamp_mode=TimestampMode.SENTENCE, punctuation=Punctuation.OFF,
        )
        body = build_request_body(settings, b"x", "audio/wav", duration_s=12.5)
        instruction = body["systemInstruction"]["parts"][0]["text"]
        assert "Group by complete sentences." in instruction
        assert "Remove all punctuation." in instruction
        assert "12.50 seconds" in instruction
        text_schema = body["generationConfig"]["responseSchema"]["items"]["properties"]["text"]
        assert text_schema["description"] == "Complete sentence"


class TestModels:

    def test_text_joins_parts_of_first_candidate(self):
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "[{"}, {"text": "}]"}]}},
                {"content": {"parts": [{"text": "ignored"}]}},
            ]
        }
        assert GenerateContentResponse.from_dict(data).text == "[{}]"

    def test_no_candidates(self):
        assert GenerateContentResponse.from_dict({}).text == ""

    def test_error_details_bare_body(self):
        details = ErrorDetails.from_dict({"code": 429, "message": "slow down", "status": "RESOURCE_EXHAUSTED"})
        assert details.code == 429
        assert details.status == "RESOURCE_EXHAUSTED"
