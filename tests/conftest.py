"""Shared test fixtures for the gemini_captioner test suite.

WHY: Several test modules need the same sample model responses — a
clean JSON array, a loose "start --> end" listing, and the cues both
should produce. Centralizing them keeps every module on the same data.

HOW: Module-level constants hold the raw payloads; pytest fixtures hand
out copies and a pre-built TranscriptionResult.

RULES:
- JSON_RESPONSE and ARROW_RESPONSE describe the same three cues
- EXPECTED_CUES is the extraction result for both
"""

from typing import List

import pytest

from gemini_captioner.core.ir import Cue, TranscriptionResult


# ---------------------------------------------------------------------------
# Sample Gemini responses
# ---------------------------------------------------------------------------

JSON_RESPONSE = (
    '[{"start": 0.0, "end": 0.42, "text": "Hello"},'
    ' {"start": 0.42, "end": 0.9, "text": "there,"},'
    ' {"start": 1.2, "end": 1.85, "text": "friend."}]'
)

ARROW_RESPONSE = "\n".join([
    "Here is the transcription:",
    "00:00:00.000 --> 00:00:00.420 \"Hello\"",
    "00:00:00.420 --> 00:00:00.900 \"there,\"",
    "00:00:01.200 --> 00:00:01.850 \"friend.\"",
])

EXPECTED_CUES: List[Cue] = [
    Cue(text="Hello", start_ms=0, end_ms=420),
    Cue(text="there,", start_ms=420, end_ms=900),
    Cue(text="friend.", start_ms=1200, end_ms=1850),
]


def gemini_body(text: str) -> dict:
    """Wrap text in a minimal generateContent response body."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ]
    }


def gemini_error(code: int, message: str, status: str) -> dict:
    """Build a Google API error envelope."""
    return {"error": {"code": code, "message": message, "status": status}}


@pytest.fixture
def json_response():
    return JSON_RESPONSE


@pytest.fixture
def arrow_response():
    return ARROW_RESPONSE


@pytest.fixture
def expected_cues():
    return list(EXPECTED_CUES)


@pytest.fixture
def sample_result():
    """A TranscriptionResult with the three expected cues."""
    return TranscriptionResult(
        raw_text=JSON_RESPONSE,
        source_filename="interview.mp3",
        cues=list(EXPECTED_CUES),
    )
