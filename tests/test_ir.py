"""Tests for the IR dataclasses.

WHY: Cue invariants are what lets formatters trust their input without
re-checking every value.
"""

import dataclasses

import pytest

from gemini_captioner.core.ir import (
    Cue,
    Punctuation,
    TimestampMode,
    TranscriptionResult,
    TranscriptionSettings,
)


class TestCue:

    def test_valid(self):
        cue = Cue(text="hi", start_ms=0, end_ms=1500)
        assert cue.duration_ms == 1500

    def test_zero_length_is_allowed(self):
        assert Cue(text="blip", start_ms=10, end_ms=10).duration_ms == 0

    @pytest.mark.parametrize("kwargs", [
        {"text": "x", "start_ms": -1, "end_ms": 0},
        {"text": "x", "start_ms": 5, "end_ms": 4},
        {"text": "  ", "start_ms": 0, "end_ms": 1},
        {"text": "", "start_ms": 0, "end_ms": 1},
    ])
    def test_invariants(self, kwargs):
        with pytest.raises(ValueError):
            Cue(**kwargs)

    def test_is_immutable(self):
        cue = Cue(text="hi", start_ms=0, end_ms=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            cue.text = "changed"


class TestTranscriptionResult:

    def test_full_transcript_prefers_cues(self):
        result = TranscriptionResult(
            raw_text="raw",
            cues=[Cue("a", 0, 1), Cue("b", 1, 2)],
        )
        assert result.full_transcript == "a b"
        assert result.duration_ms == 2

    def test_full_transcript_falls_back_to_raw(self):
        assert TranscriptionResult(raw_text="raw").full_transcript == "raw"


class TestSettings:

    def test_defaults(self):
        settings = TranscriptionSettings()
        assert settings.is_word_mode
        assert settings.punctuation == Punctuation.ON

    def test_sentence_mode(self):
        assert not TranscriptionSettings(timestamp_mode=TimestampMode.SENTENCE).is_word_mode

    def test_enum_values_parse_from_cli_strings(self):
        assert TimestampMode("sentence") is TimestampMode.SENTENCE
