"""Intermediate representation dataclasses for normalized captions.

WHY: Gemini returns a raw text payload, usually a JSON array but
sometimes a loose "start --> end text" listing. Downstream formatters
(WebVTT, plain text, timestamped text, JSON) all need the same thing:
an ordered list of timed text cues plus the raw payload as a fallback.
The IR decouples extraction from formatting.

HOW: Three enums describe the user-facing settings, one dataclass
bundles them, and two dataclasses form the result:
  Cue                 — one timed span of text in integer milliseconds
  TranscriptionResult — the cues plus the raw payload they came from

RULES:
- All times are integer milliseconds (Gemini's float seconds are rounded)
- Cues are kept in emission order; nothing is sorted or de-duplicated
- Cue is frozen; a result's cues never change after extraction
- Settings shape the prompt only; extraction never looks at them
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class TimestampMode(str, enum.Enum):
    """Granularity requested from the model: one cue per word or per sentence."""

    WORDSTAMP = "wordstamp"
    SENTENCE = "sentence"


class TimestampFormat(str, enum.Enum):
    """How timestamps are displayed in text exports."""

    HMS = "hms"  # hh:mm:ss.000
    MS = "ms"  # 000000ms


class Punctuation(str, enum.Enum):
    ON = "on"
    OFF = "off"


@dataclass(frozen=True)
class TranscriptionSettings:
    """User-selected options for one transcription run.

    RULES:
    - timestamp_mode and punctuation are forwarded to the prompt builder
    - timestamp_format only affects display in text exports
    """

    timestamp_mode: TimestampMode = TimestampMode.WORDSTAMP
    punctuation: Punctuation = Punctuation.ON
    timestamp_format: TimestampFormat = TimestampFormat.HMS

    @property
    def is_word_mode(self) -> bool:
        return self.timestamp_mode == TimestampMode.WORDSTAMP


@dataclass(frozen=True)
class Cue:
    """A single timed caption cue.

    WHY: Every export format is a rendering of an ordered list of these.

    RULES:
    - start_ms >= 0 and end_ms >= start_ms
    - text is non-empty after trimming
    - Construction with values breaking these rules raises ValueError
    """

    text: str
    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if self.start_ms < 0:
            raise ValueError(f"Cue start must be non-negative, got {self.start_ms}")
        if self.end_ms < self.start_ms:
            raise ValueError(
                f"Cue end ({self.end_ms}) precedes its start ({self.start_ms})"
            )
        if not self.text.strip():
            raise ValueError("Cue text must not be empty")

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass
class TranscriptionResult:
    """Extraction output for one transcribed file.

    WHY: When no cues can be extracted, the caller still needs something
    to show. The raw payload travels with the cues so the plain-text
    export can fall back to it.

    RULES:
    - cues may be empty even when raw_text is not
    - full_transcript is the raw payload when no cues were extracted
      from a non-empty payload, otherwise the cue texts joined by spaces
    """

    raw_text: str
    source_filename: str = ""
    cues: list[Cue] = field(default_factory=list)

    @property
    def full_transcript(self) -> str:
        if not self.cues and self.raw_text:
            return self.raw_text
        return " ".join(cue.text for cue in self.cues)

    @property
    def duration_ms(self) -> int:
        """End time of the last cue, or 0 when there are no cues."""
        if not self.cues:
            return 0
        return self.cues[-1].end_ms
