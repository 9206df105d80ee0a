"""Plain text transcript formatter.

WHY: Editors need a simple, readable transcript for review and quick
reference — no timecodes, just text. When the model's output could not
be split into cues at all, this is the only useful export, so it falls
back to the raw payload.

HOW: Uses TranscriptionResult.full_transcript: the cue texts joined by
single spaces, or the raw response when no cues were extracted.

RULES:
- Single trailing newline when there is content, empty file otherwise
- Output suffix: "-transcript.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from gemini_captioner.core.ir import TranscriptionResult
from gemini_captioner.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces the full transcript as plain text."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, result: TranscriptionResult) -> list[FormatterOutput]:
        content = result.full_transcript.strip()
        if content:
            content += "\n"
        return [
            FormatterOutput(
                suffix="-transcript.txt",
                content=content,
                media_type="text/plain",
            )
        ]
