"""Timestamped text formatter — one "[start] text" line per cue.

WHY: For reviewing word-level output, a compact list of start times is
easier to scan than a caption file. The timestamp display form is the
user's choice: clock time or raw milliseconds.

HOW: Formats each cue's start with format_timestamp() using the
formatter's timestamp_format, then joins lines with newlines.

RULES:
- HMS: "[00:00:01.500] hello"; MS: "[001500ms] hello"
- Output suffix: "-timestamps.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from gemini_captioner.core.ir import TranscriptionResult
from gemini_captioner.core.timestamps import format_timestamp
from gemini_captioner.formatters.base import BaseFormatter, FormatterOutput


class TimestampedTextFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Timestamped Text"

    def format(self, result: TranscriptionResult) -> list[FormatterOutput]:
        lines = [
            "[{}] {}".format(format_timestamp(cue.start_ms, self.timestamp_format), cue.text)
            for cue in result.cues
        ]
        content = "\n".join(lines)
        if content:
            content += "\n"
        return [
            FormatterOutput(
                suffix="-timestamps.txt",
                content=content,
                media_type="text/plain",
            )
        ]
