"""WebVTT caption formatter.

WHY: WebVTT is what browsers, players, and most editors import for
timed captions. It is the primary export of the captioner.

HOW: Writes the "WEBVTT" header, a blank line, then one block per cue:
"hh:mm:ss.mmm --> hh:mm:ss.mmm", the cue text, and a blank line.

RULES:
- Timestamps are always hh:mm:ss.mmm, whatever timestamp_format says
- No cue identifiers, settings, or styling
- Cue order is the extraction order
- Output suffix: "-captions.vtt"
- Media type: "text/vtt"
"""

from __future__ import annotations

from gemini_captioner.core.ir import Cue, TimestampFormat, TranscriptionResult
from gemini_captioner.core.timestamps import format_timestamp
from gemini_captioner.formatters.base import BaseFormatter, FormatterOutput

VTT_HEADER = "WEBVTT"


def render_vtt(cues: list[Cue]) -> str:
    """Render cues as a WebVTT document."""
    parts = [VTT_HEADER + "\n\n"]
    for cue in cues:
        start = format_timestamp(cue.start_ms, TimestampFormat.HMS)
        end = format_timestamp(cue.end_ms, TimestampFormat.HMS)
        parts.append("{} --> {}\n{}\n\n".format(start, end, cue.text))
    return "".join(parts)


class VTTFormatter(BaseFormatter):
    """Formatter that produces a WebVTT caption file."""

    @property
    def name(self) -> str:
        return "WebVTT Captions"

    def format(self, result: TranscriptionResult) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix="-captions.vtt",
                content=render_vtt(result.cues),
                media_type="text/vtt",
            )
        ]
