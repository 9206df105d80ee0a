"""Output formatter registry — pluggable export hub.

WHY: The CLI needs a single lookup to find the right formatter by name.
A central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["vtt"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gemini_captioner.formatters.json_cues import JSONCuesFormatter
from gemini_captioner.formatters.plain_text import PlainTextFormatter
from gemini_captioner.formatters.timestamped_text import TimestampedTextFormatter
from gemini_captioner.formatters.vtt import VTTFormatter

if TYPE_CHECKING:
    from gemini_captioner.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "vtt": VTTFormatter,
    "plain_text": PlainTextFormatter,
    "timestamped_text": TimestampedTextFormatter,
    "json_cues": JSONCuesFormatter,
}
