"""Abstract base formatter and output container.

WHY: Every export format consumes the same TranscriptionResult but
produces different file content. This base class enforces a consistent
interface so the CLI can run any formatter generically.

HOW: BaseFormatter is an ABC with two requirements — a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; every current formatter returns one item
- ``suffix`` starts with a hyphen, e.g. ``"-captions.vtt"``
- The caller is responsible for prepending the source filename stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from gemini_captioner.core.ir import TimestampFormat, TranscriptionResult


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-captions.vtt"`` → ``"interview-captions.vtt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    def __init__(self, timestamp_format: TimestampFormat = TimestampFormat.HMS) -> None:
        self.timestamp_format = timestamp_format

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT Captions'."""

    @abstractmethod
    def format(self, result: TranscriptionResult) -> list[FormatterOutput]:
        """Convert a transcription result into one or more output files.

        Args:
            result: The extracted cues plus the raw model payload.

        Returns:
            List of FormatterOutput objects.
        """
