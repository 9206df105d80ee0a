"""Gemini Captioner — speech-to-caption pipeline on top of Gemini.

WHY: Gemini can transcribe audio with timestamps, but its output is
free-form text that only usually matches the requested JSON shape, and
the API is rate-limited. This package turns that into reliable,
time-aligned captions.

HOW: Three-stage pipeline — call (retrying API client), normalize
(timestamp parser + cue extractor into the IR), format (pluggable
exporters). Each stage is independently testable.

RULES:
- All formatters consume the same TranscriptionResult IR
- Extraction never raises; API failures always do
- Adding a new output format = one new formatter module, no core changes
"""

__version__ = "0.1.0"
