"""Cue extraction from raw model output.

WHY: The model is asked for a JSON array of {start, end, text} objects,
but responses drift: text keyed as "word", a few corrupt entries, JSON
wrapped in Markdown fences, or no JSON at all and a subtitle-like listing
("00:00:01.000 --> 00:00:02.500 "Hello there"") instead. A partially
broken response should still yield every cue that can be recovered.

HOW: Two extraction phases are tried in order, first non-empty result
wins:
  _extract_structured — JSON array of objects
  _extract_pattern    — line scanner for "<start> --> <end> text"
Each phase returns a list of cues, or None when the payload is not the
shape that phase understands. An empty list from the JSON phase (valid
array, nothing usable) still falls through to the line scanner.

RULES:
- extract_cues() never raises for any string input
- Bad entries are dropped individually; the batch is never aborted
- Order is the order in the payload; nothing is sorted or de-duplicated
- Cues with an unparseable timestamp, empty text, or end < start are dropped
- Arrow marker is one or two dashes then ">"
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from gemini_captioner.core.ir import Cue, TranscriptionResult
from gemini_captioner.core.timestamps import UnparseableTimestampError, parse_timestamp

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("text", "word")

_CODE_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)

# Timestamp token accepted on a cue line: "1500ms", "1.5s", or a clock
# string of up to three colon groups with an optional 1–3 digit fraction.
_TS_TOKEN = r"\d+\s?ms|\d+(?:\.\d+)?s|(?:\d{1,2}:){0,2}\d{1,2}(?:[:.,]\d{1,3})?"

_CUE_LINE_RE = re.compile(
    r"(?P<start>" + _TS_TOKEN + r")"
    r"[ \t]*-{1,2}>[ \t]*"
    r"(?P<end>" + _TS_TOKEN + r")"
    r"(?P<text>.*)"
)

_QUOTES = "\"'"
_LIST_NUMBER_RE = re.compile(r"^\d+\s+(?=[A-Za-z])")


def _make_cue(start: Any, end: Any, text: Any) -> Cue | None:
    """Build a Cue, or return None if any part is unusable."""
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        start_ms = parse_timestamp(start)
        end_ms = parse_timestamp(end)
    except UnparseableTimestampError:
        return None
    if end_ms < start_ms:
        return None
    return Cue(text=text.strip(), start_ms=start_ms, end_ms=end_ms)


def _strip_code_fence(raw_text: str) -> str:
    match = _CODE_FENCE_RE.match(raw_text)
    return match.group(1) if match else raw_text


def _extract_structured(raw_text: str) -> list[Cue] | None:
    """Read a JSON array of cue objects.

    Returns None when the payload is not JSON or not a top-level array.
    """
    try:
        data = json.loads(_strip_code_fence(raw_text))
    except ValueError:
        return None
    if not isinstance(data, list):
        return None

    cues: list[Cue] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.debug("Dropping non-object entry %d", index)
            continue
        text = next((item[name] for name in _TEXT_FIELDS if item.get(name)), None)
        cue = _make_cue(item.get("start"), item.get("end"), text)
        if cue is None:
            logger.debug("Dropping unusable entry %d: %r", index, item)
            continue
        cues.append(cue)
    return cues


def _clean_line_text(text: str) -> str:
    text = text.strip().strip(_QUOTES).strip()
    # Numbered-list artifact: "3 Hello" → "Hello"
    return _LIST_NUMBER_RE.sub("", text, count=1)


def _extract_pattern(raw_text: str) -> list[Cue] | None:
    """Scan each line for "<start> --> <end> text".

    At most one cue per line; the text runs to the end of the line.
    """
    cues: list[Cue] = []
    for line in raw_text.splitlines():
        match = _CUE_LINE_RE.search(line)
        if not match:
            continue
        cue = _make_cue(
            match.group("start"),
            match.group("end"),
            _clean_line_text(match.group("text")),
        )
        if cue is None:
            logger.debug("Dropping unusable cue line: %r", line)
            continue
        cues.append(cue)
    return cues


_PHASES: tuple[Callable[[str], list[Cue] | None], ...] = (
    _extract_structured,
    _extract_pattern,
)


def extract_cues(raw_text: str) -> list[Cue]:
    """Turn a raw model response into an ordered list of cues.

    Args:
        raw_text: The response payload, possibly empty or malformed.

    Returns:
        Cues in payload order. Empty when nothing could be extracted;
        callers should then show the raw text instead.
    """
    if not raw_text or not raw_text.strip():
        return []

    for phase in _PHASES:
        cues = phase(raw_text)
        if cues:
            logger.debug("%s extracted %d cues", phase.__name__, len(cues))
            return cues
    return []


def build_result(raw_text: str, source_filename: str = "") -> TranscriptionResult:
    """Extract cues from a response and bundle them with the raw payload."""
    return TranscriptionResult(
        raw_text=raw_text,
        source_filename=source_filename,
        cues=extract_cues(raw_text),
    )
