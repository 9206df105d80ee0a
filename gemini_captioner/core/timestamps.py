"""Timestamp parsing and formatting.

WHY: Even with a numeric response schema, the model emits timestamps in
whatever shape it likes: raw JSON seconds (1.5), clock strings
("00:01:02.500", "01:02,5"), bare milliseconds ("1500ms"), or seconds
with a unit ("1.5s"). Everything downstream works in integer
milliseconds, so one total function has to absorb all of them.

HOW: parse_timestamp() dispatches on the value's type and surface form.
Clock strings split off the sub-second part at the last "." or ",",
then split the rest on ":" into 1–4 segments. format_timestamp() is
the inverse for the "hh:mm:ss.mmm" and "000000ms" display forms.

RULES:
- The only failure mode is UnparseableTimestampError (a ValueError)
- Results are never negative; garbage never becomes 0
- Numeric input is seconds, rounded half-up to whole milliseconds
- Sub-second digits are right-padded to 3 and truncated to 3 ("5" → 500)
- A 4-segment clock "h:m:s:fff" treats the last segment as sub-seconds
"""

from __future__ import annotations

import math
import re

from gemini_captioner.core.ir import TimestampFormat

_WRAPPING_CHARS = " \t\r\n[]\"'"

_MILLIS_RE = re.compile(r"(\d+)(?:\.\d*)?\s*ms")
_SECONDS_RE = re.compile(r"\d+(?:\.\d+)?s?")
_DIGITS_RE = re.compile(r"\d+")


class UnparseableTimestampError(ValueError):
    """Raised when a value cannot be read as a timestamp.

    The extractor catches this to drop the owning cue; nothing else
    should need to.
    """


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_int(digits: str, original: object) -> int:
    try:
        return int(digits)
    except ValueError:
        # over the interpreter's int string-conversion limit
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}") from None


def _seconds_to_ms(seconds: int | float | str, original: object) -> int:
    try:
        scaled = float(seconds) * 1000
    except (OverflowError, ValueError):
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}") from None
    if not math.isfinite(scaled) or scaled < 0:
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}")
    return _round_half_up(scaled)


def _parse_clock(text: str, original: object) -> int:
    """Parse "[[h:]m:]s[.fff]" and the extended "h:m:s:fff" form."""
    sep_index = max(text.rfind("."), text.rfind(","))
    if sep_index != -1:
        time_part = text[:sep_index]
        ms_part = text[sep_index + 1:]
    else:
        time_part = text
        ms_part = "0"

    segments = [seg.strip() for seg in time_part.split(":")]
    if not all(_DIGITS_RE.fullmatch(seg) for seg in segments):
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}")
    values = [_to_int(seg, original) for seg in segments]

    hours = minutes = 0
    if len(values) == 1:
        (seconds,) = values
    elif len(values) == 2:
        minutes, seconds = values
    elif len(values) == 3:
        hours, minutes, seconds = values
    elif len(values) == 4:
        hours, minutes, seconds = values[:3]
        ms_part = segments[3]
    else:
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}")

    ms_part = ms_part.strip()
    if ms_part and not _DIGITS_RE.fullmatch(ms_part):
        raise UnparseableTimestampError(f"Invalid timestamp: {original!r}")
    milliseconds = _to_int(ms_part.ljust(3, "0")[:3], original)

    return (hours * 3600 + minutes * 60 + seconds) * 1000 + milliseconds


def parse_timestamp(value: int | float | str | None) -> int:
    """Convert one timestamp token into integer milliseconds.

    Args:
        value: Seconds as a number, or a string in any supported form.

    Returns:
        Non-negative integer milliseconds.

    Raises:
        UnparseableTimestampError: If the value is not a timestamp.
    """
    # bool is an int subclass; true/false in a payload is never a time
    if isinstance(value, bool):
        raise UnparseableTimestampError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return _seconds_to_ms(value, value)
    if not isinstance(value, str):
        raise UnparseableTimestampError(f"Invalid timestamp: {value!r}")

    text = value.strip(_WRAPPING_CHARS)
    if not text:
        raise UnparseableTimestampError(f"Empty timestamp: {value!r}")

    if text.endswith("ms"):
        match = _MILLIS_RE.fullmatch(text)
        if not match:
            raise UnparseableTimestampError(f"Invalid timestamp: {value!r}")
        return _to_int(match.group(1), value)

    if _SECONDS_RE.fullmatch(text):
        return _seconds_to_ms(text.rstrip("s"), value)

    return _parse_clock(text, value)


def format_timestamp(
    total_ms: int | float,
    fmt: TimestampFormat = TimestampFormat.HMS,
    separator: str = ".",
) -> str:
    """Render milliseconds as "hh:mm:ss.mmm" or zero-padded "000000ms".

    Args:
        total_ms: Milliseconds; fractional values are rounded.
        fmt: Display form.
        separator: Character between seconds and milliseconds.
            "," gives the comma-decimal form.
    """
    rounded = _round_half_up(total_ms)
    if fmt == TimestampFormat.MS:
        return f"{rounded:06d}ms"

    total_seconds, millis = divmod(rounded, 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{millis:03d}"
