"""Command-line interface for the Gemini Captioner.

WHY: Users need a simple way to caption audio/video files from the
terminal. The CLI wires together the full pipeline — file validation,
the retrying Gemini call, cue extraction into the IR, pluggable
formatter output, and file saving — behind a single command.

HOW: Uses argparse to accept one or more input files, granularity and
punctuation options, output format selection, and an output directory.
Runs the async pipeline via asyncio.run(). Files are transcribed one
after another; a failure is reported and the queue moves on. Status
messages go to stderr; output files are saved next to the source (or to
--output-dir).

RULES:
- Positional arguments: one or more input audio/video file paths
- Validates every file and the format list before any API call
- Files are processed strictly sequentially (shared rate limit)
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-captions-2.vtt)
- Status output goes to stderr (not stdout)
- Exit code 1 if any file failed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gemini_captioner.api.client import GeminiClient
from gemini_captioner.config import (
    DEFAULT_PUNCTUATION,
    DEFAULT_TIMESTAMP_FORMAT,
    DEFAULT_TIMESTAMP_MODE,
    LOG_LEVEL,
    SUPPORTED_MEDIA_TYPES,
)
from gemini_captioner.core.extractor import build_result
from gemini_captioner.core.ir import (
    Punctuation,
    TimestampFormat,
    TimestampMode,
    TranscriptionResult,
    TranscriptionSettings,
)
from gemini_captioner.formatters import FORMATTERS
from gemini_captioner.formatters.base import FormatterOutput

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed so it shows immediately."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the captioner several times on the same file.
    Numeric suffixes (-captions-2.vtt) prevent losing earlier output.

    RULES:
    - First attempt: {stem}{suffix} (e.g. interview-captions.vtt)
    - Conflict: split suffix at last dot, insert counter before extension
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk as UTF-8 and return its path."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _validate_inputs(paths: List[str]) -> List[Path]:
    resolved: List[Path] = []
    for raw in paths:
        path = Path(raw).resolve()
        if not path.is_file():
            _fail("File not found: {}".format(path))
        ext = path.suffix.lower()
        if ext not in SUPPORTED_MEDIA_TYPES:
            _fail(
                "Unsupported file type '{}'. Supported formats: {}".format(
                    ext, ", ".join(sorted(SUPPORTED_MEDIA_TYPES))
                )
            )
        resolved.append(path)
    return resolved


def _parse_format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            _fail(
                "Unknown format '{}'. Available formats: {}".format(
                    key, ", ".join(sorted(FORMATTERS.keys()))
                )
            )
    return keys


def _settings_from_args(args: argparse.Namespace) -> TranscriptionSettings:
    # argparse does not check env-provided defaults against choices
    try:
        timestamp_mode = TimestampMode(args.mode)
        timestamp_format = TimestampFormat(args.timestamp_format)
    except ValueError as e:
        _fail(str(e))
    return TranscriptionSettings(
        timestamp_mode=timestamp_mode,
        punctuation=Punctuation.ON if args.punctuation else Punctuation.OFF,
        timestamp_format=timestamp_format,
    )


def write_outputs(
    result: TranscriptionResult,
    format_keys: List[str],
    stem: str,
    output_dir: Path,
    timestamp_format: TimestampFormat = TimestampFormat.HMS,
) -> List[Path]:
    """Run the selected formatters over a result and save every output file."""
    saved: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key](timestamp_format=timestamp_format)
        for output in formatter.format(result):
            path = _save_output(output, stem, output_dir)
            saved.append(path)
            _status("  Saved: {}".format(path.name))
    return saved


async def _process_file(
    client: GeminiClient,
    input_path: Path,
    settings: TranscriptionSettings,
    format_keys: List[str],
    output_dir: Path,
) -> List[Path]:
    raw_text = await client.transcribe_file(input_path, settings, on_status=_status)

    result = build_result(raw_text, input_path.name)
    if result.cues:
        _status("  Extracted {} cues".format(len(result.cues)))
    else:
        _status("  No timed cues found; keeping the raw response as plain text")

    return write_outputs(
        result, format_keys, input_path.stem, output_dir, settings.timestamp_format
    )


async def _run_pipeline(
    input_paths: List[Path],
    settings: TranscriptionSettings,
    format_keys: List[str],
    output_dir: Optional[Path],
) -> int:
    """Transcribe every input file in turn and save its outputs.

    RULES:
    - Inputs are already validated by main()
    - A failed file is reported and skipped; the rest still run
    - Returns the process exit code
    """
    failures = 0
    saved_files: List[Path] = []

    async with GeminiClient() as client:
        for index, input_path in enumerate(input_paths, start=1):
            _status("[{}/{}] {}".format(index, len(input_paths), input_path.name))
            try:
                saved_files.extend(
                    await _process_file(
                        client,
                        input_path,
                        settings,
                        format_keys,
                        output_dir or input_path.parent,
                    )
                )
            except Exception as e:
                logger.debug("Transcription failed for %s", input_path, exc_info=True)
                _status("  Error: {}".format(e))
                failures += 1

    _status("")
    _status("Done! Saved {} file(s); {} of {} input(s) failed.".format(
        len(saved_files), failures, len(input_paths),
    ))
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="gemini_captioner",
        description="Transcribe audio/video files with Gemini and export "
                    "time-aligned captions (WebVTT, plain text, JSON).",
    )

    parser.add_argument(
        "input_files",
        nargs="+",
        help="Paths to the audio or video files to transcribe.",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in TimestampMode],
        default=DEFAULT_TIMESTAMP_MODE,
        help="One cue per word or per sentence (default: %(default)s).",
    )

    parser.add_argument(
        "--punctuation",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_PUNCTUATION,
        help="Ask the model to keep punctuation (default: %(default)s).",
    )

    parser.add_argument(
        "--timestamp-format",
        choices=[f.value for f in TimestampFormat],
        default=DEFAULT_TIMESTAMP_FORMAT,
        help="Timestamp display in text exports: hh:mm:ss.000 or "
             "milliseconds (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as each input file).",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Validate everything before spending any API quota
    input_paths = _validate_inputs(args.input_files)
    format_keys = _parse_format_keys(args.formats)
    settings = _settings_from_args(args)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else None
    if output_dir is not None and not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    try:
        exit_code = asyncio.run(_run_pipeline(input_paths, settings, format_keys, output_dir))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except ValueError as e:
        # Config errors (missing API key, etc.)
        _fail(str(e))
    else:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
