"""JSON cue list formatter.

WHY: Other tools (and re-imports) want the normalized cues as data, in
integer milliseconds, without re-running the lenient extractor.

HOW: Serializes each cue as {"start_ms", "end_ms", "text"} and validates
the document against CUES_SCHEMA with jsonschema before returning.

RULES:
- Top level is an array, possibly empty
- Times are non-negative integers in milliseconds
- Validate output against the schema before returning; raise on failure
- Output suffix: "-cues.json"
"""

from __future__ import annotations

import json
from typing import Any

import jsonschema

from gemini_captioner.core.ir import TranscriptionResult
from gemini_captioner.formatters.base import BaseFormatter, FormatterOutput

CUES_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "start_ms": {"type": "integer", "minimum": 0},
            "end_ms": {"type": "integer", "minimum": 0},
            "text": {"type": "string", "minLength": 1},
        },
        "required": ["start_ms", "end_ms", "text"],
        "additionalProperties": False,
    },
}


class JSONCuesFormatter(BaseFormatter):
    """Formatter that produces a schema-validated JSON array of cues."""

    @property
    def name(self) -> str:
        return "JSON Cues"

    def format(self, result: TranscriptionResult) -> list[FormatterOutput]:
        """Serialize the cues.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to CUES_SCHEMA.
        """
        output = [
            {"start_ms": cue.start_ms, "end_ms": cue.end_ms, "text": cue.text}
            for cue in result.cues
        ]
        jsonschema.validate(instance=output, schema=CUES_SCHEMA)

        return [
            FormatterOutput(
                suffix="-cues.json",
                content=json.dumps(output, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
