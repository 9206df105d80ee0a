"""Request body construction for a transcription call.

WHY: The model produces usable timestamps only when told exactly what
to return. The schema and system instruction vary with the requested
granularity and punctuation, so they are built per call.

HOW: build_request_body() assembles the generateContent JSON: a short
user prompt, the media as base64 inlineData, and a generationConfig
that forces a JSON array of {start, end, text} with numeric seconds.

RULES:
- Temperature is 0.0
- Timestamps are requested as raw numbers of seconds from file start
- duration_s is only mentioned to the model; nothing else uses it
"""

from __future__ import annotations

import base64

from gemini_captioner.core.ir import Punctuation, TranscriptionSettings

USER_PROMPT = "Transcribe the attached audio file."


def build_response_schema(settings: TranscriptionSettings) -> dict:
    text_description = "Single spoken word" if settings.is_word_mode else "Complete sentence"
    return {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {
                "start": {
                    "type": "NUMBER",
                    "description": "Start time in seconds (e.g. 0.0, 1.5, 12.35)",
                },
                "end": {
                    "type": "NUMBER",
                    "description": "End time in seconds (e.g. 1.5, 2.0, 13.0)",
                },
                "text": {"type": "STRING", "description": text_description},
            },
            "required": ["start", "end", "text"],
        },
    }


def build_system_instruction(
    settings: TranscriptionSettings,
    duration_s: float | None = None,
) -> str:
    granularity = (
        "One object per single word." if settings.is_word_mode
        else "Group by complete sentences."
    )
    punctuation = (
        'Include standard punctuation in the "text" field.'
        if settings.punctuation == Punctuation.ON
        else "Remove all punctuation."
    )
    lines = [
        "You are a precision audio transcription engine.",
        "",
        "RULES:",
        "1. Timestamps: Return timestamps as raw NUMBERS (seconds), relative "
        "to the start of the file (0.0).",
        "2. Start Time: The first word typically starts near 0.0 seconds. "
        "Do NOT use embedded timecodes from metadata.",
        "3. Content: Listen carefully. Transcribe exactly what is spoken.",
        f"4. Granularity: {granularity}",
        f"5. Punctuation: {punctuation}",
    ]
    if duration_s is not None:
        lines.append(
            f"6. Duration: The file is {duration_s:.2f} seconds long; "
            "no timestamp may exceed it."
        )
    lines.extend(["", "Format the response as a JSON Array."])
    return "\n".join(lines)


def build_request_body(
    settings: TranscriptionSettings,
    media: bytes,
    mime_type: str,
    duration_s: float | None = None,
) -> dict:
    """Assemble the generateContent request JSON.

    Args:
        settings: Granularity and punctuation options.
        media: Raw audio/video bytes.
        mime_type: MIME type of the media, e.g. "audio/mpeg".
        duration_s: Optional media duration hint.

    Returns:
        A dict ready to send as the JSON request body.
    """
    return {
        "systemInstruction": {
            "parts": [{"text": build_system_instruction(settings, duration_s)}],
        },
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": USER_PROMPT},
                    {
                        "inlineData": {
                            "mimeType": mime_type,
                            "data": base64.b64encode(media).decode("ascii"),
                        }
                    },
                ],
            }
        ],
        "generationConfig": {
            "temperature": 0.0,
            "responseMimeType": "application/json",
            "responseSchema": build_response_schema(settings),
        },
    }
