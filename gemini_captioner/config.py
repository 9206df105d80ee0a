"""Configuration constants, supported media types, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Media types and API defaults are plain data
structures, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts and strings. The load_api_key() function provides
a clear error when the key is missing.

RULES:
- SUPPORTED_MEDIA_TYPES maps lowercase file extensions to MIME types
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported audio/video file extensions → MIME type sent as inlineData
# ---------------------------------------------------------------------------

SUPPORTED_MEDIA_TYPES: dict[str, str] = {
    ".aac": "audio/aac",
    ".aiff": "audio/aiff",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mp4": "video/mp4",
    ".mpeg": "video/mpeg",
}


def media_type_for(extension: str) -> str | None:
    """Return the MIME type for a file extension, or None if unsupported."""
    return SUPPORTED_MEDIA_TYPES.get(extension.lower())


# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

DEFAULT_TIMESTAMP_MODE = os.getenv("DEFAULT_TIMESTAMP_MODE", "wordstamp")
DEFAULT_PUNCTUATION = os.getenv("DEFAULT_PUNCTUATION", "on").lower() == "on"
DEFAULT_TIMESTAMP_FORMAT = os.getenv("DEFAULT_TIMESTAMP_FORMAT", "hms")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    WHY: The API key is required for every generateContent call. Loading
    it from the environment (via .env) keeps it out of source code.

    HOW: Reads GEMINI_API_KEY, falling back to the generic API_KEY name.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key
