"""Gemini generateContent response and error dataclasses.

WHY: The REST API returns nested JSON for both successful responses
(candidates → content → parts → text) and errors (the Google error
envelope). Typed dataclasses make the fields we rely on explicit.

HOW: Each dataclass maps to the subset of the JSON object the client
needs. Factory methods (from_dict) tolerate missing optional fields.

RULES:
- GenerateContentResponse.text concatenates the text parts of the first
  candidate; it is "" when there is no candidate or no text part
- ErrorDetails.from_dict accepts both {"error": {...}} and a bare body
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Candidate:
    """One generated candidate.

    RULES:
    - finish_reason is e.g. "STOP", "MAX_TOKENS", "SAFETY"; None if absent
    """

    texts: list[str] = field(default_factory=list)
    finish_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Candidate:
        parts = (data.get("content") or {}).get("parts") or []
        return cls(
            texts=[p["text"] for p in parts if isinstance(p.get("text"), str)],
            finish_reason=data.get("finishReason"),
        )


@dataclass
class GenerateContentResponse:
    """Response body of POST /models/{model}:generateContent."""

    candidates: list[Candidate] = field(default_factory=list)
    block_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> GenerateContentResponse:
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
            block_reason=(data.get("promptFeedback") or {}).get("blockReason"),
        )

    @property
    def text(self) -> str:
        if not self.candidates:
            return ""
        return "".join(self.candidates[0].texts)


@dataclass
class ErrorDetails:
    """Fields of a Google API error envelope.

    WHY: Retry classification needs both the numeric HTTP code and the
    symbolic status ("UNAVAILABLE", "RESOURCE_EXHAUSTED"), and the
    message may carry a "retry in Ns" hint.
    """

    code: int | None = None
    message: str = ""
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ErrorDetails:
        body = data.get("error", data)
        if not isinstance(body, dict):
            return cls(message=str(body))
        code = body.get("code")
        return cls(
            code=code if isinstance(code, int) else None,
            message=str(body.get("message") or ""),
            status=body.get("status"),
        )
