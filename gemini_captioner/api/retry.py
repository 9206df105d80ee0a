"""Retry orchestration for the transcription call.

WHY: generateContent is rate-limited and regularly overloaded. A 503 or
429 usually clears within seconds, so one logical "transcribe" should
survive a couple of them. Anything else (bad key, bad request) will not
get better by waiting and must surface immediately.

HOW: call_with_retry() awaits the call; on failure it classifies the
error and either re-raises it or waits and tries again:
  Attempting(i) → Success
                → TransientFailure → wait → Attempting(i + 1)
                → TerminalFailure  → re-raise
The wait is 2s, 4s, 8s... unless the error message carries a server
hint ("Please retry in 37.2s"), which wins: ceil(hint) + 1s.

RULES:
- At most 3 attempts (1 initial + 2 retries) by default
- Transient: status 503/429/"UNAVAILABLE"/"RESOURCE_EXHAUSTED", or a
  message mentioning overload, unavailability, quota or rate limits
- Terminal errors and the last transient error are re-raised unchanged
- Never returns a default payload
- The wait is an awaitable sleep, so cancelling the task cancels it
- No state is shared between calls; concurrent calls are independent
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_TRANSIENT_CODES = frozenset({503, 429, "UNAVAILABLE", "RESOURCE_EXHAUSTED"})
_TRANSIENT_PHRASES = ("overloaded", "unavailable", "quota", "rate limit")
_CODE_ATTRIBUTES = ("status_code", "status", "code")

_RETRY_HINT_RE = re.compile(r"retry in (\d+(?:\.\d+)?)\s?s", re.IGNORECASE)


class ErrorClass(str, enum.Enum):
    TRANSIENT = "transient"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds and timing of the retry loop.

    Attributes:
        max_attempts: Total attempts including the first one.
        base_delay_ms: Wait after the first failed attempt; doubles each time.
        hint_margin_ms: Added to a server-provided retry delay.
    """

    max_attempts: int = 3
    base_delay_ms: int = 2000
    hint_margin_ms: int = 1000

    def has_attempts_left(self, attempt_index: int) -> bool:
        return attempt_index < self.max_attempts - 1


DEFAULT_POLICY = RetryPolicy()


@dataclass(frozen=True)
class CallAttempt:
    """Outcome of one failed attempt: how to classify it and how long to wait."""

    attempt_index: int
    error_class: ErrorClass
    wait_ms: int


def _error_codes(exc: BaseException) -> set:
    codes = set()
    for attr in _CODE_ATTRIBUTES:
        value = getattr(exc, attr, None)
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            codes.add(value)
    return codes


def _error_message(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


def classify_error(exc: BaseException) -> ErrorClass:
    """Decide whether a failed call is worth retrying."""
    if _error_codes(exc) & _TRANSIENT_CODES:
        return ErrorClass.TRANSIENT
    message = _error_message(exc).lower()
    if any(phrase in message for phrase in _TRANSIENT_PHRASES):
        return ErrorClass.TRANSIENT
    return ErrorClass.TERMINAL


def compute_wait_ms(
    exc: BaseException,
    attempt_index: int,
    policy: RetryPolicy = DEFAULT_POLICY,
) -> int:
    """Milliseconds to wait before the attempt after ``attempt_index``.

    A "retry in Ns" hint in the error message overrides the exponential
    schedule regardless of attempt_index.
    """
    hint = _RETRY_HINT_RE.search(_error_message(exc))
    if hint:
        return math.ceil(float(hint.group(1))) * 1000 + policy.hint_margin_ms
    return policy.base_delay_ms * 2 ** attempt_index


def plan_attempt(
    exc: BaseException,
    attempt_index: int,
    policy: RetryPolicy = DEFAULT_POLICY,
) -> CallAttempt:
    error_class = classify_error(exc)
    wait_ms = 0
    if error_class == ErrorClass.TRANSIENT:
        wait_ms = compute_wait_ms(exc, attempt_index, policy)
    return CallAttempt(attempt_index=attempt_index, error_class=error_class, wait_ms=wait_ms)


async def call_with_retry(
    call: Callable[[], Awaitable[str]],
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Callable[[float], Awaitable[object]] | None = None,
    on_status: Callable[[str], None] | None = None,
) -> str:
    """Run ``call`` until it succeeds, fails terminally, or attempts run out.

    Args:
        call: Zero-argument coroutine function performing one attempt.
        policy: Attempt bound and backoff timing.
        sleep: Awaitable sleep taking seconds; defaults to asyncio.sleep.
        on_status: Optional callback for human-readable retry notices.

    Returns:
        The payload of the first successful attempt.

    Raises:
        Exception: The terminal error, or the last transient error once
            all attempts are used. Raised unchanged.
    """
    sleep = sleep or asyncio.sleep
    attempt_index = 0
    while True:
        try:
            return await call()
        except Exception as exc:
            attempt = plan_attempt(exc, attempt_index, policy)
            if attempt.error_class == ErrorClass.TERMINAL:
                raise
            if not policy.has_attempts_left(attempt_index):
                logger.error(
                    "Gemini API error (%s) persisted after %d attempts",
                    _describe(exc), policy.max_attempts,
                )
                raise

            notice = "Gemini API error ({}). Retrying in {}ms... (attempt {}/{})".format(
                _describe(exc), attempt.wait_ms, attempt_index + 1, policy.max_attempts,
            )
            logger.warning(notice)
            if on_status:
                on_status(notice)

        await sleep(attempt.wait_ms / 1000)
        attempt_index += 1


def _describe(exc: BaseException) -> str:
    codes = sorted(_error_codes(exc), key=str)
    return "/".join(str(c) for c in codes) if codes else type(exc).__name__
