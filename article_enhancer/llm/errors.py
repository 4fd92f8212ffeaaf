"""Classification of LLM provider errors.

Provider errors are matched on their reported HTTP status, error code and
message. Attributes are read duck-typed so any client raising exceptions of
the openai SDK shape is classified the same way.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    QUOTA_EXHAUSTED = "quota_exhausted"


QUOTA_CODES = {"insufficient_quota", "rate_limit_exceeded"}
UNAVAILABLE_CODES = {"model_decommissioned", "model_not_found", "model_not_available"}
UNAVAILABLE_MESSAGES = ("decommissioned", "model_not_found", "does not exist", "is not available")


def classify_error(exc: BaseException) -> Outcome:
    """Map a provider exception to the action the invoker takes.

    QUOTA_EXHAUSTED stops work for the article, RETRYABLE moves on to the
    next candidate model and FATAL propagates.
    """
    status = error_status(exc)
    code = error_code(exc)
    message = error_message(exc).lower()

    if status == 429 or code in QUOTA_CODES:
        return Outcome.QUOTA_EXHAUSTED
    if code in UNAVAILABLE_CODES:
        return Outcome.RETRYABLE
    if any(marker in message for marker in UNAVAILABLE_MESSAGES):
        return Outcome.RETRYABLE
    return Outcome.FATAL


def error_status(exc: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def error_code(exc: BaseException) -> str | None:
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code:
        return code
    nested = _nested_error(exc)
    value = nested.get("code")
    return value if isinstance(value, str) and value else None


def error_message(exc: BaseException) -> str:
    nested = _nested_error(exc)
    parts = [str(getattr(exc, "message", "") or ""), str(nested.get("message") or ""), str(exc)]
    return " ".join(part for part in parts if part)


def _nested_error(exc: BaseException) -> dict[str, Any]:
    for attr in ("body", "error"):
        value = getattr(exc, attr, None)
        if not isinstance(value, dict):
            continue
        inner = value.get("error")
        if isinstance(inner, dict):
            return inner
        return value
    return {}
