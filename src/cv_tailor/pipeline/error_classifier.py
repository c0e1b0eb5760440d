"""Map any failure to an ErrorClassification.

Classification is a heuristic over the error message: an ordered table of
(patterns, kind) where the first matching row wins. Input validation errors
are recognised by type first, since their messages name things like the API
key without being credential failures.
"""

from __future__ import annotations

import re

from cv_tailor.errors import (
    ErrorClassification,
    ErrorKind,
    GenerationFailedError,
    InputValidationError,
)
from cv_tailor.models.catalog import get_free_models

CLASSIFICATION_TABLE: list[tuple[tuple[str, ...], ErrorKind]] = [
    (("api key", "unauthorized", "authentication"), ErrorKind.AUTH),
    (("rate limit", "quota", "credits", "insufficient"), ErrorKind.QUOTA),
    (("network", "connection", "timeout"), ErrorKind.NETWORK),
    (("model", "not found", "unavailable"), ErrorKind.AI),
    (("validation", "required"), ErrorKind.VALIDATION),
]

RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.AI})

TRANSIENT_PATTERNS = [
    re.compile(r"timeout|timed out", re.IGNORECASE),
    re.compile(r"temporar", re.IGNORECASE),
    re.compile(r"try again", re.IGNORECASE),
    re.compile(r"\b5\d\d\b"),
]


def _quota_suggestion() -> str:
    free = get_free_models()
    if free:
        return (
            f"Switch to a free model such as {free[0].name}, "
            "or check your account balance."
        )
    return "Check your account balance or usage limits."


SUGGESTIONS: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Review your input and submit again.",
    ErrorKind.AUTH: "Check your API key in settings and make sure it is active.",
    ErrorKind.QUOTA: _quota_suggestion(),
    ErrorKind.NETWORK: "Check your internet connection and try again.",
    ErrorKind.AI: "Try again, or select a different model in settings.",
    ErrorKind.UNKNOWN: "Try again, or select a different model if the problem persists.",
}


def match_kind(message: str) -> ErrorKind:
    """First table row whose pattern occurs in the message, else UNKNOWN."""
    lowered = message.lower()
    for patterns, kind in CLASSIFICATION_TABLE:
        if any(pattern in lowered for pattern in patterns):
            return kind
    return ErrorKind.UNKNOWN


def is_transient(message: str) -> bool:
    return any(pattern.search(message) for pattern in TRANSIENT_PATTERNS)


def classify_error(error: BaseException) -> ErrorClassification:
    if isinstance(error, GenerationFailedError):
        return error.classification

    message = str(error) or "An unexpected error occurred."
    if isinstance(error, InputValidationError):
        kind = ErrorKind.VALIDATION
    else:
        kind = match_kind(message)

    if kind is ErrorKind.UNKNOWN:
        retryable = is_transient(message)
    else:
        retryable = kind in RETRYABLE_KINDS

    return ErrorClassification(
        kind=kind,
        retryable=retryable,
        suggestion=SUGGESTIONS[kind],
        message=message,
    )
