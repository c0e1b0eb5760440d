"""Exception hierarchy for the generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    QUOTA = "quota"
    NETWORK = "network"
    AI = "ai"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorClassification:
    """A failure normalized for display: what went wrong and what to do."""

    kind: ErrorKind
    retryable: bool
    suggestion: str
    message: str


class CVTailorError(Exception):
    """Base class for every error raised by this package."""


class InputValidationError(CVTailorError):
    """Caller input was rejected before any network call was made."""


class GatewayError(CVTailorError):
    """The LLM gateway call failed (transport or provider-reported)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseExtractionError(CVTailorError):
    """The gateway replied, but the reply could not be turned into a result."""


class ToolCallMissingError(ResponseExtractionError):
    pass


class ResponseParseError(ResponseExtractionError):
    pass


class ResponseSchemaError(ResponseExtractionError):
    pass


class MissingFieldError(ResponseExtractionError):
    pass


class EmptyContentError(ResponseExtractionError):
    pass


class ContentTooShortError(ResponseExtractionError):
    pass


class GenerationFailedError(CVTailorError):
    """Terminal failure of a generation operation, already classified."""

    def __init__(self, classification: ErrorClassification, attempts: int):
        super().__init__(classification.message)
        self.classification = classification
        self.attempts = attempts

    @property
    def kind(self) -> ErrorKind:
        return self.classification.kind

    @property
    def retryable(self) -> bool:
        return self.classification.retryable

    @property
    def suggestion(self) -> str:
        return self.classification.suggestion


class InvalidTransitionError(CVTailorError):
    """A session was asked to move between phases it cannot connect."""
