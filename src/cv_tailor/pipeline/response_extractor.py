"""Turn gateway replies into validated resumes and cover letters.

Replies are untrusted: the model may skip the forced tool call, return null
content, or send extra fields. ``resolve_reply`` reduces any reply to one of
three shapes before any field is read:

- ``ToolCallReply``: a function/tool call with its raw JSON arguments
- ``TextReply``: plain message content (possibly ``None``)
- ``MalformedReply``: no usable choice or message at all
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from pydantic import ValidationError

from cv_tailor.errors import (
    ContentTooShortError,
    EmptyContentError,
    MissingFieldError,
    ResponseExtractionError,
    ResponseParseError,
    ResponseSchemaError,
    ToolCallMissingError,
)
from cv_tailor.models.request import CoverLetterInputs, CoverLetterResult
from cv_tailor.models.resume import ResumeDocument
from cv_tailor.utils.json_parser import parse_json_object, strip_code_fences

logger = logging.getLogger(__name__)

MIN_COVER_LETTER_LENGTH = 10
SHORT_COVER_LETTER_LENGTH = 100
MAX_COVER_LETTER_LENGTH = 10_000
MIN_UNIQUE_WORD_RATIO = 0.3

_PLACEHOLDER_PATTERNS = [re.compile(r"\[[^\]\n]{1,60}\]"), re.compile(r"\{\{.*?\}\}")]
_ARTIFACT_PATTERN = re.compile(r"\b(undefined|null|NaN)\b")
_FIRST_PERSON_PATTERN = re.compile(r"\b(i|my|me)\b", re.IGNORECASE)


@dataclass(frozen=True)
class ToolCallReply:
    name: str
    arguments: str


@dataclass(frozen=True)
class TextReply:
    content: str | None


@dataclass(frozen=True)
class MalformedReply:
    reason: str


GatewayReply = Union[ToolCallReply, TextReply, MalformedReply]


def resolve_reply(response: Any, expected_tool: str | None = None) -> GatewayReply:
    """Reduce a raw chat-completion reply to a tagged shape."""
    choices = getattr(response, "choices", None)
    if not choices:
        return MalformedReply("reply has no choices")
    message = getattr(choices[0], "message", None)
    if message is None:
        return MalformedReply("first choice has no message")

    calls: list[tuple[str, str]] = []
    for call in getattr(message, "tool_calls", None) or []:
        function = getattr(call, "function", None)
        if function is not None:
            calls.append((function.name or "", function.arguments or ""))
    legacy = getattr(message, "function_call", None)
    if legacy is not None:
        calls.append((legacy.name or "", legacy.arguments or ""))

    if calls:
        for name, arguments in calls:
            if name == expected_tool:
                return ToolCallReply(name=name, arguments=arguments)
        name, arguments = calls[0]
        return ToolCallReply(name=name, arguments=arguments)

    return TextReply(content=getattr(message, "content", None))


def _empty_reply_error(reply: MalformedReply) -> ResponseExtractionError:
    logger.warning("Malformed gateway reply: %s", reply.reason)
    return ResponseExtractionError(
        "The AI service returned an empty response. "
        "Please try again or select a different model."
    )


def extract_tool_arguments(response: Any, tool_name: str) -> dict:
    """Return the parsed arguments of the forced tool call."""
    reply = resolve_reply(response, expected_tool=tool_name)
    if isinstance(reply, MalformedReply):
        raise _empty_reply_error(reply)
    if not isinstance(reply, ToolCallReply) or reply.name != tool_name:
        raise ToolCallMissingError(f"Expected tool call to {tool_name} was not returned")
    try:
        return parse_json_object(reply.arguments)
    except ValueError as exc:
        raise ResponseParseError(
            f"The {tool_name} response could not be parsed as valid JSON."
        ) from exc


def _require_text(payload: dict, field: str, message: str) -> None:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise MissingFieldError(message)


def _build_document(payload: dict) -> ResumeDocument:
    try:
        return ResumeDocument.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        raise ResponseSchemaError(
            f"The AI response does not match the resume structure (fields: {fields})."
        ) from exc


def extract_ingested_resume(response: Any, tool_name: str) -> ResumeDocument:
    payload = extract_tool_arguments(response, tool_name)
    _require_text(payload, "name", "CV must contain a valid name")
    _require_text(payload, "title", "CV must contain a valid title")
    return _build_document(payload)


def merge_tailored(original: ResumeDocument, delta: dict) -> ResumeDocument:
    """Overlay the model's delta on the original; omitted fields keep their value."""
    merged = {**original.to_wire(), **delta}
    _require_text(merged, "name", "Tailored resume must contain a valid name")
    return _build_document(merged)


def extract_tailored_resume(
    response: Any, tool_name: str, original: ResumeDocument
) -> ResumeDocument:
    delta = extract_tool_arguments(response, tool_name)
    return merge_tailored(original, delta)


def review_cover_letter(content: str, resume: ResumeDocument | None = None) -> list[str]:
    """Heuristic checks on a generated letter. Findings are warnings only."""
    findings: list[str] = []
    if len(content) > MAX_COVER_LETTER_LENGTH:
        findings.append("content unusually long")
    if len(content) < SHORT_COVER_LETTER_LENGTH:
        findings.append("content unusually short")

    for pattern in _PLACEHOLDER_PATTERNS:
        match = pattern.search(content)
        if match:
            findings.append(f"unexpanded placeholder {match.group(0)}")
            break

    artifact = _ARTIFACT_PATTERN.search(content)
    if artifact:
        findings.append(f"programming artifact {artifact.group(0)}")

    words = content.lower().split()
    if len(words) >= 20 and len(set(words)) / len(words) < MIN_UNIQUE_WORD_RATIO:
        findings.append("content appears to be highly repetitive")

    if not _FIRST_PERSON_PATTERN.search(content):
        findings.append("missing personal context typical of cover letters")

    if resume is not None:
        contact = resume.contact_info
        expected = [value for value in (contact.email, contact.phone) if value.strip()]
        if expected and not any(value in content for value in expected):
            findings.append("candidate contact details not found")

    return findings


def extract_cover_letter(
    response: Any,
    inputs: CoverLetterInputs,
    resume: ResumeDocument | None = None,
) -> CoverLetterResult:
    reply = resolve_reply(response)
    if isinstance(reply, MalformedReply):
        raise _empty_reply_error(reply)
    content = reply.content if isinstance(reply, TextReply) else None
    if content is None or not content.strip():
        raise EmptyContentError("AI generated empty content")

    content = strip_code_fences(content.strip())
    if len(content) < MIN_COVER_LETTER_LENGTH:
        raise ContentTooShortError("The AI generated an invalid cover letter: content too short")

    for finding in review_cover_letter(content, resume):
        logger.warning("Cover letter review: %s", finding)

    return CoverLetterResult(content=content, inputs=inputs)
