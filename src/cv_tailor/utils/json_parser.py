"""Parse JSON objects out of tool-call arguments."""

from __future__ import annotations

import json


def parse_json_object(text: str | None) -> dict:
    """Parse a JSON object from tool-call arguments.

    Some gateway models wrap the arguments in a ```json fence or add a short
    preamble, so after a direct parse this tries:
    1. Strip fenced code block markers and parse
    2. Parse from the first '{' to the last '}'

    Raises ValueError when no JSON object can be recovered. Truncated
    payloads are not repaired: a cut-off resume must not pass as complete.
    """
    if text is None:
        raise ValueError("No JSON text to parse")
    text = text.strip()

    try:
        return _require_object(json.loads(text))
    except json.JSONDecodeError:
        pass

    stripped = strip_code_fences(text)
    if stripped != text:
        try:
            return _require_object(json.loads(stripped))
        except json.JSONDecodeError:
            pass

    result = _extract_braces(stripped)
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON object from text: {text[:200]}")


def _require_object(value: object) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def strip_code_fences(text: str) -> str:
    lines = text.split("\n")

    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]

    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]

    return "\n".join(lines).strip()


def _extract_braces(text: str) -> dict | None:
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        try:
            value = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            return None
        if isinstance(value, dict):
            return value
    return None
