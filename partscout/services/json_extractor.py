"""Recover JSON values from free-form model output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


class MalformedExtraction(ValueError):
    """Raised when no JSON value can be recovered from text."""


def extract_json(text: str) -> Any:
    """Extract the first complete JSON object or array from text.

    Fenced ``json`` blocks win. Otherwise each ``{`` or ``[`` is matched to its
    balanced closer in order of appearance until a span parses, so prose
    before, after, or in brackets ahead of the value is ignored.

    Args:
        text: Raw response text.

    Returns:
        Parsed JSON value.

    Raises:
        MalformedExtraction: If no balanced, valid value is present.
    """

    trimmed = (text or "").strip()

    fenced = _parse_fenced_block(trimmed)
    if fenced is not None:
        return fenced

    failure = "No JSON object or array found in response"
    for start, char in enumerate(trimmed):
        if char not in _CLOSERS:
            continue
        span = _balanced_span(trimmed, start)
        if span is None:
            failure = "No matching closing bracket found in response"
            continue
        try:
            return json.loads(span)
        except json.JSONDecodeError as exc:
            failure = f"Extracted span is not valid JSON: {exc}"
    raise MalformedExtraction(failure)


def extract_json_object_span(text: str) -> Any:
    """Parse the text between the first ``{`` and the last ``}``.

    Args:
        text: Raw response text.

    Returns:
        Parsed JSON value.

    Raises:
        MalformedExtraction: If no object span exists or it does not parse.
    """

    trimmed = (text or "").strip()
    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start == -1 or end == -1 or start >= end:
        raise MalformedExtraction("No JSON object span found in response")
    try:
        return json.loads(trimmed[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedExtraction(f"Object span is not valid JSON: {exc}") from exc


def preview(text: str, limit: int = 300) -> str:
    """Collapse whitespace and clip text for log lines."""

    collapsed = " ".join((text or "").split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[:limit] + "..."


def _parse_fenced_block(text: str) -> Any | None:
    for match in _FENCE_PATTERN.finditer(text):
        body = match.group(1).strip()
        if not body or body[0] not in _CLOSERS:
            continue
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            logger.debug("Fenced block did not parse; falling back to brace scan")
            return None
    return None


def _balanced_span(text: str, start: int) -> str | None:
    opener = text[start]
    closer = _CLOSERS[opener]
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    return None
