"""
OpenAI helper utilities.

Message sanitizing for outgoing requests and normalization of the loosely
structured text that comes back.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List

from everything_converter.models.conversion import (
    AnswerParse,
    ConversionAnswer,
    ParsedAnswer,
    UnparsedAnswer,
)

_OPENING_FENCE = re.compile(r"^`{3,4}[\w+-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?`{3,4}\s*$")


def sanitize_messages(messages: Iterable[Any]) -> List[Dict[str, str]]:
    """
    Ensure every message payload sent to the Chat API is a plain role/content dict.

    Args:
        messages: Iterable of message dicts or pydantic models.

    Returns:
        List of sanitized message dicts safe to send upstream.
    """
    sanitized: List[Dict[str, str]] = []

    for msg in messages or []:
        if msg is None:
            continue

        if hasattr(msg, "model_dump"):
            msg_copy = msg.model_dump()
        else:
            msg_copy = dict(msg)
        content = msg_copy.get("content")

        if content is None or content == "":
            # Skip messages with no content - upstream rejects empty strings
            continue

        if isinstance(content, (dict, list)):
            try:
                content = json.dumps(content)
            except (TypeError, ValueError):
                content = str(content)
        elif not isinstance(content, str):
            content = str(content)

        sanitized.append({"role": msg_copy.get("role", "user"), "content": content})

    return sanitized


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` or ```` fence (with optional language tag)."""
    if not text:
        return ""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPENING_FENCE.sub("", stripped, count=1)
        stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value) if isinstance(value, (dict, list)) else str(value)


def parse_conversion_answer(text: str) -> AnswerParse:
    """
    Parse model output against the ``{"result", "explanation"}`` contract.

    Returns:
        ParsedAnswer when the text is a JSON object with at least one
        non-empty field, otherwise UnparsedAnswer carrying the cleaned text.
    """
    cleaned = strip_code_fences(text or "")
    try:
        data = json.loads(cleaned)
    except ValueError:
        return UnparsedAnswer(raw_text=cleaned)

    if not isinstance(data, dict):
        return UnparsedAnswer(raw_text=cleaned)

    result = _as_text(data.get("result"))
    explanation = _as_text(data.get("explanation"))
    if not result and not explanation:
        return UnparsedAnswer(raw_text=cleaned)

    return ParsedAnswer(answer=ConversionAnswer(result=result, explanation=explanation))


def normalize_answer(text: str) -> ConversionAnswer:
    """Always produce a two-field answer, whatever the model returned."""
    return parse_conversion_answer(text).to_answer()
