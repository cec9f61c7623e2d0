"""
Structured Extractor - Turn free-form model output into typed records

Every function here is pure and fails closed: it either returns a complete
value (possibly a sentinel or an empty list) or raises ParseError /
ValidationError. Nothing partially valid is ever returned.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

from codepilot.models.chat import CodePart, MessagePart, TextPart

from .errors import ParseError, ValidationError

NOT_AVAILABLE = "Not available"

# Whole response wrapped in one fence, optionally tagged (```json)
_WRAPPING_FENCE = re.compile(r"\A```[\w+#.-]*[ \t]*\n?(.*?)\n?[ \t]*```\Z", re.DOTALL)

# Opening fence, optional tag only when a newline follows, lazy body, closing fence
_FENCED_SPAN = re.compile(r"```(?:([\w+#.-]*)\n)?(.*?)```", re.DOTALL)

# Any line made of a fence with an optional tag
_FENCE_LINE = re.compile(r"^[ \t]*```[\w+#.-]*[ \t]*$\n?", re.MULTILINE)

_NUMBERED_ITEM = re.compile(r"^\s*\d+\.\s*(.*)$")
_BULLET_ITEM = re.compile(r"^\s*[-*+•]\s+(.*)$")


# ========== Helpers ==========


def strip_emphasis(value: str) -> str:
    """Remove markdown emphasis markers around and inside a scalar value"""
    value = value.replace("**", "").replace("__", "")
    return value.strip().strip("*_`").strip()


def unwrap_fenced_block(raw: str) -> str:
    """Return the body of a fence that wraps the whole text, else the stripped text"""
    text = raw.strip()
    match = _WRAPPING_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


# ========== JSON Mode ==========


def parse_json_record(raw: str | None, required_fields: Iterable[str]) -> dict[str, Any]:
    """Parse a (possibly fenced) JSON object and check its top-level fields"""
    if not raw or not raw.strip():
        raise ParseError("Empty response, expected a JSON object")

    body = unwrap_fenced_block(raw)
    try:
        record = json.loads(body)
    except json.JSONDecodeError as e:
        raise ParseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(record, dict):
        raise ValidationError(f"Expected a JSON object, got {type(record).__name__}")

    missing = [name for name in required_fields if name not in record]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing=missing)

    return record


# ========== Labeled Mode ==========


def parse_labeled_fields(raw: str | None, labels: Iterable[str]) -> dict[str, str]:
    """Read 'Label: value' scalars; a missing label yields NOT_AVAILABLE"""
    text = raw or ""
    values: dict[str, str] = {}
    for label in labels:
        match = re.search(re.escape(label) + r"[ \t]*([^\n]*)", text)
        value = strip_emphasis(match.group(1)) if match else ""
        values[label] = value or NOT_AVAILABLE
    return values


def parse_labeled_list(raw: str | None, label: str) -> list[str]:
    """Collect the bullet lines following a heading, up to the next heading"""
    text = raw or ""
    start = text.find(label)
    if start < 0:
        return []

    # Skip the remainder of the heading line itself
    newline = text.find("\n", start + len(label))
    if newline < 0:
        return []

    items: list[str] = []
    for line in text[newline + 1 :].splitlines():
        if not line.strip():
            continue
        match = _BULLET_ITEM.match(line)
        if not match:
            break
        item = strip_emphasis(match.group(1))
        if item:
            items.append(item)
    return items


# ========== List Mode ==========


def parse_numbered_list(raw: str | None) -> list[str]:
    """Keep '1. foo' style lines, stripped of their numbering"""
    items: list[str] = []
    for line in (raw or "").splitlines():
        match = _NUMBERED_ITEM.match(line)
        if not match:
            continue
        item = match.group(1).strip()
        if item:
            items.append(item)
    return items


# ========== Segment Mode ==========


def segment(raw: str | None) -> list[MessagePart]:
    """Split text into ordered Text and Code parts along triple-backtick fences"""
    text = raw or ""
    parts: list[MessagePart] = []
    cursor = 0

    for match in _FENCED_SPAN.finditer(text):
        before = text[cursor : match.start()]
        if before:
            parts.append(TextPart(content=before))
        parts.append(CodePart(content=match.group(2), language_hint=match.group(1) or ""))
        cursor = match.end()

    # Trailing prose, including an unterminated fence
    tail = text[cursor:]
    if tail:
        parts.append(TextPart(content=tail))
    return parts


def strip_code_fences(raw: str | None) -> str:
    """Drop every fence line (opening with its tag, and closing) and trim"""
    text = _FENCE_LINE.sub("", raw or "")
    # Fences glued to code on the same line
    text = re.sub(r"```[\w+#.-]*", "", text)
    return text.strip()
