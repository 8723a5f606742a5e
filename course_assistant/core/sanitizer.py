"""
Sanitization of catalog and conversation text.

Catalog text and user messages are rendered as HTML and pasted into model
prompts, so markup-sensitive characters are neutralized before either happens.

Dependencies: re (stdlib)
System role: Ingestion-time text hygiene
"""

import re

_ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
    "{": "&#123;",
    "}": "&#125;",
}
_UNSAFE = re.compile(r"[<>\"'{}]")
_WHITESPACE = re.compile(r"\s+")

ELLIPSIS = "…"


def sanitize(value: object) -> str:
    """
    Neutralize HTML/template characters and collapse whitespace.

    Args:
        value: Raw value (``None`` becomes "")

    Returns:
        str: Single-line escaped text
    """
    if value is None:
        return ""
    text = _UNSAFE.sub(lambda m: _ENTITIES[m.group(0)], str(value))
    return _WHITESPACE.sub(" ", text).strip()


def clamp(value: object, max_chars: int = 1200) -> str:
    """Truncate text to ``max_chars`` characters, marking the cut with an ellipsis."""
    text = "" if value is None else str(value)
    if len(text) > max_chars:
        return text[:max_chars] + ELLIPSIS
    return text
