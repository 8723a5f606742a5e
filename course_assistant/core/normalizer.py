"""
Text normalization for matching.

Canonical form used by every comparison in the matcher and classifier:
casefolded, accents removed, punctuation turned into spaces, whitespace
collapsed.

Dependencies: unicodedata (stdlib)
System role: Leaf utility for fuzzy matching
"""

import re
import unicodedata

_NON_WORD = re.compile(r"[^\w\s]|_")


def normalize(text: object) -> str:
    """
    Normalize free text for comparison.

    Total and idempotent: ``normalize(normalize(x)) == normalize(x)``.
    ``None`` maps to the empty string and other objects are stringified.

    Args:
        text: Any value, usually a user message or course title

    Returns:
        str: Normalized text
    """
    if text is None:
        return ""
    value = unicodedata.normalize("NFD", str(text).casefold())
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = _NON_WORD.sub(" ", value)
    return " ".join(value.split())


def tokens(text: object) -> set[str]:
    """Return the set of normalized whitespace-separated tokens."""
    return set(normalize(text).split())
