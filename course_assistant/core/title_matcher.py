"""
Title matching.

Token-set Jaccard similarity between a query and course titles. Ranking is
deliberately permissive (it only feeds hints to the model); direct-mention
detection is stricter because it triggers hard policy actions such as refusing
to talk about a closed course.

Dependencies: course_assistant.core.normalizer
System role: Fuzzy course resolution
"""

from collections.abc import Iterable

from pydantic import BaseModel

from course_assistant.core.normalizer import normalize, tokens
from course_assistant.models.course import Course

DIRECT_MATCH_THRESHOLD = 0.72
OVERLAP_MATCH_THRESHOLD = 0.55
OVERLAP_MIN_SHARED_TOKENS = 2


class TitleMatch(BaseModel):
    """Ranked title candidate."""

    id: str
    title: str
    score: float


def _jaccard(a: set[str], b: set[str]) -> tuple[float, int]:
    if not a or not b:
        return 0.0, 0
    shared = len(a & b)
    return shared / len(a | b), shared


def similarity(a: object, b: object) -> float:
    """
    Jaccard similarity of the normalized token sets of ``a`` and ``b``.

    Returns:
        float: Score in [0, 1]; 0 when either side has no tokens
    """
    score, _ = _jaccard(tokens(a), tokens(b))
    return score


def top_matches(courses: Iterable[Course], query: str, k: int = 3) -> list[TitleMatch]:
    """
    Rank courses by title similarity to ``query``.

    Ties keep catalog order (``sorted`` is stable).

    Args:
        courses: Courses in catalog order
        query: Free-text user message
        k: Number of candidates to keep

    Returns:
        list[TitleMatch]: Best ``k`` candidates, highest score first
    """
    query_tokens = tokens(query)
    scored = [
        TitleMatch(id=course.id, title=course.title, score=_jaccard(tokens(course.title), query_tokens)[0])
        for course in courses
    ]
    return sorted(scored, key=lambda match: match.score, reverse=True)[:k]


def is_direct_mention(query: str, title: str) -> bool:
    """
    Decide whether ``query`` unambiguously names the course ``title``.

    True when the normalized title appears inside the normalized query, when
    token overlap is very high, or when at least two tokens are shared with a
    fairly high overlap. A single shared generic word is never enough.
    """
    normalized_title = normalize(title)
    if normalized_title and normalized_title in normalize(query):
        return True

    score, shared = _jaccard(tokens(query), set(normalized_title.split()))
    if score >= DIRECT_MATCH_THRESHOLD:
        return True
    return shared >= OVERLAP_MIN_SHARED_TOKENS and score >= OVERLAP_MATCH_THRESHOLD


def resolve_direct_mention(courses: Iterable[Course], query: str) -> Course | None:
    """
    Pick the course the query names, if any.

    When several titles qualify ("curso de costura" inside "curso de costura
    avanzada") the most specific one wins: longest normalized title, then
    highest similarity, then catalog order.
    """
    best: Course | None = None
    best_key: tuple[int, float] | None = None
    for course in courses:
        if not is_direct_mention(query, course.title):
            continue
        key = (len(course.normalized_title), similarity(query, course.title))
        if best_key is None or key > best_key:
            best, best_key = course, key
    return best
