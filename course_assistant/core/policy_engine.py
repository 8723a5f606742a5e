"""
Disclosure policy.

Single source of truth for what may be said about a course given its
lifecycle state:

- inscripcion_abierta: full detail, enrollment link allowed
- proximo: full detail, no link, always states enrollment is not open yet
- en_curso / finalizado: a fixed one-line refusal when named directly; never
  listed, never offered a sign-up call to action

``enforce`` is the last step of every turn. It treats the answer as untrusted
(the language model in particular) and removes any enrollment link that does
not belong to a course with open enrollment, rewriting the sentence around it.

Dependencies: pydantic, course_assistant.core.catalog
System role: Policy enforcement
"""

import logging
import re
from urllib.parse import quote, urlsplit

from pydantic import BaseModel, ConfigDict

from course_assistant.configs.catalog import DEFAULT_ENROLLMENT_LINK_PATTERNS
from course_assistant.core.catalog import CourseCatalog
from course_assistant.models.course import Course, LifecycleState
from course_assistant.models.rendering import (
    BlockKind,
    Link,
    LinkKind,
    RenderedBlock,
    ResponseDocument,
)

logger = logging.getLogger(__name__)

STATE_LABELS = {
    LifecycleState.ENROLLMENT_OPEN: "Inscripción abierta",
    LifecycleState.UPCOMING: "Próximamente",
    LifecycleState.IN_PROGRESS: "En cursada",
    LifecycleState.FINISHED: "Finalizado",
}

REFUSAL_TEMPLATES = {
    LifecycleState.IN_PROGRESS: (
        'El curso <strong>{title}</strong> está en cursada, no admite nuevas inscripciones. '
        'Más información <a href="{link}">aquí</a>.'
    ),
    LifecycleState.FINISHED: (
        'El curso <strong>{title}</strong> ya finalizó, no podés inscribirte. '
        'Más información <a href="{link}">aquí</a>.'
    ),
}

NOT_YET_OPEN_TEMPLATE = "En el curso <strong>{title}</strong>, la inscripción aún no está habilitada."
NOT_YET_OPEN_GENERIC = "La inscripción para ese curso aún no está habilitada."

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


class DisclosureDecision(BaseModel):
    """What may be disclosed about one course."""

    model_config = ConfigDict(frozen=True)

    state: LifecycleState
    label: str
    may_link: bool
    full_detail: bool
    listable: bool
    refusal: str | None = None
    status_note: str | None = None


class PolicyEngine:
    """Lifecycle-keyed disclosure rules and post-hoc answer filtering."""

    def __init__(
        self,
        catalog: CourseCatalog,
        reference_year: int = 2025,
        enrollment_link_patterns: list[str] | None = None,
    ) -> None:
        self._catalog = catalog
        self._reference_year = reference_year
        self._patterns = [
            pattern.lower()
            for pattern in (enrollment_link_patterns or DEFAULT_ENROLLMENT_LINK_PATTERNS)
        ]

    @property
    def enrollment_link_patterns(self) -> list[str]:
        """Lowercased host/path fragments of form-hosting services."""
        return list(self._patterns)

    def reference_link(self, course: Course) -> str:
        """Neutral "more info" link for a course."""
        return f"/curso/{quote(course.id, safe='')}?y={self._reference_year}"

    def label(self, course: Course) -> str:
        return STATE_LABELS[course.state]

    def is_listable(self, course: Course) -> bool:
        """Only open and upcoming courses appear in listings."""
        return not course.state.is_closed

    def may_show_enrollment_link(self, course: Course) -> bool:
        return course.state == LifecycleState.ENROLLMENT_OPEN and bool(course.enrollment_form_url)

    def refusal_for(self, course: Course) -> str | None:
        """Fixed one-line answer for closed courses, None otherwise."""
        template = REFUSAL_TEMPLATES.get(course.state)
        if template is None:
            return None
        return template.format(title=course.title, link=self.reference_link(course))

    def refusal_document(self, course: Course) -> ResponseDocument | None:
        refusal = self.refusal_for(course)
        if refusal is None:
            return None
        block = RenderedBlock(
            text=refusal,
            kind=BlockKind.REFUSAL,
            course_id=course.id,
            links=(Link(url=self.reference_link(course), kind=LinkKind.REFERENCE),),
        )
        return ResponseDocument(blocks=(block,))

    def decide(self, course: Course) -> DisclosureDecision:
        """Disclosure decision for ``course``."""
        upcoming = course.state == LifecycleState.UPCOMING
        return DisclosureDecision(
            state=course.state,
            label=self.label(course),
            may_link=self.may_show_enrollment_link(course),
            full_detail=not course.state.is_closed,
            listable=self.is_listable(course),
            refusal=self.refusal_for(course),
            status_note=NOT_YET_OPEN_TEMPLATE.format(title=course.title) if upcoming else None,
        )

    def closed_enrollment_line(self, course: Course | None) -> str:
        """Sentence that replaces a suppressed enrollment link."""
        if course is None or course.state == LifecycleState.ENROLLMENT_OPEN:
            return NOT_YET_OPEN_GENERIC
        refusal = self.refusal_for(course)
        if refusal is not None:
            return refusal
        return NOT_YET_OPEN_TEMPLATE.format(title=course.title)

    def is_enrollment_url(self, url: str) -> bool:
        """True for form-hosting URLs and for any catalog course's form URL."""
        if self._catalog.find_by_form_url(url) is not None:
            return True
        parts = urlsplit(url.strip())
        target = f"{parts.netloc}{parts.path}".lower()
        return any(pattern in target for pattern in self._patterns)

    def classify_link(self, url: str) -> LinkKind:
        if self.is_enrollment_url(url):
            return LinkKind.ENROLLMENT
        if url.startswith("/curso/"):
            return LinkKind.REFERENCE
        return LinkKind.OTHER

    def link_owner(self, link: Link) -> Course | None:
        """Course whose enrollment form ``link`` points to."""
        return self._catalog.find_by_form_url(link.url)

    def _link_allowed(self, link: Link) -> bool:
        if link.kind != LinkKind.ENROLLMENT and not self.is_enrollment_url(link.url):
            return True
        owner = self.link_owner(link)
        return owner is not None and self.may_show_enrollment_link(owner)

    def offered_courses(self, document: ResponseDocument) -> list[Course]:
        """Distinct open courses whose enrollment link made it into ``document``."""
        offered: list[Course] = []
        for block in document.blocks:
            for link in block.enrollment_links():
                owner = self.link_owner(link)
                if owner is not None and self.may_show_enrollment_link(owner) and owner not in offered:
                    offered.append(owner)
        return offered

    def enforce(self, document: ResponseDocument) -> ResponseDocument:
        """
        Filter an answer against the disclosure policy.

        Drops listing entries for closed courses and rewrites every sentence
        carrying an enrollment link whose course is not open (or unknown).

        Args:
            document: Rendered or generated answer

        Returns:
            ResponseDocument: Answer safe to release
        """
        blocks: list[RenderedBlock] = []
        for block in document.blocks:
            course = self._catalog.get(block.course_id) if block.course_id else None

            if block.kind == BlockKind.LISTING_ENTRY and course is not None and not self.is_listable(course):
                logger.warning("Dropped listing entry for closed course", extra={"course_id": course.id})
                continue

            forbidden = [link for link in block.links if not self._link_allowed(link)]
            if not forbidden:
                blocks.append(block)
                continue

            logger.warning(
                "Suppressed %d enrollment link(s)",
                len(forbidden),
                extra={"course_id": block.course_id, "generated": document.generated},
            )
            blocks.append(self._rewrite(block, forbidden, course))

        return document.model_copy(update={"blocks": tuple(blocks)})

    def _rewrite(
        self,
        block: RenderedBlock,
        forbidden: list[Link],
        block_course: Course | None,
    ) -> RenderedBlock:
        sentences: list[str] = []
        added: list[Link] = []
        for sentence in _SENTENCE_SPLIT.split(block.text):
            hits = [link for link in forbidden if link.url in sentence]
            if not hits:
                sentences.append(sentence)
                continue
            owner = self.link_owner(hits[0]) or block_course
            replacement = self.closed_enrollment_line(owner)
            if replacement in sentences:
                continue
            sentences.append(replacement)
            if owner is not None and owner.state.is_closed:
                added.append(Link(url=self.reference_link(owner), kind=LinkKind.REFERENCE))

        kept_links = tuple(link for link in block.links if link not in forbidden) + tuple(added)
        return block.model_copy(update={"text": " ".join(sentences), "links": kept_links})
