"""
Response rendering.

Turns a classified intent into templated answer blocks. Course answers start
with "En el curso <title>, ..." and carry exactly one requested fact; listings
show at most ``listing_limit`` entries with a neutral "más info" link and a
sign-up link only when enrollment is open.

``render`` returns None when no template applies. The caller then asks the
language model and feeds its text back through ``parse_generated`` so that
both paths end in the same block representation.

Dependencies: re (stdlib), course_assistant.core.policy_engine
System role: Deterministic answer templates and generated-text parsing
"""

import re
from collections.abc import Iterable

from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.normalizer import normalize
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.models.course import Course, LifecycleState
from course_assistant.models.intent import Intent, IntentType
from course_assistant.models.rendering import (
    BlockKind,
    Link,
    LinkKind,
    RenderedBlock,
    ResponseDocument,
)
from course_assistant.models.session import OfferedCourse

NO_DATE = "sin fecha confirmada"

_BOLD_DATE = re.compile(r"\*\*(\d{1,2}\s+de\s+[^\W\d_]+)\*\*", re.IGNORECASE)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(((?:https?://|/)[^)\s]+)\)")
_ANCHOR_TAG = re.compile(r"<a\b[^>]*>", re.IGNORECASE)
_HREF_ATTR = re.compile(r"""\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""", re.IGNORECASE)
_CANONICAL_HREF = re.compile(r'<a href="([^"]+)"')
_BARE_URL = re.compile(r"\bhttps?://[^\s<>\"'()\[\]]+", re.IGNORECASE)
_URL_TAIL = r"[^\s<>\"'()\[\]]*"
_TRAILING_PUNCTUATION = ".,;:!?"


def anchor(url: str, label: str) -> str:
    return f'<a href="{url}" target="_blank" rel="noopener">{label}</a>'


def _sentence(text: str) -> str:
    text = text.strip()
    return text if text.endswith((".", "!", "?")) else f"{text}."


def markdown_to_html(text: str) -> str:
    """Convert the light markdown models tend to emit into the HTML the UI expects."""
    text = _BOLD_DATE.sub(r"\1", text)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return _MARKDOWN_LINK.sub(lambda m: anchor(m.group(2), m.group(1)), text)


def _canonical_anchor(match: re.Match) -> str:
    tag = match.group(0)
    href = _HREF_ATTR.search(tag)
    if href is None:
        return " ".join(tag.split())
    url = next(value for value in href.groups() if value is not None).strip()
    return f'<a href="{url.replace(chr(34), "%22")}" target="_blank" rel="noopener">'


def canonicalize_anchors(text: str) -> str:
    """Rewrite every opening <a> tag, however quoted or wrapped, as one-line ``<a href="...">``."""
    return _ANCHOR_TAG.sub(_canonical_anchor, text)


class ResponseRenderer:
    """Deterministic templates for every intent that has one."""

    def __init__(
        self,
        catalog: CourseCatalog,
        policy: PolicyEngine,
        listing_limit: int = 5,
    ) -> None:
        self._catalog = catalog
        self._policy = policy
        self._listing_limit = listing_limit
        hosts = "|".join(re.escape(pattern) for pattern in policy.enrollment_link_patterns)
        # Form hosts are matched with or without a scheme.
        self._form_url = (
            re.compile(rf"(?:https?://)?[\w.-]*?(?:{hosts}){_URL_TAIL}", re.IGNORECASE) if hosts else None
        )

    def render(
        self,
        intent: Intent,
        last_offered: OfferedCourse | None = None,
    ) -> ResponseDocument | None:
        """
        Render an intent.

        Args:
            intent: Classified intent
            last_offered: Course whose link was last shown in this session

        Returns:
            ResponseDocument | None: Answer, or None when the model should answer
        """
        if intent.type == IntentType.UNKNOWN:
            return None
        if intent.type == IntentType.TOPIC_LISTING:
            return self._topic_listing(intent.available_now)
        if intent.type == IntentType.LOCALITY_LISTING:
            return self._locality_listing(intent.locality or "", intent.locality_text)
        if intent.type == IntentType.ENROLLMENT_GENERAL:
            return self._enrollment_general(last_offered)

        course = self._catalog.get(intent.course_id) if intent.course_id else None
        if course is None:
            return None
        if intent.type == IntentType.GENERAL_INFO and intent.open_ended:
            return None
        return self._course_answer(intent.type, course)

    # Course answers

    def _course_answer(self, intent_type: IntentType, course: Course) -> ResponseDocument:
        decision = self._policy.decide(course)
        if decision.refusal is not None:
            return self._policy.refusal_document(course)

        if intent_type == IntentType.ENROLLMENT_LINK:
            return ResponseDocument(blocks=(self._enrollment_block(course),))
        if intent_type == IntentType.GENERAL_INFO:
            return ResponseDocument(blocks=self._course_card(course))

        block = self._fact_block(intent_type, course)
        blocks = [block]
        if decision.status_note:
            blocks.append(RenderedBlock(text=decision.status_note, kind=BlockKind.NOTICE, course_id=course.id))
        return ResponseDocument(blocks=tuple(blocks))

    def _preamble(self, course: Course) -> str:
        return f"En el curso <strong>{course.title}</strong>, "

    def _enrollment_block(self, course: Course) -> RenderedBlock:
        if self._policy.may_show_enrollment_link(course):
            url = course.enrollment_form_url
            return RenderedBlock(
                text=f"{self._preamble(course)}te podés inscribir acá: {anchor(url, 'inscribirte')}.",
                course_id=course.id,
                links=(Link(url=url, kind=LinkKind.ENROLLMENT),),
            )
        if course.state == LifecycleState.ENROLLMENT_OPEN:
            text = f"{self._preamble(course)}la inscripción está abierta pero el formulario todavía no está publicado."
        else:
            text = self._policy.closed_enrollment_line(course)
        return RenderedBlock(text=text, kind=BlockKind.NOTICE, course_id=course.id)

    def _fact_block(self, intent_type: IntentType, course: Course) -> RenderedBlock:
        pre = self._preamble(course)

        if intent_type == IntentType.SCHEDULE:
            if course.day_schedule:
                text = f"{pre}los días y horarios son: {'; '.join(course.day_schedule)}."
            else:
                text = f"{pre}no hay horario publicado."
            if course.weekly_frequency and course.weekly_frequency != "otro":
                text += f" Frecuencia semanal: {course.weekly_frequency}."
            if course.class_hours:
                text += f" Duración de cada clase: {' / '.join(course.class_hours)} h."
        elif intent_type == IntentType.REQUIREMENTS:
            items = course.requirements.listed()
            if items:
                text = f"{pre}los requisitos son: {', '.join(items)}."
            else:
                text = f"{pre}no hay requisitos publicados."
        elif intent_type == IntentType.MATERIALS:
            parts = []
            if course.materials.student_provided:
                parts.append(f"el estudiante aporta: {', '.join(course.materials.student_provided)}")
            if course.materials.course_provided:
                parts.append(f"el curso entrega: {', '.join(course.materials.course_provided)}")
            text = f"{pre}{'; '.join(parts)}." if parts else f"{pre}no hay materiales publicados."
        elif intent_type == IntentType.LOCATION:
            if course.localities:
                text = f"{pre}se dicta en: {', '.join(course.localities)}."
                if course.addresses:
                    text += f" Dirección: {'; '.join(course.addresses)}."
            else:
                text = f"{pre}todavía no hay sede confirmada."
        elif intent_type == IntentType.START_DATE:
            if course.start_date_readable:
                text = f"{pre}se inicia el {course.start_date_readable}."
            else:
                text = f"{pre}fecha de inicio: {NO_DATE}."
        elif intent_type == IntentType.END_DATE:
            if course.end_date_readable:
                text = f"{pre}finaliza el {course.end_date_readable}."
            else:
                text = f"{pre}fecha de finalización: {NO_DATE}."
        elif intent_type == IntentType.DURATION:
            text = f"{pre}la duración total es: {course.total_duration or 'no está publicada'}."
        else:
            reference = self._policy.reference_link(course)
            return RenderedBlock(
                text=f"{pre}esa información no está publicada. Podés ver la ficha del curso {anchor(reference, 'acá')}.",
                course_id=course.id,
                links=(Link(url=reference, kind=LinkKind.REFERENCE),),
            )
        return RenderedBlock(text=text, course_id=course.id)

    def _course_card(self, course: Course) -> tuple[RenderedBlock, ...]:
        description = course.short_description or course.full_description
        summary = _sentence(description) if description else "no hay descripción publicada."
        localities = ", ".join(course.localities) or "sin sede confirmada"
        reference = self._policy.reference_link(course)
        return (
            RenderedBlock(text=f"{self._preamble(course)}{summary}", course_id=course.id),
            RenderedBlock(
                text=(
                    f"Inicio: {course.start_date_readable or NO_DATE}. "
                    f"Fin: {course.end_date_readable or NO_DATE}. "
                    f"Sede: {localities}. Estado: {self._policy.label(course)}."
                ),
                course_id=course.id,
            ),
            self._enrollment_block(course),
            RenderedBlock(
                text=f"Más información {anchor(reference, 'aquí')}.",
                course_id=course.id,
                links=(Link(url=reference, kind=LinkKind.REFERENCE),),
            ),
        )

    # Listings

    def _listing_entry(self, course: Course) -> RenderedBlock:
        reference = self._policy.reference_link(course)
        text = (
            f"<strong>{course.title}</strong> ({self._policy.label(course)}) · "
            f"{anchor(reference, 'más info')}"
        )
        links = [Link(url=reference, kind=LinkKind.REFERENCE)]
        if self._policy.may_show_enrollment_link(course):
            text += f" · {anchor(course.enrollment_form_url, 'Inscribirme')}"
            links.append(Link(url=course.enrollment_form_url, kind=LinkKind.ENROLLMENT))
        return RenderedBlock(text=text, kind=BlockKind.LISTING_ENTRY, course_id=course.id, links=tuple(links))

    def _listing(self, header: str, courses: list[Course], empty: str) -> ResponseDocument:
        if not courses:
            return ResponseDocument(blocks=(RenderedBlock(text=empty, kind=BlockKind.NOTICE),))

        # Open enrollment first; sorted() keeps catalog order within each group
        ordered = sorted(courses, key=lambda c: c.state != LifecycleState.ENROLLMENT_OPEN)
        shown = ordered[: self._listing_limit]
        blocks = [RenderedBlock(text=header, kind=BlockKind.LISTING_HEADER)]
        blocks.extend(self._listing_entry(course) for course in shown)
        remaining = len(ordered) - len(shown)
        if remaining > 0:
            blocks.append(
                RenderedBlock(
                    text=f"Y {remaining} curso(s) más. Preguntame por uno en particular.",
                    kind=BlockKind.NOTICE,
                )
            )
        return ResponseDocument(blocks=tuple(blocks))

    def _listable(self) -> list[Course]:
        return [course for course in self._catalog if self._policy.is_listable(course)]

    def _open_courses(self) -> list[Course]:
        return [course for course in self._listable() if course.state == LifecycleState.ENROLLMENT_OPEN]

    def _topic_listing(self, available_now: bool) -> ResponseDocument:
        if available_now:
            return self._listing(
                "Estos cursos tienen la inscripción abierta:",
                self._open_courses(),
                "Por ahora no hay cursos con inscripción abierta.",
            )
        return self._listing(
            "Estos son los cursos disponibles:",
            self._listable(),
            "Por ahora no hay cursos disponibles.",
        )

    def _locality_listing(self, locality: str, written: str | None = None) -> ResponseDocument:
        wanted = normalize(locality)
        matches: list[Course] = []
        display = ""
        for course in self._listable():
            for name in course.localities:
                normalized = normalize(name)
                if wanted and normalized and (normalized in wanted or wanted in normalized):
                    matches.append(course)
                    display = display or name
                    break

        if matches:
            return self._listing(f"Cursos disponibles en {display}:", matches, "")

        shown_name = (written or locality).strip() or "esa localidad"
        text = f"No encontré cursos disponibles en {shown_name}."
        nearby = self._localities_with_courses()
        if nearby:
            text += f" Hay cursos en: {', '.join(nearby)}."
        return ResponseDocument(blocks=(RenderedBlock(text=text, kind=BlockKind.NOTICE),))

    def _localities_with_courses(self) -> list[str]:
        names: list[str] = []
        seen: set[str] = set()
        for course in self._listable():
            for name in course.localities:
                key = normalize(name)
                if key and key not in seen:
                    seen.add(key)
                    names.append(name)
        return names[: self._listing_limit]

    def _enrollment_general(self, last_offered: OfferedCourse | None) -> ResponseDocument:
        if last_offered is not None:
            course = self._catalog.get(last_offered.course_id)
            if course is not None and self._policy.may_show_enrollment_link(course):
                url = course.enrollment_form_url
                return ResponseDocument(
                    blocks=(
                        RenderedBlock(
                            text=f"{anchor(url, 'Formulario de inscripción')} del curso <strong>{course.title}</strong>.",
                            course_id=course.id,
                            links=(Link(url=url, kind=LinkKind.ENROLLMENT),),
                        ),
                    )
                )
        return self._listing(
            "Estos cursos tienen la inscripción abierta:",
            self._open_courses(),
            "Por ahora no hay cursos con inscripción abierta.",
        )

    # Generated text

    def parse_generated(self, text: str) -> ResponseDocument:
        """
        Split model output into blocks with course and link metadata.

        Anchors are normalized over the whole text first, so a tag wrapped
        across lines still lands in one block. Each non-empty line then
        becomes a block. The block's course is the most specific catalog title
        it mentions; every URL found in the line (anchor targets, bare URLs
        and form-host addresses without a scheme) is recorded as a link.
        """
        html_text = canonicalize_anchors(markdown_to_html(text.strip()))
        blocks = [
            RenderedBlock(
                text=line,
                kind=BlockKind.GENERATED,
                course_id=self._mentioned_course_id(line),
                links=tuple(self._links_in(line)),
            )
            for line in (raw.strip() for raw in html_text.splitlines())
            if line
        ]
        return ResponseDocument(blocks=tuple(blocks), generated=True, separator="\n")

    def _links_in(self, line: str) -> Iterable[Link]:
        found = _BARE_URL.findall(line)
        if self._form_url is not None:
            found += self._form_url.findall(line)
        urls = _CANONICAL_HREF.findall(line) + [url.rstrip(_TRAILING_PUNCTUATION) for url in found]
        seen: set[str] = set()
        for url in urls:
            if url and url not in seen:
                seen.add(url)
                yield Link(url=url, kind=self._policy.classify_link(url))

    def _mentioned_course_id(self, line: str) -> str | None:
        normalized_line = normalize(re.sub(r"<[^>]+>", " ", line))
        best: Course | None = None
        for course in self._catalog:
            title = course.normalized_title
            if title and title in normalized_line:
                if best is None or len(title) > len(best.normalized_title):
                    best = course
        return best.id if best else None
