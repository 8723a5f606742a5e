"""
Rule-based intent classification.

Maps a user message, plus the course it directly mentions (if any), to one
intent. Rules are evaluated top to bottom and the first match wins; the order
is part of the behavior because keyword families overlap.

Course-specific keyword families are only consulted once a direct title
mention is established, so generic questions that happen to share vocabulary
with a course title do not turn into course answers.

Patterns run against normalized text (lowercase, no accents, no punctuation).

Dependencies: re (stdlib), course_assistant.core.normalizer
System role: Deterministic intent classification
"""

import re
import unicodedata
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from course_assistant.core.normalizer import normalize
from course_assistant.models.course import Course
from course_assistant.models.intent import Intent, IntentType

ENROLLMENT_PATTERN = re.compile(
    r"\b(inscrib\w*|inscripcion\w*|anot\w*|registr\w*|link|enlace|formulario)\b"
)
TOPIC_LISTING_PATTERN = re.compile(
    r"\b(que cursos (hay|tienen|ofrecen|dan|dictan|estan)"
    r"|cursos (disponibles|abiertos|vigentes)"
    r"|(lista|listado|oferta) de cursos"
    r"|(cuales|que) son los cursos"
    r"|todos los cursos)\b"
)
AVAILABLE_NOW_PATTERN = re.compile(r"\b(abiert\w*|ahora|hoy)\b")
LOCALITY_PATTERN = re.compile(
    r"\bcursos(?:\s+(?:hay|disponibles|abiertos|que|tienen|dictan|dan))*"
    r"\s+(?:en|por)\s+(?:la\s+(?:localidad|ciudad|zona)\s+de\s+)?"
    r"(?P<locality>\w+(?:\s+\w+){0,4})"
)
LOCALITY_FILLER = {"por", "favor", "hay", "tienen", "disponibles", "este", "ano", "2025", "gracias"}
_WORD = re.compile(r"[^\W_]+")
OPEN_ENDED_PATTERN = re.compile(
    r"\b(contame|conta|cuentame|mas (info|informacion|detalles)|detalles"
    r"|de que se trata|que se hace|que voy a aprender|que aprendo|explica\w*)\b"
)

# Course-specific keyword families, in priority order
COURSE_KEYWORD_RULES: tuple[tuple[IntentType, re.Pattern], ...] = (
    (IntentType.ENROLLMENT_LINK, ENROLLMENT_PATTERN),
    (
        IntentType.SCHEDULE,
        re.compile(r"\b(horarios?|dias|que dias?|a que hora|cronograma|frecuencia|cuantas veces|turnos?)\b"),
    ),
    (
        IntentType.REQUIREMENTS,
        re.compile(
            r"\b(requisitos?|requiere\w*|que necesito|piden|edad|mayor de edad|mayor de 18"
            r"|secundari\w*|primari\w*|carnet|licencia de conducir|estudios)\b"
        ),
    ),
    (
        IntentType.MATERIALS,
        re.compile(r"\b(materiales?|llevar|traer|herramientas?|insumos?|utiles|elementos)\b"),
    ),
    (
        IntentType.LOCATION,
        re.compile(r"\b(donde|sedes?|direccion\w*|lugar|ubicacion|ubicado|localidad\w*)\b"),
    ),
    (
        IntentType.START_DATE,
        re.compile(r"\b(empieza|comienza|inicia|inicio|arranca|fecha de inicio)\b"),
    ),
    (
        IntentType.END_DATE,
        re.compile(r"\b(termina|finaliza|finalizacion|fecha de (fin|cierre)|hasta cuando)\b"),
    ),
    (
        IntentType.DURATION,
        re.compile(r"\b(duracion|dura|cuantas horas|cuantos (meses|dias|semanas|clases)|carga horaria)\b"),
    ),
    (
        IntentType.UNPUBLISHED_FIELD,
        re.compile(
            r"\b(precio|costo|cuesta|cuanto sale|arancel|gratis|gratuito|pagar|pago"
            r"|cupos?|vacantes?|modalidad|virtual|presencial|online|certificad\w*)\b"
        ),
    ),
)


@dataclass(frozen=True)
class Rule:
    """One classification step: when ``predicate`` holds, ``build`` the intent."""

    name: str
    predicate: Callable[[str, Course | None], bool]
    build: Callable[[str, Course | None], Intent]


def extract_locality(text: str) -> str | None:
    """Pull the locality out of "cursos en <localidad>" phrasing."""
    match = LOCALITY_PATTERN.search(normalize(text))
    if match is None:
        return None
    words = match.group("locality").split()
    while words and words[-1] in LOCALITY_FILLER:
        words.pop()
    return " ".join(words) or None


def locality_as_written(message: str, locality: str) -> str:
    """Words of ``message`` that normalize to ``locality``, keeping the user's accents and casing."""
    wanted = locality.split()
    written = _WORD.findall(unicodedata.normalize("NFC", message or ""))
    normalized = [normalize(word) for word in written]
    for start in range(len(written) - len(wanted), -1, -1):
        if normalized[start : start + len(wanted)] == wanted:
            return " ".join(written[start : start + len(wanted)])
    return locality


def classify_course_question(text: str, course: Course) -> Intent:
    """Resolve the sub-intent of a message that names ``course``."""
    for intent_type, pattern in COURSE_KEYWORD_RULES:
        if pattern.search(text):
            return Intent(type=intent_type, course_id=course.id)
    return Intent(
        type=IntentType.GENERAL_INFO,
        course_id=course.id,
        open_ended=bool(OPEN_ENDED_PATTERN.search(text)),
    )


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule(
        name="enrollment_general",
        predicate=lambda text, course: course is None and bool(ENROLLMENT_PATTERN.search(text)),
        build=lambda text, course: Intent(type=IntentType.ENROLLMENT_GENERAL),
    ),
    Rule(
        name="topic_listing",
        predicate=lambda text, course: bool(TOPIC_LISTING_PATTERN.search(text))
        and extract_locality(text) is None,
        build=lambda text, course: Intent(
            type=IntentType.TOPIC_LISTING,
            available_now=bool(AVAILABLE_NOW_PATTERN.search(text)),
        ),
    ),
    Rule(
        name="locality_listing",
        predicate=lambda text, course: extract_locality(text) is not None,
        build=lambda text, course: Intent(
            type=IntentType.LOCALITY_LISTING,
            locality=extract_locality(text),
        ),
    ),
    Rule(
        name="course_question",
        predicate=lambda text, course: course is not None,
        build=classify_course_question,
    ),
)


class IntentClassifier:
    """Stateless, ordered rule evaluator."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rule_names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def classify(self, message: str, mentioned: Course | None = None) -> Intent:
        """
        Classify a message.

        Args:
            message: User message (normalized here; already-normalized text is fine)
            mentioned: Course the message directly names, if any

        Returns:
            Intent: First matching rule's intent, else UNKNOWN
        """
        text = normalize(message)
        for rule in self._rules:
            if rule.predicate(text, mentioned):
                intent = rule.build(text, mentioned)
                if intent.locality:
                    intent = intent.model_copy(
                        update={"locality_text": locality_as_written(message, intent.locality)}
                    )
                return intent
        return Intent(type=IntentType.UNKNOWN)
