"""
Course domain models.

Typed, immutable view of a raw catalog record. The schema is the field
whitelist: unknown keys are dropped, free text is sanitized, list fields are
capped and the lifecycle state always resolves to a known value.

Raw records use the Spanish keys of the published catalog (``titulo``,
``estado``...). Models accept either those aliases or the attribute names and
serialize back with the aliases.

Dependencies: pydantic, course_assistant.core
System role: Catalog schema and validation
"""

from datetime import date, datetime, timezone
from enum import Enum
from functools import partial
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, computed_field

from course_assistant.core.normalizer import normalize
from course_assistant.core.sanitizer import sanitize

MAX_CLASS_HOURS = 3
MAX_DAY_SCHEDULE = 8
MAX_LOCALITIES = 12
MAX_ADDRESSES = 8
MAX_OTHER_REQUIREMENTS = 10
MAX_MATERIALS = 30

MONTHS_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


class LifecycleState(str, Enum):
    """Enrollment phase of a course."""

    ENROLLMENT_OPEN = "inscripcion_abierta"
    UPCOMING = "proximo"
    IN_PROGRESS = "en_curso"
    FINISHED = "finalizado"

    @classmethod
    def parse(cls, value: Any) -> "LifecycleState":
        """Case-insensitive lookup; anything unrecognized is UPCOMING."""
        if isinstance(value, cls):
            return value
        key = normalize(value).replace(" ", "_")
        return _STATE_ALIASES.get(key, cls.UPCOMING)

    @property
    def is_closed(self) -> bool:
        """True for states that no longer accept enrollment."""
        return self in (LifecycleState.IN_PROGRESS, LifecycleState.FINISHED)


_STATE_ALIASES = {
    "inscripcion_abierta": LifecycleState.ENROLLMENT_OPEN,
    "enrollment_open": LifecycleState.ENROLLMENT_OPEN,
    "proximo": LifecycleState.UPCOMING,
    "upcoming": LifecycleState.UPCOMING,
    "en_curso": LifecycleState.IN_PROGRESS,
    "in_progress": LifecycleState.IN_PROGRESS,
    "finalizado": LifecycleState.FINISHED,
    "finished": LifecycleState.FINISHED,
}


def _capped_list(value: Any, limit: int) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    items = (sanitize(item) for item in value if item is not None)
    return tuple(item for item in items if item)[:limit]


def _sub_record(value: Any) -> Any:
    """Nested records: dicts and model instances pass through, anything else is empty."""
    return value if isinstance(value, (dict, BaseModel)) else {}


def _parse_date(value: Any) -> date | None:
    """Accept ISO dates/datetimes; anything unparseable is treated as absent."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def _course_id(value: Any) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError("course id is required")
    return text


def _frequency(value: Any) -> str:
    return "otro" if value is None else sanitize(value)


def readable_date(value: date | None) -> str:
    """Format a date as "15 de junio" ("" when absent)."""
    if value is None:
        return ""
    return f"{value.day} de {MONTHS_ES[value.month - 1]}"


SafeText = Annotated[str, BeforeValidator(sanitize)]
Flag = Annotated[bool, BeforeValidator(bool)]
OptionalDate = Annotated[date | None, BeforeValidator(_parse_date)]


def capped_text_list(limit: int):
    """Tuple of sanitized strings truncated to ``limit`` entries."""
    return Annotated[tuple[str, ...], BeforeValidator(partial(_capped_list, limit=limit))]


class Requirements(BaseModel):
    """Published enrollment requirements."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    adult_only: Flag = Field(default=False, alias="mayor_18")
    drivers_license: Flag = Field(default=False, alias="carnet_conducir")
    primary_complete: Flag = Field(default=False, alias="primaria_completa")
    secondary_complete: Flag = Field(default=False, alias="secundaria_completa")
    other: capped_text_list(MAX_OTHER_REQUIREMENTS) = Field(default=(), alias="otros")

    def listed(self) -> list[str]:
        """Human-readable list of the requirements that apply."""
        items = []
        if self.adult_only:
            items.append("Ser mayor de 18 años")
        if self.drivers_license:
            items.append("Carnet de conducir")
        if self.primary_complete:
            items.append("Primaria completa")
        if self.secondary_complete:
            items.append("Secundaria completa")
        items.extend(self.other)
        return items


class Materials(BaseModel):
    """Materials the student brings and materials the course hands out."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    student_provided: capped_text_list(MAX_MATERIALS) = Field(default=(), alias="aporta_estudiante")
    course_provided: capped_text_list(MAX_MATERIALS) = Field(default=(), alias="entrega_curso")


class Course(BaseModel):
    """A catalog course, sanitized and immutable after load."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: Annotated[str, BeforeValidator(_course_id)]
    title: SafeText = Field(default="", alias="titulo")
    short_description: SafeText = Field(default="", alias="descripcion_breve")
    full_description: SafeText = Field(default="", alias="descripcion_completa")
    activities: SafeText = Field(default="", alias="actividades")
    total_duration: SafeText = Field(default="", alias="duracion_total")
    start_date: OptionalDate = Field(default=None, alias="fecha_inicio")
    end_date: OptionalDate = Field(default=None, alias="fecha_fin")
    weekly_frequency: Annotated[str, BeforeValidator(_frequency)] = Field(
        default="otro", alias="frecuencia_semanal"
    )
    class_hours: capped_text_list(MAX_CLASS_HOURS) = Field(default=(), alias="duracion_clase_horas")
    day_schedule: capped_text_list(MAX_DAY_SCHEDULE) = Field(default=(), alias="dias_horarios")
    localities: capped_text_list(MAX_LOCALITIES) = Field(default=(), alias="localidades")
    addresses: capped_text_list(MAX_ADDRESSES) = Field(default=(), alias="direcciones")
    requirements: Annotated[Requirements, BeforeValidator(_sub_record)] = Field(
        default_factory=Requirements, alias="requisitos"
    )
    materials: Annotated[Materials, BeforeValidator(_sub_record)] = Field(
        default_factory=Materials, alias="materiales"
    )
    enrollment_form_url: SafeText = Field(default="", alias="formulario")
    image_url: SafeText = Field(default="", alias="imagen")
    state: Annotated[LifecycleState, BeforeValidator(LifecycleState.parse)] = Field(
        default=LifecycleState.UPCOMING, alias="estado"
    )

    @computed_field(alias="fecha_inicio_legible")
    @property
    def start_date_readable(self) -> str:
        return readable_date(self.start_date)

    @computed_field(alias="fecha_fin_legible")
    @property
    def end_date_readable(self) -> str:
        return readable_date(self.end_date)

    @property
    def normalized_title(self) -> str:
        return normalize(self.title)
