"""
Shared test fixtures and configuration for entire test suite.

Provides: sample catalog records, catalog/policy/renderer instances, session
store, mocked text generator and a wired ChatService
Dependencies: pytest, unittest.mock
System role: Test infrastructure and fixture management
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from course_assistant.application.services.chat_service import ChatService
from course_assistant.application.session_store import InMemorySessionStore
from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.intent_classifier import IntentClassifier
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.core.renderer import ResponseRenderer
from course_assistant.observability.prompt_registry import PromptRegistry


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Raw catalog records covering every lifecycle state."""
    return [
        {
            "id": 1,
            "titulo": "Curso de Costura",
            "descripcion_breve": "Aprendé a confeccionar prendas básicas",
            "fecha_inicio": "2025-06-15",
            "fecha_fin": "2025-09-30",
            "frecuencia_semanal": 2,
            "duracion_clase_horas": ["3"],
            "dias_horarios": ["Lunes 18 a 21 h", "Miércoles 18 a 21 h"],
            "localidades": ["San Salvador de Jujuy"],
            "direcciones": ["Av. Belgrano 123"],
            "requisitos": {"mayor_18": True, "otros": ["DNI vigente"]},
            "materiales": {"aporta_estudiante": ["Tijera", "Hilo"], "entrega_curso": ["Tela"]},
            "formulario": "https://forms.gle/abc123",
            "estado": "inscripcion_abierta",
        },
        {
            "id": "2",
            "titulo": "Curso de Electricidad Domiciliaria",
            "descripcion_breve": "Instalaciones eléctricas seguras",
            "fecha_inicio": "2025-08-01",
            "localidades": ["Palpalá"],
            "formulario": "https://forms.gle/elec999",
            "estado": "proximo",
        },
        {
            "id": "3",
            "titulo": "Curso de Carpintería",
            "localidades": ["Perico"],
            "formulario": "https://forms.gle/carp555",
            "estado": "en_curso",
        },
        {
            "id": "42",
            "titulo": "Curso de Gastronomía",
            "localidades": ["San Salvador de Jujuy"],
            "formulario": "https://forms.gle/gastro42",
            "estado": "finalizado",
        },
        {
            "id": "5",
            "titulo": "Curso de Peluquería",
            "descripcion_breve": "Corte y peinado",
            "localidades": ["Palpalá", "Perico"],
            "formulario": "https://docs.google.com/forms/d/e/pelu/viewform",
            "estado": "INSCRIPCION_ABIERTA",
        },
    ]


@pytest.fixture
def catalog(sample_records: list[dict[str, Any]]) -> CourseCatalog:
    return CourseCatalog.from_records(sample_records)


@pytest.fixture
def policy(catalog: CourseCatalog) -> PolicyEngine:
    return PolicyEngine(catalog, reference_year=2025)


@pytest.fixture
def renderer(catalog: CourseCatalog, policy: PolicyEngine) -> ResponseRenderer:
    return ResponseRenderer(catalog, policy, listing_limit=5)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(history_turns=3)


@pytest.fixture
def mock_generator() -> AsyncMock:
    """
    Mocked text generator.

    Returns:
        AsyncMock: Object with an async ``generate`` returning plain text
    """
    generator = AsyncMock()
    generator.generate = AsyncMock(return_value="Con gusto te ayudo con los cursos.")
    return generator


@pytest.fixture
def chat_service(
    catalog: CourseCatalog,
    policy: PolicyEngine,
    renderer: ResponseRenderer,
    session_store: InMemorySessionStore,
    mock_generator: AsyncMock,
) -> ChatService:
    """ChatService wired to the sample catalog and a mocked generator."""
    return ChatService(
        catalog=catalog,
        policy=policy,
        classifier=IntentClassifier(),
        renderer=renderer,
        sessions=session_store,
        generator=mock_generator,
    )


@pytest.fixture(autouse=True)
def reset_prompt_registry():
    """Keep the Langfuse registry singleton from leaking between tests."""
    PromptRegistry.reset()
    yield
    PromptRegistry.reset()
