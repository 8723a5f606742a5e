"""
Test suite for dependency injection container.

Tests ServiceCache wiring, settings propagation and the full application
built around it.

System role: Verification of DI container
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from course_assistant.api.deps import ServiceCache, build_service_cache
from course_assistant.application.services import ChatService
from course_assistant.application.session_store import InMemorySessionStore
from course_assistant.boundary.llm import GenerationClient
from course_assistant.configs import Settings
from course_assistant.configs.catalog import CatalogSettings
from course_assistant.configs.llm import LLMSettings
from course_assistant.core.catalog import CourseCatalog
from course_assistant.main import create_app


@pytest.fixture
def catalog_file(tmp_path: Path, sample_records: list[dict]) -> Path:
    path = tmp_path / "cursos.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path


@pytest.fixture
def settings(catalog_file: Path) -> Settings:
    return Settings(
        catalog=CatalogSettings(path=str(catalog_file), reference_year=2026, listing_limit=2),
        llm=LLMSettings(model="gemini-test", max_attempts=1),
    )


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_catalog_is_loaded_from_configured_path(self, settings: Settings) -> None:
        cache = ServiceCache(settings)

        assert len(cache.catalog) == 5

    def test_services_are_cached(self, settings: Settings) -> None:
        cache = ServiceCache(settings)

        assert cache.chat_service is cache.chat_service
        assert isinstance(cache.chat_service, ChatService)
        assert isinstance(cache.sessions, InMemorySessionStore)

    def test_settings_reach_policy_and_generator(self, settings: Settings) -> None:
        cache = ServiceCache(settings)

        assert cache.policy.reference_link(cache.catalog.get("1")) == "/curso/1?y=2026"
        assert isinstance(cache.generator, GenerationClient)
        assert cache.generator.model_id == "gemini-test"

    def test_injected_components_are_used(self, settings: Settings) -> None:
        generator = AsyncMock()
        catalog = CourseCatalog()

        cache = ServiceCache(settings, catalog=catalog, generator=generator)

        assert cache.catalog is catalog
        assert cache.chat_service.generator is generator

    def test_build_service_cache_wires_everything(self, settings: Settings) -> None:
        cache = build_service_cache(settings)

        assert cache.chat_service.catalog is cache.catalog


class TestApplication:
    """Full application with a pre-built service cache."""

    def test_chat_round_trip(self, settings: Settings) -> None:
        # Arrange
        generator = AsyncMock()
        generator.generate = AsyncMock(return_value="respuesta")
        app = create_app(services=ServiceCache(settings, generator=generator))

        # Act
        with TestClient(app) as client:
            refusal = client.post("/api/chat", json={"message": "quiero info del curso de gastronomía"})
            empty = client.post("/api/chat", json={"message": ""})
            malformed = client.post("/api/chat", json={"message": 5})
            listing = client.get("/api/v1/courses")

        # Assert
        assert refusal.status_code == 200
        assert "ya finalizó" in refusal.json()["message"]
        assert "/curso/42?y=2026" in refusal.json()["message"]
        assert empty.status_code == 400
        assert empty.json() == {"error": "Mensaje vacío"}
        assert malformed.status_code == 400
        assert malformed.json() == {"error": "Mensaje vacío"}
        assert listing.status_code == 200
        generator.generate.assert_not_awaited()
