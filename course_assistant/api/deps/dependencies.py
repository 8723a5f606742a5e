"""
Dependency injection container.

Builds the shared service graph once at startup and exposes FastAPI
dependency factories that read it from application state.

Dependencies: course_assistant.configs, course_assistant.application, course_assistant.core, course_assistant.boundary
System role: DI container for service injection
"""

from fastapi import Depends, Request

from course_assistant.application.services.chat_service import ChatService
from course_assistant.application.session_store import InMemorySessionStore, SessionStore
from course_assistant.boundary.llm.generation_client import GenerationClient, TextGenerator
from course_assistant.configs import Settings, get_settings
from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.intent_classifier import IntentClassifier
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.core.renderer import ResponseRenderer


class ServiceCache:
    """Container for cached service instances."""

    def __init__(
        self,
        settings: Settings,
        catalog: CourseCatalog | None = None,
        generator: TextGenerator | None = None,
        sessions: SessionStore | None = None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._generator = generator
        self._sessions = sessions
        self._policy = None
        self._renderer = None
        self._chat_service = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def catalog(self) -> CourseCatalog:
        """Get cached catalog, loading it from the configured file."""
        if self._catalog is None:
            self._catalog = CourseCatalog.load(self._settings.catalog.path)
        return self._catalog

    @property
    def policy(self) -> PolicyEngine:
        if self._policy is None:
            self._policy = PolicyEngine(
                self.catalog,
                reference_year=self._settings.catalog.reference_year,
                enrollment_link_patterns=self._settings.catalog.enrollment_link_patterns,
            )
        return self._policy

    @property
    def renderer(self) -> ResponseRenderer:
        if self._renderer is None:
            self._renderer = ResponseRenderer(
                self.catalog,
                self.policy,
                listing_limit=self._settings.catalog.listing_limit,
            )
        return self._renderer

    @property
    def sessions(self) -> SessionStore:
        if self._sessions is None:
            self._sessions = InMemorySessionStore(history_turns=self._settings.session.history_turns)
        return self._sessions

    @property
    def generator(self) -> TextGenerator:
        """Get cached text-generation client."""
        if self._generator is None:
            llm = self._settings.llm
            self._generator = GenerationClient(
                model_id=llm.model,
                temperature=llm.temperature,
                timeout_seconds=llm.timeout_seconds,
                max_attempts=llm.max_attempts,
            )
        return self._generator

    @property
    def chat_service(self) -> ChatService:
        """Get cached chat service."""
        if self._chat_service is None:
            catalog_settings = self._settings.catalog
            self._chat_service = ChatService(
                catalog=self.catalog,
                policy=self.policy,
                classifier=IntentClassifier(),
                renderer=self.renderer,
                sessions=self.sessions,
                generator=self.generator,
                message_max_chars=self._settings.session.message_max_chars,
                context_max_chars=catalog_settings.context_max_chars,
                context_fallback_courses=catalog_settings.context_fallback_courses,
                context_exclude_closed=catalog_settings.context_exclude_closed,
                use_prompt_registry=self._settings.llm.use_prompt_registry,
                prompt_label=self._settings.llm.prompt_label,
            )
        return self._chat_service


def build_service_cache(settings: Settings | None = None) -> ServiceCache:
    """Create the service cache and load the catalog eagerly."""
    cache = ServiceCache(settings or get_settings())
    _ = cache.chat_service
    return cache


def get_service_cache(request: Request) -> ServiceCache:
    """Service cache stored on application state during startup."""
    return request.app.state.services


def get_chat_service(cache: ServiceCache = Depends(get_service_cache)) -> ChatService:
    """FastAPI dependency for ChatService."""
    return cache.chat_service


def get_catalog(cache: ServiceCache = Depends(get_service_cache)) -> CourseCatalog:
    """FastAPI dependency for the course catalog."""
    return cache.catalog


def get_policy(cache: ServiceCache = Depends(get_service_cache)) -> PolicyEngine:
    """FastAPI dependency for the disclosure policy."""
    return cache.policy
