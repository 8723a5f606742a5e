"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from course_assistant.configs.base import BaseSettings
from course_assistant.configs.catalog import CatalogSettings
from course_assistant.configs.llm import LLMSettings
from course_assistant.configs.observability import ObservabilitySettings
from course_assistant.configs.session import SessionSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from course_assistant.configs import get_settings
        settings = get_settings()
    """
    return Settings()
