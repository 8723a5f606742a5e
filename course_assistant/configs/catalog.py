"""
Catalog configuration settings.

Location of the course catalog file plus the knobs that shape listings,
reference links and the catalog context handed to the language model.

Dependencies: pydantic_settings
System role: Catalog and disclosure policy configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENROLLMENT_LINK_PATTERNS = [
    "forms.gle",
    "docs.google.com/forms",
    "forms.office.com",
    "forms.microsoft.com",
    "typeform.com",
    "jotform.com",
]


class CatalogSettings(BaseSettings):
    """Catalog source and policy settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    path: str = Field(
        default="cursos_2025.json",
        description="Path to the JSON array of raw course records",
    )
    reference_year: int = Field(
        default=2025,
        description="Catalog year used in course reference links",
    )
    listing_limit: int = Field(
        default=5,
        gt=0,
        description="Maximum entries shown in topic and locality listings",
    )
    context_max_chars: int = Field(
        default=18000,
        gt=0,
        description="Character budget for the serialized catalog sent to the model",
    )
    context_fallback_courses: int = Field(
        default=40,
        gt=0,
        description="Courses kept in the model context when the budget is exceeded",
    )
    context_exclude_closed: bool = Field(
        default=True,
        description="Leave in-progress and finished courses out of the model context",
    )
    enrollment_link_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENROLLMENT_LINK_PATTERNS),
        description="Host/path fragments that identify enrollment form URLs",
    )
