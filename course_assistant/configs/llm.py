"""
Language model configuration settings.

Model identifier, sampling temperature and call budget for the text
generation fallback.

Dependencies: pydantic_settings
System role: Text generation client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Text generation settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="gemini-2.5-flash",
        description="Chat model identifier",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (low for near-deterministic answers)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single generation attempt",
    )
    max_attempts: int = Field(
        default=2,
        ge=1,
        description="Total generation attempts (first call plus retries)",
    )
    use_prompt_registry: bool = Field(
        default=False,
        description="Fetch the instruction prompt from Langfuse",
    )
    prompt_label: str | None = Field(
        default=None,
        description="Langfuse label used when fetching the prompt",
    )
