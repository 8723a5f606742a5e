"""
Session configuration settings.

Dependencies: pydantic_settings
System role: Conversation memory bounds
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """In-memory conversation settings."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    history_turns: int = Field(
        default=3,
        ge=1,
        description="Request/response pairs remembered per session",
    )
    message_max_chars: int = Field(
        default=1200,
        gt=0,
        description="Length at which stored history entries are clamped",
    )
