"""
Observability module.

Provides structured logging, correlation ID tracking and prompt version
management.
"""

from course_assistant.observability.prompt_registry import PromptRegistry

__all__ = ["PromptRegistry"]
