"""Langfuse-backed prompt versioning."""

from course_assistant.observability.prompt_registry.registry import PromptRegistry

__all__ = ["PromptRegistry"]
