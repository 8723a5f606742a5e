"""Language model fallback prompt."""

from course_assistant.core.generation.prompt import (
    ASSISTANT_PROMPT,
    SYSTEM_PROMPT,
    build_messages,
    catalog_context,
    get_instructions,
    history_messages,
    matching_hint,
    register_instructions_prompt,
)

__all__ = [
    "ASSISTANT_PROMPT",
    "SYSTEM_PROMPT",
    "build_messages",
    "catalog_context",
    "get_instructions",
    "history_messages",
    "matching_hint",
    "register_instructions_prompt",
]
