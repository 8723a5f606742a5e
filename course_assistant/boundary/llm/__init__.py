"""Language model clients."""

from course_assistant.boundary.llm.generation_client import GenerationClient, TextGenerator

__all__ = ["GenerationClient", "TextGenerator"]
