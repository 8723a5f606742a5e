"""
Text-generation client.

Wraps a LangChain chat model behind a single async call. Every attempt is
bounded by a timeout and a failed attempt is retried with short jittered
backoff; the last failure surfaces as GenerationError.

Dependencies: langchain_core, langchain_google_genai, tenacity, python-dotenv
System role: Language model boundary
"""

import asyncio
import logging
from typing import Protocol

from dotenv import load_dotenv
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from course_assistant.core.exceptions import GenerationError

# GOOGLE_API_KEY for the Gemini client
load_dotenv()

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns role-tagged messages into text."""

    async def generate(self, messages: list[BaseMessage]) -> str: ...


def _content_text(content: str | list) -> str:
    """Flatten chat model content (plain string or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class GenerationClient:
    """
    Chat model client with timeout and bounded retry.

    The Gemini model is created on first use so the service can start (and
    answer every deterministic question) without credentials.
    """

    def __init__(
        self,
        model_id: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        timeout_seconds: float = 30.0,
        max_attempts: int = 2,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            model_id: Gemini model identifier
            temperature: Model temperature
            timeout_seconds: Per-attempt timeout
            max_attempts: Total attempts, first call included
            model: Pre-built chat model (tests, alternative providers)
        """
        self._model_id = model_id
        self._temperature = temperature
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max_attempts
        self._model = model

        self._invoke_with_retry = retry(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=2),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:generate - Retry {retry_state.attempt_number}/{max_attempts} "
                f"after {type(retry_state.outcome.exception()).__name__}"
            ),
            reraise=True,
        )(self._invoke_once)

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_model(self) -> BaseChatModel:
        if self._model is None:
            self._model = ChatGoogleGenerativeAI(
                model=self._model_id,
                temperature=self._temperature,
            )
        return self._model

    async def _invoke_once(self, messages: list[BaseMessage]) -> str:
        response = await asyncio.wait_for(
            self._get_model().ainvoke(messages),
            timeout=self._timeout_seconds,
        )
        return _content_text(response.content)

    async def generate(self, messages: list[BaseMessage]) -> str:
        """
        Generate an answer.

        Args:
            messages: Role-tagged prompt messages

        Returns:
            str: Model text

        Raises:
            GenerationError: When every attempt failed or timed out
        """
        logger.info(f"{__name__}:generate - START model={self._model_id} messages={len(messages)}")
        try:
            text = await self._invoke_with_retry(messages)
        except Exception as e:
            raise GenerationError(
                "Text generation failed",
                model=self._model_id,
                attempts=self._max_attempts,
            ) from e

        logger.info(f"{__name__}:generate - SUCCESS chars={len(text)}")
        return text
