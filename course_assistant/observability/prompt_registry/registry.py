"""
Langfuse prompt registry for versioned prompt management.

Singleton registry that stores the assistant's instruction prompt in Langfuse
with the model configuration it was written for, and fetches it back by label.

Dependencies: langfuse, course_assistant.configs
System role: Prompt version control and retrieval
"""

import logging

from langfuse import Langfuse

from course_assistant.configs import get_settings

logger = logging.getLogger(__name__)


class PromptRegistry:
    """
    Singleton registry for Langfuse text prompts.

    Attributes:
        _instance: Singleton instance
        _client: Langfuse client
        _enabled: Whether Langfuse integration is enabled
    """

    _instance: "PromptRegistry | None" = None
    _client: Langfuse | None = None
    _enabled: bool = False

    def __new__(cls) -> "PromptRegistry":
        """Singleton pattern for registry instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next call re-reads configuration."""
        cls._instance = None

    def _initialize(self) -> None:
        """Initialize Langfuse client with configuration."""
        obs_settings = get_settings().observability

        if not obs_settings.enable_tracing:
            logger.info("Langfuse disabled, prompt registry inactive")
            self._enabled = False
            return

        if not obs_settings.public_key or not obs_settings.secret_key:
            logger.warning("Langfuse keys not configured, prompt registry inactive")
            self._enabled = False
            return

        self._client = Langfuse(
            public_key=obs_settings.public_key,
            secret_key=obs_settings.secret_key,
            host=obs_settings.host,
        )
        self._enabled = True
        logger.info("Prompt registry initialized: host=%s", obs_settings.host)

    @property
    def is_enabled(self) -> bool:
        """Check if registry is active."""
        return self._enabled

    def register_text_prompt(
        self,
        name: str,
        text: str,
        model: str,
        temperature: float | None = None,
        labels: list[str] | None = None,
    ) -> None:
        """
        Register or version a text prompt in Langfuse.

        The chat model and temperature the prompt was written for are stored
        as the prompt config, so a version can be traced back to its model.

        Args:
            name: Unique prompt identifier
            text: Prompt body
            model: Chat model identifier
            temperature: Sampling temperature, omitted from the config when None
            labels: Optional labels (e.g., ["production"])
        """
        if not self._enabled or self._client is None:
            logger.debug("Prompt registry disabled, skipping registration: name=%s", name)
            return

        config: dict = {"model": model}
        if temperature is not None:
            config["temperature"] = temperature

        prompt = self._client.create_prompt(
            name=name,
            type="text",
            prompt=text,
            config=config,
            labels=labels or [],
        )
        logger.info(
            "Registered text prompt: name=%s version=%s labels=%s",
            name, prompt.version, labels,
        )

    def get_text_prompt(self, name: str, label: str | None = None) -> str | None:
        """
        Fetch a text prompt body from Langfuse.

        Args:
            name: Prompt identifier
            label: Optional label filter

        Returns:
            str: Prompt text, or None if disabled/not found
        """
        if not self._enabled or self._client is None:
            return None

        kwargs: dict = {"name": name, "type": "text"}
        if label:
            kwargs["label"] = label

        try:
            prompt = self._client.get_prompt(**kwargs)
        except Exception as e:
            logger.warning("Prompt fetch failed: name=%s error=%s", name, type(e).__name__)
            return None

        if prompt is None:
            return None
        logger.debug("Fetched prompt: name=%s version=%s", name, prompt.version)
        return prompt.prompt
