"""Base agent class for all NPC Control agents."""

import logging
from abc import ABC, abstractmethod

from ..llm import LLMProvider, get_llm_manager

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Base class for LLM-backed agents.

    Resolves the provider and model through the LLM manager on every
    call, so configuration changes (keys, overrides) take effect
    without rebuilding agents.
    """

    # Subclasses should set this to their agent name
    agent_name: str = "unknown"

    def __init__(self, model_override: str | None = None):
        """Initialize the agent.

        Args:
            model_override: Specific model to use (overrides settings)
        """
        self._model_override = model_override

    def _get_provider_and_model(self) -> tuple[LLMProvider, str]:
        """Get the provider and model for this agent.

        Raises:
            RuntimeError: If no provider is configured
        """
        manager = get_llm_manager()

        if self._model_override:
            return manager.get_provider(), self._model_override

        return manager.get_provider_for_agent(self.agent_name)

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """The system prompt for this agent."""
        pass

    async def call(self, user_message: str, max_tokens: int = 1024, **context) -> str:
        """Make a single text completion call.

        Args:
            user_message: The main user message/query
            max_tokens: Completion budget
            **context: Additional context sections to include in the message

        Returns:
            The raw completion text
        """
        provider, model = self._get_provider_and_model()
        full_message = self._build_message(user_message, context)
        messages = [{"role": "user", "content": full_message}]

        logger.debug(f"[{self.agent_name}] {provider.name}/{model} prompt: {len(full_message)} chars")

        response = await provider.complete(
            messages=messages,
            system=self.system_prompt,
            model=model,
            max_tokens=max_tokens,
        )
        return response.content

    def _build_message(self, user_message: str, context: dict) -> str:
        """Format message with context sections."""
        parts = []

        for key, value in context.items():
            if value:
                # Convert key to title case with spaces
                title = key.replace('_', ' ').title()
                parts.append(f"## {title}\n{value}")

        parts.append(user_message)

        return "\n\n".join(parts)
