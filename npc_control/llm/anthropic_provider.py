"""Anthropic Claude LLM provider."""

import logging
from typing import Dict, List, Optional

from .provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider implementation.

    Haiku is used for action elaboration: short, structured, and
    latency-bound by the engine's generation timeout.
    """

    @property
    def name(self) -> str:
        return "anthropic"

    def get_default_model(self) -> str:
        return "claude-sonnet-4-5"

    def get_fast_model(self) -> str:
        return "claude-haiku-4-5"

    def _init_client(self):
        """Initialize the Anthropic client."""
        import anthropic
        self._client = anthropic.Anthropic(api_key=self.api_key)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text completion using Claude."""
        self._ensure_client()

        model_name = model or self.default_model

        kwargs = {
            "model": model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system if system else "",
            "messages": messages,
        }

        message = await self._run_blocking(lambda: self._client.messages.create(**kwargs))

        full_text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )

        usage = {}
        if hasattr(message, "usage") and message.usage:
            usage = {
                "prompt_tokens": message.usage.input_tokens,
                "completion_tokens": message.usage.output_tokens,
                "total_tokens": message.usage.input_tokens + message.usage.output_tokens,
            }

        return LLMResponse(
            content=full_text,
            model=model_name,
            usage=usage,
            raw_response=message,
        )
