"""OpenAI ChatGPT LLM provider."""

import logging

from .provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI ChatGPT provider implementation."""

    @property
    def name(self) -> str:
        return "openai"

    def get_default_model(self) -> str:
        return "gpt-4o"

    def get_fast_model(self) -> str:
        return "gpt-4o-mini"

    def _init_client(self):
        """Initialize the OpenAI client."""
        import openai
        self._client = openai.OpenAI(api_key=self.api_key)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text completion using ChatGPT."""
        self._ensure_client()

        model_name = model or self.default_model

        full_messages = []
        if system:
            full_messages.append({"role": "system", "content": system})
        full_messages.extend(messages)

        kwargs = {
            "model": model_name,
            "messages": full_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            # The action prompt always asks for a single JSON object
            "response_format": {"type": "json_object"},
        }

        try:
            response = await self._run_blocking(
                lambda: self._client.chat.completions.create(**kwargs)
            )
        except Exception as e:
            raise RuntimeError(f"OpenAI completion failed for {model_name}: {e}") from e

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content,
            model=model_name,
            usage=usage,
            raw_response=response,
        )
