"""Google Gemini LLM provider using the google.genai SDK."""

import logging
from typing import Dict, List, Optional

from .provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class GoogleProvider(LLMProvider):
    """Google Gemini provider using the google.genai SDK."""

    @property
    def name(self) -> str:
        return "google"

    def get_default_model(self) -> str:
        return "gemini-2.5-flash"

    def get_fast_model(self) -> str:
        return "gemini-2.5-flash"

    def _init_client(self):
        """Initialize the Google GenAI client."""
        from google import genai
        self._client = genai.Client(api_key=self.api_key)

    @staticmethod
    def _build_contents(messages: List[Dict[str, str]]) -> list:
        """Convert chat messages to Gemini contents (assistant -> model)."""
        contents = []
        for msg in messages:
            role = "model" if msg["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg["content"]}]})
        return contents

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text completion using Gemini."""
        self._ensure_client()

        model_name = model or self.default_model
        contents = self._build_contents(messages)

        config = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
            "response_mime_type": "application/json",
        }
        if system:
            config["system_instruction"] = system

        response = await self._run_blocking(
            lambda: self._client.models.generate_content(
                model=model_name,
                contents=contents,
                config=config,
            )
        )

        usage = {}
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata:
            usage = {
                "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0) or 0,
                "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0) or 0,
                "total_tokens": getattr(usage_metadata, "total_token_count", 0) or 0,
            }

        return LLMResponse(
            content=response.text or "",
            model=model_name,
            usage=usage,
            raw_response=response,
        )
