"""LLM manager: resolves and caches provider instances."""

import logging
from typing import Dict, Optional, Tuple

from ..config import Config
from .provider import LLMProvider

logger = logging.getLogger(__name__)

# Per-agent model overrides from configuration
_AGENT_MODEL_OVERRIDES = {
    "action_content": lambda: Config.ACTION_MODEL,
}


class LLMManager:
    """Creates providers lazily from API keys and hands them to agents.

    Providers are cached per name. Agents ask for
    ``get_provider_for_agent(name)`` and receive the primary provider
    plus the model they should use.
    """

    def __init__(
        self,
        primary_provider: Optional[str] = None,
        google_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
    ):
        self._api_keys: Dict[str, str] = {}
        if google_api_key:
            self._api_keys["google"] = google_api_key
        if anthropic_api_key:
            self._api_keys["anthropic"] = anthropic_api_key
        if openai_api_key:
            self._api_keys["openai"] = openai_api_key

        self._providers: Dict[str, LLMProvider] = {}
        self.primary_provider = self._resolve_primary(primary_provider)

    def _resolve_primary(self, requested: Optional[str]) -> str:
        if requested:
            return requested.lower()
        for name in ("google", "anthropic", "openai"):
            if name in self._api_keys:
                return name
        return "none"

    def list_available_providers(self) -> list[str]:
        """Providers with an API key configured."""
        return list(self._api_keys)

    def get_provider(self, name: Optional[str] = None) -> LLMProvider:
        """Get (or create) a provider instance.

        Raises:
            RuntimeError: If the provider is unknown or has no API key.
        """
        provider_name = (name or self.primary_provider).lower()
        if provider_name in self._providers:
            return self._providers[provider_name]

        api_key = self._api_keys.get(provider_name)
        if not api_key:
            raise RuntimeError(f"No API key configured for LLM provider '{provider_name}'")

        if provider_name == "openai":
            from .openai_provider import OpenAIProvider
            provider = OpenAIProvider(api_key=api_key)
        elif provider_name == "anthropic":
            from .anthropic_provider import AnthropicProvider
            provider = AnthropicProvider(api_key=api_key)
        elif provider_name == "google":
            from .google_provider import GoogleProvider
            provider = GoogleProvider(api_key=api_key)
        else:
            raise RuntimeError(f"Unknown LLM provider '{provider_name}'")

        logger.info(f"Initialized LLM provider: {provider_name}")
        self._providers[provider_name] = provider
        return provider

    def get_fast_model(self) -> str:
        return self.get_provider().get_fast_model()

    def get_provider_for_agent(self, agent_name: str) -> Tuple[LLMProvider, str]:
        """Provider and model for an agent (override, else the fast model)."""
        provider = self.get_provider()
        override = _AGENT_MODEL_OVERRIDES.get(agent_name)
        model = override() if override else ""
        return provider, model or provider.get_fast_model()


_manager: Optional[LLMManager] = None


def get_llm_manager() -> LLMManager:
    """Get the process-wide LLM manager, creating it from Config."""
    global _manager
    if _manager is None:
        _manager = LLMManager(
            primary_provider=Config.get_primary_provider(),
            google_api_key=Config.GOOGLE_API_KEY or None,
            anthropic_api_key=Config.ANTHROPIC_API_KEY or None,
            openai_api_key=Config.OPENAI_API_KEY or None,
        )
    return _manager


def reset_llm_manager() -> None:
    """Drop the cached manager (e.g. after keys change)."""
    global _manager
    _manager = None
