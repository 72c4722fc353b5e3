"""Abstract LLM provider interface."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LLMResponse:
    """Standard response from any LLM provider."""

    content: str
    """The text content of the response."""

    model: str = ""
    """The model that generated this response."""

    usage: Dict[str, int] = field(default_factory=dict)
    """Token usage: {prompt_tokens, completion_tokens, total_tokens}."""

    raw_response: Any = None
    """The raw response object from the provider."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Additional metadata (e.g., latency, finish reason)."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    The engine only needs one capability from a provider: turn a prompt
    into text. Each call is a single attempt; callers bound it with a
    timeout and fall back on any failure, so providers do not retry.
    """

    def __init__(self, api_key: str, default_model: Optional[str] = None):
        """Initialize the provider.

        Args:
            api_key: API key for the provider
            default_model: Default model to use
        """
        self.api_key = api_key
        self.default_model = default_model or self.get_default_model()
        self._client = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'anthropic', 'google', 'openai')."""
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this provider."""
        pass

    @abstractmethod
    def get_fast_model(self) -> str:
        """Get the fast/cheap model for this provider."""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text completion.

        Args:
            messages: List of messages [{role: str, content: str}]
            system: System prompt
            model: Model to use (defaults to provider default)
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            LLMResponse with the completion
        """
        pass

    async def _run_blocking(self, sync_fn: Callable[[], T]) -> T:
        """Run a blocking SDK call in the default executor.

        Cancelling the awaiting task (e.g. from ``asyncio.wait_for``)
        releases the caller immediately; the worker thread finishes in
        the background and its result is discarded.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, sync_fn)

    # ── Client lifecycle ─────────────────────────────────────────

    def _ensure_client(self):
        """Ensure the client is initialized (lazy loading)."""
        if self._client is None:
            self._init_client()

    @abstractmethod
    def _init_client(self):
        """Initialize the provider's client."""
        pass
