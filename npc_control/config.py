"""Configuration management for NPC Control."""

import os
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env file
def _find_env_file() -> Path | None:
    """Find the .env file, searching up the directory tree."""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None


_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


class Config:
    """Application configuration from environment variables."""

    # LLM Provider Selection
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "")  # Empty = auto-detect

    # LLM API Keys
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")

    # Model override for action content generation (optional)
    ACTION_MODEL: str = os.getenv("ACTION_MODEL", "")

    # Generation limits
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "10"))
    ACTION_MAX_TOKENS: int = int(os.getenv("ACTION_MAX_TOKENS", "1024"))

    # Learning
    LEARNING_HISTORY_LIMIT: int = int(os.getenv("LEARNING_HISTORY_LIMIT", "50"))

    # Behavior catalog (empty = bundled patterns.yaml)
    BEHAVIOR_PATTERNS_PATH: str = os.getenv("BEHAVIOR_PATTERNS_PATH", "")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./npc_control.db")

    # Debug
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []

        if not any([cls.GOOGLE_API_KEY, cls.ANTHROPIC_API_KEY, cls.OPENAI_API_KEY]):
            issues.append(
                "No LLM API keys configured. Actions will use fallback content only. "
                "Set GOOGLE_API_KEY, ANTHROPIC_API_KEY, or OPENAI_API_KEY in .env"
            )

        if cls.AI_TIMEOUT_SECONDS <= 0:
            issues.append("AI_TIMEOUT_SECONDS must be positive")

        if cls.LEARNING_HISTORY_LIMIT < 1:
            issues.append("LEARNING_HISTORY_LIMIT must be at least 1")

        if cls.BEHAVIOR_PATTERNS_PATH and not Path(cls.BEHAVIOR_PATTERNS_PATH).exists():
            issues.append(f"Behavior pattern file not found: {cls.BEHAVIOR_PATTERNS_PATH}")

        return issues

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of providers with configured API keys."""
        providers = []
        if cls.GOOGLE_API_KEY:
            providers.append("google")
        if cls.ANTHROPIC_API_KEY:
            providers.append("anthropic")
        if cls.OPENAI_API_KEY:
            providers.append("openai")
        return providers

    @classmethod
    def get_primary_provider(cls) -> str:
        """Get the primary provider name."""
        if cls.LLM_PROVIDER:
            return cls.LLM_PROVIDER.lower()
        # Auto-detect based on available keys
        if cls.GOOGLE_API_KEY:
            return "google"
        if cls.ANTHROPIC_API_KEY:
            return "anthropic"
        if cls.OPENAI_API_KEY:
            return "openai"
        return "none"

    @classmethod
    def is_debug(cls) -> bool:
        """Check if debug mode is enabled."""
        return cls.DEBUG

    @classmethod
    def get_database_url(cls) -> str:
        """Get the database URL."""
        return cls.DATABASE_URL
