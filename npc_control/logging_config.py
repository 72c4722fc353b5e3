"""
Centralized logging configuration for NPC Control.

Call setup_logging() once at process startup, from whatever process
hosts the SessionRegistry.  Every source module then gets its own
logger via:

    import logging
    logger = logging.getLogger(__name__)

Level mapping:
  DEBUG   – selection draws, prompt sizes, pattern filtering
  INFO    – start/stop of AI control, completed decisions
  WARNING – generation fallbacks, ignored feedback
  ERROR   – swallowed decision failures, failed background notifications
"""

import logging
import sys
from typing import Optional

from .config import Config


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logger and quiet noisy third-party loggers.

    Args:
        level: Root level name; defaults to LOG_LEVEL, or DEBUG when DEBUG=true
    """
    if level is None:
        level = "DEBUG" if Config.is_debug() else Config.LOG_LEVEL
    fmt = "[%(name)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    # Quiet noisy third-party loggers
    for name in (
        "httpx",
        "httpcore",
        "openai",
        "anthropic",
        "google_genai",
        "sqlalchemy.engine",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
