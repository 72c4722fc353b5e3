"""Exception types raised across NPC Control."""


class NPCControlError(Exception):
    """Base class for NPC Control errors."""


class InvalidFeedbackError(NPCControlError, ValueError):
    """Feedback rejected at the boundary (e.g. rating outside 1-5)."""


class PersistenceError(NPCControlError):
    """The action or character store failed to read or write."""


class GenerationError(NPCControlError):
    """The AI returned content that cannot be turned into an action.

    Never escapes ActionContentGenerator; it always lands on the
    fallback path.
    """
