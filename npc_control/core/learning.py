"""Feedback learning: player ratings nudge a character's action-type weights."""

import logging
from typing import Optional

from ..db.stores import ActionStore
from ..errors import InvalidFeedbackError
from .actions import AIAction, FeedbackEntry
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
NEUTRAL_RATING = 3
WEIGHT_STEP = 0.1


def rating_delta(rating: int) -> float:
    """Weight change for a rating: 1 -> -0.2, 3 -> 0, 5 -> +0.2."""
    return (rating - NEUTRAL_RATING) * WEIGHT_STEP


def validate_rating(rating) -> int:
    """Raises InvalidFeedbackError unless ``rating`` is an int in 1-5."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidFeedbackError(f"Rating must be an integer, got {rating!r}")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidFeedbackError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
    return rating


class FeedbackLearner:
    """Applies player ratings to the controller that produced an action.

    Each call is applied immediately and on its own. Weight updates are
    additive, so independently rated actions reach the same weight in any
    order as long as no clamp bound is hit along the way.
    """

    def __init__(self, registry: SessionRegistry, action_store: ActionStore):
        self.registry = registry
        self.action_store = action_store

    async def record_feedback(self, action_id: str, rating: int, comment: Optional[str] = None) -> Optional[AIAction]:
        """Record a rating for an action and adapt its character's weights.

        Args:
            action_id: The rated action
            rating: 1 (bad) to 5 (great)
            comment: Optional free-text comment

        Returns:
            The action with the feedback attached, or None when the action
            or its controller no longer exists

        Raises:
            InvalidFeedbackError: If the rating is out of range (nothing is changed)
            PersistenceError: If the action store fails
        """
        rating = validate_rating(rating)

        action = self.action_store.get_by_id(action_id)
        if action is None:
            logger.warning(f"Feedback for unknown action {action_id} ignored")
            return None

        controller = self.registry.get_controller_in_session(action.session_id, action.character_id)
        if controller is None:
            logger.warning(f"Feedback for {action_id} ignored: {action.character_id} is no longer controlled")
            return None

        async with controller.lock:
            entry = FeedbackEntry(action_id=action_id, rating=rating, comment=comment)
            # Re-read under the lock so concurrent feedback on one action is not lost
            current = self.action_store.get_by_id(action_id) or action
            updated = current.with_feedback(entry)
            self.action_store.save(updated)

            controller.learning.record(updated, entry)
            weight = controller.learning.adjust_weight(action.type, rating_delta(rating))

        session = self.registry.get_session(action.session_id)
        if session is not None:
            session.performance.record_rating(rating)

        logger.info(f"Feedback {rating}/5 on {action.type} by {action.character_id}: weight now {weight:.2f}")
        return updated
