"""Pattern eligibility: does a behavior pattern apply right now?"""

import logging

from ..core.context import DecisionContext
from .patterns import BehaviorPattern

logger = logging.getLogger(__name__)


class EligibilityEvaluator:
    """Pure predicate over (pattern, context). Fails closed.

    Checks, in order:
    1. The pattern is scoped to the acting character's archetype
    2. The current situation mode is one the pattern applies to
    3. HP percentage lies inside the pattern's health window, if any
    4. At least one of the pattern's context triggers is active, if any
    """

    def is_eligible(self, pattern: BehaviorPattern, context: DecisionContext) -> bool:
        conditions = pattern.conditions

        if not pattern.applies_to(context.character_type):
            return False

        if context.mode not in conditions.session_modes:
            return False

        thresholds = conditions.health_thresholds
        if thresholds is not None:
            hp_percent = context.character_state.hp_percent
            if thresholds.min is not None and hp_percent < thresholds.min:
                return False
            if thresholds.max is not None and hp_percent > thresholds.max:
                return False

        if conditions.context_triggers:
            if context.active_triggers.isdisjoint(conditions.context_triggers):
                return False

        return True

    def filter(self, patterns: list[BehaviorPattern], context: DecisionContext) -> list[BehaviorPattern]:
        """Eligible patterns sorted by priority, highest first (stable)."""
        eligible = [p for p in patterns if self.is_eligible(p, context)]
        eligible.sort(key=lambda p: p.priority, reverse=True)
        logger.debug(
            f"{len(eligible)}/{len(patterns)} patterns eligible for "
            f"{context.character_id} in {context.mode}"
        )
        return eligible
