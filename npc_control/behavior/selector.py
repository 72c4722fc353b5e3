"""Weighted-random action selection with learned multipliers."""

import logging
import random
from dataclasses import dataclass
from typing import Mapping, Optional

from .patterns import ActionTemplate, BehaviorPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionCandidate:
    """One (pattern, template) pair and its effective weight."""

    pattern: BehaviorPattern
    template: ActionTemplate
    weight: float


class ActionSelector:
    """Roulette-wheel selection over every template of the eligible patterns.

    The random source is injected so a seeded ``random.Random`` makes
    selection reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def candidates(
        patterns: list[BehaviorPattern],
        adaptive_weights: Mapping[str, float],
    ) -> list[ActionCandidate]:
        """Flatten patterns into candidates, scaling base weights by learned multipliers."""
        return [
            ActionCandidate(
                pattern=pattern,
                template=template,
                weight=template.weight * adaptive_weights.get(template.type, 1.0),
            )
            for pattern in patterns
            for template in pattern.actions
        ]

    def select(
        self,
        patterns: list[BehaviorPattern],
        adaptive_weights: Mapping[str, float],
    ) -> Optional[ActionCandidate]:
        """Pick one candidate, or None when the patterns offer no actions.

        Args:
            patterns: Eligible patterns, highest priority first
            adaptive_weights: action type -> learned multiplier

        Returns:
            The selected candidate. If roundoff leaves the walk without a
            pick, the first candidate is returned.
        """
        candidates = self.candidates(patterns, adaptive_weights)
        if not candidates:
            return None

        total_weight = sum(c.weight for c in candidates)
        remainder = self.rng.random() * total_weight
        logger.debug(f"Selection draw {remainder:.3f} of {total_weight:.3f} over {len(candidates)} candidates")

        for candidate in candidates:
            remainder -= candidate.weight
            if remainder <= 0:
                return candidate

        return candidates[0]
