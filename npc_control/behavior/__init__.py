"""Behavior patterns, eligibility filtering and action selection."""

from .eligibility import EligibilityEvaluator
from .patterns import (
    ActionTemplate,
    BehaviorPattern,
    BehaviorPatternCatalog,
    HealthThresholds,
    PatternConditions,
)
from .selector import ActionCandidate, ActionSelector

__all__ = [
    "ActionCandidate",
    "ActionSelector",
    "ActionTemplate",
    "BehaviorPattern",
    "BehaviorPatternCatalog",
    "EligibilityEvaluator",
    "HealthThresholds",
    "PatternConditions",
]
