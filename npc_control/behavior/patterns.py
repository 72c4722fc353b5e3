"""Behavior pattern catalog.

Patterns are declared in YAML (``patterns.yaml`` next to this module, or
the file named by ``BEHAVIOR_PATTERNS_PATH``), validated into pydantic
models once at process start, and treated as read-only afterwards.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from ..config import Config
from ..enums import ActionType, CharacterType, PatternFrequency, SessionMode

logger = logging.getLogger(__name__)

_BUNDLED_CATALOG = Path(__file__).parent / "patterns.yaml"


class HealthThresholds(BaseModel):
    """HP-percentage gate (inclusive bounds, 0-100)."""

    min: Optional[float] = Field(default=None, ge=0, le=100)
    max: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _check_order(self) -> "HealthThresholds":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"health threshold min {self.min} exceeds max {self.max}")
        return self


class PatternConditions(BaseModel):
    """When a pattern applies."""

    character_types: list[CharacterType] = Field(min_length=1)
    session_modes: list[SessionMode] = Field(min_length=1)
    health_thresholds: Optional[HealthThresholds] = None
    context_triggers: list[str] = Field(default_factory=list)


class ActionTemplate(BaseModel, frozen=True):
    """A weighted candidate action offered by a pattern."""

    type: ActionType
    weight: float = Field(ge=0)
    narrative_hints: tuple[str, ...] = ()


class BehaviorPattern(BaseModel, frozen=True):
    """A named, archetype-scoped bundle of candidate actions."""

    id: str
    name: str
    description: str = ""
    conditions: PatternConditions
    priority: int = 5
    frequency: PatternFrequency = PatternFrequency.SOMETIMES
    actions: tuple[ActionTemplate, ...] = Field(min_length=1)

    def applies_to(self, character_type: CharacterType) -> bool:
        return character_type in self.conditions.character_types


class BehaviorPatternCatalog:
    """Immutable registry of behavior patterns keyed by id."""

    def __init__(self, patterns: list[BehaviorPattern]):
        by_id: dict[str, BehaviorPattern] = {}
        for pattern in patterns:
            if pattern.id in by_id:
                raise ValueError(f"Duplicate behavior pattern id: {pattern.id}")
            by_id[pattern.id] = pattern
        self._patterns = MappingProxyType(by_id)

    @classmethod
    def from_yaml(cls, path: Path) -> "BehaviorPatternCatalog":
        """Load a catalog from a YAML file with a top-level ``patterns`` list.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the YAML is malformed or a pattern is invalid
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict) or not isinstance(data.get("patterns"), list):
            raise ValueError(f"{path}: expected a top-level 'patterns' list")

        patterns = [BehaviorPattern.model_validate(entry) for entry in data["patterns"]]
        logger.info(f"Loaded {len(patterns)} behavior patterns from {path.name}")
        return cls(patterns)

    @classmethod
    def load_default(cls) -> "BehaviorPatternCatalog":
        """Load the configured catalog, or the bundled one."""
        path = Path(Config.BEHAVIOR_PATTERNS_PATH) if Config.BEHAVIOR_PATTERNS_PATH else _BUNDLED_CATALOG
        return cls.from_yaml(path)

    def get(self, pattern_id: str) -> Optional[BehaviorPattern]:
        return self._patterns.get(pattern_id)

    def resolve(self, pattern_ids: list[str]) -> list[BehaviorPattern]:
        """Map ids to patterns, skipping ids no longer in the catalog."""
        return [self._patterns[pid] for pid in pattern_ids if pid in self._patterns]

    def ids_for(self, character_type: CharacterType) -> list[str]:
        """Ids of every pattern scoped to an archetype, in catalog order."""
        return [pid for pid, pattern in self._patterns.items() if pattern.applies_to(character_type)]

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[BehaviorPattern]:
        return iter(self._patterns.values())

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._patterns
