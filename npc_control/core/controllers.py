"""
Per-character and per-session controller state.

A CharacterController is owned by exactly one SessionController and
mutated only by decisions and feedback that name its character. Each
controller carries an ``asyncio.Lock`` that sequences those calls, so at
most one decision per character is in flight.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from ..config import Config
from ..enums import (
    ActionType,
    AutomationLevel,
    AutonomyLevel,
    CharacterType,
    ConflictResolution,
    GMInterventionMode,
)
from .actions import AIAction, FeedbackEntry, utcnow

logger = logging.getLogger(__name__)

MIN_ADAPTIVE_WEIGHT = 0.1
MAX_ADAPTIVE_WEIGHT = 2.0


def clamp_weight(value: float) -> float:
    return max(MIN_ADAPTIVE_WEIGHT, min(MAX_ADAPTIVE_WEIGHT, value))


# ── Settings ───────────────────────────────────────────────────────────

class ControllerSettings(BaseModel):
    """Tunable knobs of one character controller."""

    enabled: bool = True
    autonomy_level: AutonomyLevel = AutonomyLevel.ASSISTED
    intervention_threshold: float = Field(default=0.3, ge=0, le=1)
    response_delay: float = Field(default=2.0, ge=0)  # seconds
    randomness: float = Field(default=0.2, ge=0, le=1)

    @model_validator(mode="after")
    def _manual_is_never_enabled(self) -> "ControllerSettings":
        if self.autonomy_level == AutonomyLevel.MANUAL:
            self.enabled = False
        return self


class SessionSettings(BaseModel):
    """Session-wide automation settings."""

    automation_level: AutomationLevel = AutomationLevel.MODERATE
    gm_intervention_mode: GMInterventionMode = GMInterventionMode.REACTIVE
    pacing_control: bool = False
    narrative_assistance: bool = True


class ProgressionControl(BaseModel):
    auto_advance_events: bool = False
    suggestion_system: bool = True
    conflict_resolution: ConflictResolution = ConflictResolution.SUGGEST
    mood_tracking: bool = True


# ── Learning ───────────────────────────────────────────────────────────

def _bounded() -> deque:
    return deque(maxlen=Config.LEARNING_HISTORY_LIMIT)


def _neutral_weights() -> dict[str, float]:
    return {action_type.value: 1.0 for action_type in ActionType}


@dataclass
class LearningRecord:
    """What a controller has learned from player feedback.

    ``adaptive_weights`` multiplies template base weights during
    selection; every value stays within [0.1, 2.0]. Histories are
    bounded and drop their oldest entries first.
    """

    adaptive_weights: dict[str, float] = field(default_factory=_neutral_weights)
    successful_actions: deque = field(default_factory=_bounded)
    failed_actions: deque = field(default_factory=_bounded)
    feedback_log: deque = field(default_factory=_bounded)

    def weight_for(self, action_type: str) -> float:
        return self.adaptive_weights.get(action_type, 1.0)

    def adjust_weight(self, action_type: str, delta: float) -> float:
        new_weight = clamp_weight(self.weight_for(action_type) + delta)
        self.adaptive_weights[action_type] = new_weight
        return new_weight

    def record(self, action: AIAction, entry: FeedbackEntry) -> None:
        self.feedback_log.append(entry)
        if entry.rating >= 4:
            self.successful_actions.append(action)
        elif entry.rating <= 2:
            self.failed_actions.append(action)


# ── Controllers ────────────────────────────────────────────────────────

@dataclass
class CharacterState:
    pending_actions: list[AIAction] = field(default_factory=list)
    last_decision_at: Optional[datetime] = None


@dataclass
class CharacterController:
    character_id: str
    character_type: CharacterType
    session_id: str
    settings: ControllerSettings = field(default_factory=ControllerSettings)
    active_pattern_ids: list[str] = field(default_factory=list)
    learning: LearningRecord = field(default_factory=LearningRecord)
    state: CharacterState = field(default_factory=CharacterState)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def enabled(self) -> bool:
        return self.settings.enabled and self.settings.autonomy_level != AutonomyLevel.MANUAL

    def add_pending(self, action: AIAction) -> None:
        self.state.pending_actions.append(action)
        self.state.last_decision_at = action.timestamp

    def remove_pending(self, action_id: str) -> bool:
        before = len(self.state.pending_actions)
        self.state.pending_actions = [a for a in self.state.pending_actions if a.id != action_id]
        return len(self.state.pending_actions) != before

    def update_settings(self, **changes: Any) -> ControllerSettings:
        """Apply setting changes; ``enabled`` follows autonomy unless given.

        Manual autonomy always leaves the controller disabled.

        Raises:
            ValueError: If a setting name is unknown
            pydantic.ValidationError: If a value is out of range
        """
        unknown = set(changes) - set(ControllerSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown controller settings: {', '.join(sorted(unknown))}")

        data = self.settings.model_dump()
        data.update(changes)
        if "autonomy_level" in changes and "enabled" not in changes:
            data["enabled"] = AutonomyLevel(changes["autonomy_level"]) != AutonomyLevel.MANUAL
        self.settings = ControllerSettings.model_validate(data)
        return self.settings

    def summary(self) -> "CharacterControllerSummary":
        return CharacterControllerSummary(
            character_id=self.character_id,
            character_type=self.character_type,
            enabled=self.settings.enabled,
            autonomy_level=self.settings.autonomy_level,
            active_pattern_ids=list(self.active_pattern_ids),
            pending_actions=len(self.state.pending_actions),
            last_decision_at=self.state.last_decision_at,
            adaptive_weights=dict(self.learning.adaptive_weights),
        )


@dataclass
class PerformanceCounters:
    """Aggregate session metrics, updated by decisions and feedback."""

    started_at: datetime = field(default_factory=utcnow)
    total_decisions: int = 0
    executed_actions: int = 0
    total_response_ms: float = 0.0
    feedback_count: int = 0
    rating_sum: int = 0

    def record_decision(self, response_ms: float) -> None:
        self.total_decisions += 1
        self.total_response_ms += response_ms

    def record_execution(self) -> None:
        self.executed_actions += 1

    def record_rating(self, rating: int) -> None:
        self.feedback_count += 1
        self.rating_sum += rating

    def snapshot(self, now: Optional[datetime] = None) -> "PerformanceSnapshot":
        now = now or utcnow()
        minutes = max((now - self.started_at).total_seconds() / 60, 1 / 60)
        return PerformanceSnapshot(
            total_decisions=self.total_decisions,
            actions_per_minute=self.total_decisions / minutes,
            average_response_time=(
                self.total_response_ms / self.total_decisions if self.total_decisions else 0.0
            ),
            player_satisfaction=self.rating_sum / self.feedback_count if self.feedback_count else 0.0,
            gm_workload_reduction=(
                self.executed_actions / self.total_decisions if self.total_decisions else 0.0
            ),
        )


@dataclass
class SessionController:
    session_id: str
    settings: SessionSettings = field(default_factory=SessionSettings)
    progression: ProgressionControl = field(default_factory=ProgressionControl)
    character_controllers: dict[str, CharacterController] = field(default_factory=dict)
    performance: PerformanceCounters = field(default_factory=PerformanceCounters)

    def summary(self) -> "SessionControllerSummary":
        return SessionControllerSummary(
            session_id=self.session_id,
            settings=self.settings.model_copy(),
            progression=self.progression.model_copy(),
            characters=[c.summary() for c in self.character_controllers.values()],
            performance=self.performance.snapshot(),
        )


# ── Read models ────────────────────────────────────────────────────────

class CharacterControllerSummary(BaseModel):
    character_id: str
    character_type: CharacterType
    enabled: bool
    autonomy_level: AutonomyLevel
    active_pattern_ids: list[str]
    pending_actions: int
    last_decision_at: Optional[datetime] = None
    adaptive_weights: dict[str, float]


class PerformanceSnapshot(BaseModel):
    total_decisions: int = 0
    actions_per_minute: float = 0.0
    average_response_time: float = 0.0  # milliseconds
    player_satisfaction: float = 0.0  # mean rating, 0 when unrated
    gm_workload_reduction: float = 0.0  # executed / decided


class SessionControllerSummary(BaseModel):
    session_id: str
    settings: SessionSettings
    progression: ProgressionControl
    characters: list[CharacterControllerSummary]
    performance: PerformanceSnapshot


class SessionStatus(BaseModel):
    session_id: str
    ai_control_active: bool
    controlled_characters: list[CharacterControllerSummary] = Field(default_factory=list)
    recent_actions: list[AIAction] = Field(default_factory=list)
    performance: PerformanceSnapshot = Field(default_factory=PerformanceSnapshot)
