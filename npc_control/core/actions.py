"""AI action records: the immutable output of one decision."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import ActionType, SessionMode


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    target: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class ActionContextSnapshot(BaseModel):
    """Where and why the action was decided."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    round: Optional[int] = None
    turn: Optional[int] = None
    session_mode: SessionMode
    current_event: Optional[str] = None
    trigger_reason: str


class DecisionMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    confidence: float = Field(ge=0, le=1)
    reasoning: str
    alternative_options: list[str] = Field(default_factory=list)
    personality_factors: list[str] = Field(default_factory=list)


class FeedbackEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_id: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    recorded_at: datetime = Field(default_factory=utcnow)


class AIAction(BaseModel):
    """One decided action.

    Frozen: only ``executed_at`` and ``feedback`` ever change, and they
    change by producing an updated copy (``mark_executed`` /
    ``with_feedback``) that is saved over the stored record.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    character_id: str
    type: ActionType
    subtype: Optional[str] = None
    details: ActionDetails
    context: ActionContextSnapshot
    ai_decision: DecisionMetadata
    timestamp: datetime = Field(default_factory=utcnow)
    executed_at: Optional[datetime] = None
    duration: Optional[float] = None
    feedback: tuple[FeedbackEntry, ...] = ()

    @property
    def session_id(self) -> str:
        return self.context.session_id

    @property
    def is_executed(self) -> bool:
        return self.executed_at is not None

    def mark_executed(self, when: Optional[datetime] = None) -> "AIAction":
        return self.model_copy(update={"executed_at": when or utcnow()})

    def with_feedback(self, entry: FeedbackEntry) -> "AIAction":
        return self.model_copy(update={"feedback": self.feedback + (entry,)})
