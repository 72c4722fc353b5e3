"""
Decision context: the situation snapshot a single decision is made from.

Built once per ``trigger_action`` call from a partial, nested mapping
supplied by the caller. Missing sections are filled with defaults;
malformed ones fail validation before any controller state is touched.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import CharacterType, SessionMode


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SessionState(_Frozen):
    mode: SessionMode = SessionMode.EXPLORATION
    round: Optional[int] = None
    turn: Optional[int] = None
    active_event: Optional[str] = None
    time_of_day: str = "morning"
    available_actions: tuple[str, ...] = ()


class CharacterState(_Frozen):
    current_hp: int = 100
    max_hp: int = 100
    status_effects: tuple[str, ...] = ()
    mood: Optional[str] = None

    @property
    def hp_percent(self) -> float:
        """Current HP as a percentage of max (0 when max is not positive)."""
        if self.max_hp <= 0:
            return 0.0
        return self.current_hp / self.max_hp * 100


class EnvironmentContext(_Frozen):
    location: str = "unknown"
    present_characters: tuple[str, ...] = ()


class RelationshipContext(_Frozen):
    pc_relationships: dict[str, Any] = Field(default_factory=dict)
    npc_relationships: dict[str, Any] = Field(default_factory=dict)
    recent_interactions: tuple[str, ...] = ()


class GameContext(_Frozen):
    current_quests: tuple[str, ...] = ()
    recent_events: tuple[str, ...] = ()
    party_mood: str = "neutral"
    story_tension: int = 5
    urgency: int = 5
    plot_developments: tuple[str, ...] = ()


class DecisionContext(_Frozen):
    """Immutable per-decision snapshot. Never persisted as-is."""

    session_id: str
    character_id: str
    character_type: CharacterType
    session_state: SessionState = Field(default_factory=SessionState)
    character_state: CharacterState = Field(default_factory=CharacterState)
    environment: EnvironmentContext = Field(default_factory=EnvironmentContext)
    relationships: RelationshipContext = Field(default_factory=RelationshipContext)
    game: GameContext = Field(default_factory=GameContext)
    active_triggers: frozenset[str] = frozenset()

    @property
    def mode(self) -> SessionMode:
        return self.session_state.mode

    @property
    def urgency(self) -> int:
        return self.game.urgency


def build_decision_context(
    session_id: str,
    character_id: str,
    character_type: CharacterType,
    partial: Optional[dict[str, Any]] = None,
    default_hp: Optional[tuple[int, int]] = None,
) -> DecisionContext:
    """Fill a partial caller-supplied context with defaults.

    Args:
        session_id: Session the decision belongs to
        character_id: Character that acts
        character_type: Archetype of the acting character
        partial: Optional nested mapping with any of ``session_state``,
            ``character_state``, ``environment_context``,
            ``relationship_context``, ``game_context`` and ``triggers``
        default_hp: (current, max) HP used when ``character_state`` omits them

    Raises:
        pydantic.ValidationError: If a supplied section is malformed
    """
    partial = partial or {}

    character_state = dict(partial.get("character_state") or {})
    if default_hp is not None:
        character_state.setdefault("current_hp", default_hp[0])
        character_state.setdefault("max_hp", default_hp[1])

    return DecisionContext.model_validate({
        "session_id": session_id,
        "character_id": character_id,
        "character_type": character_type,
        "session_state": partial.get("session_state") or {},
        "character_state": character_state,
        "environment": partial.get("environment_context") or {},
        "relationships": partial.get("relationship_context") or {},
        "game": partial.get("game_context") or {},
        "active_triggers": partial.get("triggers") or (),
    })
