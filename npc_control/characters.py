"""
Character models for NPC Control.

A Character is a tagged variant on ``character_type``:

    PlayerCharacter  ("PC")    – never AI-controlled
    NPCCharacter     ("NPC")   – carries NPCData (personality)
    EnemyCharacter   ("Enemy") – carries EnemyData (combat behavior)

Code that needs archetype-specific data matches on the concrete class
instead of probing optional fields.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .enums import AutonomyLevel, CharacterType


class AIPersonality(BaseModel):
    """Personality traits that drive an NPC's decisions."""

    traits: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    motivations: list[str] = Field(default_factory=list)
    fears: list[str] = Field(default_factory=list)
    autonomy_level: Optional[AutonomyLevel] = None


class NPCData(BaseModel):
    """NPC-specific data."""

    importance: str = "minor"
    disposition: str = "neutral"
    occupation: str = "Villager"
    location: str = "Village"
    ai_personality: AIPersonality = Field(default_factory=AIPersonality)


class AICombatBehavior(BaseModel):
    """Combat temperament of an enemy (scores are 0-10)."""

    autonomy_level: Optional[AutonomyLevel] = None
    aggression: int = Field(default=5, ge=0, le=10)
    intelligence: int = Field(default=5, ge=0, le=10)
    teamwork: int = Field(default=5, ge=0, le=10)
    preservation: int = Field(default=5, ge=0, le=10)


class EnemyCombat(BaseModel):
    tactics: list[str] = Field(default_factory=list)
    ai_combat_behavior: AICombatBehavior = Field(default_factory=AICombatBehavior)


class EnemyData(BaseModel):
    """Enemy-specific data."""

    category: str = "minion"
    challenge_rating: float = 1
    encounter_level: int = 1
    combat: EnemyCombat = Field(default_factory=EnemyCombat)


class _CharacterBase(BaseModel):
    id: str
    name: str
    description: str = ""
    level: int = 1
    current_hp: int = 100
    max_hp: int = 100
    session_id: Optional[str] = None

    @property
    def archetype(self) -> CharacterType:
        return CharacterType(self.character_type)


class PlayerCharacter(_CharacterBase):
    character_type: Literal["PC"] = "PC"


class NPCCharacter(_CharacterBase):
    character_type: Literal["NPC"] = "NPC"
    npc_data: NPCData = Field(default_factory=NPCData)


class EnemyCharacter(_CharacterBase):
    character_type: Literal["Enemy"] = "Enemy"
    enemy_data: EnemyData = Field(default_factory=EnemyData)


Character = Annotated[
    Union[PlayerCharacter, NPCCharacter, EnemyCharacter],
    Field(discriminator="character_type"),
]

_character_adapter: TypeAdapter = TypeAdapter(Character)


def parse_character(data: dict) -> PlayerCharacter | NPCCharacter | EnemyCharacter:
    """Validate a raw mapping into the matching Character variant."""
    return _character_adapter.validate_python(data)


def default_npc_data() -> NPCData:
    """Archetype data for an NPC row stored without any."""
    return NPCData(
        ai_personality=AIPersonality(
            traits=["friendly"],
            goals=["help_adventurers"],
            motivations=["community"],
            fears=["monsters"],
            autonomy_level=AutonomyLevel.ASSISTED,
        )
    )


def default_enemy_data() -> EnemyData:
    """Archetype data for an Enemy row stored without any."""
    return EnemyData(
        combat=EnemyCombat(
            tactics=["basic_attack"],
            ai_combat_behavior=AICombatBehavior(
                autonomy_level=AutonomyLevel.AUTONOMOUS,
                aggression=7,
                intelligence=3,
                teamwork=2,
                preservation=5,
            ),
        )
    )


def initial_autonomy(character) -> AutonomyLevel:
    """Autonomy level a new controller starts with (default: assisted)."""
    if isinstance(character, NPCCharacter):
        level = character.npc_data.ai_personality.autonomy_level
    elif isinstance(character, EnemyCharacter):
        level = character.enemy_data.combat.ai_combat_behavior.autonomy_level
    else:
        level = None
    return level or AutonomyLevel.ASSISTED


def is_ai_controllable(character) -> bool:
    """Only NPCs and Enemies get controllers."""
    return isinstance(character, (NPCCharacter, EnemyCharacter))
