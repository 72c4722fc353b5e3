"""
Action Content Generator for NPC Control.

Turns a selected action template into a concrete, narrated action for
one character. The AI path asks the configured LLM for a JSON object;
any failure on that path (no provider, transport error, timeout,
malformed JSON) lands on a deterministic fallback built from the
action type alone.
"""

import asyncio
import json
import logging
import math
import re
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ..behavior.patterns import ActionTemplate
from ..characters import EnemyCharacter, NPCCharacter
from ..config import Config
from ..core.context import DecisionContext
from ..enums import ActionType
from ..errors import GenerationError
from .base import BaseAgent

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.3
FALLBACK_REASONING = "fallback decision"
FALLBACK_ALTERNATIVES = ("wait", "observe")
FALLBACK_PERSONALITY_FACTORS = ("basic behavior pattern",)

FALLBACK_DESCRIPTIONS = {
    ActionType.DIALOGUE: "observes the surroundings and speaks up at the right moment",
    ActionType.MOVEMENT: "moves to a tactically advantageous position",
    ActionType.COMBAT: "attacks the most threatening target",
    ActionType.INTERACTION: "interacts with nearby objects or the environment",
    ActionType.SKILL_USE: "uses a skill suited to the situation",
    ActionType.SPELL_CAST: "casts a spell strategically",
}
DEFAULT_FALLBACK_DESCRIPTION = "acts according to the situation"

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


class ActionContent(BaseModel):
    """Concrete content of one action, from the AI or the fallback."""

    description: str = "AI-generated action"
    target: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.5
    reasoning: str = "AI judgment"
    alternatives: list[str] = Field(default_factory=list)
    personality_factors: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("personality_factors", "personalityFactors"),
    )
    is_fallback: bool = False

    @field_validator("description", "reasoning", mode="before")
    @classmethod
    def _blank_to_default(cls, value, info):
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("parameters", "alternatives", "personality_factors", mode="before")
    @classmethod
    def _null_to_empty(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default_factory()
        return value

    @field_validator("target", mode="before")
    @classmethod
    def _stringify_target(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        if value is None:
            return 0.5
        if isinstance(value, bool):
            raise ValueError("confidence must be a number")
        confidence = float(value)
        if math.isnan(confidence):
            raise ValueError("confidence must be a number")
        return min(max(confidence, 0.0), 1.0)


def fallback_content(action_type: ActionType) -> ActionContent:
    """Deterministic content for an action type. Never fails."""
    return ActionContent(
        description=FALLBACK_DESCRIPTIONS.get(action_type, DEFAULT_FALLBACK_DESCRIPTION),
        parameters={},
        confidence=FALLBACK_CONFIDENCE,
        reasoning=FALLBACK_REASONING,
        alternatives=list(FALLBACK_ALTERNATIVES),
        personality_factors=list(FALLBACK_PERSONALITY_FACTORS),
        is_fallback=True,
    )


def _listed(values, default: str = "unknown") -> str:
    return ", ".join(values) if values else default


class ActionContentGenerator(BaseAgent):
    """Elaborates an action template into narrated, character-specific content."""

    agent_name = "action_content"

    def __init__(self, timeout: Optional[float] = None, model_override: str | None = None):
        super().__init__(model_override=model_override)
        self.timeout = timeout if timeout is not None else Config.AI_TIMEOUT_SECONDS

    @property
    def system_prompt(self):
        return """You are the behavior engine for AI-controlled characters in a tabletop RPG session.

Given a character, their situation and the kind of action they have chosen,
describe one concrete thing the character does next.

## Rules:
- Stay true to the character's personality, goals and combat temperament
- Be specific to the location and the people present
- Keep the action achievable in a single turn
- Reply with a single JSON object and nothing else"""

    def build_prompt(self, character, context: DecisionContext, template: ActionTemplate) -> str:
        """Assemble the user prompt for one elaboration."""
        state = context.character_state
        character_info = (
            f"**Name:** {character.name}\n"
            f"**Description:** {character.description or 'unknown'}\n"
            f"**Level:** {character.level}\n"
            f"**HP:** {state.current_hp}/{state.max_hp}"
        )

        situation = (
            f"**Mode:** {context.mode}\n"
            f"**Location:** {context.environment.location}\n"
            f"**Characters nearby:** {len(context.environment.present_characters)}\n"
            f"**Mood:** {state.mood or 'normal'}\n"
            f"**Urgency:** {context.urgency}/10"
        )
        if context.game.recent_events:
            situation += f"\n**Recent events:** {_listed(context.game.recent_events[-5:])}"

        requested = f"**Action type:** {template.type}"
        if template.narrative_hints:
            requested += "\n**Flavor examples:**\n" + "\n".join(f"- {hint}" for hint in template.narrative_hints)

        instructions = """## Response Format
Respond with this JSON object:
{
  "description": "what the character does, in one or two vivid sentences",
  "target": "id of the character targeted, or null",
  "parameters": {},
  "confidence": 0.8,
  "reasoning": "why this character chose this action",
  "alternatives": ["another option considered", "and another"],
  "personality_factors": ["trait that drove the choice", "another trait"]
}"""

        return self._build_message(
            instructions,
            {
                "character": character_info,
                "personality": self._personality_section(character),
                "current_situation": situation,
                "requested_action": requested,
            },
        )

    @staticmethod
    def _personality_section(character) -> str:
        """Archetype-specific traits; empty for player characters."""
        if isinstance(character, NPCCharacter):
            data = character.npc_data
            personality = data.ai_personality
            return (
                f"**Traits:** {_listed(personality.traits)}\n"
                f"**Goals:** {_listed(personality.goals)}\n"
                f"**Motivations:** {_listed(personality.motivations)}\n"
                f"**Fears:** {_listed(personality.fears)}\n"
                f"**Disposition:** {data.disposition or 'unknown'}\n"
                f"**Occupation:** {data.occupation or 'unknown'}"
            )
        if isinstance(character, EnemyCharacter):
            data = character.enemy_data
            behavior = data.combat.ai_combat_behavior
            return (
                f"**Category:** {data.category or 'unknown'}\n"
                f"**Tactics:** {_listed(data.combat.tactics)}\n"
                f"**Aggression:** {behavior.aggression}/10\n"
                f"**Intelligence:** {behavior.intelligence}/10\n"
                f"**Teamwork:** {behavior.teamwork}/10"
            )
        return ""

    def parse_response(self, raw: str) -> ActionContent:
        """Parse the AI's JSON reply.

        Raises:
            GenerationError: If the reply is not a JSON object of the expected shape
        """
        text = raw or ""
        fenced = _CODE_FENCE.match(text)
        if fenced:
            text = fenced.group(1)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise GenerationError(f"AI response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise GenerationError(f"AI response is a JSON {type(data).__name__}, expected an object")

        data.pop("is_fallback", None)
        try:
            return ActionContent.model_validate(data)
        except ValidationError as e:
            raise GenerationError(f"AI response has the wrong shape: {e}") from e

    async def elaborate(self, character, context: DecisionContext, template: ActionTemplate) -> ActionContent:
        """Produce content for ``template``, falling back on any AI failure.

        A single attempt bounded by ``self.timeout``; never raises for
        generation problems.
        """
        if character is None:
            logger.warning(f"Character {context.character_id} not found, using fallback action")
            return fallback_content(template.type)

        try:
            prompt = self.build_prompt(character, context, template)
            raw = await asyncio.wait_for(
                self.call(prompt, max_tokens=Config.ACTION_MAX_TOKENS),
                timeout=self.timeout,
            )
            return self.parse_response(raw)
        except asyncio.TimeoutError:
            logger.warning(
                f"Action generation for {character.name} timed out after {self.timeout}s, using fallback"
            )
        except GenerationError as e:
            logger.warning(f"Action generation for {character.name} returned unusable content: {e}")
        except Exception as e:
            logger.warning(f"Action generation for {character.name} failed ({type(e).__name__}: {e}), using fallback")

        return fallback_content(template.type)
