"""
Canonical string enumerations for NPC Control.

StrEnum values serialize as plain strings, so they're
drop-in replacements for raw string literals in database
columns, JSON payloads, YAML catalogs and LLM prompts.
"""

from enum import StrEnum


# ── Characters ─────────────────────────────────────────────────────────

class CharacterType(StrEnum):
    """Character archetypes. Only NPC and Enemy are AI-controlled."""
    PC = "PC"
    NPC = "NPC"
    ENEMY = "Enemy"


class AutonomyLevel(StrEnum):
    """How much freedom a controller has to act on its own."""
    MANUAL = "manual"
    ASSISTED = "assisted"
    AUTONOMOUS = "autonomous"


# ── Situation ──────────────────────────────────────────────────────────

class SessionMode(StrEnum):
    """Situation modes a behavior pattern can apply to."""
    EXPLORATION = "exploration"
    COMBAT = "combat"
    SOCIAL = "social"
    PLANNING = "planning"
    REST = "rest"


# ── Behavior ───────────────────────────────────────────────────────────

class ActionType(StrEnum):
    """Concrete action categories produced by behavior patterns."""
    DIALOGUE = "dialogue"
    MOVEMENT = "movement"
    COMBAT = "combat"
    INTERACTION = "interaction"
    SKILL_USE = "skill_use"
    SPELL_CAST = "spell_cast"


class PatternFrequency(StrEnum):
    """Informational hint for how often a pattern should surface."""
    ALWAYS = "always"
    OFTEN = "often"
    SOMETIMES = "sometimes"
    RARELY = "rarely"


# ── Session settings ───────────────────────────────────────────────────

class AutomationLevel(StrEnum):
    """Session-wide AI automation level."""
    MINIMAL = "minimal"
    MODERATE = "moderate"
    EXTENSIVE = "extensive"
    FULL = "full"


class GMInterventionMode(StrEnum):
    """When the GM is expected to step in."""
    PROACTIVE = "proactive"
    REACTIVE = "reactive"
    MINIMAL = "minimal"


class ConflictResolution(StrEnum):
    """How the session resolves competing AI suggestions."""
    AUTOMATIC = "automatic"
    SUGGEST = "suggest"
    MANUAL = "manual"
