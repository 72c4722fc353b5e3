"""
Shared test fixtures for the NPC Control test suite.

Provides:
- MockLLMProvider: deterministic LLM stub (no API keys needed)
- Database fixtures: in-memory SQLite, character and action stores
- Sample characters: NPC, Enemy, PC and a manual-autonomy NPC
- A wired AICharacterService with a seeded random source
- Markers: live (needs API keys)
"""

import asyncio
import json
import os
import random
from collections import deque
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

# Set test environment BEFORE any npc_control imports
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from npc_control.agents.action_content import ActionContentGenerator
from npc_control.behavior import BehaviorPatternCatalog
from npc_control.characters import (
    AICombatBehavior,
    AIPersonality,
    EnemyCharacter,
    EnemyCombat,
    EnemyData,
    NPCCharacter,
    NPCData,
    PlayerCharacter,
)
from npc_control.core.service import AICharacterService
from npc_control.db.session import drop_db, get_engine, init_db, reset_engine
from npc_control.db.stores import SqlActionStore, SqlCharacterStore
from npc_control.enums import AutonomyLevel
from npc_control.llm.provider import LLMProvider, LLMResponse

SESSION_ID = "session-1"

# ---------------------------------------------------------------------------
# MockLLMProvider: deterministic stub
# ---------------------------------------------------------------------------

class MockLLMProvider(LLMProvider):
    """LLM provider that returns canned responses from a queue.

    Usage:
        provider = MockLLMProvider()
        provider.queue_response('{"description": "waves"}')
        resp = await provider.complete(messages=[...])
        assert resp.content == '{"description": "waves"}'
    """

    def __init__(self):
        super().__init__(api_key="mock-key", default_model="mock-model")
        self._response_queue: deque = deque()
        self._call_history: list[dict[str, Any]] = []
        self.delay: float = 0.0

    # --- Queue helpers ---

    def queue_response(self, content: str = "", **kwargs):
        """Queue a text response."""
        self._response_queue.append(
            LLMResponse(content=content, model="mock-model", **kwargs)
        )

    def queue_error(self, error: Exception):
        """Queue an exception to raise from the next call."""
        self._response_queue.append(error)

    @property
    def call_history(self) -> list[dict[str, Any]]:
        return self._call_history

    # --- LLMProvider interface ---

    @property
    def name(self) -> str:
        return "mock"

    def get_default_model(self) -> str:
        return "mock-model"

    def get_fast_model(self) -> str:
        return "mock-fast"

    async def complete(
        self,
        messages,
        system=None,
        model=None,
        max_tokens=1024,
        temperature=0.7,
    ) -> LLMResponse:
        self._call_history.append({
            "method": "complete",
            "messages": messages,
            "system": system,
            "model": model,
            "max_tokens": max_tokens,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self._response_queue:
            item = self._response_queue.popleft()
            if isinstance(item, Exception):
                raise item
            return item
        return LLMResponse(content="mock response", model="mock-model")

    def _init_client(self):
        pass  # No real client needed


def action_json(**overrides) -> str:
    """A well-formed action-content reply, with optional field overrides."""
    payload = {
        "description": "Mira leans over the bar and offers the party a warm stew.",
        "target": "pc-1",
        "parameters": {"tone": "warm"},
        "confidence": 0.85,
        "reasoning": "Mira is friendly and wants the inn to prosper.",
        "alternatives": ["ask about their travels", "ignore them"],
        "personality_factors": ["warm", "curious"],
    }
    payload.update(overrides)
    return json.dumps(payload)


# ---------------------------------------------------------------------------
# LLM fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_provider():
    """Fresh MockLLMProvider instance."""
    return MockLLMProvider()


@pytest.fixture
def mock_llm_manager(mock_provider):
    """Patch get_llm_manager to return a manager using MockLLMProvider."""
    manager = MagicMock()
    manager.get_provider.return_value = mock_provider
    manager.get_provider_for_agent.return_value = (mock_provider, "mock-model")
    manager.primary_provider = "mock"
    manager.get_fast_model.return_value = "mock-fast"

    with patch("npc_control.llm.manager.get_llm_manager", return_value=manager):
        # Also patch from agents.base where it's imported directly
        with patch("npc_control.agents.base.get_llm_manager", return_value=manager):
            yield manager


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fresh_db():
    """Create an in-memory SQLite database with all tables."""
    reset_engine()
    init_db()
    yield get_engine()
    drop_db()
    reset_engine()


@pytest.fixture
def character_store(fresh_db):
    return SqlCharacterStore()


@pytest.fixture
def action_store(fresh_db):
    return SqlActionStore()


# ---------------------------------------------------------------------------
# Sample characters
# ---------------------------------------------------------------------------

@pytest.fixture
def npc():
    """Friendly innkeeper NPC with assisted autonomy."""
    return NPCCharacter(
        id="npc-1",
        name="Mira",
        description="Innkeeper of the Gilded Goose",
        session_id=SESSION_ID,
        npc_data=NPCData(
            importance="major",
            disposition="friendly",
            occupation="Innkeeper",
            location="Gilded Goose",
            ai_personality=AIPersonality(
                traits=["warm", "curious"],
                goals=["keep the inn running"],
                motivations=["family"],
                fears=["fire"],
                autonomy_level=AutonomyLevel.ASSISTED,
            ),
        ),
    )


@pytest.fixture
def enemy():
    """Goblin skirmisher with autonomous combat behavior."""
    return EnemyCharacter(
        id="enemy-1",
        name="Grik",
        description="A wiry goblin with a rusty blade",
        session_id=SESSION_ID,
        current_hp=30,
        max_hp=30,
        enemy_data=EnemyData(
            category="goblin",
            challenge_rating=0.5,
            combat=EnemyCombat(
                tactics=["ambush", "hit_and_run"],
                ai_combat_behavior=AICombatBehavior(
                    autonomy_level=AutonomyLevel.AUTONOMOUS,
                    aggression=8,
                    intelligence=4,
                    teamwork=3,
                    preservation=6,
                ),
            ),
        ),
    )


@pytest.fixture
def pc():
    return PlayerCharacter(id="pc-1", name="Aria", description="Half-elf ranger", session_id=SESSION_ID)


@pytest.fixture
def manual_npc():
    """NPC whose personality keeps it under manual (GM) control."""
    return NPCCharacter(
        id="npc-manual",
        name="Old Tom",
        session_id=SESSION_ID,
        npc_data=NPCData(ai_personality=AIPersonality(autonomy_level=AutonomyLevel.MANUAL)),
    )


@pytest.fixture
def characters(npc, enemy, pc, manual_npc):
    return [npc, enemy, pc, manual_npc]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

@pytest.fixture
def catalog():
    return BehaviorPatternCatalog.load_default()


@pytest.fixture
def service(mock_llm_manager, character_store, action_store, catalog, characters):
    """AICharacterService on the in-memory DB with all sample characters stored."""
    for character in characters:
        character_store.add_character(character)
    return AICharacterService(
        catalog=catalog,
        character_store=character_store,
        action_store=action_store,
        generator=ActionContentGenerator(timeout=1.0),
        rng=random.Random(1234),
    )


@pytest.fixture
async def controlled_service(service, characters):
    """Service with AI control already started for SESSION_ID."""
    await service.start_control(SESSION_ID, characters)
    return service
