"""Tests for controller state, learning records and the session registry."""

import pytest
from pydantic import ValidationError

from npc_control.core.actions import (
    AIAction,
    ActionContextSnapshot,
    ActionDetails,
    DecisionMetadata,
    FeedbackEntry,
)
from npc_control.core.controllers import (
    CharacterController,
    ControllerSettings,
    LearningRecord,
    PerformanceCounters,
    SessionController,
    clamp_weight,
)
from npc_control.core.registry import SessionRegistry
from npc_control.enums import ActionType, AutonomyLevel, CharacterType, SessionMode


def make_action(action_id="a-1", action_type=ActionType.COMBAT, character_id="enemy-1", session_id="s-1"):
    return AIAction(
        id=action_id,
        character_id=character_id,
        type=action_type,
        details=ActionDetails(description="swings"),
        context=ActionContextSnapshot(
            session_id=session_id,
            session_mode=SessionMode.COMBAT,
            trigger_reason="Pattern: test",
        ),
        ai_decision=DecisionMetadata(confidence=0.5, reasoning="test"),
    )


def make_session(session_id, *character_ids):
    session = SessionController(session_id=session_id)
    for character_id in character_ids:
        session.character_controllers[character_id] = CharacterController(
            character_id=character_id,
            character_type=CharacterType.NPC,
            session_id=session_id,
        )
    return session


# ---------------------------------------------------------------------------
# Tests: LearningRecord
# ---------------------------------------------------------------------------

class TestLearningRecord:
    def test_fresh_record_is_neutral(self):
        record = LearningRecord()
        assert set(record.adaptive_weights) == {t.value for t in ActionType}
        assert all(w == 1.0 for w in record.adaptive_weights.values())
        assert not record.successful_actions and not record.failed_actions and not record.feedback_log

    def test_adjust_weight_clamps(self):
        record = LearningRecord()
        for _ in range(20):
            record.adjust_weight("combat", 0.2)
        assert record.weight_for("combat") == 2.0
        for _ in range(30):
            record.adjust_weight("combat", -0.2)
        assert record.weight_for("combat") == 0.1

    def test_clamp_weight(self):
        assert clamp_weight(5) == 2.0
        assert clamp_weight(-1) == 0.1
        assert clamp_weight(1.3) == 1.3

    def test_histories_by_rating(self):
        record = LearningRecord()
        action = make_action()
        record.record(action, FeedbackEntry(action_id=action.id, rating=5))
        record.record(action, FeedbackEntry(action_id=action.id, rating=3))
        record.record(action, FeedbackEntry(action_id=action.id, rating=1))
        assert len(record.feedback_log) == 3
        assert len(record.successful_actions) == 1
        assert len(record.failed_actions) == 1

    def test_histories_are_bounded(self):
        record = LearningRecord()
        limit = record.feedback_log.maxlen
        action = make_action()
        for _ in range(limit + 5):
            record.record(action, FeedbackEntry(action_id=action.id, rating=4))
        assert len(record.feedback_log) == limit
        assert len(record.successful_actions) == limit


# ---------------------------------------------------------------------------
# Tests: CharacterController
# ---------------------------------------------------------------------------

class TestCharacterController:
    def test_pending_actions(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1")
        action = make_action()
        controller.add_pending(action)
        assert controller.state.last_decision_at == action.timestamp
        assert controller.remove_pending(action.id) is True
        assert controller.remove_pending(action.id) is False

    def test_manual_autonomy_disables(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1")
        settings = controller.update_settings(autonomy_level="manual")
        assert settings.autonomy_level is AutonomyLevel.MANUAL
        assert controller.enabled is False

        controller.update_settings(autonomy_level=AutonomyLevel.AUTONOMOUS)
        assert controller.enabled is True

    def test_manual_ignores_explicit_enabled(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1")
        settings = controller.update_settings(autonomy_level="manual", enabled=True)
        assert settings.enabled is False
        assert controller.enabled is False

        controller.update_settings(enabled=True)
        assert controller.enabled is False

    def test_manual_settings_built_directly(self):
        settings = ControllerSettings(enabled=True, autonomy_level=AutonomyLevel.MANUAL)
        assert settings.enabled is False

    def test_other_settings_keep_enabled(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1")
        controller.update_settings(enabled=False)
        controller.update_settings(randomness=0.5)
        assert controller.enabled is False
        assert controller.settings.randomness == 0.5

    def test_invalid_settings_rejected(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1")
        with pytest.raises(ValidationError):
            controller.update_settings(intervention_threshold=3)
        with pytest.raises(ValueError, match="Unknown"):
            controller.update_settings(volume=11)
        assert controller.settings.intervention_threshold == 0.3

    def test_summary(self):
        controller = CharacterController("npc-1", CharacterType.NPC, "s-1", active_pattern_ids=["p"])
        controller.add_pending(make_action())
        summary = controller.summary()
        assert summary.pending_actions == 1
        assert summary.active_pattern_ids == ["p"]
        assert summary.adaptive_weights["combat"] == 1.0


# ---------------------------------------------------------------------------
# Tests: PerformanceCounters
# ---------------------------------------------------------------------------

class TestPerformanceCounters:
    def test_empty_snapshot(self):
        snapshot = PerformanceCounters().snapshot()
        assert snapshot.total_decisions == 0
        assert snapshot.average_response_time == 0.0
        assert snapshot.player_satisfaction == 0.0

    def test_snapshot(self):
        counters = PerformanceCounters()
        counters.record_decision(100)
        counters.record_decision(300)
        counters.record_execution()
        counters.record_rating(5)
        counters.record_rating(2)

        snapshot = counters.snapshot()
        assert snapshot.total_decisions == 2
        assert snapshot.average_response_time == 200
        assert snapshot.player_satisfaction == 3.5
        assert snapshot.gm_workload_reduction == 0.5
        assert snapshot.actions_per_minute > 0


# ---------------------------------------------------------------------------
# Tests: SessionRegistry
# ---------------------------------------------------------------------------

class TestSessionRegistry:
    async def test_register_and_lookup(self):
        registry = SessionRegistry()
        session = make_session("s-1", "npc-1", "npc-2")

        assert await registry.register(session) is None

        assert "s-1" in registry
        assert len(registry) == 1
        assert registry.get_session("s-1") is session
        assert registry.get_character_controller("npc-1") is session.character_controllers["npc-1"]
        assert registry.get_controller_in_session("s-1", "npc-2") is session.character_controllers["npc-2"]
        assert registry.get_controller_in_session("s-2", "npc-2") is None

    async def test_restart_replaces_controllers(self):
        registry = SessionRegistry()
        first = make_session("s-1", "npc-1", "npc-2")
        await registry.register(first)
        first.character_controllers["npc-1"].learning.adjust_weight("dialogue", 0.5)

        second = make_session("s-1", "npc-1")
        assert await registry.register(second) is first

        controller = registry.get_character_controller("npc-1")
        assert controller is second.character_controllers["npc-1"]
        assert controller.learning.weight_for("dialogue") == 1.0
        assert registry.get_character_controller("npc-2") is None

    async def test_remove_unindexes(self):
        registry = SessionRegistry()
        await registry.register(make_session("s-1", "npc-1"))

        removed = await registry.remove("s-1")

        assert removed.session_id == "s-1"
        assert registry.get_character_controller("npc-1") is None
        assert registry.get_controller_in_session("s-1", "npc-1") is None
        assert await registry.remove("s-1") is None

    async def test_removing_older_session_keeps_newer_index(self):
        registry = SessionRegistry()
        await registry.register(make_session("s-1", "npc-1"))
        newer = make_session("s-2", "npc-1")
        await registry.register(newer)

        await registry.remove("s-1")

        assert registry.get_character_controller("npc-1") is newer.character_controllers["npc-1"]

    async def test_clear(self):
        registry = SessionRegistry()
        await registry.register(make_session("s-1", "npc-1"))
        await registry.register(make_session("s-2", "npc-2"))

        cleared = await registry.clear()

        assert sorted(s.session_id for s in cleared) == ["s-1", "s-2"]
        assert registry.session_ids() == []
        assert registry.get_character_controller("npc-2") is None
