"""Tests for ActionSelector weighted-random selection."""

import random
from collections import Counter

import pytest

from npc_control.behavior import ActionSelector, BehaviorPattern
from npc_control.enums import ActionType


def make_pattern(pattern_id, actions, priority=5):
    return BehaviorPattern.model_validate({
        "id": pattern_id,
        "name": pattern_id,
        "priority": priority,
        "conditions": {"character_types": ["Enemy"], "session_modes": ["combat"]},
        "actions": [{"type": t, "weight": w} for t, w in actions],
    })


class FixedRandom(random.Random):
    """Random source that always draws the same value."""

    def __init__(self, value):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def patterns():
    return [
        make_pattern("aggressive", [("combat", 15), ("dialogue", 3)], priority=9),
        make_pattern("caster", [("spell_cast", 6), ("skill_use", 2)], priority=6),
    ]


# ---------------------------------------------------------------------------
# Tests: candidates
# ---------------------------------------------------------------------------

class TestCandidates:
    def test_flattened_in_pattern_order(self, patterns):
        candidates = ActionSelector.candidates(patterns, {})
        assert [(c.pattern.id, c.template.type, c.weight) for c in candidates] == [
            ("aggressive", ActionType.COMBAT, 15),
            ("aggressive", ActionType.DIALOGUE, 3),
            ("caster", ActionType.SPELL_CAST, 6),
            ("caster", ActionType.SKILL_USE, 2),
        ]

    def test_adaptive_weights_scale_base_weight(self, patterns):
        candidates = ActionSelector.candidates(patterns, {"combat": 0.5, "skill_use": 2.0})
        assert [c.weight for c in candidates] == [7.5, 3, 6, 4]


# ---------------------------------------------------------------------------
# Tests: select
# ---------------------------------------------------------------------------

class TestSelect:
    def test_empty_patterns_select_nothing(self):
        assert ActionSelector(random.Random(1)).select([], {}) is None

    def test_walk_picks_by_cumulative_weight(self, patterns):
        # total 26: [0,15] combat, (15,18] dialogue, (18,24] spell, (24,26] skill
        cases = {0.0: "combat", 0.5: "combat", 0.65: "dialogue", 0.8: "spell_cast", 0.99: "skill_use"}
        for draw, expected in cases.items():
            chosen = ActionSelector(FixedRandom(draw)).select(patterns, {})
            assert chosen.template.type == expected

    def test_roundoff_falls_back_to_first_candidate(self, patterns):
        # A draw past the total leaves a positive remainder after the walk
        chosen = ActionSelector(FixedRandom(1.5)).select(patterns, {})
        assert chosen.pattern.id == "aggressive"
        assert chosen.template.type == ActionType.COMBAT

    def test_zero_weights_still_pick_first(self):
        pattern = make_pattern("idle", [("dialogue", 0), ("movement", 0)])
        chosen = ActionSelector(random.Random(3)).select([pattern], {})
        assert chosen.template.type == ActionType.DIALOGUE

    def test_reproducible_with_same_seed(self, patterns):
        selector_a = ActionSelector(random.Random(42))
        selector_b = ActionSelector(random.Random(42))
        run_a = [selector_a.select(patterns, {}).template.type for _ in range(50)]
        run_b = [selector_b.select(patterns, {}).template.type for _ in range(50)]
        assert run_a == run_b
        assert len(set(run_a)) > 1

    def test_frequencies_converge_to_weight_share(self, patterns):
        selector = ActionSelector(random.Random(2024))
        weights = {"combat": 1.0, "dialogue": 2.0, "spell_cast": 0.5, "skill_use": 1.0}
        n = 20000
        counts = Counter(selector.select(patterns, weights).template.type for _ in range(n))

        effective = {"combat": 15, "dialogue": 6, "spell_cast": 3, "skill_use": 2}
        total = sum(effective.values())
        for action_type, weight in effective.items():
            expected = weight / total
            assert counts[action_type] / n == pytest.approx(expected, abs=0.015)
