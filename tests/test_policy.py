"""
Tests for the policy store.

Validates that the Q-table:
- Reads back what was written
- Inserts defaults on value lookups, never on membership checks
- Selects the best action correctly
- Merges with the right-hand side winning
"""
import math

import pytest

from relearn import Action, Policy, State


@pytest.fixture
def memory() -> Policy:
    policy = Policy()
    policy.update(State("hello"), Action(1), 0)
    policy.update(State("world"), Action(2), 1)
    return policy


class TestPolicyValues:
    """Tests for update/value/actions."""

    def test_update_then_value(self, memory):
        """Values written with update are read back."""
        assert memory.value(State("hello"), Action(1)) == 0
        assert memory.value(State("world"), Action(2)) == 1

    def test_update_overwrites(self, memory):
        memory.update(State("hello"), Action(1), -0.25)
        assert memory.value(State("hello"), Action(1)) == -0.25

    def test_reward_does_not_split_keys(self):
        """States differing only by reward share one entry."""
        policy = Policy()
        policy.update(State("s", reward=1.0), Action("a"), 0.5)
        assert policy.value(State("s"), Action("a")) == 0.5
        assert len(policy) == 1

    def test_value_defaults_to_zero_and_inserts(self):
        """Reading a missing value inserts a zero entry."""
        policy = Policy()
        assert not policy.contains(State("x"), Action("y"))
        assert policy.value(State("x"), Action("y")) == 0.0
        assert policy.contains(State("x"), Action("y"))

    def test_actions_returns_copy(self, memory):
        """Actions mapping matches inserted values and is a copy."""
        actions = memory.actions(State("world"))
        assert actions == {Action(2): 1}

        actions[Action(99)] = 5.0
        assert not memory.contains(State("world"), Action(99))

    def test_actions_unseen_state_inserts_empty(self):
        policy = Policy()
        assert policy.actions(State("new")) == {}
        assert State("new") in policy

    def test_membership_does_not_insert(self):
        policy = Policy()
        assert State("ghost") not in policy
        assert not policy.contains(State("ghost"))
        assert len(policy) == 0

    def test_values_stored_as_float(self):
        policy = Policy()
        policy.update(State(0), Action(0), 1)
        assert isinstance(policy.value(State(0), Action(0)), float)

    def test_custom_value_type(self):
        """The value type is configurable."""
        policy = Policy(value_type=int)
        policy.update(State(0), Action(0), 2.7)
        assert policy.value(State(0), Action(0)) == 2


class TestPolicyBest:
    """Tests for best/best_value/best_action."""

    def test_best_action(self, memory):
        assert memory.best_action(State("world")) == Action(2)
        assert memory.best_value(State("world")) == 1
        assert memory.best_action(State("hello")) == Action(1)
        assert memory.best_value(State("hello")) == 0

    def test_best_is_max(self):
        """best_value equals the max over all recorded values."""
        policy = Policy()
        s = State("s")
        for trait, value in [("a", 0.1), ("b", 0.7), ("c", -0.3), ("d", 0.4)]:
            policy.update(s, Action(trait), value)

        expected = max(policy.value(s, a) for a in policy.actions(s))
        assert policy.best_value(s) == expected
        assert policy.value(s, policy.best_action(s)) == expected
        assert policy.best(s) == (Action("b"), 0.7)

    def test_negative_values(self):
        policy = Policy()
        policy.update(State("s"), Action("a"), -2.0)
        policy.update(State("s"), Action("b"), -1.0)
        assert policy.best(State("s")) == (Action("b"), -1.0)

    def test_unknown_state(self):
        """No recorded actions: no action and a NaN value."""
        policy = Policy()
        action, value = policy.best(State("nowhere"))
        assert action is None
        assert math.isnan(value)
        assert policy.best_action(State("nowhere")) is None
        assert math.isnan(policy.best_value(State("nowhere")))

    def test_tie_returns_a_maximal_action(self):
        policy = Policy()
        policy.update(State("s"), Action("a"), 1.0)
        policy.update(State("s"), Action("b"), 1.0)
        assert policy.best_action(State("s")) in (Action("a"), Action("b"))
        assert policy.best_value(State("s")) == 1.0


class TestPolicyMerge:
    """Tests for merging policies."""

    def test_right_hand_wins(self):
        p1 = Policy()
        p2 = Policy()
        p1.update(State("s"), Action("a"), 1.0)
        p1.update(State("only_p1"), Action("x"), 3.0)
        p2.update(State("s"), Action("a"), 2.0)

        p1.merge(p2)

        assert p1.value(State("s"), Action("a")) == 2.0
        assert p1.value(State("only_p1"), Action("x")) == 3.0

    def test_merge_operator(self):
        """+= concatenates policies, inserting what is missing."""
        lhs = Policy()
        rhs = Policy()
        lhs.update(State("hello"), Action(1), 0)
        lhs.update(State("world"), Action(2), 1)

        rhs.update(State("hello"), Action(1), 0)
        rhs.update(State("cruel"), Action(2), 0)
        rhs.update(State("world"), Action(3), 1)

        lhs += rhs

        assert lhs.value(State("hello"), Action(1)) == 0
        assert lhs.value(State("cruel"), Action(2)) == 0
        assert lhs.value(State("world"), Action(3)) == 1
        assert lhs.value(State("world"), Action(2)) == 1

    def test_merge_skips_empty_rows(self):
        """States with no recorded actions are not copied."""
        lhs = Policy()
        rhs = Policy()
        rhs.actions(State("seen"))
        rhs.update(State("s"), Action("a"), 1.0)

        lhs.merge(rhs)

        assert State("seen") not in lhs
        assert len(lhs) == 1

    def test_merge_leaves_other_untouched(self):
        lhs = Policy()
        rhs = Policy()
        rhs.update(State("s"), Action("a"), 1.0)
        lhs.merge(rhs)
        lhs.update(State("s"), Action("a"), 5.0)
        assert rhs.value(State("s"), Action("a")) == 1.0


class TestPolicySerialization:
    """Tests for dictionary conversion and statistics."""

    def test_items(self, memory):
        triplets = sorted(
            (s.trait, a.trait, v) for s, a, v in memory.items()
        )
        assert triplets == [("hello", 1, 0.0), ("world", 2, 1.0)]

    def test_dict_roundtrip(self):
        policy = Policy()
        policy.update(State((0, 1)), Action("up"), 0.5)
        policy.update(State((0, 2)), Action(None), 1.0)

        restored = Policy.from_dict(policy.to_dict())
        assert restored == policy
        assert restored.best_action(State((0, 1))) == Action("up")

    def test_statistics(self, memory):
        stats = memory.get_statistics()
        assert stats["states"] == 2
        assert stats["entries"] == 2
        assert stats["max_value"] == 1.0
        assert stats["min_value"] == 0.0

    def test_empty_statistics(self):
        stats = Policy().get_statistics()
        assert stats["entries"] == 0
        assert stats["max_value"] is None

    def test_clear(self, memory):
        memory.clear()
        assert len(memory) == 0
