"""
Tests for epsilon-greedy action selection.
"""
import pytest

from relearn import Action, EpsilonGreedy, Policy, State

MOVES = [Action("up"), Action("down"), Action("left"), Action("right")]


@pytest.fixture
def trained() -> Policy:
    policy = Policy()
    policy.update(State("s"), Action("up"), 0.1)
    policy.update(State("s"), Action("right"), 0.9)
    return policy


class TestEpsilonGreedy:
    """Tests for EpsilonGreedy."""

    def test_greedy_when_no_exploration(self, trained):
        selector = EpsilonGreedy(trained, exploration_rate=0.0, prng_seed=1)
        for _ in range(20):
            assert selector.select(State("s"), MOVES) == Action("right")
        assert selector.exploitations == 20
        assert selector.explorations == 0

    def test_always_explores(self, trained):
        selector = EpsilonGreedy(trained, exploration_rate=1.0, prng_seed=1)
        picks = [selector.select(State("s"), MOVES) for _ in range(50)]
        assert all(p in MOVES for p in picks)
        assert len(set(picks)) > 1
        assert selector.explorations == 50

    def test_deterministic_with_seed(self, trained):
        a = EpsilonGreedy(trained, exploration_rate=0.5, prng_seed=42)
        b = EpsilonGreedy(trained, exploration_rate=0.5, prng_seed=42)
        picks_a = [a.select(State("s"), MOVES) for _ in range(30)]
        picks_b = [b.select(State("s"), MOVES) for _ in range(30)]
        assert picks_a == picks_b

    def test_unknown_state_explores(self):
        selector = EpsilonGreedy(Policy(), exploration_rate=0.0, prng_seed=3)
        assert selector.select(State("new"), MOVES) in MOVES
        assert selector.explorations == 1

    def test_no_candidates_uses_policy(self, trained):
        selector = EpsilonGreedy(trained, exploration_rate=1.0)
        assert selector.select(State("s")) == Action("right")

    def test_nothing_to_choose(self):
        selector = EpsilonGreedy(Policy())
        with pytest.raises(ValueError):
            selector.select(State("void"))

    def test_follows_policy_updates(self, trained):
        selector = EpsilonGreedy(trained, exploration_rate=0.0)
        trained.update(State("s"), Action("down"), 5.0)
        assert selector.select(State("s"), MOVES) == Action("down")

    def test_statistics(self, trained):
        selector = EpsilonGreedy(trained, exploration_rate=0.0)
        selector.select(State("s"), MOVES)
        stats = selector.get_statistics()
        assert stats["exploitations"] == 1
        assert stats["explore_ratio"] == 0.0
