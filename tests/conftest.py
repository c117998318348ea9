"""
Shared pytest fixtures for Kuhn Poker tests.

Provides seeded generators, the two extreme profiles and a temporary
JSON store.
"""

from __future__ import annotations

import numpy as np
import pytest

from kuhn_poker.engine.cards import str_to_card
from kuhn_poker.engine.game_state import HandState
from kuhn_poker.engine.profiles import StrategyProfile, uniform_profile
from kuhn_poker.engine.rules import str_to_history
from kuhn_poker.persistence.json_store import JsonStore


def dealt(first: str, second: str, history: str = '') -> HandState:
    """Build a HandState with a preset deal and replayed history.

    Examples:
        >>> dealt('K', 'A', 'b').pot
        3
    """
    state = HandState()
    state.start_hand(cards=(str_to_card(first), str_to_card(second)))
    for action in str_to_history(history):
        state.apply_action(action)
    return state


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def aggressive() -> StrategyProfile:
    """Always bets and always calls."""
    return uniform_profile(1.0, name="Always aggressive")


@pytest.fixture
def passive() -> StrategyProfile:
    """Always checks and always folds."""
    return uniform_profile(0.0, name="Always passive")


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(tmp_path / "data")


@pytest.fixture
def d():
    """Expose the dealt() helper as a fixture for convenience."""
    return dealt
