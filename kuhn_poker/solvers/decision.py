"""
AI decision procedure: turn a strategy profile into concrete actions.

At every decision the AI classifies the (history, seat) pair into a
DecisionPoint, looks up the profile probability p for its card and draws
exactly one uniform variate u from the supplied generator:

    u < p  → aggressive action (BET or CALL)
    u ≥ p  → passive action    (CHECK or FOLD)

So p = 1.0 always acts aggressively and p = 0.0 never does. The
procedure is pure apart from the random source.
"""

from __future__ import annotations

import logging

import numpy as np

from kuhn_poker.engine.cards import card_to_str
from kuhn_poker.engine.game_state import Action, HandStrategy
from kuhn_poker.engine.profiles import StrategyProfile
from kuhn_poker.solvers.information_sets import classify_decision_point

logger = logging.getLogger(__name__)


def decide_action(
    profile: StrategyProfile,
    card: int,
    history: str,
    is_first_actor: bool,
    rng: np.random.Generator,
) -> Action:
    """Choose one action for an AI holding ``card`` after ``history``.

    Args:
        profile:        Strategy profile driving the AI.
        card:           The AI's own card.
        history:        Betting history so far.
        is_first_actor: True if the AI is the first actor of this hand.
        rng:            Source of the single uniform draw.

    Returns:
        The aggressive or the passive legal action of the decision point.

    Raises:
        InvalidProfileError: If (history, seat) is not a decision point.
    """
    point = classify_decision_point(history, is_first_actor)
    p = profile.probability(point, card)
    u = rng.random()
    action = point.aggressive_action if u < p else point.passive_action
    logger.debug(
        "%s holding %s at %s: p=%.3f u=%.3f -> %s",
        profile.name, card_to_str(card), point.value, p, u, action.name,
    )
    return action


def make_profile_strategy(profile: StrategyProfile) -> HandStrategy:
    """Wrap ``profile`` as a hand-runner strategy callable.

    Example:
        >>> from kuhn_poker.engine.profiles import uniform_profile
        >>> strategy = make_profile_strategy(uniform_profile(1.0))
        >>> strategy(1, '', True, np.random.default_rng(0))
        <Action.BET: 'b'>
    """
    def strategy(card: int, history: str, is_first_actor: bool, rng: np.random.Generator) -> Action:
        return decide_action(profile, card, history, is_first_actor, rng)

    strategy.__name__ = f"profile_strategy[{profile.name}]"
    return strategy
