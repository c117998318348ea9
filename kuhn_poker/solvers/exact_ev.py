"""
Exact expected-value calculator, best response and exploitability.

The Kuhn game tree is tiny: 6 equally likely ordered deals and at most
three actions per hand. The EV of profile A against profile B is therefore
computed in closed form rather than sampled:

    For each deal (first_card, second_card) and each seat assignment
    (A first / A second):
        walk the betting tree recursively, weighting each branch by the
        acting profile's probability, and settle each leaf.
    EV(A, B) = mean of the 12 values, signed to A.

Because the seats alternate in play, the seat-averaged game value is 0,
so any profile's EV against itself is exactly 0.

Best response (backward induction):
    For a fixed opponent profile, the responder's optimal pure action at
    each infoset (card, decision point) maximises the reach-weighted EV of
    the two actions. Deeper decisions (S1_CALL) are fixed before the
    decisions that lead to them (S1_BET). The responder's own reach
    probability is constant within an infoset and can be ignored.

    exploitability(P) = EV(best_response(P), P) ≥ 0,
    with equality exactly at an equilibrium profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, NamedTuple, Sequence

import numpy as np

from kuhn_poker.engine.cards import CARDS, card_key, card_to_str
from kuhn_poker.engine.deck import all_deals
from kuhn_poker.engine.game_state import Seat
from kuhn_poker.engine.profiles import StrategyProfile, builtin_profiles
from kuhn_poker.engine.rules import actor_for, is_terminal, settle_hand, str_to_history
from kuhn_poker.solvers.information_sets import DecisionPoint, classify_decision_point

logger = logging.getLogger(__name__)


# ─── Type aliases ─────────────────────────────────────────────────────────────

# policy(card, point) -> probability of the aggressive action
Policy = Callable[[int, DecisionPoint], float]


def _profile_policy(profile: StrategyProfile) -> Policy:
    return lambda card, point: profile.probability(point, card)


# ─── Result types ─────────────────────────────────────────────────────────────

class DealConfiguration(NamedTuple):
    """EV of one (deal, seat assignment) configuration, signed to profile A."""
    first_card: int
    second_card: int
    a_is_first: bool
    ev_to_a: float


@dataclass(frozen=True)
class ExactEvResult:
    """Closed-form EV of profile A against profile B.

    Attributes:
        profile_a:      Name of profile A.
        profile_b:      Name of profile B.
        ev:             Mean EV per hand for A over all 12 configurations.
        ev_as_first:    Mean EV for A over the 6 deals where A acts first.
        ev_as_second:   Mean EV for A over the 6 deals where A acts second.
        configurations: All 12 per-configuration values.
    """
    profile_a: str
    profile_b: str
    ev: float
    ev_as_first: float
    ev_as_second: float
    configurations: tuple[DealConfiguration, ...]


@dataclass(frozen=True)
class BestResponse:
    """Pure counter-strategy to a fixed profile, with its EV."""
    profile: StrategyProfile
    ev: float
    ev_as_first: float
    ev_as_second: float


# ─── Tree evaluation ──────────────────────────────────────────────────────────

def _node_ev(
    history: str,
    first_card: int,
    second_card: int,
    first_policy: Policy,
    second_policy: Policy,
) -> float:
    """Expected payoff to the first actor from ``history`` onwards."""
    if is_terminal(history):
        return float(settle_hand(history, first_card, second_card)[1])

    is_first = actor_for(history) is Seat.FIRST
    point = classify_decision_point(history, is_first)
    card = first_card if is_first else second_card
    p = (first_policy if is_first else second_policy)(card, point)

    ev = 0.0
    if p > 0.0:
        ev += p * _node_ev(
            history + point.aggressive_action.code,
            first_card, second_card, first_policy, second_policy,
        )
    if p < 1.0:
        ev += (1.0 - p) * _node_ev(
            history + point.passive_action.code,
            first_card, second_card, first_policy, second_policy,
        )
    return ev


def hand_ev(
    first_profile: StrategyProfile,
    second_profile: StrategyProfile,
    first_card: int,
    second_card: int,
) -> float:
    """Exact EV to the first actor for one fixed deal."""
    return _node_ev(
        '', first_card, second_card,
        _profile_policy(first_profile), _profile_policy(second_profile),
    )


# ─── Exact EV ─────────────────────────────────────────────────────────────────

def compute_exact_ev(profile_a: StrategyProfile, profile_b: StrategyProfile) -> ExactEvResult:
    """Closed-form EV of ``profile_a`` against ``profile_b``.

    Args:
        profile_a: Profile whose EV is reported.
        profile_b: Opponent profile.

    Returns:
        ExactEvResult with the seat-averaged EV and its two seat components.

    Example:
        >>> from kuhn_poker.engine.profiles import gto_profile
        >>> round(compute_exact_ev(gto_profile(), gto_profile()).ev, 12)
        0.0
    """
    policy_a = _profile_policy(profile_a)
    policy_b = _profile_policy(profile_b)

    configurations: list[DealConfiguration] = []
    for first_card, second_card in all_deals():
        ev_first = _node_ev('', first_card, second_card, policy_a, policy_b)
        configurations.append(DealConfiguration(first_card, second_card, True, ev_first))
    for first_card, second_card in all_deals():
        ev_second = -_node_ev('', first_card, second_card, policy_b, policy_a)
        configurations.append(DealConfiguration(first_card, second_card, False, ev_second))

    as_first = [c.ev_to_a for c in configurations if c.a_is_first]
    as_second = [c.ev_to_a for c in configurations if not c.a_is_first]
    ev_as_first = float(np.mean(as_first))
    ev_as_second = float(np.mean(as_second))

    return ExactEvResult(
        profile_a=profile_a.name,
        profile_b=profile_b.name,
        ev=float(np.mean([c.ev_to_a for c in configurations])),
        ev_as_first=ev_as_first,
        ev_as_second=ev_as_second,
        configurations=tuple(configurations),
    )


def exact_ev(profile_a: StrategyProfile, profile_b: StrategyProfile) -> float:
    """Mean EV per hand of ``profile_a`` against ``profile_b`` (seat-averaged)."""
    return compute_exact_ev(profile_a, profile_b).ev


def exact_ev_matrix(
    profiles: Mapping[str, StrategyProfile] | Sequence[StrategyProfile],
) -> tuple[list[str], np.ndarray]:
    """Round-robin table of exact EVs.

    Args:
        profiles: Profiles keyed by id, or a sequence (labelled by name).

    Returns:
        (labels, matrix) where ``matrix[i, j]`` is the EV of profile i
        against profile j. The matrix is antisymmetric with a zero diagonal.
    """
    if isinstance(profiles, Mapping):
        labels = list(profiles.keys())
        items = list(profiles.values())
    else:
        items = list(profiles)
        labels = [p.name for p in items]

    n = len(items)
    matrix = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            ev = exact_ev(items[i], items[j])
            matrix[i, j] = ev
            matrix[j, i] = -ev
    return labels, matrix


# ─── Best response and exploitability ─────────────────────────────────────────

def _opponent_reach(
    history: str,
    opponent_card: int,
    opponent_policy: Policy,
    responder_is_first: bool,
) -> float:
    """Probability that the opponent's own actions produce ``history``."""
    reach = 1.0
    for i, action in enumerate(str_to_history(history)):
        actor_is_first = i % 2 == 0
        if actor_is_first == responder_is_first:
            continue
        point = classify_decision_point(history[:i], actor_is_first)
        p = opponent_policy(opponent_card, point)
        reach *= p if action is point.aggressive_action else 1.0 - p
    return reach


def _best_response_for_seat(
    opponent: StrategyProfile,
    responder_is_first: bool,
) -> dict[tuple[int, DecisionPoint], float]:
    """Backward induction over the responder's infosets for one seat."""
    opponent_policy = _profile_policy(opponent)
    table: dict[tuple[int, DecisionPoint], float] = {}

    def responder_policy(card: int, point: DecisionPoint) -> float:
        return table.get((card, point), 0.0)

    if responder_is_first:
        order = (DecisionPoint.S1_CALL, DecisionPoint.S1_BET)
        first_policy, second_policy = responder_policy, opponent_policy
    else:
        order = (DecisionPoint.S2_BET, DecisionPoint.S2_CALL)
        first_policy, second_policy = opponent_policy, responder_policy
    sign = 1.0 if responder_is_first else -1.0

    for point in order:
        for card in CARDS:
            values = {}
            for action in (point.aggressive_action, point.passive_action):
                total = 0.0
                for opp_card in CARDS:
                    if opp_card == card:
                        continue
                    reach = _opponent_reach(point.history, opp_card, opponent_policy, responder_is_first)
                    if reach == 0.0:
                        continue
                    first_card, second_card = (card, opp_card) if responder_is_first else (opp_card, card)
                    total += reach * sign * _node_ev(
                        point.history + action.code,
                        first_card, second_card, first_policy, second_policy,
                    )
                values[action] = total
            # Ties resolve to the passive action.
            take_aggressive = values[point.aggressive_action] > values[point.passive_action] + 1e-12
            table[(card, point)] = 1.0 if take_aggressive else 0.0
    return table


def best_response(profile: StrategyProfile) -> BestResponse:
    """Pure strategy maximising seat-averaged EV against ``profile``.

    Returns:
        BestResponse holding the counter-profile and its exact EV against
        ``profile`` (overall and per seat).
    """
    values: dict[str, float] = {}
    for responder_is_first in (True, False):
        table = _best_response_for_seat(profile, responder_is_first)
        stage = 's1' if responder_is_first else 's2'
        for (card, point), p in table.items():
            kind = 'call' if point.facing_bet else 'bet'
            values[f"{stage}_{card_key(card)}_{kind}"] = p

    counter = StrategyProfile(name=f"Best response to {profile.name}", **values)
    result = compute_exact_ev(counter, profile)
    logger.debug("Best response to %s: EV %.6f", profile.name, result.ev)
    return BestResponse(
        profile=counter,
        ev=result.ev,
        ev_as_first=result.ev_as_first,
        ev_as_second=result.ev_as_second,
    )


def exploitability(profile: StrategyProfile) -> float:
    """EV a perfect counter-strategy gains per hand against ``profile``.

    Zero (up to floating point) for a GTO profile, positive otherwise.
    """
    return max(0.0, best_response(profile).ev)


# ─── Main block (report) ──────────────────────────────────────────────────────

if __name__ == "__main__":
    profiles = builtin_profiles()
    labels, matrix = exact_ev_matrix(profiles)

    print("=" * 72)
    print("Kuhn Poker: exact EV matrix (row vs column, units per hand)")
    print("=" * 72)
    width = max(len(label) for label in labels) + 2
    print(" " * width + "".join(f"{label:>{width}}" for label in labels))
    for i, label in enumerate(labels):
        row = "".join(f"{matrix[i, j]:>+{width}.4f}" for j in range(len(labels)))
        print(f"{label:<{width}}{row}")

    print()
    print("Exploitability of built-in profiles")
    for key, profile in profiles.items():
        br = best_response(profile)
        print(f"  {key:<18} {br.ev:+.4f}  (as first {br.ev_as_first:+.4f}, "
              f"as second {br.ev_as_second:+.4f})")

    print()
    print("Per-deal EV, GTO vs Steady (first actor = GTO)")
    for first_card, second_card in all_deals():
        ev = hand_ev(profiles['gto'], profiles['kensjitsu'], first_card, second_card)
        print(f"  {card_to_str(first_card)} vs {card_to_str(second_card)}: {ev:+.4f}")
