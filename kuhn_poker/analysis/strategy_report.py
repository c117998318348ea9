"""Strategy reports for Kuhn Poker profiles.

Two analysis functions summarise a StrategyProfile, and three print
functions format results into human-readable tables:

    compute_tendencies(profile)      - bet / call / bluff frequency (%)
    analyze_profile(profile)         - aggressiveness, tightness, bluffing,
                                       strengths and weaknesses
    print_profile_details(profile)   - 12-probability table + analysis
    print_ev_matrix(labels, matrix)  - round-robin EV table
    print_simulation_summary(result) - Monte Carlo run vs exact EV
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from kuhn_poker.analysis.simulator import SimulationResult, compare_with_exact
from kuhn_poker.engine.cards import CARDS, card_to_str
from kuhn_poker.engine.profiles import StrategyProfile
from kuhn_poker.solvers.exact_ev import compute_exact_ev, exploitability
from kuhn_poker.solvers.information_sets import DecisionPoint

# Thresholds on the [0, 1] style scores.
_HIGH: float = 0.7
_LOW: float = 0.3
_MID: float = 0.5

_BET_POINTS = (DecisionPoint.S1_BET, DecisionPoint.S2_BET)
_CALL_POINTS = (DecisionPoint.S1_CALL, DecisionPoint.S2_CALL)


@dataclass(frozen=True)
class ProfileTendencies:
    """Headline frequencies in percent."""
    bet_freq: float     # mean P(BET) over both seats and all cards
    call_freq: float    # mean P(CALL) over both seats and all cards
    bluff_freq: float   # mean P(BET) holding Q


@dataclass(frozen=True)
class ProfileAnalysis:
    """Style scores in [0, 1] plus descriptive labels."""
    aggressiveness: float
    tightness: float
    bluffing: float
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]


# ─── Analysis ─────────────────────────────────────────────────────────────────

def _mean(profile: StrategyProfile, points, cards) -> float:
    return float(np.mean([profile.probability(p, c) for p in points for c in cards]))


def compute_tendencies(profile: StrategyProfile) -> ProfileTendencies:
    """Bet, call and bluff frequencies of ``profile`` in percent."""
    queen = (CARDS[0],)
    return ProfileTendencies(
        bet_freq=_mean(profile, _BET_POINTS, CARDS) * 100.0,
        call_freq=_mean(profile, _CALL_POINTS, CARDS) * 100.0,
        bluff_freq=_mean(profile, _BET_POINTS, queen) * 100.0,
    )


def analyze_profile(profile: StrategyProfile) -> ProfileAnalysis:
    """Score a profile's playing style.

    aggressiveness = mean of the 6 bet probabilities
    tightness      = 1 − mean of the Q bet/call probabilities of both seats
    bluffing       = mean of the 2 Q bet probabilities
    """
    queen = CARDS[0]
    ace = CARDS[-1]
    aggressiveness = _mean(profile, _BET_POINTS, CARDS)
    tightness = 1.0 - _mean(profile, _BET_POINTS + _CALL_POINTS, (queen,))
    bluffing = _mean(profile, _BET_POINTS, (queen,))
    value_betting = _mean(profile, _BET_POINTS, (ace,))
    calling = _mean(profile, _CALL_POINTS, CARDS)

    strengths: list[str] = []
    weaknesses: list[str] = []

    if aggressiveness > _HIGH:
        strengths.append("Applies steady pressure with frequent bets")
    elif aggressiveness < _LOW:
        weaknesses.append("Too passive; rarely bets")

    if tightness > _HIGH:
        strengths.append("Disciplined with weak hands")
    elif tightness < _LOW:
        weaknesses.append("Plays weak hands too loosely")

    if bluffing > _MID:
        strengths.append("Bluffs often enough to stay unpredictable")
    elif bluffing == 0.0:
        weaknesses.append("Never bluffs; bets always mean strength")

    if value_betting < _MID:
        weaknesses.append("Misses value with the Ace")

    if calling > _HIGH:
        weaknesses.append("Calls too much; easy to value-bet against")

    return ProfileAnalysis(
        aggressiveness=aggressiveness,
        tightness=tightness,
        bluffing=bluffing,
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
    )


# ─── Public report functions ──────────────────────────────────────────────────

def print_profile_details(profile: StrategyProfile) -> None:
    """Print the 12 probabilities of ``profile`` with its style analysis."""
    print("=" * 56)
    print(f"Strategy Profile: {profile.name}")
    print("=" * 56)
    header = "".join(f"{card_to_str(c):>8}" for c in CARDS)
    print(f"  {'Decision point':<16}{header}")
    print(f"  {'-' * 16}{'  ------' * len(CARDS)}")
    for point in DecisionPoint:
        row = "".join(f"{profile.probability(point, c):>8.3f}" for c in CARDS)
        print(f"  {point.value:<16}{row}")
    print()

    tendencies = compute_tendencies(profile)
    analysis = analyze_profile(profile)
    print(f"  Bet frequency:    {tendencies.bet_freq:5.1f}%")
    print(f"  Call frequency:   {tendencies.call_freq:5.1f}%")
    print(f"  Bluff frequency:  {tendencies.bluff_freq:5.1f}%")
    print(f"  Aggressiveness:   {analysis.aggressiveness:.3f}")
    print(f"  Tightness:        {analysis.tightness:.3f}")
    print(f"  Bluffing:         {analysis.bluffing:.3f}")
    print(f"  Exploitability:   {exploitability(profile):.4f} units/hand")
    for s in analysis.strengths:
        print(f"  + {s}")
    for w in analysis.weaknesses:
        print(f"  - {w}")
    print()


def print_ev_matrix(labels: list[str], matrix: np.ndarray) -> None:
    """Print a round-robin EV table (row profile vs column profile)."""
    width = max(10, max((len(label) for label in labels), default=0) + 2)
    print("=" * (width * (len(labels) + 1)))
    print("Exact EV per hand (row vs column)")
    print("=" * (width * (len(labels) + 1)))
    print(" " * width + "".join(f"{label:>{width}}" for label in labels))
    for i, label in enumerate(labels):
        row = "".join(f"{matrix[i, j]:>+{width}.4f}" for j in range(len(labels)))
        print(f"{label:<{width}}{row}")
    print()


def print_simulation_summary(
    result: SimulationResult,
    profile_a: StrategyProfile | None = None,
    profile_b: StrategyProfile | None = None,
) -> None:
    """Print a Monte Carlo run, compared with the exact EV if profiles given."""
    print("=" * 56)
    print(f"Simulation: {result.profile_a} vs {result.profile_b}")
    print("=" * 56)
    print(f"  Hands:            {result.n_hands:,} of {result.n_requested:,}"
          f"{'  (cancelled)' if result.cancelled else ''}")
    print(f"  {result.profile_a} wins: {result.a_wins:,}  ({result.a_win_pct:.1f}%)")
    print(f"  {result.profile_b} wins: {result.b_wins:,}")
    print(f"  Total profit A:   {result.total_profit_a:+.0f}")
    print(f"  EV per hand:      {result.mean_ev:+.4f}  "
          f"(95% CI {result.ci_95_low:+.4f} to {result.ci_95_high:+.4f})")
    if profile_a is not None and profile_b is not None and result.n_hands:
        comparison = compare_with_exact(result, compute_exact_ev(profile_a, profile_b))
        print(f"  Exact EV:         {comparison.exact_ev:+.4f}")
        print(f"  Difference:       {comparison.difference:+.4f}  "
              f"(z={comparison.z_score:+.2f}, p={comparison.p_value:.3f})")
    print()
