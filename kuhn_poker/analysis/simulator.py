"""
Monte Carlo simulator for Kuhn Poker strategy profiles.

Plays full hands between two profiles through the hand state machine and
accumulates per-hand profit for profile A to produce EV statistics with
confidence intervals.

Primary use: cross-validate the exact EV calculator. With N = 200,000
hands the Monte Carlo mean is expected within ±0.02 units of the exact
seat-averaged EV.

Key implementation notes:
    - Seats alternate: hand i (1-indexed) has A as first actor iff i is odd.
      Parallel shards keep this parity by global hand index.
    - Every hand gets a fresh deal; decisions and deals share one generator.
    - should_stop() is polled between hands. A cancelled run reports only
      the completed hands and sets ``cancelled``.
"""

from __future__ import annotations

import logging
import math
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from itertools import combinations
from typing import Callable, Mapping

import numpy as np
from scipy import stats

from kuhn_poker.engine.errors import InvalidArgumentError
from kuhn_poker.engine.game_state import Seat, play_hand
from kuhn_poker.engine.profiles import StrategyProfile, builtin_profiles
from kuhn_poker.solvers.decision import make_profile_strategy
from kuhn_poker.solvers.exact_ev import ExactEvResult, compute_exact_ev

logger = logging.getLogger(__name__)

StopCallback = Callable[[], bool]


# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate statistics from a Monte Carlo run, from A's perspective.

    Attributes:
        profile_a:       Name of profile A.
        profile_b:       Name of profile B.
        n_hands:         Hands actually completed.
        n_requested:     Hands requested.
        a_wins:          Hands won by A.
        b_wins:          Hands won by B.
        total_profit_a:  Sum of A's per-hand profit.
        mean_ev:         Mean profit per hand for A.
        std_ev:          Sample standard deviation of per-hand profit.
        ci_95_low:       Lower bound of the 95% confidence interval.
        ci_95_high:      Upper bound of the 95% confidence interval.
        payouts:         Per-hand profit for A (float64, length n_hands).
        cancelled:       True if the run stopped early.
    """

    profile_a: str
    profile_b: str
    n_hands: int
    n_requested: int
    a_wins: int
    b_wins: int
    total_profit_a: float
    mean_ev: float
    std_ev: float
    ci_95_low: float
    ci_95_high: float
    payouts: np.ndarray = field(repr=False)
    cancelled: bool = False

    @property
    def a_win_rate(self) -> float:
        """Fraction of completed hands won by A (0.0 if none completed)."""
        return self.a_wins / self.n_hands if self.n_hands else 0.0

    @property
    def a_win_pct(self) -> float:
        return self.a_win_rate * 100.0

    def running_ev(self) -> np.ndarray:
        return running_ev(self.payouts)

    def __str__(self) -> str:
        sign = "+" if self.mean_ev >= 0 else ""
        status = " (cancelled)" if self.cancelled else ""
        return (
            f"{self.profile_a} vs {self.profile_b} | "
            f"Hands: {self.n_hands:,}{status} | "
            f"A wins: {self.a_win_pct:.1f}% | "
            f"EV: {sign}{self.mean_ev:.4f} | "
            f"95% CI: [{self.ci_95_low:.4f}, {self.ci_95_high:.4f}] | "
            f"Total: {self.total_profit_a:+.0f}"
        )


@dataclass(frozen=True)
class EvComparison:
    """Monte Carlo mean against the exact EV of the same matchup."""

    mc_ev: float
    exact_ev: float
    difference: float
    std_error: float
    z_score: float
    p_value: float
    n_hands: int

    def within_tolerance(self, tol: float = 0.02) -> bool:
        return abs(self.difference) <= tol


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _validate_hand_count(n_hands: object) -> int:
    if isinstance(n_hands, bool) or not isinstance(n_hands, (int, np.integer)):
        raise InvalidArgumentError(f"n_hands must be a positive integer, got {n_hands!r}.")
    if n_hands <= 0:
        raise InvalidArgumentError(f"n_hands must be a positive integer, got {n_hands}.")
    return int(n_hands)


def running_ev(payouts: np.ndarray) -> np.ndarray:
    """Running average profit: element i is the mean of the first i+1 hands.

    Example:
        >>> running_ev(np.array([1.0, -1.0, 2.0])).tolist()
        [1.0, 0.0, 0.6666666666666666]
    """
    arr = np.asarray(payouts, dtype=np.float64)
    if arr.size == 0:
        return arr
    return np.cumsum(arr) / np.arange(1, arr.size + 1)


def _play_range(
    profile_a: StrategyProfile,
    profile_b: StrategyProfile,
    start: int,
    stop: int,
    rng: np.random.Generator,
    should_stop: StopCallback | None = None,
) -> tuple[np.ndarray, int, int, bool]:
    """Play global hand indices [start, stop) (0-indexed).

    Returns:
        (payouts, a_wins, b_wins, cancelled)
    """
    strategy_a = make_profile_strategy(profile_a)
    strategy_b = make_profile_strategy(profile_b)

    payouts = np.zeros(stop - start, dtype=np.float64)
    a_wins = b_wins = 0
    played = 0
    cancelled = False

    for i in range(start, stop):
        if should_stop is not None and should_stop():
            cancelled = True
            break

        # 0-indexed even == 1-indexed odd: A acts first.
        a_is_first = i % 2 == 0
        if a_is_first:
            result = play_hand(strategy_a, strategy_b, rng)
            a_seat = Seat.FIRST
        else:
            result = play_hand(strategy_b, strategy_a, rng)
            a_seat = Seat.SECOND

        payouts[played] = result.payoff_for(a_seat)
        if result.winner is a_seat:
            a_wins += 1
        else:
            b_wins += 1
        played += 1

    return payouts[:played], a_wins, b_wins, cancelled


def _summarize(
    profile_a: StrategyProfile,
    profile_b: StrategyProfile,
    payouts: np.ndarray,
    a_wins: int,
    b_wins: int,
    n_requested: int,
    cancelled: bool,
) -> SimulationResult:
    n = int(payouts.size)
    mean = float(np.mean(payouts)) if n else 0.0
    std = float(np.std(payouts, ddof=1)) if n > 1 else 0.0
    ci_margin = 1.96 * std / math.sqrt(n) if n else 0.0

    return SimulationResult(
        profile_a=profile_a.name,
        profile_b=profile_b.name,
        n_hands=n,
        n_requested=n_requested,
        a_wins=a_wins,
        b_wins=b_wins,
        total_profit_a=float(np.sum(payouts)),
        mean_ev=mean,
        std_ev=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        payouts=payouts,
        cancelled=cancelled,
    )


# ─── Core simulation loop ─────────────────────────────────────────────────────


def simulate_hands(
    profile_a: StrategyProfile,
    profile_b: StrategyProfile,
    n_hands: int,
    seed: int | None = 42,
    rng: np.random.Generator | None = None,
    should_stop: StopCallback | None = None,
) -> SimulationResult:
    """Simulate ``n_hands`` between two profiles, alternating seats.

    Args:
        profile_a:   Profile whose profit is reported.
        profile_b:   Opponent profile.
        n_hands:     Number of hands; a positive int.
        seed:        Seed for a fresh generator (ignored when ``rng`` given).
                     None for a non-deterministic run.
        rng:         Explicit generator to draw from.
        should_stop: Optional callable polled before each hand; returning
                     True cancels the run.

    Returns:
        SimulationResult for the completed hands.

    Raises:
        InvalidArgumentError: If ``n_hands`` is not a positive int.
    """
    n_hands = _validate_hand_count(n_hands)
    if rng is None:
        rng = np.random.default_rng(seed)

    logger.info("Simulating %d hands: %s vs %s", n_hands, profile_a.name, profile_b.name)
    payouts, a_wins, b_wins, cancelled = _play_range(
        profile_a, profile_b, 0, n_hands, rng, should_stop
    )
    result = _summarize(profile_a, profile_b, payouts, a_wins, b_wins, n_hands, cancelled)
    if cancelled:
        logger.info("Simulation cancelled after %d of %d hands", result.n_hands, n_hands)
    logger.info("Simulation finished: %s", result)
    return result


def _simulate_shard(
    profile_a: StrategyProfile,
    profile_b: StrategyProfile,
    start: int,
    stop: int,
    seed_seq: np.random.SeedSequence,
) -> tuple[np.ndarray, int, int]:
    payouts, a_wins, b_wins, _ = _play_range(
        profile_a, profile_b, start, stop, np.random.default_rng(seed_seq)
    )
    return payouts, a_wins, b_wins


def simulate_hands_parallel(
    profile_a: StrategyProfile,
    profile_b: StrategyProfile,
    n_hands: int,
    n_workers: int | None = None,
    seed: int | None = 42,
) -> SimulationResult:
    """Simulate ``n_hands`` split across a process pool.

    The global index range is split into contiguous shards, one per
    worker, each with an independent child of ``SeedSequence(seed)``.
    Partial profit logs are concatenated in shard order.

    Args:
        profile_a: Profile whose profit is reported.
        profile_b: Opponent profile.
        n_hands:   Total number of hands; a positive int.
        n_workers: Worker processes. Defaults to the CPU count, never more
                   than ``n_hands``.
        seed:      Root seed for the per-shard generators.

    Raises:
        InvalidArgumentError: If ``n_hands`` or ``n_workers`` is not a
            positive int.
    """
    n_hands = _validate_hand_count(n_hands)
    if n_workers is None:
        n_workers = os.cpu_count() or 1
    if isinstance(n_workers, bool) or not isinstance(n_workers, int) or n_workers <= 0:
        raise InvalidArgumentError(f"n_workers must be a positive integer, got {n_workers!r}.")
    n_workers = min(n_workers, n_hands)

    bounds = np.linspace(0, n_hands, n_workers + 1, dtype=np.int64)
    children = np.random.SeedSequence(seed).spawn(n_workers)
    shards = [
        (int(bounds[w]), int(bounds[w + 1]), children[w]) for w in range(n_workers)
    ]
    logger.info(
        "Simulating %d hands on %d workers: %s vs %s",
        n_hands, n_workers, profile_a.name, profile_b.name,
    )

    if n_workers == 1:
        parts = [_simulate_shard(profile_a, profile_b, *shards[0])]
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            futures = [
                pool.submit(_simulate_shard, profile_a, profile_b, start, stop, seq)
                for start, stop, seq in shards
            ]
            parts = [f.result() for f in futures]

    payouts = np.concatenate([p[0] for p in parts])
    a_wins = sum(p[1] for p in parts)
    b_wins = sum(p[2] for p in parts)
    result = _summarize(profile_a, profile_b, payouts, a_wins, b_wins, n_hands, False)
    logger.info("Parallel simulation finished: %s", result)
    return result


# ─── Batch and validation helpers ─────────────────────────────────────────────


def run_round_robin(
    profiles: Mapping[str, StrategyProfile],
    n_hands: int = 1000,
    seed: int | None = 42,
) -> dict[tuple[str, str], SimulationResult]:
    """Simulate every unordered pair of profiles.

    Args:
        profiles: Profiles keyed by id.
        n_hands:  Hands per matchup.
        seed:     Root seed; each pair gets its own child generator.

    Returns:
        ``{(id_a, id_b): SimulationResult}`` for each pair, A listed first
        in the mapping's order.
    """
    n_hands = _validate_hand_count(n_hands)
    pairs = list(combinations(profiles.keys(), 2))
    children = np.random.SeedSequence(seed).spawn(len(pairs)) if pairs else []

    results: dict[tuple[str, str], SimulationResult] = {}
    for (id_a, id_b), seq in zip(pairs, children):
        results[(id_a, id_b)] = simulate_hands(
            profiles[id_a], profiles[id_b], n_hands, rng=np.random.default_rng(seq)
        )
    return results


def compare_with_exact(result: SimulationResult, exact: float | ExactEvResult) -> EvComparison:
    """Test the Monte Carlo mean against the exact EV.

    The z-score uses the standard error of the mean; the p-value is the
    two-sided normal tail probability.
    """
    exact_value = exact.ev if isinstance(exact, ExactEvResult) else float(exact)
    difference = result.mean_ev - exact_value
    std_error = result.std_ev / math.sqrt(result.n_hands) if result.n_hands else 0.0

    if std_error > 0.0:
        z = difference / std_error
        p_value = float(2.0 * stats.norm.sf(abs(z)))
    else:
        z = 0.0 if difference == 0.0 else math.copysign(math.inf, difference)
        p_value = 1.0 if difference == 0.0 else 0.0

    return EvComparison(
        mc_ev=result.mean_ev,
        exact_ev=exact_value,
        difference=difference,
        std_error=std_error,
        z_score=float(z),
        p_value=p_value,
        n_hands=result.n_hands,
    )


def win_rate_interval(result: SimulationResult, confidence: float = 0.95) -> tuple[float, float]:
    """Clopper-Pearson interval for A's win rate.

    Raises:
        InvalidArgumentError: If the run completed no hands.
    """
    if result.n_hands == 0:
        raise InvalidArgumentError("Win-rate interval needs at least one completed hand.")
    ci = stats.binomtest(result.a_wins, result.n_hands).proportion_ci(
        confidence_level=confidence, method="exact"
    )
    return float(ci.low), float(ci.high)


def run_validation(
    profile_a: StrategyProfile | None = None,
    profile_b: StrategyProfile | None = None,
    n_hands: int = 200_000,
    seed: int = 42,
) -> dict[str, object]:
    """Simulate a matchup and compare it with its exact EV.

    Defaults to GTO against the Steady built-in.

    Returns:
        {'simulation': SimulationResult, 'exact': ExactEvResult,
         'comparison': EvComparison}
    """
    builtins = builtin_profiles()
    profile_a = profile_a if profile_a is not None else builtins['gto']
    profile_b = profile_b if profile_b is not None else builtins['kensjitsu']

    simulation = simulate_hands(profile_a, profile_b, n_hands, seed=seed)
    exact = compute_exact_ev(profile_a, profile_b)
    return {
        "simulation": simulation,
        "exact": exact,
        "comparison": compare_with_exact(simulation, exact),
    }


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("Kuhn Poker Monte Carlo Validation: 200,000 hands\n")
    report = run_validation(n_hands=200_000)
    sim = report["simulation"]
    comparison = report["comparison"]
    print(f"Simulation: {sim}")
    print(f"Exact EV:   {comparison.exact_ev:+.4f}")
    print(f"Difference: {comparison.difference:+.4f} "
          f"(z={comparison.z_score:+.2f}, p={comparison.p_value:.3f})")
    low, high = win_rate_interval(sim)
    print(f"A win rate: {sim.a_win_pct:.2f}%  (95% CI {low * 100:.2f}% to {high * 100:.2f}%)")
    print(f"Within ±0.02: {'yes' if comparison.within_tolerance() else 'NO'}")
