"""
Tests for kuhn_poker/solvers/exact_ev.py

Covers:
    - Closed-form EV on deterministic profiles
    - Zero EV in self-play and an antisymmetric round-robin matrix
    - GTO: zero exploitability and no losing matchup
    - Best response dominates any fixed counter-profile
"""

from __future__ import annotations

import numpy as np
import pytest

from kuhn_poker.engine.profiles import (
    BUILTIN_PROFILES,
    PROBABILITY_FIELDS,
    gto_profile,
    uniform_profile,
)
from kuhn_poker.solvers.exact_ev import (
    best_response,
    compute_exact_ev,
    exact_ev,
    exact_ev_matrix,
    exploitability,
    hand_ev,
)


class TestHandEv:
    def test_aggressive_first_against_passive(self, aggressive, passive):
        for first, second in [(1, 3), (2, 1), (3, 2)]:
            assert hand_ev(aggressive, passive, first, second) == 1.0

    def test_both_passive_is_showdown(self, passive):
        assert hand_ev(passive, passive, 3, 1) == 1.0
        assert hand_ev(passive, passive, 1, 3) == -1.0

    def test_both_aggressive_is_bet_call(self, aggressive):
        assert hand_ev(aggressive, aggressive, 2, 3) == -2.0

    def test_mixed_branch_weights(self, passive):
        half = uniform_profile(0.0).with_updates(s1_q_bet=0.5)
        # Q bets half the time into a folder (+1), else checks to a lost showdown (-1).
        assert hand_ev(half, passive, 1, 2) == pytest.approx(0.0)


class TestExactEv:
    def test_aggressive_beats_passive(self, aggressive, passive):
        result = compute_exact_ev(aggressive, passive)
        assert result.ev == pytest.approx(1.0)
        assert result.ev_as_first == pytest.approx(1.0)
        assert result.ev_as_second == pytest.approx(1.0)
        assert len(result.configurations) == 12

    def test_seat_split_averages(self):
        result = compute_exact_ev(BUILTIN_PROFILES['kiai'], BUILTIN_PROFILES['mitaiman'])
        assert result.ev == pytest.approx((result.ev_as_first + result.ev_as_second) / 2)

    @pytest.mark.parametrize("key", sorted(BUILTIN_PROFILES))
    def test_self_play_is_zero(self, key):
        profile = BUILTIN_PROFILES[key]
        assert abs(exact_ev(profile, profile)) < 1e-12

    def test_gto_first_seat_value(self):
        # Game value for the first actor is -1/18.
        gto = gto_profile()
        assert compute_exact_ev(gto, gto).ev_as_first == pytest.approx(-1 / 18)

    def test_ev_bounded(self):
        rng = np.random.default_rng(7)
        for _ in range(10):
            a = uniform_profile(0.5).with_updates(**{f: float(rng.random()) for f in PROBABILITY_FIELDS})
            b = uniform_profile(0.5).with_updates(**{f: float(rng.random()) for f in PROBABILITY_FIELDS})
            assert -2.0 <= exact_ev(a, b) <= 2.0


class TestMatrix:
    def test_antisymmetric(self):
        labels, matrix = exact_ev_matrix(BUILTIN_PROFILES)
        assert labels == list(BUILTIN_PROFILES)
        assert matrix.shape == (5, 5)
        assert np.allclose(matrix, -matrix.T)
        assert np.all(np.diag(matrix) == 0.0)

    def test_sequence_labels_by_name(self, aggressive, passive):
        labels, matrix = exact_ev_matrix([aggressive, passive])
        assert labels == [aggressive.name, passive.name]
        assert matrix[0, 1] == pytest.approx(1.0)


class TestGto:
    @pytest.mark.parametrize("alpha", [0.0, 0.1, 1 / 3])
    def test_unexploitable(self, alpha):
        assert exploitability(gto_profile(alpha)) < 1e-9

    @pytest.mark.parametrize("key", sorted(BUILTIN_PROFILES))
    def test_never_loses_to_builtins(self, key):
        assert exact_ev(gto_profile(), BUILTIN_PROFILES[key]) >= -1e-12


class TestBestResponse:
    def test_exploits_passive(self, passive):
        br = best_response(passive)
        assert br.ev == pytest.approx(1.0)
        assert br.profile.s1_q_bet == 1.0

    @pytest.mark.parametrize("key", ['kensjitsu', 'kiai', 'mitaiman', 'tightaggressive'])
    def test_dominates_fixed_counters(self, key):
        target = BUILTIN_PROFILES[key]
        br = best_response(target)
        assert br.ev >= exact_ev(gto_profile(), target) - 1e-12
        for other in BUILTIN_PROFILES.values():
            assert br.ev >= exact_ev(other, target) - 1e-12

    def test_pure_strategy(self):
        br = best_response(BUILTIN_PROFILES['kiai'])
        assert set(br.profile.probabilities().values()) <= {0.0, 1.0}
        assert br.profile.name == "Best response to Gutsy"

    def test_exploitability_positive_for_builtins(self):
        for key in ['kensjitsu', 'kiai', 'mitaiman', 'tightaggressive']:
            assert exploitability(BUILTIN_PROFILES[key]) > 0.0
