"""Tests for the strategy report (kuhn_poker/analysis/strategy_report.py).

Print functions are checked through capsys; analysis functions through
the known extreme profiles and the GTO table.
"""

from __future__ import annotations

import pytest

from kuhn_poker.analysis.simulator import simulate_hands
from kuhn_poker.analysis.strategy_report import (
    analyze_profile,
    compute_tendencies,
    print_ev_matrix,
    print_profile_details,
    print_simulation_summary,
)
from kuhn_poker.engine.profiles import BUILTIN_PROFILES, gto_profile
from kuhn_poker.solvers.exact_ev import exact_ev_matrix


class TestTendencies:
    def test_gto(self):
        t = compute_tendencies(gto_profile())
        assert t.bet_freq == pytest.approx(400 / 9)
        assert t.call_freq == pytest.approx(50.0)
        assert t.bluff_freq == pytest.approx(100 / 3)

    def test_extremes(self, aggressive, passive):
        assert compute_tendencies(aggressive).bet_freq == 100.0
        assert compute_tendencies(passive).call_freq == 0.0


class TestAnalyzeProfile:
    def test_aggressive(self, aggressive):
        analysis = analyze_profile(aggressive)
        assert analysis.aggressiveness == 1.0
        assert analysis.tightness == 0.0
        assert "Applies steady pressure with frequent bets" in analysis.strengths
        assert "Plays weak hands too loosely" in analysis.weaknesses
        assert "Calls too much; easy to value-bet against" in analysis.weaknesses

    def test_passive(self, passive):
        analysis = analyze_profile(passive)
        assert "Too passive; rarely bets" in analysis.weaknesses
        assert "Never bluffs; bets always mean strength" in analysis.weaknesses
        assert "Misses value with the Ace" in analysis.weaknesses
        assert "Disciplined with weak hands" in analysis.strengths

    def test_scores_in_unit_interval(self):
        for profile in BUILTIN_PROFILES.values():
            analysis = analyze_profile(profile)
            for score in (analysis.aggressiveness, analysis.tightness, analysis.bluffing):
                assert 0.0 <= score <= 1.0


class TestPrintFunctions:
    def test_profile_details(self, capsys):
        print_profile_details(BUILTIN_PROFILES['kiai'])
        out = capsys.readouterr().out
        assert "Strategy Profile: Gutsy" in out
        for point in ('s1_bet', 's1_call', 's2_bet', 's2_call'):
            assert point in out
        assert "Exploitability" in out

    def test_ev_matrix(self, capsys):
        labels, matrix = exact_ev_matrix(BUILTIN_PROFILES)
        print_ev_matrix(labels, matrix)
        out = capsys.readouterr().out
        assert "Exact EV per hand" in out
        assert all(label in out for label in labels)
        assert "+0.0000" in out

    def test_simulation_summary_with_exact(self, capsys, aggressive, passive):
        result = simulate_hands(aggressive, passive, 50)
        print_simulation_summary(result, aggressive, passive)
        out = capsys.readouterr().out
        assert "Hands:            50 of 50" in out
        assert "Exact EV:         +1.0000" in out
        assert "Difference:       +0.0000" in out

    def test_simulation_summary_without_profiles(self, capsys, aggressive, passive):
        print_simulation_summary(simulate_hands(aggressive, passive, 50))
        assert "Exact EV" not in capsys.readouterr().out
