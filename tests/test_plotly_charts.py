"""Tests for the interactive Plotly charts (kuhn_poker/analysis/plotly_charts.py).

Plotly figures are in-memory objects and the save helper writes HTML
without rendering, so no display server is required.
"""

from __future__ import annotations

import os

import numpy as np
import plotly.graph_objects as go
import pytest

from kuhn_poker.analysis.plotly_charts import (
    build_ev_matrix_figure,
    build_profile_lookup_figure,
    build_running_ev_figure,
    save_figure_html,
)
from kuhn_poker.analysis.simulator import simulate_hands
from kuhn_poker.engine.profiles import BUILTIN_PROFILES, gto_profile
from kuhn_poker.solvers.exact_ev import exact_ev, exact_ev_matrix


@pytest.fixture(scope="module")
def result():
    return simulate_hands(BUILTIN_PROFILES['gto'], BUILTIN_PROFILES['kiai'], 5000, seed=1)


class TestRunningEvFigure:
    def test_returns_figure(self, result):
        fig = build_running_ev_figure(result)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1
        assert "GTO AI vs Gutsy" in fig.layout.title.text

    def test_thinned(self, result):
        fig = build_running_ev_figure(result)
        assert len(fig.data[0].x) <= 2000
        assert fig.data[0].x[-1] == 5000
        assert fig.data[0].y[-1] == pytest.approx(result.mean_ev)

    def test_short_run_not_thinned(self, aggressive, passive):
        fig = build_running_ev_figure(simulate_hands(aggressive, passive, 30))
        assert len(fig.data[0].x) == 30

    def test_exact_line(self, result):
        exact = exact_ev(BUILTIN_PROFILES['gto'], BUILTIN_PROFILES['kiai'])
        fig = build_running_ev_figure(result, exact)
        assert any(shape.y0 == pytest.approx(exact) for shape in fig.layout.shapes)


class TestProfileLookupFigure:
    def test_heatmap(self):
        fig = build_profile_lookup_figure(gto_profile())
        heatmap = fig.data[0]
        assert isinstance(heatmap, go.Heatmap)
        assert np.array(heatmap.z).shape == (4, 3)
        assert list(heatmap.x) == ['Q', 'K', 'A']
        assert list(heatmap.y) == ['s1_bet', 's1_call', 's2_bet', 's2_call']

    def test_hover_names_actions(self):
        heatmap = build_profile_lookup_figure(gto_profile()).data[0]
        assert "P(BET)" in heatmap.text[0][0]
        assert "P(FOLD)" in heatmap.text[3][2]


class TestEvMatrixFigure:
    def test_heatmap(self):
        labels, matrix = exact_ev_matrix(BUILTIN_PROFILES)
        heatmap = build_ev_matrix_figure(labels, matrix).data[0]
        assert list(heatmap.x) == labels
        assert heatmap.zmin == -heatmap.zmax


class TestSaveFigureHtml:
    def test_writes_file(self, tmp_path):
        path = str(tmp_path / "lookup.html")
        save_figure_html(build_profile_lookup_figure(gto_profile()), path)
        assert os.path.getsize(path) > 0
        with open(path) as f:
            assert "cdn.plot.ly" in f.read()
