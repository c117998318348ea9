"""Interactive Plotly charts for the Kuhn Poker lab.

Four public functions:

    build_running_ev_figure(result, exact)
        - Running average profit of a simulation, with the exact EV line.
    build_profile_lookup_figure(profile)
        - Interactive 4×3 heat map of a profile's probabilities.
    build_ev_matrix_figure(labels, matrix)
        - Round-robin EV matrix heat map.
    save_figure_html(fig, path)
        - Export any figure to a self-contained HTML file.

Hover over any cell or point to see details. Figures open in a browser via
``fig.show()`` or embed in Streamlit with ``st.plotly_chart``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import plotly.graph_objects as go

from kuhn_poker.analysis.heat_maps import build_profile_heatmap_data
from kuhn_poker.analysis.simulator import SimulationResult
from kuhn_poker.engine.cards import CARDS, card_to_str
from kuhn_poker.engine.profiles import StrategyProfile
from kuhn_poker.solvers.information_sets import DecisionPoint

# ─── Constants ────────────────────────────────────────────────────────────────

_POINTS: list[DecisionPoint] = list(DecisionPoint)
_ROW_LABELS: list[str] = [p.value for p in _POINTS]
_COL_LABELS: list[str] = [card_to_str(c) for c in CARDS]

# Running-EV curves are thinned to at most this many points.
_MAX_CURVE_POINTS: int = 2000


# ─── Hover text builders ──────────────────────────────────────────────────────


def _build_profile_hover(data: np.ndarray) -> list[list[str]]:
    """Return a 4×3 list of hover strings for a profile panel."""
    rows: list[list[str]] = []
    for r, point in enumerate(_POINTS):
        row: list[str] = []
        for c, label in enumerate(_COL_LABELS):
            val = data[r, c]
            lines = [
                f"Card: <b>{label}</b>",
                f"Point: {point.value} (history '{point.history}')",
                f"P({point.aggressive_action.name}): <b>{val:.3f}</b>",
                f"P({point.passive_action.name}): {1.0 - val:.3f}",
            ]
            row.append("<br>".join(lines))
        rows.append(row)
    return rows


# ─── Public figure builders ───────────────────────────────────────────────────


def build_running_ev_figure(
    result: SimulationResult,
    exact: float | None = None,
) -> go.Figure:
    """Line chart of the running average profit per hand for profile A.

    Args:
        result: Completed (or cancelled) simulation.
        exact:  Optional exact EV drawn as a dashed reference line.

    Returns:
        go.Figure with one line trace (plus a horizontal line if ``exact``).
    """
    curve = result.running_ev()
    hands = np.arange(1, curve.size + 1)
    if curve.size > _MAX_CURVE_POINTS:
        idx = np.unique(np.linspace(0, curve.size - 1, _MAX_CURVE_POINTS).astype(int))
        hands, curve = hands[idx], curve[idx]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=hands,
        y=curve,
        mode="lines",
        name=f"{result.profile_a} running EV",
        hovertemplate="Hand %{x:,}<br>EV %{y:+.4f}<extra></extra>",
    ))
    if exact is not None:
        fig.add_hline(
            y=exact,
            line_dash="dash",
            line_color="#d62728",
            annotation_text=f"Exact EV {exact:+.4f}",
            annotation_position="top right",
        )
    fig.update_layout(
        title=f"{result.profile_a} vs {result.profile_b}: running EV",
        xaxis_title="Hands played",
        yaxis_title="Average profit per hand",
        template="plotly_white",
        height=420,
    )
    return fig


def build_profile_lookup_figure(profile: StrategyProfile) -> go.Figure:
    """Interactive heat map of a profile's aggressive-action probabilities."""
    data = build_profile_heatmap_data(profile)
    fig = go.Figure(go.Heatmap(
        z=data.tolist(),
        x=_COL_LABELS,
        y=_ROW_LABELS,
        colorscale="RdYlGn",
        zmin=0.0,
        zmax=1.0,
        text=_build_profile_hover(data),
        texttemplate="%{z:.2f}",
        hovertemplate="%{text}<extra></extra>",
        colorbar={"title": "P(bet / call)"},
        name=profile.name,
    ))
    fig.update_layout(
        title=f"Strategy lookup: {profile.name}",
        xaxis_title="Card",
        yaxis_title="Decision point",
        yaxis={"autorange": "reversed"},
        template="plotly_white",
        height=380,
    )
    return fig


def build_ev_matrix_figure(labels: Sequence[str], matrix: np.ndarray) -> go.Figure:
    """Heat map of a round-robin EV matrix (row profile vs column profile)."""
    limit = float(np.max(np.abs(matrix))) if matrix.size else 1.0
    limit = limit or 1.0
    labels = list(labels)
    hover = [
        [f"{labels[r]} vs {labels[c]}<br>EV: <b>{matrix[r, c]:+.4f}</b>"
         for c in range(len(labels))]
        for r in range(len(labels))
    ]
    fig = go.Figure(go.Heatmap(
        z=matrix.tolist(),
        x=labels,
        y=labels,
        colorscale="RdBu",
        zmin=-limit,
        zmax=limit,
        text=hover,
        texttemplate="%{z:+.3f}",
        hovertemplate="%{text}<extra></extra>",
        colorbar={"title": "EV"},
    ))
    fig.update_layout(
        title="EV per hand (row vs column)",
        yaxis={"autorange": "reversed"},
        template="plotly_white",
        height=120 + 60 * len(labels),
    )
    return fig


def save_figure_html(fig: go.Figure, path: str) -> None:
    """Write ``fig`` to a self-contained HTML file (Plotly JS from CDN).

    Args:
        fig:  Any go.Figure produced by this module.
        path: Destination file path (e.g. ``"running_ev.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from kuhn_poker.analysis.simulator import simulate_hands
    from kuhn_poker.engine.profiles import builtin_profiles
    from kuhn_poker.solvers.exact_ev import exact_ev, exact_ev_matrix

    profiles = builtin_profiles()
    a, b = profiles["gto"], profiles["kiai"]
    print("Simulating 20,000 hands …")
    result = simulate_hands(a, b, 20_000)

    save_figure_html(build_running_ev_figure(result, exact_ev(a, b)), "running_ev.html")
    save_figure_html(build_profile_lookup_figure(a), "gto_lookup.html")
    save_figure_html(build_ev_matrix_figure(*exact_ev_matrix(profiles)), "ev_matrix.html")
    print("Saved: running_ev.html, gto_lookup.html, ev_matrix.html")
