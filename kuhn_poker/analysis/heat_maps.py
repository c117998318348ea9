"""Strategy heat maps for Kuhn Poker profiles.

One public data-builder function returns a NumPy matrix that can be used
programmatically or passed to the plot helpers:

    build_profile_heatmap_data(profile)  - (4, 3) probability matrix

Three public plot functions render matplotlib figures:

    plot_profile_heatmap(profile, ...)         - single profile
    plot_profile_comparison(profiles, ...)     - one panel per profile
    plot_ev_matrix(labels, matrix, ...)        - round-robin EV table

Matrix convention (profile builder):
    Shape  : (4, 3) - rows = decision points [s1_bet, s1_call, s2_bet, s2_call],
                       cols = cards [Q, K, A]
    Values : probability of the aggressive action (BET / CALL) in [0, 1]
"""

from __future__ import annotations

from typing import Sequence

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from kuhn_poker.engine.cards import CARDS, card_to_str
from kuhn_poker.engine.profiles import StrategyProfile
from kuhn_poker.solvers.information_sets import DecisionPoint

# ─── Constants ────────────────────────────────────────────────────────────────

_POINTS: list[DecisionPoint] = list(DecisionPoint)
_ROW_LABELS: list[str] = [p.value for p in _POINTS]
_COL_LABELS: list[str] = [card_to_str(c) for c in CARDS]


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_probability_cmap() -> matplotlib.colors.Colormap:
    """RdYlGn gradient: red = always passive, green = always aggressive."""
    return matplotlib.colormaps["RdYlGn"].copy()


def _make_ev_cmap() -> matplotlib.colors.Colormap:
    """Diverging RdBu: red = row loses, blue = row wins."""
    return matplotlib.colormaps["RdBu"].copy()


_PROBABILITY_CMAP: matplotlib.colors.Colormap = _make_probability_cmap()
_EV_CMAP: matplotlib.colors.Colormap = _make_ev_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def build_profile_heatmap_data(profile: StrategyProfile) -> np.ndarray:
    """Return the (4, 3) aggressive-action probability matrix of ``profile``.

    Args:
        profile: Strategy profile to tabulate.

    Returns:
        float64 array, rows = decision points, cols = Q, K, A.
    """
    data = np.zeros((len(_POINTS), len(CARDS)), dtype=np.float64)
    for r, point in enumerate(_POINTS):
        for c, card in enumerate(CARDS):
            data[r, c] = profile.probability(point, card)
    return data


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
) -> matplotlib.image.AxesImage:
    """Render one profile panel onto *ax* and return the AxesImage."""
    im = ax.imshow(data, cmap=_PROBABILITY_CMAP, vmin=0.0, vmax=1.0, aspect="auto")

    ax.set_xticks(range(len(_COL_LABELS)))
    ax.set_xticklabels(_COL_LABELS, fontsize=9)
    ax.set_yticks(range(len(_ROW_LABELS)))
    ax.set_yticklabels(_ROW_LABELS, fontsize=9)

    for r in range(data.shape[0]):
        for c in range(data.shape[1]):
            val = data[r, c]
            text_color = "black" if 0.25 < val < 0.75 else "white"
            ax.text(c, r, f"{val:.2f}", ha="center", va="center",
                    fontsize=9, color=text_color, fontweight="bold")
    return im


def _finish(fig: matplotlib.figure.Figure, show: bool, save_path: str | None) -> None:
    plt.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_profile_heatmap(
    profile: StrategyProfile,
    *,
    title: str | None = None,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot one profile as a 4×3 heat map of aggressive-action probabilities.

    Args:
        profile:   Profile to plot.
        title:     Figure title; defaults to the profile name.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    fig, ax = plt.subplots(figsize=(5, 4.5))
    im = _render_panel(ax, build_profile_heatmap_data(profile))
    ax.set_title(title or profile.name, fontsize=12, fontweight="bold")
    ax.set_xlabel("Card", fontsize=9)
    ax.set_ylabel("Decision point", fontsize=9)
    plt.colorbar(im, ax=ax, label="P(bet / call)", fraction=0.046, pad=0.04)
    _finish(fig, show, save_path)
    return fig


def plot_profile_comparison(
    profiles: Sequence[StrategyProfile],
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Side-by-side heat maps, one panel per profile.

    Raises:
        ValueError: If ``profiles`` is empty.
    """
    if not profiles:
        raise ValueError("plot_profile_comparison needs at least one profile.")

    n = len(profiles)
    fig, axes = plt.subplots(1, n, figsize=(3.6 * n + 1, 4.5), squeeze=False)
    fig.suptitle("Kuhn Poker Strategy Comparison", fontsize=14, fontweight="bold")

    im = None
    for col, profile in enumerate(profiles):
        ax = axes[0, col]
        im = _render_panel(ax, build_profile_heatmap_data(profile))
        ax.set_title(profile.name, fontsize=10, fontweight="bold")
        ax.set_xlabel("Card", fontsize=9)
        if col > 0:
            ax.set_yticklabels([])

    fig.colorbar(im, ax=axes.ravel().tolist(), label="P(bet / call)", fraction=0.03, pad=0.04)
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()
    return fig


def plot_ev_matrix(
    labels: Sequence[str],
    matrix: np.ndarray,
    *,
    title: str = "Exact EV per hand (row vs column)",
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot a round-robin EV matrix with a symmetric diverging colour scale."""
    limit = float(np.max(np.abs(matrix))) if matrix.size else 1.0
    limit = limit or 1.0

    fig, ax = plt.subplots(figsize=(1.4 * len(labels) + 2, 1.1 * len(labels) + 1.5))
    im = ax.imshow(matrix, cmap=_EV_CMAP, vmin=-limit, vmax=limit, aspect="auto")
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels, fontsize=9, rotation=30, ha="right")
    ax.set_yticks(range(len(labels)))
    ax.set_yticklabels(labels, fontsize=9)
    for r in range(matrix.shape[0]):
        for c in range(matrix.shape[1]):
            ax.text(c, r, f"{matrix[r, c]:+.3f}", ha="center", va="center", fontsize=8)
    ax.set_title(title, fontsize=12, fontweight="bold")
    plt.colorbar(im, ax=ax, label="EV (units/hand)", fraction=0.046, pad=0.04)
    _finish(fig, show, save_path)
    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from kuhn_poker.engine.profiles import builtin_profiles
    from kuhn_poker.solvers.exact_ev import exact_ev_matrix

    profiles = builtin_profiles()
    print("Generating profile heat maps …")
    plot_profile_comparison(list(profiles.values()), show=False, save_path="profiles.png")
    labels, matrix = exact_ev_matrix(profiles)
    plot_ev_matrix(labels, matrix, show=False, save_path="ev_matrix.png")
    print("Saved: profiles.png, ev_matrix.png")
