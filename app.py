"""Kuhn Poker Lab: Streamlit Dashboard.

Four-tab interactive app:
  Tab 1: Play vs AI          (human or AI seat against an AI profile)
  Tab 2: AI vs AI Simulator  (Monte Carlo vs exact EV, round robin)
  Tab 3: Stats Hub           (counters, filtered rates, advice, export and clear)
  Tab 4: Strategy Lab        (build, inspect and save custom profiles)

Run:
    streamlit run app.py
"""

from __future__ import annotations

import contextlib
import functools
import io
import time
from datetime import date

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import numpy as np
import pandas as pd
import streamlit as st

from kuhn_poker.analysis.heat_maps import plot_profile_heatmap
from kuhn_poker.analysis.player_stats import filter_records, strategic_advice, summarize
from kuhn_poker.analysis.plotly_charts import (
    build_ev_matrix_figure,
    build_profile_lookup_figure,
    build_running_ev_figure,
)
from kuhn_poker.analysis.simulator import compare_with_exact, run_round_robin, simulate_hands, win_rate_interval
from kuhn_poker.analysis.strategy_report import analyze_profile, compute_tendencies, print_profile_details
from kuhn_poker.config import load_settings
from kuhn_poker.engine.cards import CARDS, card_to_str
from kuhn_poker.engine.errors import KuhnPokerError
from kuhn_poker.logging_config import configure_logging
from kuhn_poker.persistence.json_store import JsonStore, is_valid_id
from kuhn_poker.persistence.records import HUMAN_STRATEGY_ID
from kuhn_poker.session import GameSession, Participant
from kuhn_poker.solvers.exact_ev import compute_exact_ev, exact_ev_matrix, exploitability
from kuhn_poker.solvers.information_sets import DecisionPoint

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Kuhn Poker Lab",
    page_icon="🃏",
    layout="wide",
)

settings = load_settings()
configure_logging(level=settings.log_level)


@st.cache_resource
def _get_store(data_dir: str, history_limit: int, gto_alpha: float) -> JsonStore:
    """One store per configuration (cached for the process lifetime)."""
    return JsonStore(data_dir, history_limit=history_limit, gto_alpha=gto_alpha)


store = _get_store(str(settings.data_dir), settings.history_limit, settings.gto_alpha)


def _format_profile(profile_id: str) -> str:
    if profile_id == HUMAN_STRATEGY_ID:
        return "You (human)"
    try:
        return f"{store.get_profile(profile_id).name} [{profile_id}]"
    except KuhnPokerError:
        return profile_id


def _get_session(user_id: str, player_id: str, opponent_id: str) -> GameSession:
    """Return the session in st.session_state, rebuilding it on a seat change."""
    key = (user_id, player_id, opponent_id)
    session: GameSession | None = st.session_state.get("session")
    if session is not None and st.session_state.get("session_key") == key:
        return session

    player = (
        Participant.human() if player_id == HUMAN_STRATEGY_ID
        else Participant.ai(player_id, store.get_profile(player_id))
    )
    opponent = Participant.ai(opponent_id, store.get_profile(opponent_id))
    session = GameSession(
        player,
        opponent,
        games_played=store.get_aggregate_stats(user_id).games_played,
        recorder=functools.partial(store.save_hand_result, user_id),
        history_limit=settings.history_limit,
    )
    st.session_state["session"] = session
    st.session_state["session_key"] = key
    return session


def _advance_ai(session: GameSession) -> None:
    if settings.ai_delay_seconds > 0 and session.hand_in_progress and not session.is_human_turn():
        time.sleep(settings.ai_delay_seconds)
    session.advance_ai()


def _fmt_rate(value: float | None) -> str:
    return "n/a" if value is None else f"{value * 100:.1f}%"


# ─── Sidebar controls ─────────────────────────────────────────────────────────

profile_ids = list(store.list_profiles())

with st.sidebar:
    st.title("🃏 Kuhn Poker Lab")
    st.markdown("---")

    user_id = st.text_input("User id", value="guest").strip() or "guest"
    if not is_valid_id(user_id):
        st.error(
            f"User id {user_id!r} is not allowed; use 1-64 letters, digits, '.', '_' or '-'. "
            "Showing the guest account instead."
        )
        user_id = "guest"

    player_id = st.selectbox(
        "Your seat",
        options=[HUMAN_STRATEGY_ID] + profile_ids,
        format_func=_format_profile,
        index=0,
    )
    opponent_id = st.selectbox(
        "Opponent AI",
        options=profile_ids,
        format_func=_format_profile,
        index=0,
    )

    st.markdown("---")
    st.caption(f"Data directory: {settings.data_dir}")
    st.caption("Engine → Exact EV → Monte Carlo → Analysis")

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3, tab4 = st.tabs(
    [
        "Play vs AI",
        "AI vs AI Simulator",
        "Stats Hub",
        "Strategy Lab",
    ]
)

# ── Tab 1: Play vs AI ─────────────────────────────────────────────────────────

with tab1:
    st.header("Play vs AI")
    try:
        session = _get_session(user_id, player_id, opponent_id)
    except KuhnPokerError as e:
        st.error(f"Could not start a session: {e}")
        session = None

    if session is not None:
        st.caption(
            f"Game {session.games_played + 1}: "
            f"{'you act first' if (session.games_played + 1) % 2 else 'opponent acts first'}"
        )

        if st.button("Deal new hand", type="primary", disabled=session.hand_in_progress):
            session.new_hand()
            _advance_ai(session)

        if session.state.is_dealt:
            col1, col2, col3 = st.columns(3)
            col1.metric("Your card", card_to_str(session.player_card))
            visible = session.visible_opponent_card()
            col2.metric(f"{session.opponent.label}'s card", card_to_str(visible) if visible else "?")
            col3.metric("Pot", session.state.pot)

            st.write(f"Betting so far: `{session.state.history or '-'}`")

            if session.is_human_turn():
                actions = session.legal_actions()
                cols = st.columns(len(actions))
                for col, action in zip(cols, actions):
                    if col.button(action.name.title(), key=f"action_{action.code}"):
                        try:
                            session.apply_human_action(action)
                            _advance_ai(session)
                        except KuhnPokerError as e:
                            st.error(str(e))
                        st.rerun()

            message = session.result_message()
            if message:
                profit = session.last_record.profit if session.last_record else 0
                (st.success if profit > 0 else st.warning)(message)
                if session.last_save_ok is False:
                    st.info("Hand could not be saved; it is kept in this session only.")
        else:
            st.info("Press **Deal new hand** to start.")

# ── Tab 2: AI vs AI Simulator ─────────────────────────────────────────────────

with tab2:
    st.header("AI vs AI Simulator")
    col_a, col_b = st.columns(2)
    sim_a = col_a.selectbox("Profile A", profile_ids, format_func=_format_profile, key="sim_a")
    sim_b = col_b.selectbox(
        "Profile B", profile_ids, format_func=_format_profile, key="sim_b",
        index=min(1, len(profile_ids) - 1),
    )
    n_hands = st.number_input(
        "Hands",
        min_value=1,
        max_value=settings.max_simulation_hands,
        value=settings.default_simulation_hands,
        step=1000,
    )

    if st.button("Run simulation", type="primary"):
        profile_a = store.get_profile(sim_a)
        profile_b = store.get_profile(sim_b)
        with st.spinner(f"Simulating {int(n_hands):,} hands …"):
            sim = simulate_hands(profile_a, profile_b, int(n_hands), seed=None)
        exact = compute_exact_ev(profile_a, profile_b)
        comparison = compare_with_exact(sim, exact)
        store.save_simulation_summary(user_id, sim)

        c1, c2, c3, c4 = st.columns(4)
        c1.metric("A win rate", f"{sim.a_win_pct:.1f}%")
        c2.metric("MC EV / hand", f"{sim.mean_ev:+.4f}")
        c3.metric("Exact EV / hand", f"{exact.ev:+.4f}")
        c4.metric("Total profit A", f"{sim.total_profit_a:+.0f}")
        low, high = win_rate_interval(sim)
        st.caption(
            f"95% CI of EV: [{sim.ci_95_low:+.4f}, {sim.ci_95_high:+.4f}] | "
            f"win rate CI: {low * 100:.1f}% to {high * 100:.1f}% | "
            f"z={comparison.z_score:+.2f}, p={comparison.p_value:.3f} | "
            f"exact as first {exact.ev_as_first:+.4f}, as second {exact.ev_as_second:+.4f}"
        )
        st.plotly_chart(build_running_ev_figure(sim, exact.ev), use_container_width=True)

    st.markdown("---")
    st.subheader("Round robin")
    profiles = store.list_profiles()
    labels, matrix = exact_ev_matrix(profiles)
    st.plotly_chart(build_ev_matrix_figure(labels, matrix), use_container_width=True)

    if st.button("Simulate round robin (1,000 hands per pair)"):
        with st.spinner("Simulating every pair …"):
            results = run_round_robin(profiles, n_hands=1000, seed=None)
        rows = [
            {
                "A": a,
                "B": b,
                "A win %": f"{r.a_win_pct:.1f}",
                "MC EV (A)": f"{r.mean_ev:+.4f}",
                "Exact EV (A)": f"{matrix[labels.index(a), labels.index(b)]:+.4f}",
            }
            for (a, b), r in results.items()
        ]
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    past = store.get_simulation_history(user_id, limit=10)
    if past:
        st.markdown("---")
        st.subheader("Recent simulations")
        st.dataframe(pd.DataFrame(past), use_container_width=True, hide_index=True)

# ── Tab 3: Stats Hub ──────────────────────────────────────────────────────────

with tab3:
    st.header("Stats Hub")

    with st.expander("Your data"):
        e1, e2 = st.columns(2)
        e1.download_button(
            "Export data (JSON)",
            data=store.export_user(user_id),
            file_name=f"kuhn-poker-{user_id}-{date.today().isoformat()}.json",
            mime="application/json",
        )
        confirm_clear = e2.checkbox("I understand clearing cannot be undone")
        if e2.button("Clear my data", disabled=not confirm_clear):
            if store.clear_user(user_id):
                st.session_state.pop("session", None)
                st.session_state.pop("session_key", None)
                st.success(f"Cleared stored hands and simulations for {user_id}.")
            else:
                st.error("Clearing failed; see the log for details.")

    aggregate = store.get_aggregate_stats(user_id)
    c1, c2, c3 = st.columns(3)
    c1.metric("Games played", aggregate.games_played)
    c2.metric("Win rate", f"{aggregate.win_rate * 100:.1f}%")
    c3.metric("Total profit", f"{aggregate.total_profit:+d}")

    records = store.get_history(user_id, limit=settings.history_limit)
    if not records and st.session_state.get("session") is not None:
        records = st.session_state["session"].history

    st.subheader("Advice")
    for tip in strategic_advice(records, opponent_id):
        st.write(f"💡 {tip}")

    f1, f2 = st.columns(2)
    opponent_filter = f1.selectbox(
        "Opponent", ["all"] + sorted({r.opponent_strategy_id for r in records}),
        format_func=lambda v: "All opponents" if v == "all" else _format_profile(v),
    )
    card_filter = f2.selectbox("Your card", ["all", "Q", "K", "A"])
    filtered = filter_records(records, opponent_id=opponent_filter, player_card=card_filter)
    stats = summarize(filtered)

    if stats.games == 0:
        st.info("No hands recorded yet for this filter.")
    else:
        s1, s2, s3, s4 = st.columns(4)
        s1.metric("Filtered games", stats.games)
        s2.metric("EV / hand", f"{stats.ev_per_hand:+.3f}")
        s3.metric("Longest win streak", stats.longest_win_streak)
        s4.metric("Current streak", f"{stats.current_streak:+d}")

        rate_rows = [
            {
                "Card": card,
                "Opening bet rate": _fmt_rate(stats.opening_bet_rate[card]),
                "Call rate vs bet": _fmt_rate(stats.call_rate_by_card[card]),
                "Win rate": _fmt_rate(stats.win_rate_by_card[card]),
            }
            for card in ("Q", "K", "A")
        ]
        st.dataframe(pd.DataFrame(rate_rows), use_container_width=True, hide_index=True)
        st.caption(
            f"Overall call rate: {_fmt_rate(stats.call_rate)} | "
            f"Favourite action: {stats.favorite_action or 'n/a'} | "
            f"Average hand length: {stats.average_sequence_length:.2f} actions"
        )

        st.subheader("Recent hands")
        st.dataframe(
            pd.DataFrame([r.to_dict() for r in filtered[:20]]),
            use_container_width=True,
            hide_index=True,
        )

# ── Tab 4: Strategy Lab ───────────────────────────────────────────────────────

with tab4:
    st.header("Strategy Lab")
    base_id = st.selectbox("Start from", profile_ids, format_func=_format_profile, key="lab_base")
    base = store.get_profile(base_id)

    values: dict[str, float] = {}
    point_cols = st.columns(len(DecisionPoint))
    for col, point in zip(point_cols, DecisionPoint):
        col.markdown(f"**{point.value}**  \n{point.aggressive_action.name.title()} probability")
        for card in CARDS:
            field_name = point.field_name(card)
            values[field_name] = col.slider(
                card_to_str(card), 0.0, 1.0, float(getattr(base, field_name)), 0.01,
                key=f"lab_{base_id}_{field_name}",
            )

    name = st.text_input("Profile name", value=f"{base.name} (custom)")
    try:
        custom = base.with_updates(name=name, **values)
    except KuhnPokerError as e:
        st.error(str(e))
        custom = base

    left, right = st.columns(2)
    with left:
        st.pyplot(plot_profile_heatmap(custom, show=False))
    with right:
        st.plotly_chart(build_profile_lookup_figure(custom), use_container_width=True)

    tendencies = compute_tendencies(custom)
    analysis = analyze_profile(custom)
    t1, t2, t3, t4 = st.columns(4)
    t1.metric("Bet freq", f"{tendencies.bet_freq:.1f}%")
    t2.metric("Call freq", f"{tendencies.call_freq:.1f}%")
    t3.metric("Bluff freq", f"{tendencies.bluff_freq:.1f}%")
    t4.metric("Exploitability", f"{exploitability(custom):.4f}")
    for s in analysis.strengths:
        st.write(f"✅ {s}")
    for w in analysis.weaknesses:
        st.write(f"⚠️ {w}")

    with st.expander("Full report"):
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            print_profile_details(custom)
        st.code(buf.getvalue(), language=None)

    new_id = st.text_input("Save as profile id", value="custom1")
    if st.button("Save profile"):
        try:
            if store.save_profile(new_id, custom):
                st.success(f"Saved {custom.name} as {new_id}.")
            else:
                st.error("Saving failed; see the log for details.")
        except KuhnPokerError as e:
            st.error(str(e))

    ev_vs = {pid: compute_exact_ev(custom, p).ev for pid, p in store.list_profiles().items()}
    st.caption("Exact EV of this profile against each stored profile")
    st.dataframe(
        pd.DataFrame({"Opponent": list(ev_vs), "EV / hand": np.round(list(ev_vs.values()), 4)}),
        use_container_width=True,
        hide_index=True,
    )
