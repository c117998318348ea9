"""Tests for kuhn_poker/analysis/player_stats.py."""

from __future__ import annotations

import pytest

from kuhn_poker.analysis.player_stats import NO_DATA_ADVICE, filter_records, strategic_advice, summarize
from kuhn_poker.persistence.records import HandRecord


def rec(card: str, seq: str, first: bool, won: bool, profit: int, opponent: str = 'kiai') -> HandRecord:
    return HandRecord(
        player_card=card,
        opponent_card='Q' if card != 'Q' else 'K',
        action_sequence=seq,
        is_player_first=first,
        winner='player' if won else 'opponent',
        profit=profit,
        player_strategy_id='human',
        opponent_strategy_id=opponent,
    )


@pytest.fixture
def history():
    # Newest first.
    return [
        rec('A', 'bk', True, True, 2),
        rec('K', 'bf', False, False, -1, opponent='gto'),
        rec('Q', 'cbf', True, False, -1),
        rec('A', 'cc', False, True, 1),
        rec('K', 'bk', False, False, -2, opponent='gto'),
        rec('A', 'cbk', True, True, 2),
    ]


class TestSummarize:
    def test_empty(self):
        stats = summarize([])
        assert stats.games == 0
        assert stats.win_rate is None
        assert stats.ev_per_hand is None
        assert stats.call_rate is None
        assert stats.opening_bet_rate == {'Q': None, 'K': None, 'A': None}
        assert stats.favorite_action is None

    def test_totals(self, history):
        stats = summarize(history)
        assert stats.games == 6
        assert stats.wins == 3
        assert stats.total_profit == 1
        assert stats.win_rate == pytest.approx(0.5)
        assert stats.ev_per_hand == pytest.approx(1 / 6)

    def test_opening_bet_rate(self, history):
        stats = summarize(history)
        # Player first with A twice (bet once, check once) and Q once (check).
        assert stats.opening_bet_rate['A'] == pytest.approx(0.5)
        assert stats.opening_bet_rate['Q'] == 0.0
        assert stats.opening_bet_rate['K'] is None

    def test_call_rate(self, history):
        stats = summarize(history)
        # Facing a bet: K fold, Q fold, K call, A call.
        assert stats.call_rate == pytest.approx(0.5)
        assert stats.call_rate_by_card['K'] == pytest.approx(0.5)
        assert stats.call_rate_by_card['Q'] == 0.0
        assert stats.call_rate_by_card['A'] == 1.0

    def test_win_rate_by_card(self, history):
        stats = summarize(history)
        assert stats.win_rate_by_card == {'Q': 0.0, 'K': 0.0, 'A': 1.0}

    def test_streaks(self, history):
        stats = summarize(history)
        # Oldest to newest: W L W L L W
        assert stats.longest_win_streak == 1
        assert stats.longest_loss_streak == 2
        assert stats.current_streak == 1

    def test_streaks_chronological_input(self, history):
        stats = summarize(list(reversed(history)), newest_first=False)
        assert stats.current_streak == 1
        assert stats.longest_loss_streak == 2

    def test_action_counts(self, history):
        stats = summarize(history)
        assert stats.action_counts == {'BET': 1, 'CALL': 2, 'FOLD': 2, 'CHECK': 3}
        assert stats.favorite_action == 'CHECK'

    def test_average_sequence_length(self, history):
        assert summarize(history).average_sequence_length == pytest.approx(14 / 6)


class TestFilter:
    def test_by_opponent(self, history):
        assert len(filter_records(history, opponent_id='gto')) == 2

    def test_by_card(self, history):
        assert len(filter_records(history, player_card='A')) == 3
        assert len(filter_records(history, player_card=2)) == 2
        assert len(filter_records(history, player_card='k')) == 2

    def test_all_disables(self, history):
        assert filter_records(history, opponent_id='all', player_card='all') == history

    def test_combined(self, history):
        assert len(filter_records(history, opponent_id='kiai', player_card='A')) == 3


class TestStrategicAdvice:
    def test_no_history(self):
        assert strategic_advice([], 'kiai') == [NO_DATA_ADVICE]

    def test_middling_results_only_opponent_tip(self, history):
        # 3 of 6 won: no win-rate tip.
        advice = strategic_advice(history, 'kiai')
        assert advice == ["Gutsy bets and calls loosely; careful play pays off against it."]

    def test_losing_streak(self):
        losses = [rec('Q', 'bk', True, False, -2) for _ in range(5)]
        advice = strategic_advice(losses, 'kensjitsu')
        assert advice[0] == "Try playing more aggressively against the AI."
        assert len(advice) == 3
        assert "bluffs work well" in advice[-1]

    def test_winning_streak(self):
        wins = [rec('A', 'bk', True, True, 2) for _ in range(4)]
        advice = strategic_advice(wins, 'mitaiman')
        assert advice[0] == "Your current strategy is working."
        assert "bet your strong hands" in advice[-1]

    def test_unknown_opponent_has_no_tip(self, history):
        assert strategic_advice(history, 'gto') == []
        assert strategic_advice(history) == []

    def test_only_recent_window_counts(self):
        # Newest three are wins, older ten are losses.
        records = [rec('A', 'bk', True, True, 2)] * 3 + [rec('Q', 'bk', True, False, -2)] * 10
        assert strategic_advice(records, recent=3)[0] == "Your current strategy is working."
        assert strategic_advice(records, recent=13)[0] == "Try playing more aggressively against the AI."
