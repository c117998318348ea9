"""
Tests for kuhn_poker/session.py

Covers:
    - Seat rotation by game number
    - Human turn handling and errors
    - AI stepping and full auto-play
    - Hand records, recorder success / failure, history cap
    - Result messages and opponent card visibility
"""

from __future__ import annotations

import numpy as np
import pytest

from kuhn_poker.engine.errors import InvalidArgumentError, InvalidStateError
from kuhn_poker.engine.game_state import Action, Seat
from kuhn_poker.engine.profiles import BUILTIN_PROFILES
from kuhn_poker.session import GameSession, Participant

Q, K, A = 1, 2, 3


@pytest.fixture
def human_vs_passive(rng, passive):
    return GameSession(Participant.human(), Participant.ai('passive', passive), rng=rng)


class TestParticipant:
    def test_human(self):
        human = Participant.human()
        assert human.is_human
        assert human.label == "You"
        assert human.participant_id == 'human'

    def test_ai(self, aggressive):
        ai = Participant.ai('agg', aggressive)
        assert not ai.is_human
        assert ai.label == aggressive.name

    def test_opponent_must_be_ai(self, rng):
        with pytest.raises(InvalidArgumentError):
            GameSession(Participant.human(), Participant.human(), rng=rng)


class TestSeatRotation:
    def test_player_first_on_odd_games(self, human_vs_passive):
        session = human_vs_passive
        session.new_hand(cards=(K, Q))
        assert session.is_player_first
        assert session.player_seat is Seat.FIRST
        assert session.player_card == K

    def test_player_second_on_even_games(self, rng, passive):
        session = GameSession(Participant.human(), Participant.ai('p', passive), rng=rng, games_played=1)
        session.new_hand(cards=(K, Q))
        assert not session.is_player_first
        # The preset is (player, opponent) regardless of seat.
        assert session.player_card == K
        assert session.opponent_card == Q
        assert session.state.first_card == Q

    def test_alternates_across_hands(self, human_vs_passive):
        session = human_vs_passive
        seats = []
        for _ in range(4):
            session.new_hand()
            seats.append(session.is_player_first)
            session.advance_ai()
            session.apply_human_action(Action.CHECK)
            session.advance_ai()
            assert session.result.history == 'cc'
        assert seats == [True, False, True, False]
        assert session.games_played == 4


class TestHumanTurn:
    def test_new_hand_while_in_progress(self, human_vs_passive):
        human_vs_passive.new_hand()
        with pytest.raises(InvalidStateError):
            human_vs_passive.new_hand()

    def test_human_acts_first(self, human_vs_passive):
        session = human_vs_passive
        session.new_hand(cards=(A, Q))
        assert session.is_human_turn()
        assert session.legal_actions() == (Action.BET, Action.CHECK)
        with pytest.raises(InvalidStateError):
            session.step_ai()

    def test_not_human_turn(self, rng, passive):
        session = GameSession(Participant.human(), Participant.ai('p', passive), rng=rng, games_played=1)
        session.new_hand()
        assert not session.is_human_turn()
        with pytest.raises(InvalidStateError):
            session.apply_human_action(Action.BET)

    def test_illegal_action(self, human_vs_passive):
        human_vs_passive.new_hand()
        with pytest.raises(InvalidStateError):
            human_vs_passive.apply_human_action(Action.CALL)

    def test_bet_into_fold(self, human_vs_passive):
        session = human_vs_passive
        session.new_hand(cards=(Q, A))
        session.apply_human_action(Action.BET)
        assert session.advance_ai() == [Action.FOLD]
        assert session.result.history == 'bf'
        assert session.last_record.profit == 1
        assert session.visible_opponent_card() is None
        assert session.result_message() == "Always passive folded. You win 1 chip."

    def test_ai_opens_then_human_replies(self, rng, aggressive):
        session = GameSession(Participant.human(), Participant.ai('agg', aggressive), rng=rng, games_played=1)
        session.new_hand(cards=(K, A))
        assert session.advance_ai() == [Action.BET]
        assert session.is_human_turn()
        session.apply_human_action(Action.CALL)
        result = session.result
        assert result.history == 'bk'
        assert session.last_record.winner == 'opponent'
        assert session.last_record.profit == -2
        assert session.last_record.player_actions == 'k'
        assert session.visible_opponent_card() == A
        assert session.result_message() == "Showdown: K vs A. You lose 2 chips."


class TestAutoPlay:
    def test_play_full_hand_needs_ai_player(self, human_vs_passive):
        with pytest.raises(InvalidStateError):
            human_vs_passive.play_full_hand()

    def test_ai_vs_ai(self, rng):
        session = GameSession(
            Participant.ai('gto', BUILTIN_PROFILES['gto']),
            Participant.ai('kiai', BUILTIN_PROFILES['kiai']),
            rng=rng,
        )
        for _ in range(20):
            result = session.play_full_hand()
            assert result.history in ('cc', 'bk', 'bf', 'cbk', 'cbf')
        assert session.games_played == 20
        assert len(session.history) == 20
        assert session.history[0].player_strategy_id == 'gto'


class TestRecording:
    def test_no_result_before_end(self, human_vs_passive):
        human_vs_passive.new_hand()
        assert human_vs_passive.result is None
        assert human_vs_passive.result_message() is None
        assert human_vs_passive.last_record is None

    def test_recorder_receives_each_hand_once(self, rng, aggressive, passive):
        saved = []
        session = GameSession(
            Participant.ai('agg', aggressive), Participant.ai('p', passive),
            rng=rng, recorder=lambda r: saved.append(r) or True,
        )
        session.play_full_hand()
        session.play_full_hand()
        assert len(saved) == 2
        assert session.last_save_ok is True
        assert saved[-1] is session.last_record

    def test_recorder_failure_is_contained(self, rng, aggressive, passive):
        def broken(record):
            raise OSError("disk full")

        session = GameSession(
            Participant.ai('agg', aggressive), Participant.ai('p', passive),
            rng=rng, recorder=broken,
        )
        session.play_full_hand()
        assert session.last_save_ok is False
        assert session.games_played == 1
        assert len(session.history) == 1

    def test_history_capped(self, aggressive, passive):
        session = GameSession(
            Participant.ai('agg', aggressive), Participant.ai('p', passive),
            rng=np.random.default_rng(0), history_limit=3,
        )
        for _ in range(5):
            session.play_full_hand()
        assert len(session.history) == 3
        assert session.games_played == 5

    def test_recorder_with_store(self, store, rng, aggressive, passive):
        session = GameSession(
            Participant.ai('agg', aggressive), Participant.ai('p', passive),
            rng=rng, recorder=lambda r: store.save_hand_result('alice', r),
        )
        session.play_full_hand()
        assert session.last_save_ok is True
        assert store.get_aggregate_stats('alice').games_played == 1
