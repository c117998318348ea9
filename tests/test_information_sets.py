"""Tests for kuhn_poker/solvers/information_sets.py."""

from __future__ import annotations

import pytest

from kuhn_poker.engine.errors import InvalidProfileError
from kuhn_poker.engine.game_state import Action
from kuhn_poker.solvers.information_sets import (
    DecisionPoint,
    KuhnInfoSet,
    all_info_sets,
    classify_decision_point,
    get_legal_actions,
    make_info_set,
)


class TestClassify:
    @pytest.mark.parametrize("history,first,expected", [
        ('', True, DecisionPoint.S1_BET),
        ('cb', True, DecisionPoint.S1_CALL),
        ('c', False, DecisionPoint.S2_BET),
        ('b', False, DecisionPoint.S2_CALL),
    ])
    def test_points(self, history, first, expected):
        assert classify_decision_point(history, first) is expected

    @pytest.mark.parametrize("history,first", [
        ('', False), ('c', True), ('b', True), ('cb', False), ('cc', True), ('bk', False),
    ])
    def test_unclassifiable(self, history, first):
        with pytest.raises(InvalidProfileError):
            classify_decision_point(history, first)


class TestDecisionPoint:
    def test_actions(self):
        assert DecisionPoint.S1_BET.aggressive_action is Action.BET
        assert DecisionPoint.S1_BET.passive_action is Action.CHECK
        assert DecisionPoint.S2_CALL.aggressive_action is Action.CALL
        assert DecisionPoint.S2_CALL.passive_action is Action.FOLD

    def test_history_matches_classification(self):
        for point in DecisionPoint:
            assert classify_decision_point(point.history, point.is_first_actor) is point

    def test_legal_actions(self):
        assert get_legal_actions(DecisionPoint.S1_CALL) == [Action.CALL, Action.FOLD]

    def test_field_name(self):
        assert DecisionPoint.S2_BET.field_name(3) == 's2_a_bet'


class TestInfoSets:
    def test_make(self):
        assert make_info_set(2, 'b', False) == KuhnInfoSet(card=2, point=DecisionPoint.S2_CALL)

    def test_hashable(self):
        table = {make_info_set(1, '', True): 0.5}
        assert table[KuhnInfoSet(1, DecisionPoint.S1_BET)] == 0.5

    def test_enumeration(self):
        assert len(all_info_sets()) == 12
        assert len(all_info_sets(is_first_actor=True)) == 6
        assert all(i.point.is_first_actor for i in all_info_sets(True))

    def test_label(self):
        assert KuhnInfoSet(3, DecisionPoint.S2_CALL).label == 'A:s2_call'
