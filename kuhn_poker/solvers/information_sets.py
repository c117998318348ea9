"""
Decision points and information sets for Kuhn Poker.

An information set (infoset) encodes exactly what an actor observes when
choosing an action: their own card and the public betting history. The
opponent's card is never visible before showdown.

Four decision points cover every non-terminal state of a hand:

    S1_BET   - first actor opens (history '')            BET or CHECK
    S1_CALL  - first actor faces a bet after 'c b'       CALL or FOLD
    S2_BET   - second actor after a check (history 'c')  BET or CHECK
    S2_CALL  - second actor faces a bet (history 'b')    CALL or FOLD

Combined with the three cards this gives 12 infosets, one per strategy
profile probability. ``KuhnInfoSet`` is a NamedTuple, so it is hashable
and usable directly as a dictionary key in best-response tables.

Action and Seat are imported from the engine; do not redefine them here.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from kuhn_poker.engine.cards import CARDS, card_to_str
from kuhn_poker.engine.errors import InvalidProfileError
from kuhn_poker.engine.game_state import Action
from kuhn_poker.engine.profiles import probability_field


# ─── Decision points ──────────────────────────────────────────────────────────

class DecisionPoint(Enum):
    # Values are the profile field groups read at each point.
    S1_BET = 's1_bet'
    S1_CALL = 's1_call'
    S2_BET = 's2_bet'
    S2_CALL = 's2_call'

    @property
    def is_first_actor(self) -> bool:
        return self in (DecisionPoint.S1_BET, DecisionPoint.S1_CALL)

    @property
    def facing_bet(self) -> bool:
        return self in (DecisionPoint.S1_CALL, DecisionPoint.S2_CALL)

    @property
    def aggressive_action(self) -> Action:
        return Action.CALL if self.facing_bet else Action.BET

    @property
    def passive_action(self) -> Action:
        return Action.FOLD if self.facing_bet else Action.CHECK

    @property
    def history(self) -> str:
        """The unique history at which this decision point is reached."""
        return _POINT_HISTORIES[self]

    def field_name(self, card: int) -> str:
        """Profile field read at this point holding ``card``.

        Example:
            >>> DecisionPoint.S1_CALL.field_name(2)
            's1_k_call'
        """
        return probability_field(self, card)


_POINT_HISTORIES: dict[DecisionPoint, str] = {
    DecisionPoint.S1_BET: '',
    DecisionPoint.S1_CALL: 'cb',
    DecisionPoint.S2_BET: 'c',
    DecisionPoint.S2_CALL: 'b',
}

_POINTS_BY_KEY: dict[tuple[str, bool], DecisionPoint] = {
    (history, point.is_first_actor): point for point, history in _POINT_HISTORIES.items()
}


def classify_decision_point(history: str, is_first_actor: bool) -> DecisionPoint:
    """Map (history, seat) to its decision point.

    Args:
        history:        Betting history so far.
        is_first_actor: True if the actor to move is the first actor.

    Returns:
        The matching DecisionPoint.

    Raises:
        InvalidProfileError: If the pair is not a reachable decision point
            (terminal history, or the wrong seat for the history).

    Example:
        >>> classify_decision_point('cb', True)
        <DecisionPoint.S1_CALL: 's1_call'>
    """
    try:
        return _POINTS_BY_KEY[(history, bool(is_first_actor))]
    except KeyError:
        seat = "first" if is_first_actor else "second"
        raise InvalidProfileError(
            f"No decision point for the {seat} actor after history {history!r}."
        ) from None


# ─── Information set type ─────────────────────────────────────────────────────

class KuhnInfoSet(NamedTuple):
    """An actor's information at a decision: own card plus decision point.

    Attributes:
        card:  Actor's card (1=Q, 2=K, 3=A).
        point: DecisionPoint reached by the public history.

    Example:
        >>> KuhnInfoSet(card=3, point=DecisionPoint.S2_CALL).label
        'A:s2_call'
    """
    card: int
    point: DecisionPoint

    @property
    def label(self) -> str:
        return f"{card_to_str(self.card)}:{self.point.value}"


def make_info_set(card: int, history: str, is_first_actor: bool) -> KuhnInfoSet:
    """Extract the infoset for an actor holding ``card`` after ``history``."""
    return KuhnInfoSet(card=card, point=classify_decision_point(history, is_first_actor))


def all_info_sets(is_first_actor: bool | None = None) -> list[KuhnInfoSet]:
    """Enumerate infosets, optionally only those of one seat.

    Returns 12 infosets for both seats, 6 for a single seat.
    """
    return [
        KuhnInfoSet(card=card, point=point)
        for point in DecisionPoint
        if is_first_actor is None or point.is_first_actor == is_first_actor
        for card in CARDS
    ]


def get_legal_actions(point: DecisionPoint) -> list[Action]:
    """Legal actions at a decision point, aggressive action first."""
    return [point.aggressive_action, point.passive_action]
