"""
Hand state machine and complete AI-vs-AI hand play.

Implements the Kuhn Poker hand flow:
    DEALING → FIRST_ACTOR_TO_ACT → SECOND_ACTOR_TO_ACT →
    (FIRST_ACTOR_TO_ACT again after 'c b') → TERMINAL

Key rules modelled here:
    - Each seat antes 1, so a freshly dealt pot is 2.
    - At most one bet of 1 per hand; BET and CALL each add 1 to the actor's
      contribution. The pot is always the sum of the two contributions.
    - Illegal actions are rejected with InvalidStateError, never coerced.
    - A terminal hand is resolved exactly once; later calls to resolve()
      return the same HandResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

import numpy as np

from .cards import card_to_str
from .deck import Deal, deal_cards, validate_deal
from .errors import InvalidStateError
from .rules import (
    ANTE,
    BET_SIZE,
    Action,
    Seat,
    actor_for,
    is_terminal,
    legal_actions,
    settle_hand,
)

__all__ = [
    'Action',
    'Seat',
    'Phase',
    'HandResult',
    'HandState',
    'HandStrategy',
    'play_hand',
]

logger = logging.getLogger(__name__)


# ─── Enumerations ─────────────────────────────────────────────────────────────

class Phase(Enum):
    DEALING = auto()
    FIRST_ACTOR_TO_ACT = auto()
    SECOND_ACTOR_TO_ACT = auto()
    TERMINAL = auto()


# ─── Result type ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HandResult:
    """Result of a completed Kuhn hand, signed from the first actor's view."""
    first_card: int
    second_card: int
    history: str
    winner: Seat
    payoff_to_first: int         # +N first actor wins N, -N first actor loses N
    final_pot: int
    folded: bool

    def payoff_for(self, seat: Seat) -> int:
        """Signed payoff for ``seat`` (zero-sum with the other seat)."""
        return self.payoff_to_first if seat is Seat.FIRST else -self.payoff_to_first

    def __str__(self) -> str:
        payoff_str = (
            f"+{self.payoff_to_first}" if self.payoff_to_first >= 0
            else f"{self.payoff_to_first}"
        )
        ending = "fold" if self.folded else "showdown"
        return (
            f"First: {card_to_str(self.first_card)} | "
            f"Second: {card_to_str(self.second_card)} | "
            f"history={self.history or '-'} ({ending}) | "
            f"{self.winner.name} wins, pot={self.final_pot}, first {payoff_str}"
        )


# ─── State machine ────────────────────────────────────────────────────────────

class HandState:
    """Mutable state of one hand, changed only through ``apply_action``.

    Examples:
        >>> state = HandState()
        >>> state.start_hand(cards=(2, 3))
        >>> state.apply_action(Action.BET)
        >>> state.apply_action(Action.FOLD)
        >>> state.resolve().payoff_to_first
        1
    """

    def __init__(self) -> None:
        self._cards: Deal | None = None
        self._actions: list[Action] = []
        self._contributions: list[int] = [0, 0]
        self._result: HandResult | None = None

    def start_hand(
        self,
        rng: np.random.Generator | None = None,
        cards: Deal | None = None,
    ) -> None:
        """Deal a new hand and reset the betting.

        Args:
            rng:   Random generator for the deal (ignored when ``cards`` given).
            cards: Optional preset (first_card, second_card); validated.
        """
        if cards is not None:
            self._cards = validate_deal(*cards)
        else:
            self._cards = deal_cards(rng)
        self._actions = []
        self._contributions = [ANTE, ANTE]
        self._result = None

    # ── Read-only views ───────────────────────────────────────────────────────

    @property
    def is_dealt(self) -> bool:
        return self._cards is not None

    @property
    def first_card(self) -> int:
        self._require_dealt()
        return self._cards[0]

    @property
    def second_card(self) -> int:
        self._require_dealt()
        return self._cards[1]

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def history(self) -> str:
        return ''.join(a.code for a in self._actions)

    @property
    def contributions(self) -> tuple[int, int]:
        return self._contributions[0], self._contributions[1]

    @property
    def pot(self) -> int:
        return self._contributions[0] + self._contributions[1]

    @property
    def is_over(self) -> bool:
        return self.is_dealt and is_terminal(self.history)

    @property
    def phase(self) -> Phase:
        if not self.is_dealt:
            return Phase.DEALING
        if self.is_over:
            return Phase.TERMINAL
        if actor_for(self.history) is Seat.FIRST:
            return Phase.FIRST_ACTOR_TO_ACT
        return Phase.SECOND_ACTOR_TO_ACT

    @property
    def current_seat(self) -> Seat | None:
        """Seat to act, or None before the deal and after the hand ends."""
        if not self.is_dealt or self.is_over:
            return None
        return actor_for(self.history)

    def card_for(self, seat: Seat) -> int:
        return self.first_card if seat is Seat.FIRST else self.second_card

    # ── Transitions ───────────────────────────────────────────────────────────

    def legal_actions(self) -> tuple[Action, ...]:
        """Legal actions for the seat to act; () when not dealt or terminal."""
        if not self.is_dealt:
            return ()
        return legal_actions(self.history)

    def apply_action(self, action: Action) -> None:
        """Apply ``action`` for the seat to act.

        Raises:
            InvalidStateError: If the hand is not dealt, already terminal,
                or ``action`` is not in ``legal_actions()``.
        """
        if not self.is_dealt:
            raise InvalidStateError("No hand in progress; call start_hand() first.")
        if self.is_over:
            raise InvalidStateError(f"Hand is already over (history {self.history!r}).")
        legal = self.legal_actions()
        if action not in legal:
            names = ', '.join(a.name for a in legal)
            raise InvalidStateError(
                f"Illegal action {action.name} after {self.history!r}; legal: {names}."
            )

        seat = actor_for(self.history)
        if action.is_aggressive:
            self._contributions[0 if seat is Seat.FIRST else 1] += BET_SIZE
        self._actions.append(action)

    def resolve(self) -> HandResult:
        """Settle a terminal hand. Repeated calls return the same result.

        Raises:
            InvalidStateError: If the hand has not reached a terminal state.
        """
        if self._result is not None:
            return self._result
        if not self.is_over:
            raise InvalidStateError(
                f"Cannot resolve a hand in progress (history {self.history!r})."
            )

        history = self.history
        winner, payoff = settle_hand(history, self.first_card, self.second_card)
        self._result = HandResult(
            first_card=self.first_card,
            second_card=self.second_card,
            history=history,
            winner=winner,
            payoff_to_first=payoff,
            final_pot=self.pot,
            folded=history.endswith(Action.FOLD.code),
        )
        logger.debug("Resolved hand: %s", self._result)
        return self._result

    def _require_dealt(self) -> None:
        if self._cards is None:
            raise InvalidStateError("No cards have been dealt yet.")


# ─── Strategy type alias ──────────────────────────────────────────────────────

# strategy(card, history, is_first_actor, rng) -> Action
HandStrategy = Callable[[int, str, bool, np.random.Generator], Action]


# ─── Core game simulation ─────────────────────────────────────────────────────

def play_hand(
    first_strategy: HandStrategy,
    second_strategy: HandStrategy,
    rng: np.random.Generator,
    cards: Deal | None = None,
) -> HandResult:
    """Play one complete hand between two strategies.

    Args:
        first_strategy:  Callable choosing the first actor's actions.
        second_strategy: Callable choosing the second actor's actions.
        rng:             Random generator shared by the deal and decisions.
        cards:           Optional preset (first_card, second_card).

    Returns:
        HandResult of the terminal hand.
    """
    state = HandState()
    state.start_hand(rng=rng, cards=cards)

    while not state.is_over:
        seat = state.current_seat
        is_first = seat is Seat.FIRST
        strategy = first_strategy if is_first else second_strategy
        action = strategy(state.card_for(seat), state.history, is_first, rng)
        state.apply_action(action)

    return state.resolve()
