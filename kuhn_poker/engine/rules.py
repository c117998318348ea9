"""
Betting rules, terminal detection, and settlement for one Kuhn Poker hand.

History encoding (one character per action, first actor moves at even
indices, second actor at odd indices):
    b = BET, c = CHECK, k = CALL, f = FOLD

Reachable histories:
    ''   → first actor: BET or CHECK
    'c'  → second actor: BET or CHECK
    'b'  → second actor: CALL or FOLD
    'cb' → first actor: CALL or FOLD
Terminal histories: 'cc', 'bk', 'cbk' (showdowns) and any history ending
in 'f' ('bf', 'cbf').

Payout convention (from the first actor's perspective):
    +N = first actor wins N units
    -N = first actor loses N units
There are no pushes: the two dealt cards are always distinct.
"""

from __future__ import annotations

from enum import Enum, auto

from .errors import InvalidStateError

ANTE: int = 1
BET_SIZE: int = 1


# ─── Enumerations ─────────────────────────────────────────────────────────────

class Action(Enum):
    BET = 'b'
    CHECK = 'c'
    CALL = 'k'
    FOLD = 'f'

    @property
    def code(self) -> str:
        """Single-character history code."""
        return self.value

    @property
    def is_aggressive(self) -> bool:
        """True for actions that put a chip in the pot (BET, CALL)."""
        return self in (Action.BET, Action.CALL)

    @classmethod
    def from_code(cls, code: str) -> Action:
        try:
            return cls(code)
        except ValueError:
            raise InvalidStateError(f"Unknown action code {code!r}.") from None


class Seat(Enum):
    FIRST = auto()
    SECOND = auto()

    @property
    def other(self) -> Seat:
        return Seat.SECOND if self is Seat.FIRST else Seat.FIRST


# Showdown terminals; fold terminals are covered by the trailing-'f' rule.
SHOWDOWN_HISTORIES: frozenset[str] = frozenset({'cc', 'bk', 'cbk'})

_OPENING_HISTORIES: frozenset[str] = frozenset({'', 'c'})
_FACING_BET_HISTORIES: frozenset[str] = frozenset({'b', 'cb'})


# ─── History helpers ──────────────────────────────────────────────────────────

def history_to_str(actions: tuple[Action, ...] | list[Action]) -> str:
    """Render an action sequence as its history string.

    Examples:
        >>> history_to_str((Action.CHECK, Action.BET, Action.FOLD))
        'cbf'
    """
    return ''.join(a.code for a in actions)


def str_to_history(history: str) -> tuple[Action, ...]:
    """Parse a history string into a tuple of actions."""
    return tuple(Action.from_code(ch) for ch in history)


def is_terminal(history: str) -> bool:
    """Pure terminal predicate on a history string.

    Examples:
        >>> is_terminal('cc'), is_terminal('bf'), is_terminal('cb')
        (True, True, False)
    """
    return history in SHOWDOWN_HISTORIES or history.endswith(Action.FOLD.code)


def legal_actions(history: str) -> tuple[Action, ...]:
    """Return the legal actions after ``history``.

    Returns:
        (BET, CHECK) when no wager is outstanding, (CALL, FOLD) when facing
        a bet, and () once the hand is terminal.

    Raises:
        InvalidStateError: If ``history`` cannot arise under Kuhn rules.
    """
    if is_terminal(history):
        return ()
    if history in _OPENING_HISTORIES:
        return (Action.BET, Action.CHECK)
    if history in _FACING_BET_HISTORIES:
        return (Action.CALL, Action.FOLD)
    raise InvalidStateError(f"History {history!r} is not reachable in Kuhn Poker.")


def actor_for(history: str) -> Seat:
    """Seat that acts after ``history`` (first actor on even lengths)."""
    return Seat.FIRST if len(history) % 2 == 0 else Seat.SECOND


def contributions(history: str) -> tuple[int, int]:
    """Chips put in by (first actor, second actor): ante plus one per BET/CALL."""
    first = second = ANTE
    for i, code in enumerate(history):
        if Action.from_code(code).is_aggressive:
            if i % 2 == 0:
                first += BET_SIZE
            else:
                second += BET_SIZE
    return first, second


# ─── Settlement ───────────────────────────────────────────────────────────────

def settle_hand(history: str, first_card: int, second_card: int) -> tuple[Seat, int]:
    """Determine the winner and the first actor's signed payoff.

    Settlement rules:
        1. Fold     → the non-folder wins the folder's own contribution.
        2. Showdown → the higher card wins the loser's contribution.

    Args:
        history:     Terminal history string.
        first_card:  First actor's card (strength encoding).
        second_card: Second actor's card.

    Returns:
        (winner, payoff_to_first)

    Raises:
        InvalidStateError: If ``history`` is not terminal.

    Examples:
        >>> settle_hand('bk', 1, 2)
        (<Seat.SECOND: 2>, -2)
    """
    if not is_terminal(history):
        raise InvalidStateError(f"Cannot settle non-terminal history {history!r}.")

    first_in, second_in = contributions(history)

    if history.endswith(Action.FOLD.code):
        folder = actor_for(history[:-1])
        winner = folder.other
    else:
        winner = Seat.FIRST if first_card > second_card else Seat.SECOND

    if winner is Seat.FIRST:
        return winner, second_in
    return winner, -first_in
