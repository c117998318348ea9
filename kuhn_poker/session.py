"""
Interactive game session: one player against one AI opponent, hand by hand.

A GameSession owns everything the UI needs between clicks: the current
HandState, who sits where, the running game count and the in-memory hand
history. It is an explicit object passed around by the caller (the
Streamlit app keeps one in ``st.session_state``); nothing here is global.

Seat rotation:
    The player acts first on odd-numbered games (games_played + 1 odd),
    the opponent on even-numbered ones.

Recording:
    When a hand ends the session builds a HandRecord (profit signed to the
    player), appends it to its capped in-memory history and hands it to the
    optional recorder. Recorder failures are logged and never interrupt play;
    the in-memory history remains the local fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from kuhn_poker.engine.cards import card_to_str
from kuhn_poker.engine.deck import Deal
from kuhn_poker.engine.errors import InvalidArgumentError, InvalidStateError
from kuhn_poker.engine.game_state import Action, HandResult, HandState, Seat
from kuhn_poker.engine.profiles import StrategyProfile
from kuhn_poker.persistence.records import (
    HUMAN_STRATEGY_ID,
    WINNER_OPPONENT,
    WINNER_PLAYER,
    HandRecord,
)
from kuhn_poker.solvers.decision import decide_action

logger = logging.getLogger(__name__)

# recorder(record) -> True if stored
HandRecorder = Callable[[HandRecord], bool]


@dataclass(frozen=True)
class Participant:
    """A seat occupant: the human (no profile) or an AI profile with its id."""
    participant_id: str
    profile: StrategyProfile | None = None

    @property
    def is_human(self) -> bool:
        return self.profile is None

    @property
    def label(self) -> str:
        return "You" if self.is_human else self.profile.name

    @classmethod
    def human(cls) -> Participant:
        return cls(participant_id=HUMAN_STRATEGY_ID)

    @classmethod
    def ai(cls, profile_id: str, profile: StrategyProfile) -> Participant:
        return cls(participant_id=profile_id, profile=profile)


class GameSession:
    """Interactive session state.

    Args:
        player:        The user's seat: human, or an AI playing on their behalf.
        opponent:      The AI opponent (must have a profile).
        rng:           Generator for deals and AI decisions.
        games_played:  Finished games so far; sets the seat rotation.
        recorder:      Optional best-effort sink for finished hands.
        history_limit: In-memory history cap.

    Raises:
        InvalidArgumentError: If ``opponent`` is human.
    """

    def __init__(
        self,
        player: Participant,
        opponent: Participant,
        rng: np.random.Generator | None = None,
        games_played: int = 0,
        recorder: HandRecorder | None = None,
        history_limit: int = 100,
    ) -> None:
        if opponent.is_human:
            raise InvalidArgumentError("The opponent must be an AI profile.")
        self.player = player
        self.opponent = opponent
        self.rng = rng if rng is not None else np.random.default_rng()
        self.games_played = games_played
        self.recorder = recorder
        self.history_limit = history_limit

        self.state = HandState()
        self.is_player_first = True
        self.last_record: HandRecord | None = None
        self.last_save_ok: bool | None = None
        self._history: list[HandRecord] = []
        self._recorded = False

    # ── Seats ─────────────────────────────────────────────────────────────────

    @property
    def player_seat(self) -> Seat:
        return Seat.FIRST if self.is_player_first else Seat.SECOND

    @property
    def player_card(self) -> int:
        return self.state.card_for(self.player_seat)

    @property
    def opponent_card(self) -> int:
        return self.state.card_for(self.player_seat.other)

    def _participant(self, seat: Seat) -> Participant:
        return self.player if seat is self.player_seat else self.opponent

    # ── Hand flow ─────────────────────────────────────────────────────────────

    @property
    def hand_in_progress(self) -> bool:
        return self.state.is_dealt and not self.state.is_over

    def new_hand(self, cards: Deal | None = None) -> None:
        """Deal the next hand.

        Args:
            cards: Optional preset (player_card, opponent_card).

        Raises:
            InvalidStateError: If the current hand has not finished.
        """
        if self.hand_in_progress:
            raise InvalidStateError("Finish the current hand before dealing a new one.")

        self.is_player_first = (self.games_played + 1) % 2 != 0
        preset = None
        if cards is not None:
            preset = cards if self.is_player_first else (cards[1], cards[0])
        self.state.start_hand(rng=self.rng, cards=preset)
        self._recorded = False
        logger.debug(
            "Game %d dealt: player %s (%s)",
            self.games_played + 1, card_to_str(self.player_card),
            "first" if self.is_player_first else "second",
        )

    def current_actor(self) -> Participant | None:
        seat = self.state.current_seat
        return None if seat is None else self._participant(seat)

    def is_human_turn(self) -> bool:
        actor = self.current_actor()
        return actor is not None and actor.is_human

    def legal_actions(self) -> tuple[Action, ...]:
        return self.state.legal_actions()

    def apply_human_action(self, action: Action) -> None:
        """Apply the human's chosen action.

        Raises:
            InvalidStateError: If it is not the human's turn, or the action
                is illegal.
        """
        if not self.is_human_turn():
            raise InvalidStateError("It is not the human player's turn.")
        self.state.apply_action(action)
        self._finish_if_over()

    def step_ai(self) -> Action:
        """Let the AI to act take exactly one action.

        Raises:
            InvalidStateError: If no AI is to act.
        """
        actor = self.current_actor()
        if actor is None or actor.is_human:
            raise InvalidStateError("No AI is due to act.")
        seat = self.state.current_seat
        action = decide_action(
            actor.profile,
            self.state.card_for(seat),
            self.state.history,
            seat is Seat.FIRST,
            self.rng,
        )
        self.state.apply_action(action)
        self._finish_if_over()
        return action

    def advance_ai(self) -> list[Action]:
        """Run AI actions until the hand ends or the human must act."""
        taken: list[Action] = []
        while self.hand_in_progress and not self.is_human_turn():
            taken.append(self.step_ai())
        return taken

    def play_full_hand(self) -> HandResult:
        """Deal and auto-play a hand; only valid when no human is seated."""
        if self.player.is_human:
            raise InvalidStateError("play_full_hand() needs an AI in the player seat.")
        self.new_hand()
        self.advance_ai()
        return self.state.resolve()

    # ── Results ───────────────────────────────────────────────────────────────

    @property
    def result(self) -> HandResult | None:
        return self.state.resolve() if self.state.is_over else None

    def visible_opponent_card(self) -> int | None:
        """Opponent card once revealed at showdown; None otherwise."""
        result = self.result
        if result is None or result.folded:
            return None
        return self.opponent_card

    def result_message(self) -> str | None:
        result = self.result
        if result is None:
            return None
        profit = result.payoff_for(self.player_seat)
        if result.folded:
            folder = self.player if result.winner is not self.player_seat else self.opponent
            how = f"{folder.label} folded"
        else:
            how = (
                f"Showdown: {card_to_str(self.player_card)} vs "
                f"{card_to_str(self.opponent_card)}"
            )
        outcome = "win" if profit > 0 else "lose"
        return f"{how}. You {outcome} {abs(profit)} chip{'s' if abs(profit) != 1 else ''}."

    @property
    def history(self) -> list[HandRecord]:
        """In-memory hand records, newest first."""
        return list(reversed(self._history))

    def _finish_if_over(self) -> None:
        if not self.state.is_over or self._recorded:
            return
        result = self.state.resolve()
        player_seat = self.player_seat
        record = HandRecord(
            player_card=card_to_str(self.player_card),
            opponent_card=card_to_str(self.opponent_card),
            action_sequence=result.history,
            is_player_first=self.is_player_first,
            winner=WINNER_PLAYER if result.winner is player_seat else WINNER_OPPONENT,
            profit=result.payoff_for(player_seat),
            player_strategy_id=self.player.participant_id,
            opponent_strategy_id=self.opponent.participant_id,
        )
        self._recorded = True
        self.games_played += 1
        self.last_record = record
        self._history.append(record)
        if len(self._history) > self.history_limit:
            del self._history[: len(self._history) - self.history_limit]

        if self.recorder is None:
            self.last_save_ok = None
            return
        try:
            self.last_save_ok = bool(self.recorder(record))
        except Exception as e:
            logger.error(f"Recorder failed for game {self.games_played}: {e}", exc_info=True)
            self.last_save_ok = False
