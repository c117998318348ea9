"""
Value types exchanged with the persistence layer.

    HandRecord      - one finished interactive hand, from the player's view.
    AggregateStats  - per-user counters updated on each saved hand.

Cards are stored by name ('Q', 'K', 'A') and the betting history as its
code string, so records stay readable in the JSON files.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from kuhn_poker.engine.cards import CARD_NAMES

WINNER_PLAYER = 'player'
WINNER_OPPONENT = 'opponent'
HUMAN_STRATEGY_ID = 'human'


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class HandRecord:
    """One finished hand, with profit signed to the player."""
    player_card: str
    opponent_card: str
    action_sequence: str
    is_player_first: bool
    winner: str
    profit: int
    player_strategy_id: str
    opponent_strategy_id: str
    timestamp: str = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        names = set(CARD_NAMES.values())
        if self.player_card not in names or self.opponent_card not in names:
            raise ValueError(
                f"Record cards must be one of {sorted(names)}, "
                f"got {self.player_card!r} and {self.opponent_card!r}."
            )
        if self.winner not in (WINNER_PLAYER, WINNER_OPPONENT):
            raise ValueError(f"Record winner must be 'player' or 'opponent', got {self.winner!r}.")

    @property
    def player_won(self) -> bool:
        return self.winner == WINNER_PLAYER

    @property
    def player_actions(self) -> str:
        """Codes of the actions the player took (even indices when first)."""
        offset = 0 if self.is_player_first else 1
        return self.action_sequence[offset::2]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HandRecord:
        return cls(
            player_card=data['player_card'],
            opponent_card=data['opponent_card'],
            action_sequence=data['action_sequence'],
            is_player_first=bool(data['is_player_first']),
            winner=data['winner'],
            profit=int(data['profit']),
            player_strategy_id=data.get('player_strategy_id', HUMAN_STRATEGY_ID),
            opponent_strategy_id=data['opponent_strategy_id'],
            timestamp=data.get('timestamp') or _utc_now(),
        )


@dataclass(frozen=True)
class AggregateStats:
    """Simple per-user counters."""
    games_played: int = 0
    wins: int = 0
    total_profit: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games_played if self.games_played else 0.0

    def with_record(self, record: HandRecord) -> AggregateStats:
        return replace(
            self,
            games_played=self.games_played + 1,
            wins=self.wins + (1 if record.player_won else 0),
            total_profit=self.total_profit + record.profit,
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregateStats:
        return cls(
            games_played=int(data.get('games_played', 0)),
            wins=int(data.get('wins', 0)),
            total_profit=int(data.get('total_profit', 0)),
        )
