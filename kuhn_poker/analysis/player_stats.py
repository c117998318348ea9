"""
Statistics over a player's interactive hand history.

Works on HandRecord lists as returned by the history store (newest first).
All rates are fractions in [0, 1]; a rate with no qualifying hands is None
rather than 0 so the UI can show "n/a". strategic_advice() turns recent
results and the opponent id into short tips.

Player-side decision spots:
    opening bet  - player is first actor: history[0] is 'b'
    facing a bet - player second after 'b', or player first after 'c b';
                   the player's reply is 'k' (call) or 'f' (fold)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from kuhn_poker.engine.cards import CARD_NAMES, card_to_str
from kuhn_poker.engine.rules import Action
from kuhn_poker.persistence.records import HandRecord

_CARD_ORDER: tuple[str, ...] = tuple(CARD_NAMES.values())


@dataclass(frozen=True)
class PlayerStats:
    """Summary of a hand history from the player's perspective."""
    games: int
    wins: int
    total_profit: int
    win_rate: float | None
    ev_per_hand: float | None
    opening_bet_rate: dict[str, float | None]
    call_rate: float | None
    call_rate_by_card: dict[str, float | None]
    win_rate_by_card: dict[str, float | None]
    longest_win_streak: int
    longest_loss_streak: int
    current_streak: int              # +n = n wins in a row, -n = n losses
    average_sequence_length: float | None
    action_counts: dict[str, int] = field(default_factory=dict)
    favorite_action: str | None = None


def _rate(hits: int, total: int) -> float | None:
    return hits / total if total else None


def _facing_bet_reply(record: HandRecord) -> str | None:
    """Player's reply code when facing a bet, or None if never faced one."""
    seq = record.action_sequence
    if record.is_player_first:
        return seq[2] if seq.startswith('cb') and len(seq) > 2 else None
    return seq[1] if seq.startswith('b') and len(seq) > 1 else None


def filter_records(
    records: Iterable[HandRecord],
    opponent_id: str | None = None,
    player_card: str | int | None = None,
) -> list[HandRecord]:
    """Keep records against ``opponent_id`` and/or holding ``player_card``.

    ``None`` (or 'all') disables a filter. Order is preserved.
    """
    card = None
    if player_card is not None and player_card != 'all':
        card = card_to_str(player_card) if isinstance(player_card, int) else player_card.upper()

    out = []
    for r in records:
        if opponent_id not in (None, 'all') and r.opponent_strategy_id != opponent_id:
            continue
        if card is not None and r.player_card != card:
            continue
        out.append(r)
    return out


def _streaks(chronological: list[HandRecord]) -> tuple[int, int, int]:
    longest_win = longest_loss = 0
    current = 0
    for r in chronological:
        if r.player_won:
            current = current + 1 if current > 0 else 1
            longest_win = max(longest_win, current)
        else:
            current = current - 1 if current < 0 else -1
            longest_loss = max(longest_loss, -current)
    return longest_win, longest_loss, current


def summarize(records: Iterable[HandRecord], newest_first: bool = True) -> PlayerStats:
    """Compute PlayerStats for a history.

    Args:
        records:      Hand records.
        newest_first: Order of ``records``; streaks are computed oldest → newest.
    """
    records = list(records)
    chronological = list(reversed(records)) if newest_first else records

    games = len(records)
    wins = sum(1 for r in records if r.player_won)
    total_profit = sum(r.profit for r in records)

    open_hits: Counter[str] = Counter()
    open_total: Counter[str] = Counter()
    call_hits: Counter[str] = Counter()
    call_total: Counter[str] = Counter()
    card_wins: Counter[str] = Counter()
    card_games: Counter[str] = Counter()
    action_counts: Counter[str] = Counter()

    for r in records:
        card_games[r.player_card] += 1
        if r.player_won:
            card_wins[r.player_card] += 1

        if r.is_player_first and r.action_sequence:
            open_total[r.player_card] += 1
            if r.action_sequence[0] == Action.BET.code:
                open_hits[r.player_card] += 1

        reply = _facing_bet_reply(r)
        if reply is not None:
            call_total[r.player_card] += 1
            if reply == Action.CALL.code:
                call_hits[r.player_card] += 1

        for code in r.player_actions:
            action_counts[Action.from_code(code).name] += 1

    longest_win, longest_loss, current = _streaks(chronological)
    favorite = action_counts.most_common(1)[0][0] if action_counts else None

    return PlayerStats(
        games=games,
        wins=wins,
        total_profit=total_profit,
        win_rate=_rate(wins, games),
        ev_per_hand=total_profit / games if games else None,
        opening_bet_rate={c: _rate(open_hits[c], open_total[c]) for c in _CARD_ORDER},
        call_rate=_rate(sum(call_hits.values()), sum(call_total.values())),
        call_rate_by_card={c: _rate(call_hits[c], call_total[c]) for c in _CARD_ORDER},
        win_rate_by_card={c: _rate(card_wins[c], card_games[c]) for c in _CARD_ORDER},
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        current_streak=current,
        average_sequence_length=(
            sum(len(r.action_sequence) for r in records) / games if games else None
        ),
        action_counts=dict(action_counts),
        favorite_action=favorite,
    )


# ─── Advice ───────────────────────────────────────────────────────────────────

ADVICE_RECENT_GAMES = 10

NO_DATA_ADVICE = "Play more hands to build up data for analysis."

_OPPONENT_ADVICE: dict[str, str] = {
    'kensjitsu': "Steady folds its weak hands; bluffs work well against it.",
    'kiai': "Gutsy bets and calls loosely; careful play pays off against it.",
    'mitaiman': "Calling Station rarely bets; bet your strong hands for value.",
}


def strategic_advice(
    records: Iterable[HandRecord],
    opponent_id: str | None = None,
    recent: int = ADVICE_RECENT_GAMES,
) -> list[str]:
    """Short tips based on the player's recent results and the opponent.

    Args:
        records:     Hand records, newest first.
        opponent_id: Profile id of the current opponent; built-in ids with a
                     known style add a matching tip.
        recent:      How many of the newest records to judge the win rate on.

    Returns:
        Tips in display order; a single "play more" tip when there is no data.
    """
    window = list(records)[:recent]
    if not window:
        return [NO_DATA_ADVICE]

    advice: list[str] = []
    win_rate = sum(1 for r in window if r.player_won) / len(window)
    if win_rate < 0.3:
        advice.append("Try playing more aggressively against the AI.")
        advice.append("Consider betting your strong hands (A, K) more often.")
    elif win_rate > 0.7:
        advice.append("Your current strategy is working.")
        advice.append("You seem to have read the AI's patterns.")

    if opponent_id in _OPPONENT_ADVICE:
        advice.append(_OPPONENT_ADVICE[opponent_id])
    return advice
