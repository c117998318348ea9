"""
Deck creation and dealing for Kuhn Poker.

The deck is always exactly {Q, K, A}. A hand deals two of the three cards:
a uniform random permutation is drawn and its first two elements go to the
first actor and the second actor. The third card is never seen.

Randomness comes from an explicit ``numpy.random.Generator`` so every deal
is reproducible from a seed.
"""

from __future__ import annotations

from itertools import permutations

import numpy as np

from .cards import CARDS, card_to_str, str_to_card

Deal = tuple[int, int]


def create_deck() -> tuple[int, ...]:
    """Return the full Kuhn deck, weakest card first.

    Examples:
        >>> create_deck()
        (1, 2, 3)
    """
    return CARDS


def deal_cards(rng: np.random.Generator | None = None) -> Deal:
    """Deal two distinct cards uniformly at random.

    Args:
        rng: Random generator. A fresh, unseeded generator is used if None.

    Returns:
        (first_actor_card, second_actor_card)

    Examples:
        >>> first, second = deal_cards(np.random.default_rng(0))
        >>> first != second
        True
    """
    if rng is None:
        rng = np.random.default_rng()
    order = rng.permutation(len(CARDS))
    return CARDS[int(order[0])], CARDS[int(order[1])]


def validate_deal(first_card: int, second_card: int) -> Deal:
    """Check that a preset deal uses two distinct Kuhn cards.

    Used for deterministic test setups and replaying stored hands.

    Raises:
        ValueError: If either card is unknown or both cards are the same.
    """
    for card in (first_card, second_card):
        if card not in CARDS:
            raise ValueError(f"Unknown card {card!r}; expected one of {CARDS}.")
    if first_card == second_card:
        raise ValueError(f"Dealt cards must be distinct, got {first_card} twice.")
    return first_card, second_card


def deal_from_str(first: str, second: str) -> Deal:
    """Build a validated deal from card names, e.g. ``deal_from_str('K', 'A')``."""
    return validate_deal(str_to_card(first), str_to_card(second))


def all_deals() -> list[Deal]:
    """Enumerate the 6 equally likely ordered deals (first, second).

    Examples:
        >>> len(all_deals())
        6
    """
    return [(a, b) for a, b in permutations(CARDS, 2)]


def deal_to_str(deal: Deal) -> str:
    """Human-readable deal, e.g. ``'K vs A'``."""
    return f"{card_to_str(deal[0])} vs {card_to_str(deal[1])}"
