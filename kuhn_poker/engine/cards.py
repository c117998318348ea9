"""
Card constants, encoding, and human-readable I/O helpers.

Card encoding (integer 1–3):
    1 = Q (Queen), 2 = K (King), 3 = A (Ace)

The integer IS the card's strength, so showdown comparison is a plain
integer comparison. String representations are used exclusively at I/O
boundaries (UI, persistence records, profile keys).
"""

from __future__ import annotations

CARD_QUEEN: int = 1
CARD_KING: int = 2
CARD_ACE: int = 3

# Ordered weakest → strongest.
CARDS: tuple[int, ...] = (CARD_QUEEN, CARD_KING, CARD_ACE)

CARD_NAMES: dict[int, str] = {CARD_QUEEN: 'Q', CARD_KING: 'K', CARD_ACE: 'A'}
_NAME_TO_CARD: dict[str, int] = {name: card for card, name in CARD_NAMES.items()}


def card_strength(card: int) -> int:
    """Return the showdown strength of a card (Q=1, K=2, A=3).

    Raises:
        ValueError: If ``card`` is not one of the three Kuhn cards.

    Examples:
        >>> card_strength(CARD_ACE)
        3
    """
    if card not in CARD_NAMES:
        raise ValueError(f"Unknown card {card!r}; expected one of {CARDS}.")
    return card


def card_to_str(card: int) -> str:
    """Convert a card integer to its one-letter name.

    Examples:
        >>> card_to_str(1)
        'Q'
        >>> card_to_str(3)
        'A'
    """
    try:
        return CARD_NAMES[card]
    except KeyError:
        raise ValueError(f"Unknown card {card!r}; expected one of {CARDS}.") from None


def str_to_card(s: str) -> int:
    """Parse a one-letter card name (case-insensitive) to its integer encoding.

    Examples:
        >>> str_to_card('K')
        2
        >>> str_to_card('a')
        3
    """
    try:
        return _NAME_TO_CARD[s.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown card name {s!r}; expected Q, K or A.") from None


def card_key(card: int) -> str:
    """Lower-case card name used in strategy-profile field names ('q', 'k', 'a')."""
    return card_to_str(card).lower()
