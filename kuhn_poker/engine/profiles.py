"""
Strategy profiles: twelve action probabilities that fully describe an AI.

Field naming: ``{stage}_{card}_{kind}``
    stage ∈ {s1, s2}     s1 = first actor, s2 = second actor
    card  ∈ {q, k, a}
    kind  ∈ {bet, call}  probability of the aggressive action (BET / CALL)
                         at that decision point

Decision points and the field group they read:
    s1_bet   first actor, history ''    → BET  (else CHECK)
    s1_call  first actor, history 'cb'  → CALL (else FOLD)
    s2_bet   second actor, history 'c'  → BET  (else CHECK)
    s2_call  second actor, history 'b'  → CALL (else FOLD)

Profiles are frozen: editing returns a new profile via ``with_updates``.

The game-theoretic optimum is built by ``gto_profile(alpha)``, the
analytic Kuhn Poker equilibrium family (Kuhn, 1950). It is the only
source of the GTO table in the package.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, replace
from typing import Any

from .cards import CARDS, card_key, card_to_str
from .errors import InvalidProfileError

STAGES: tuple[str, ...] = ('s1', 's2')
KINDS: tuple[str, ...] = ('bet', 'call')
CARD_KEYS: tuple[str, ...] = ('q', 'k', 'a')

# Canonical order: stage, then kind, then card (weakest first).
PROBABILITY_FIELDS: tuple[str, ...] = tuple(
    f"{stage}_{card}_{kind}"
    for stage in STAGES
    for kind in KINDS
    for card in CARD_KEYS
)

DEFAULT_GTO_ALPHA: float = 1.0 / 3.0


def probability_field(point: Any, card: int) -> str:
    """Field name read at ``point`` holding ``card``.

    ``point`` is a ``DecisionPoint`` or its string value ('s1_bet', ...).

    Examples:
        >>> probability_field('s2_call', 2)
        's2_k_call'
    """
    value = getattr(point, 'value', point)
    try:
        stage, kind = str(value).split('_')
    except ValueError:
        raise InvalidProfileError(f"Unknown decision point {point!r}.") from None
    if stage not in STAGES or kind not in KINDS:
        raise InvalidProfileError(f"Unknown decision point {point!r}.")
    return f"{stage}_{card_key(card)}_{kind}"


def _check_probability(field_name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidProfileError(
            f"{field_name} must be a number in [0, 1], got {value!r}."
        )
    value = float(value)
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise InvalidProfileError(f"{field_name} must be in [0, 1], got {value!r}.")
    return value


# ─── Profile value object ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class StrategyProfile:
    """Immutable mixed strategy for both seats.

    Raises:
        InvalidProfileError: On construction, if any probability is
            non-numeric, NaN, or outside [0, 1].
    """
    name: str
    s1_q_bet: float
    s1_k_bet: float
    s1_a_bet: float
    s1_q_call: float
    s1_k_call: float
    s1_a_call: float
    s2_q_bet: float
    s2_k_bet: float
    s2_a_bet: float
    s2_q_call: float
    s2_k_call: float
    s2_a_call: float

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise InvalidProfileError(f"Profile name must be a string, got {self.name!r}.")
        for field_name in PROBABILITY_FIELDS:
            checked = _check_probability(field_name, getattr(self, field_name))
            object.__setattr__(self, field_name, checked)

    def probability(self, point: Any, card: int) -> float:
        """Probability of the aggressive action at ``point`` holding ``card``."""
        return getattr(self, probability_field(point, card))

    def probabilities(self) -> dict[str, float]:
        """The 12 probabilities keyed by field name, in canonical order."""
        return {name: getattr(self, name) for name in PROBABILITY_FIELDS}

    def with_updates(self, **changes: Any) -> StrategyProfile:
        """Return a copy with some fields replaced (validated again).

        Raises:
            InvalidProfileError: On an unknown field or invalid probability.
        """
        allowed = set(PROBABILITY_FIELDS) | {'name'}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidProfileError(f"Unknown profile fields: {sorted(unknown)}.")
        return replace(self, **changes)

    # ── Serialisation ─────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> StrategyProfile:
        """Build a profile from a mapping of the 12 fields (plus optional name).

        Raises:
            InvalidProfileError: If any probability field is missing or invalid.
        """
        if not isinstance(data, dict):
            raise InvalidProfileError(f"Profile data must be a mapping, got {type(data).__name__}.")
        missing = [f for f in PROBABILITY_FIELDS if f not in data]
        if missing:
            raise InvalidProfileError(f"Profile is missing fields: {missing}.")
        resolved_name = name if name is not None else data.get('name', 'custom')
        return cls(name=resolved_name, **{f: data[f] for f in PROBABILITY_FIELDS})

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> StrategyProfile:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidProfileError(f"Profile JSON is malformed: {exc}") from exc
        return cls.from_dict(data)

    def __str__(self) -> str:
        parts = ', '.join(f"{k}={v:.3f}" for k, v in self.probabilities().items())
        return f"{self.name}({parts})"


# ─── Profile builders ─────────────────────────────────────────────────────────

def uniform_profile(p: float, name: str | None = None) -> StrategyProfile:
    """Profile that takes the aggressive action with the same ``p`` everywhere.

    ``uniform_profile(1.0)`` always bets / calls; ``uniform_profile(0.0)``
    always checks / folds.
    """
    return StrategyProfile(
        name=name if name is not None else f"uniform-{p:g}",
        **{f: p for f in PROBABILITY_FIELDS},
    )


def gto_profile(alpha: float = DEFAULT_GTO_ALPHA, name: str = "GTO AI") -> StrategyProfile:
    """Analytic Kuhn Poker equilibrium for parameter ``alpha`` ∈ [0, 1/3].

    First actor: bluff-bet Q with alpha, never bet K, bet A with 3·alpha;
    facing a bet, call K with alpha + 1/3 and always call A.
    Second actor: bet Q with 1/3 and A always after a check; call a bet
    with K 1/3 of the time and with A always. Q never calls.

    Raises:
        InvalidProfileError: If ``alpha`` is outside [0, 1/3].

    Examples:
        >>> gto_profile(0.0).s1_a_bet
        0.0
    """
    alpha = _check_probability('alpha', alpha)
    if alpha > DEFAULT_GTO_ALPHA + 1e-12:
        raise InvalidProfileError(f"GTO alpha must be in [0, 1/3], got {alpha!r}.")
    third = 1.0 / 3.0
    return StrategyProfile(
        name=name,
        s1_q_bet=alpha,
        s1_k_bet=0.0,
        s1_a_bet=min(1.0, 3.0 * alpha),
        s1_q_call=0.0,
        s1_k_call=min(1.0, alpha + third),
        s1_a_call=1.0,
        s2_q_bet=third,
        s2_k_bet=0.0,
        s2_a_bet=1.0,
        s2_q_call=0.0,
        s2_k_call=third,
        s2_a_call=1.0,
    )


def _symmetric(name: str, bet: tuple[float, float, float], call: tuple[float, float, float]) -> StrategyProfile:
    # Same (q, k, a) table for both seats.
    values: dict[str, float] = {}
    for stage in STAGES:
        for card, b, c in zip(CARD_KEYS, bet, call):
            values[f"{stage}_{card}_bet"] = b
            values[f"{stage}_{card}_call"] = c
    return StrategyProfile(name=name, **values)


def builtin_profiles(gto_alpha: float = DEFAULT_GTO_ALPHA) -> dict[str, StrategyProfile]:
    """Read-only built-in profiles keyed by id."""
    return {
        'kensjitsu': StrategyProfile(
            name="Steady",
            s1_q_bet=0.1, s1_k_bet=0.0, s1_a_bet=0.8,
            s1_q_call=0.0, s1_k_call=0.1, s1_a_call=1.0,
            s2_q_bet=0.1, s2_k_bet=0.0, s2_a_bet=1.0,
            s2_q_call=0.0, s2_k_call=0.2, s2_a_call=1.0,
        ),
        'kiai': _symmetric("Gutsy", bet=(0.7, 0.8, 1.0), call=(0.8, 0.9, 1.0)),
        'mitaiman': _symmetric("Calling Station", bet=(0.0, 0.1, 0.2), call=(0.9, 0.9, 1.0)),
        'tightaggressive': _symmetric("Tight-Aggressive", bet=(0.8, 0.1, 1.0), call=(0.0, 0.0, 1.0)),
        'gto': gto_profile(gto_alpha),
    }


BUILTIN_PROFILES: dict[str, StrategyProfile] = builtin_profiles()


def profile_table(profile: StrategyProfile) -> dict[str, dict[str, float]]:
    """Nested view ``{'s1_bet': {'Q': .., 'K': .., 'A': ..}, ...}`` for display."""
    table: dict[str, dict[str, float]] = {}
    for stage in STAGES:
        for kind in KINDS:
            point = f"{stage}_{kind}"
            table[point] = {card_to_str(c): profile.probability(point, c) for c in CARDS}
    return table

