"""Application settings and environment-variable utilities.

All runtime knobs are read once from ``KUHN_*`` environment variables.
Unparseable or out-of-range values fall back to (or are clamped into) safe
defaults rather than failing at start-up.

Typical usage::

    settings = load_settings()
    store = JsonStore(settings.data_dir, settings.history_limit, settings.gto_alpha)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from kuhn_poker.engine.profiles import DEFAULT_GTO_ALPHA
from kuhn_poker.logging_config import resolve_level

# Largest run the simulator form accepts.
SIMULATION_HANDS_CEILING = 100_000


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration.

    Attributes:
        data_dir:                 Root directory of the JSON store.
        log_level:                Level name passed to configure_logging().
        max_simulation_hands:     Upper bound the UI accepts for one run.
        default_simulation_hands: Pre-filled hand count in the simulator.
        history_limit:            Hands kept per user.
        gto_alpha:                Parameter of the built-in GTO profile.
        ai_delay_seconds:         Cosmetic pause before each AI action.
    """

    data_dir: Path = Path("data")
    log_level: str = "INFO"
    max_simulation_hands: int = SIMULATION_HANDS_CEILING
    default_simulation_hands: int = 10_000
    history_limit: int = 100
    gto_alpha: float = DEFAULT_GTO_ALPHA
    ai_delay_seconds: float = 0.0


# ── Environment-variable parsing helpers ─────────────────────────────────

def parse_float_env(name: str, default: float) -> float:
    """Read a float from env-var *name*, returning *default* on absence or error."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def parse_int_env(name: str, default: int) -> int:
    """Read an integer from env-var *name*, returning *default* on absence or error."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    if raw.lstrip("-").isdigit():
        return int(raw)
    return default


def clamp_float(value: float, min_value: float, max_value: float) -> float:
    """Clamp *value* into ``[min_value, max_value]``."""
    return max(min_value, min(max_value, value))


def clamp_int(value: int, min_value: int, max_value: int) -> int:
    """Clamp *value* into ``[min_value, max_value]``."""
    return max(min_value, min(max_value, value))


def load_settings() -> Settings:
    """Build Settings from the environment."""
    defaults = Settings()
    max_hands = clamp_int(
        parse_int_env("KUHN_MAX_SIM_HANDS", defaults.max_simulation_hands),
        1, SIMULATION_HANDS_CEILING,
    )
    alpha = parse_float_env("KUHN_GTO_ALPHA", defaults.gto_alpha)
    if alpha != alpha:  # NaN
        alpha = defaults.gto_alpha

    return Settings(
        data_dir=Path(os.getenv("KUHN_DATA_DIR", "").strip() or defaults.data_dir),
        log_level=resolve_level(os.getenv("KUHN_LOG_LEVEL"), defaults.log_level),
        max_simulation_hands=max_hands,
        default_simulation_hands=clamp_int(
            parse_int_env("KUHN_DEFAULT_SIM_HANDS", defaults.default_simulation_hands),
            1, max_hands,
        ),
        history_limit=clamp_int(parse_int_env("KUHN_HISTORY_LIMIT", defaults.history_limit), 1, 10_000),
        gto_alpha=clamp_float(alpha, 0.0, DEFAULT_GTO_ALPHA),
        ai_delay_seconds=clamp_float(parse_float_env("KUHN_AI_DELAY", defaults.ai_delay_seconds), 0.0, 5.0),
    )
