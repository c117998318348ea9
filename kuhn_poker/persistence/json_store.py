"""JSON-file persistence for hand history, user stats, profiles and simulations.

Layout under ``base_dir``::

    profiles.json                 custom strategy profiles keyed by id
    users/<user_id>/history.json  finished hands, oldest first (capped)
    users/<user_id>/stats.json    AggregateStats counters
    users/<user_id>/simulations.json  recent simulation summaries (capped)

Writes are best effort: a failed save is logged and reported through the
return value, never raised into the game. Profile lookups are contract
checks and do raise.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kuhn_poker.analysis.simulator import SimulationResult
from kuhn_poker.engine.errors import InvalidArgumentError, InvalidProfileError
from kuhn_poker.engine.profiles import DEFAULT_GTO_ALPHA, StrategyProfile, builtin_profiles
from kuhn_poker.persistence.records import AggregateStats, HandRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
SIMULATION_HISTORY_LIMIT = 50

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def is_valid_id(value: str) -> bool:
    """True if ``value`` can be used as a user or profile id."""
    return isinstance(value, str) and bool(_ID_PATTERN.fullmatch(value)) and value not in (".", "..")


def _check_id(kind: str, value: str) -> str:
    if not is_valid_id(value):
        raise InvalidArgumentError(
            f"{kind} must be 1-64 letters, digits, '.', '_' or '-', got {value!r}."
        )
    return value


class JsonStore:
    """File-backed implementation of the history, stats and profile stores.

    Args:
        base_dir:      Root directory; created on first write.
        history_limit: Hands kept per user (oldest dropped first).
        gto_alpha:     Parameter of the built-in GTO profile.
    """

    def __init__(
        self,
        base_dir: str | Path = "data",
        history_limit: int = 100,
        gto_alpha: float = DEFAULT_GTO_ALPHA,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.history_limit = history_limit
        self._builtins = builtin_profiles(gto_alpha)

    # ── File helpers ──────────────────────────────────────────────────────────

    def _user_dir(self, user_id: str) -> Path:
        return self.base_dir / "users" / _check_id("user_id", user_id)

    def _read_json(self, path: Path, default: Any) -> Any:
        """Load ``path``; a missing, unreadable or wrongly shaped file yields ``default``."""
        if not path.exists():
            return default
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}", exc_info=True)
            return default
        if not isinstance(data, type(default)):
            logger.warning(f"Ignoring {path}: expected {type(default).__name__}, got {type(data).__name__}")
            return default
        return data

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(path)

    # ── Hand history and stats ────────────────────────────────────────────────

    def save_hand_result(self, user_id: str, record: HandRecord) -> bool:
        """Append ``record`` to the user's history and update their counters.

        Returns:
            True on success, False if the write failed (already logged).
        """
        try:
            user_dir = self._user_dir(user_id)
            history_path = user_dir / "history.json"
            stats_path = user_dir / "stats.json"

            history = self._read_json(history_path, {"version": SCHEMA_VERSION, "hands": []})
            hands = history.get("hands")
            if not isinstance(hands, list):
                hands = []
            hands.append(record.to_dict())
            history["hands"] = hands[-self.history_limit:] if self.history_limit > 0 else []

            previous = self.get_aggregate_stats(user_id)
            stats = previous.with_record(record)

            # Counters first; undone if the history write fails.
            self._write_json(stats_path, stats.to_dict())
            try:
                self._write_json(history_path, history)
            except Exception:
                self._write_json(stats_path, previous.to_dict())
                raise
            logger.info(
                f"Saved hand for {user_id}: {record.action_sequence} "
                f"{record.winner} {record.profit:+d} (games={stats.games_played})"
            )
            return True
        except Exception as e:
            logger.error(f"Failed to save hand for {user_id}: {e}", exc_info=True)
            return False

    def get_history(self, user_id: str, limit: int = 100) -> list[HandRecord]:
        """Most recent hands for ``user_id``, newest first."""
        data = self._read_json(self._user_dir(user_id) / "history.json", {"hands": []})
        hands = data.get("hands")
        records: list[HandRecord] = []
        for entry in reversed(hands if isinstance(hands, list) else []):
            if len(records) >= limit:
                break
            try:
                records.append(HandRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed hand record for {user_id}: {e}")
        return records

    def get_aggregate_stats(self, user_id: str) -> AggregateStats:
        data = self._read_json(self._user_dir(user_id) / "stats.json", {})
        try:
            return AggregateStats.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Resetting malformed stats for {user_id}: {e}")
            return AggregateStats()

    # ── Export and clear ──────────────────────────────────────────────────────

    def export_user(self, user_id: str) -> str:
        """All stored data for ``user_id`` as one JSON document.

        Hands and simulations are listed oldest first, as stored.

        Raises:
            InvalidArgumentError: If ``user_id`` is malformed.
        """
        user_dir = self._user_dir(user_id)
        history = self._read_json(user_dir / "history.json", {"hands": []})
        hands = history.get("hands")
        data = {
            "version": SCHEMA_VERSION,
            "user_id": user_id,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "stats": self.get_aggregate_stats(user_id).to_dict(),
            "hands": hands if isinstance(hands, list) else [],
            "simulations": self._read_json(user_dir / "simulations.json", []),
        }
        logger.info(f"Exported data for {user_id}: {len(data['hands'])} hands")
        return json.dumps(data, indent=2)

    def clear_user(self, user_id: str) -> bool:
        """Delete the user's history, stats and simulation summaries.

        Custom profiles are shared and stay in place.

        Returns:
            True if nothing is left for ``user_id``, False if deletion failed.
        """
        try:
            user_dir = self._user_dir(user_id)
            if not user_dir.exists():
                logger.info(f"No stored data for {user_id}")
                return True
            shutil.rmtree(user_dir)
            logger.info(f"Cleared stored data for {user_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to clear data for {user_id}: {e}", exc_info=True)
            return False

    # ── Profiles ──────────────────────────────────────────────────────────────

    @property
    def builtin_ids(self) -> list[str]:
        return list(self._builtins)

    def _custom_profiles(self) -> dict[str, Any]:
        return self._read_json(self.base_dir / "profiles.json", {})

    def list_profiles(self) -> dict[str, StrategyProfile]:
        """Built-in profiles followed by saved custom profiles."""
        profiles = dict(self._builtins)
        for profile_id, data in self._custom_profiles().items():
            if profile_id in profiles:
                continue
            try:
                profiles[profile_id] = StrategyProfile.from_dict(data)
            except InvalidProfileError as e:
                logger.warning(f"Skipping invalid stored profile {profile_id}: {e}")
        return profiles

    def get_profile(self, profile_id: str) -> StrategyProfile:
        """Look up a profile: built-ins first, then saved custom profiles.

        Raises:
            InvalidArgumentError: If no profile has this id.
            InvalidProfileError:  If the stored profile is corrupt.
        """
        if profile_id in self._builtins:
            return self._builtins[profile_id]
        data = self._custom_profiles().get(profile_id)
        if data is None:
            raise InvalidArgumentError(f"Unknown profile id {profile_id!r}.")
        return StrategyProfile.from_dict(data)

    def save_profile(self, profile_id: str, profile: StrategyProfile) -> bool:
        """Store a custom profile under ``profile_id``.

        Raises:
            InvalidArgumentError: If ``profile_id`` is a built-in id or malformed.

        Returns:
            True on success, False if the write failed (already logged).
        """
        _check_id("profile_id", profile_id)
        if profile_id in self._builtins:
            raise InvalidArgumentError(f"Built-in profile {profile_id!r} is read-only.")
        try:
            profiles = self._custom_profiles()
            profiles[profile_id] = profile.to_dict()
            self._write_json(self.base_dir / "profiles.json", profiles)
            logger.info(f"Saved profile {profile_id} ({profile.name})")
            return True
        except Exception as e:
            logger.error(f"Failed to save profile {profile_id}: {e}", exc_info=True)
            return False

    # ── Simulation summaries ──────────────────────────────────────────────────

    def save_simulation_summary(self, user_id: str, result: SimulationResult) -> bool:
        """Keep a summary of ``result`` (profit log excluded), newest last."""
        try:
            path = self._user_dir(user_id) / "simulations.json"
            summaries = self._read_json(path, [])
            summaries.append({
                "profile_a": result.profile_a,
                "profile_b": result.profile_b,
                "n_hands": result.n_hands,
                "a_wins": result.a_wins,
                "b_wins": result.b_wins,
                "total_profit_a": result.total_profit_a,
                "mean_ev": result.mean_ev,
                "cancelled": result.cancelled,
                "saved_at": datetime.now(timezone.utc).isoformat(),
            })
            self._write_json(path, summaries[-SIMULATION_HISTORY_LIMIT:])
            logger.info(f"Saved simulation summary for {user_id}: {result.profile_a} vs {result.profile_b}")
            return True
        except Exception as e:
            logger.error(f"Failed to save simulation summary for {user_id}: {e}", exc_info=True)
            return False

    def get_simulation_history(self, user_id: str, limit: int = SIMULATION_HISTORY_LIMIT) -> list[dict[str, Any]]:
        """Saved simulation summaries, newest first."""
        summaries = self._read_json(self._user_dir(user_id) / "simulations.json", [])
        return list(reversed(summaries))[:limit]
