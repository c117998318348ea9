"""Tests for kuhn_poker/config.py and kuhn_poker/logging_config.py."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from kuhn_poker.config import (
    SIMULATION_HANDS_CEILING,
    Settings,
    clamp_float,
    clamp_int,
    load_settings,
    parse_float_env,
    parse_int_env,
)
from kuhn_poker.logging_config import configure_logging, resolve_level

_ENV_VARS = (
    "KUHN_DATA_DIR", "KUHN_LOG_LEVEL", "KUHN_MAX_SIM_HANDS", "KUHN_DEFAULT_SIM_HANDS",
    "KUHN_HISTORY_LIMIT", "KUHN_GTO_ALPHA", "KUHN_AI_DELAY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestEnvHelpers:
    def test_parse_int(self, monkeypatch):
        monkeypatch.setenv("X_INT", " 42 ")
        assert parse_int_env("X_INT", 1) == 42
        monkeypatch.setenv("X_INT", "-3")
        assert parse_int_env("X_INT", 1) == -3
        monkeypatch.setenv("X_INT", "4.5")
        assert parse_int_env("X_INT", 1) == 1
        assert parse_int_env("X_MISSING", 7) == 7

    def test_parse_float(self, monkeypatch):
        monkeypatch.setenv("X_FLOAT", "0.25")
        assert parse_float_env("X_FLOAT", 1.0) == 0.25
        monkeypatch.setenv("X_FLOAT", "lots")
        assert parse_float_env("X_FLOAT", 1.0) == 1.0

    def test_clamps(self):
        assert clamp_int(500, 1, 100) == 100
        assert clamp_int(-5, 1, 100) == 1
        assert clamp_float(0.5, 0.0, 1.0) == 0.5


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings() == Settings()

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KUHN_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("KUHN_LOG_LEVEL", "debug")
        monkeypatch.setenv("KUHN_MAX_SIM_HANDS", "5000")
        monkeypatch.setenv("KUHN_DEFAULT_SIM_HANDS", "2000")
        monkeypatch.setenv("KUHN_GTO_ALPHA", "0.1")
        settings = load_settings()
        assert settings.data_dir == Path(tmp_path)
        assert settings.log_level == "DEBUG"
        assert settings.max_simulation_hands == 5000
        assert settings.default_simulation_hands == 2000
        assert settings.gto_alpha == 0.1

    def test_max_hands_capped(self, monkeypatch):
        monkeypatch.setenv("KUHN_MAX_SIM_HANDS", "10000000")
        assert load_settings().max_simulation_hands == SIMULATION_HANDS_CEILING

    def test_default_hands_within_max(self, monkeypatch):
        monkeypatch.setenv("KUHN_MAX_SIM_HANDS", "500")
        settings = load_settings()
        assert settings.default_simulation_hands == 500

    @pytest.mark.parametrize("raw,expected", [("0.9", 1 / 3), ("-1", 0.0), ("nan", 1 / 3)])
    def test_alpha_kept_in_range(self, monkeypatch, raw, expected):
        monkeypatch.setenv("KUHN_GTO_ALPHA", raw)
        assert load_settings().gto_alpha == pytest.approx(expected)

    def test_bad_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("KUHN_HISTORY_LIMIT", "many")
        monkeypatch.setenv("KUHN_AI_DELAY", "99")
        settings = load_settings()
        assert settings.history_limit == 100
        assert settings.ai_delay_seconds == 5.0

    @pytest.mark.parametrize("raw", ["verbose", "  ", "Level 5"])
    def test_unknown_log_level_falls_back(self, monkeypatch, raw):
        monkeypatch.setenv("KUHN_LOG_LEVEL", raw)
        settings = load_settings()
        assert settings.log_level == "INFO"
        assert configure_logging(level=settings.log_level).level == logging.INFO


class TestConfigureLogging:
    def test_explicit_level(self):
        logger = configure_logging(level="debug")
        assert logger.name == "kuhn_poker"
        assert logger.level == logging.DEBUG

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("KUHN_LOG_LEVEL", "warning")
        assert configure_logging().level == logging.WARNING

    def test_streamlit_kept_quiet(self):
        configure_logging(level="DEBUG")
        assert logging.getLogger("streamlit").level >= logging.WARNING

    def test_extra_loggers(self):
        configure_logging(level="ERROR", extra_loggers=["kuhn_test_extra"])
        assert logging.getLogger("kuhn_test_extra").level == logging.ERROR

    def test_module_loggers_inherit(self):
        configure_logging(level="INFO")
        assert logging.getLogger("kuhn_poker.analysis.simulator").getEffectiveLevel() == logging.INFO

    def test_unknown_level_uses_info(self):
        assert configure_logging(level="verbose").level == logging.INFO

    def test_unknown_env_level_uses_info(self, monkeypatch):
        monkeypatch.setenv("KUHN_LOG_LEVEL", "chatty")
        assert configure_logging().level == logging.INFO


class TestResolveLevel:
    @pytest.mark.parametrize("raw,expected", [
        ("debug", "DEBUG"), (" Warning ", "WARNING"), ("CRITICAL", "CRITICAL"),
        (None, "INFO"), ("", "INFO"), ("verbose", "INFO"),
    ])
    def test_names(self, raw, expected):
        assert resolve_level(raw) == expected

    def test_custom_default(self):
        assert resolve_level("nope", default="ERROR") == "ERROR"
