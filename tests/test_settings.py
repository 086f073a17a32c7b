"""Tests for settings."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from phaseguard.config.settings import PhaseguardSettings, load_settings

# Keys that must be cleared to isolate tests from the user's environment
_CLEAR_KEYS = {
    "PHASEGUARD_TIMEOUT": "30000",
    "PHASEGUARD_DEBUG": "false",
    "PHASEGUARD_RUNS_DIR": ".phaseguard/runs",
    "PHASEGUARD_RECORD_EVENTS": "true",
}


class TestSettings:
    def test_defaults(self) -> None:
        with patch.dict(os.environ, _CLEAR_KEYS, clear=False):
            s = PhaseguardSettings(_env_file=None)  # type: ignore[call-arg]
            assert s.timeout == 30_000
            assert s.debug is False
            assert s.runs_dir == Path(".phaseguard/runs")
            assert s.record_events is True
            assert s.effective_timeout == 30_000

    def test_timeout_from_env(self) -> None:
        env = {**_CLEAR_KEYS, "PHASEGUARD_TIMEOUT": "5000"}
        with patch.dict(os.environ, env, clear=False):
            s = PhaseguardSettings(_env_file=None)  # type: ignore[call-arg]
            assert s.timeout == 5000

    def test_debug_disables_enforcement(self) -> None:
        env = {**_CLEAR_KEYS, "PHASEGUARD_DEBUG": "1"}
        with patch.dict(os.environ, env, clear=False):
            s = PhaseguardSettings(_env_file=None)  # type: ignore[call-arg]
            assert s.debug is True
            assert s.effective_timeout == 0

    def test_negative_timeout_rejected(self) -> None:
        env = {**_CLEAR_KEYS, "PHASEGUARD_TIMEOUT": "-1"}
        with (
            patch.dict(os.environ, env, clear=False),
            pytest.raises(ValueError, match="timeout"),
        ):
            PhaseguardSettings(_env_file=None)  # type: ignore[call-arg]

    def test_zero_timeout_allowed(self) -> None:
        env = {**_CLEAR_KEYS, "PHASEGUARD_TIMEOUT": "0"}
        with patch.dict(os.environ, env, clear=False):
            s = PhaseguardSettings(_env_file=None)  # type: ignore[call-arg]
            assert s.effective_timeout == 0

    def test_load_settings_overrides(self) -> None:
        with patch.dict(os.environ, _CLEAR_KEYS, clear=False):
            s = load_settings(timeout=1234, debug=None)
            assert s.timeout == 1234
            assert s.debug is False
