"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from phaseguard.logging.events import EventLog, RunDir
from phaseguard.manager import TimeoutManager


@pytest.fixture
def run_dir(tmp_path: Path) -> RunDir:
    """Create a temporary run directory."""
    return RunDir(base=tmp_path / "runs")


@pytest.fixture
def event_log(run_dir: RunDir) -> EventLog:
    """Create an event log in a temporary run directory."""
    log = EventLog(run_dir)
    yield log
    log.close()


@pytest.fixture
def manager() -> TimeoutManager:
    """Create a manager with a 1 second default budget."""
    return TimeoutManager(1000)


@pytest.fixture
def sample_plan_path(tmp_path: Path) -> Path:
    """Create a plan file whose phases all fit their budgets."""
    plan = tmp_path / "plan.json"
    plan.write_text(
        """{
  "name": "Login flow",
  "timeout": "1s",
  "phases": [
    {"type": "beforeAll", "duration": "10ms", "timeout": "500ms", "location": "tests/login.py:3:1"},
    {
      "type": "test",
      "title": "logs in",
      "duration": "20ms",
      "location": "tests/login.py:8:5",
      "fixtures": [
        {"title": "db", "setup": "10ms", "teardown": "10ms", "timeout": "500ms"},
        {"title": "page", "setup": "5ms", "teardown": "5ms"}
      ]
    }
  ]
}
""",
        encoding="utf-8",
    )
    return plan


@pytest.fixture
def slow_plan_path(tmp_path: Path) -> Path:
    """Create a plan whose test body overruns its budget."""
    plan = tmp_path / "slow.json"
    plan.write_text(
        '{"name": "Slow", "timeout": 50, "phases": [{"type": "test", "duration": "2s"}]}',
        encoding="utf-8",
    )
    return plan
