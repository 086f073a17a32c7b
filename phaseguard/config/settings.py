"""Application settings via Pydantic BaseSettings."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class PhaseguardSettings(BaseSettings):
    """Phaseguard configuration from environment variables and .env files."""

    model_config = {"env_prefix": "PHASEGUARD_", "env_file": ".env", "extra": "ignore"}

    timeout: int = 30_000  # milliseconds; 0 disables enforcement
    debug: bool = False
    runs_dir: Path = Path(".phaseguard/runs")
    record_events: bool = True

    @field_validator("timeout")
    @classmethod
    def check_timeout(cls, v: int) -> int:
        if v < 0:
            raise ValueError("timeout must be >= 0 (use 0 to disable enforcement)")
        return v

    @property
    def effective_timeout(self) -> int:
        """Timeout handed to the manager; debug mode turns enforcement off."""
        return 0 if self.debug else self.timeout


def load_settings(**overrides: object) -> PhaseguardSettings:
    """Load settings with optional overrides (useful for CLI args)."""
    return PhaseguardSettings(**{k: v for k, v in overrides.items() if v is not None})  # type: ignore[arg-type]
