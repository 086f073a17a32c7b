"""Phase plan models: a scripted sequence of phases for the simulator."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, field_validator

from phaseguard.slots import FixtureDescription, Location, RunnableType, TimeSlot

_DURATION_TOKEN = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_MS = {"ms": 1, "s": 1000, "m": 60_000, "h": 3_600_000}


def parse_duration_ms(value: int | float | str) -> float:
    """Parse '250ms', '2s', '1m30s' or a bare number of milliseconds."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        total = float(value)
    else:
        s = value.strip().lower()
        if not s:
            raise ValueError("Duration must not be empty")
        try:
            total = float(s)
        except ValueError:
            pos = 0
            total = 0.0
            for match in _DURATION_TOKEN.finditer(s):
                if match.start() != pos:
                    break
                total += float(match.group(1)) * _UNIT_MS[match.group(2)]
                pos = match.end()
            if pos != len(s):
                raise ValueError(f"Invalid duration: {value}") from None
    if total < 0:
        raise ValueError(f"Duration must not be negative: {value}")
    return total


class PlannedFixture(BaseModel):
    """A fixture used by a planned phase."""

    title: str
    setup: float = 0
    teardown: float = 0
    timeout: float | None = None
    location: str | None = None

    @field_validator("setup", "teardown", mode="before")
    @classmethod
    def parse_duration(cls, v: int | float | str) -> float:
        return parse_duration_ms(v)

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v: int | float | str | None) -> float | None:
        return None if v is None else parse_duration_ms(v)

    @field_validator("location")
    @classmethod
    def check_location(cls, v: str | None) -> str | None:
        if v is not None:
            Location.parse(v)
        return v

    def describe(self, phase: Literal["setup", "teardown"], slot: TimeSlot | None) -> FixtureDescription:
        return FixtureDescription(
            title=self.title,
            phase=phase,
            location=Location.parse(self.location) if self.location else None,
            slot=slot,
        )


class PlannedPhase(BaseModel):
    """One runnable: a test body, hook, modifier check or worker teardown."""

    type: RunnableType = RunnableType.TEST
    title: str = ""
    duration: float = 0
    timeout: float | None = None
    location: str | None = None
    slow: bool = False
    set_timeout: float | None = None
    fixtures: list[PlannedFixture] = []

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, v: int | float | str) -> float:
        return parse_duration_ms(v)

    @field_validator("timeout", "set_timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v: int | float | str | None) -> float | None:
        return None if v is None else parse_duration_ms(v)

    @field_validator("location")
    @classmethod
    def check_location(cls, v: str | None) -> str | None:
        if v is not None:
            Location.parse(v)
        return v

    @property
    def label(self) -> str:
        return self.title or self.type.value


class PhasePlan(BaseModel):
    """A named sequence of phases run against one timeout manager."""

    name: str
    timeout: float | None = None
    phases: list[PlannedPhase] = []

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v: int | float | str | None) -> float | None:
        return None if v is None else parse_duration_ms(v)
