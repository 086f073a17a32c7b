"""Time slots and the runnable/fixture descriptions that own them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


class RunnableType(StrEnum):
    TEST = "test"
    BEFORE_ALL = "beforeAll"
    AFTER_ALL = "afterAll"
    BEFORE_EACH = "beforeEach"
    AFTER_EACH = "afterEach"
    SLOW = "slow"
    SKIP = "skip"
    FAIL = "fail"
    FIXME = "fixme"
    TEARDOWN = "teardown"


MODIFIER_TYPES = frozenset(
    {
        RunnableType.SLOW,
        RunnableType.SKIP,
        RunnableType.FAIL,
        RunnableType.FIXME,
    }
)


@dataclass
class TimeSlot:
    """A time budget in milliseconds. A zero timeout disables enforcement."""

    timeout: float
    elapsed: float = 0.0


@dataclass(frozen=True)
class Location:
    file: str
    line: int
    column: int

    @classmethod
    def parse(cls, text: str) -> Location:
        """Parse 'file:line:column'. The file part may itself contain colons."""
        parts = text.strip().rsplit(":", 2)
        if len(parts) != 3 or not parts[0]:
            raise ValueError(f"Invalid location: {text!r} (expected file:line:column)")
        try:
            return cls(file=parts[0], line=int(parts[1]), column=int(parts[2]))
        except ValueError:
            raise ValueError(f"Invalid location: {text!r} (line and column must be integers)") from None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class FixtureDescription:
    """A fixture being set up or torn down within the current runnable."""

    title: str
    phase: Literal["setup", "teardown"]
    location: Location | None = None
    slot: TimeSlot | None = None  # Falls back to the runnable slot.


@dataclass
class RunnableDescription:
    """The phase that is currently executing."""

    type: RunnableType = RunnableType.TEST
    location: Location | None = None
    slot: TimeSlot | None = None  # Falls back to the default slot.
    fixture: FixtureDescription | None = None

    @classmethod
    def resting(cls) -> RunnableDescription:
        """The idle runnable. A new instance every call, never shared."""
        return cls(type=RunnableType.TEST)


def resolve_slot(runnable: RunnableDescription, default_slot: TimeSlot) -> TimeSlot:
    """Pick the slot that applies: fixture, then runnable, then default."""
    if runnable.fixture is not None and runnable.fixture.slot is not None:
        return runnable.fixture.slot
    if runnable.slot is not None:
        return runnable.slot
    return default_slot
