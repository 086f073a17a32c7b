"""Timeout error messages attributed to the phase or fixture that ran out of time."""

from __future__ import annotations

from phaseguard.slots import (
    MODIFIER_TYPES,
    Location,
    RunnableDescription,
    RunnableType,
)


class TimeoutManagerError(Exception):
    """A phase exceeded its time budget.

    ``stack`` is what gets displayed for the failure: the message plus the
    location of the hook, modifier or fixture, with no class name or traceback.
    """

    def __init__(self, message: str, location: Location | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def stack(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message}\n    at {self.location}"

    def __str__(self) -> str:
        return self.message


def format_ms(value: float) -> str:
    """Render a millisecond value, dropping a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def timeout_message(runnable: RunnableDescription, timeout: float) -> str:
    """Build the message for a timeout in ``runnable`` with resolved budget ``timeout``."""
    t = format_ms(timeout)
    fixture = runnable.fixture
    kind = runnable.type

    if fixture is not None and fixture.slot is not None:
        return f'Fixture "{fixture.title}" timeout of {t}ms exceeded during {fixture.phase}.'

    if kind == RunnableType.TEST:
        if fixture is None:
            return f"Test timeout of {t}ms exceeded."
        if fixture.phase == "setup":
            return f'Test timeout of {t}ms exceeded while setting up "{fixture.title}".'
        # Teardown shares the test's budget even when the body finished in time.
        return "\n".join(
            [
                f'Test finished within timeout of {t}ms, but tearing down "{fixture.title}" ran out of time.',
                "Please allow more time for the test, since teardown is attributed towards the test timeout budget.",
            ]
        )
    if kind in (RunnableType.BEFORE_EACH, RunnableType.AFTER_EACH):
        return f'Test timeout of {t}ms exceeded while running "{kind}" hook.'
    if kind in (RunnableType.BEFORE_ALL, RunnableType.AFTER_ALL):
        return f'"{kind}" hook timeout of {t}ms exceeded.'
    if kind == RunnableType.TEARDOWN:
        if fixture is None:
            return f"Worker teardown timeout of {t}ms exceeded."
        action = "setting up" if fixture.phase == "setup" else "tearing down"
        return f'Worker teardown timeout of {t}ms exceeded while {action} "{fixture.title}".'
    if kind in MODIFIER_TYPES:
        return f'"{kind}" modifier timeout of {t}ms exceeded.'
    raise ValueError(f"Unknown runnable type: {kind}")


def create_timeout_error(runnable: RunnableDescription, timeout: float) -> TimeoutManagerError:
    fixture = runnable.fixture
    if fixture is not None and fixture.slot is not None:
        location = fixture.location
    else:
        location = runnable.location
    return TimeoutManagerError(timeout_message(runnable, timeout), location)
