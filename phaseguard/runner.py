"""Deadline race primitive built on asyncio timeout scopes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


class TimeoutRunnerError(Exception):
    """The active race ran past its deadline (or was interrupted)."""

    def __init__(self) -> None:
        super().__init__("Timeout while running operation")


def _now() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000


@dataclass
class _Race:
    start: float
    scope: asyncio.Timeout
    interrupted: bool = False


class TimeoutRunner:
    """Races awaitables against a budget that can be changed while they run.

    Elapsed time only accumulates while a race is active. Nested ``run`` calls
    suspend the enclosing race and re-arm it once the inner one finishes.
    """

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout
        self._elapsed = 0.0
        self._running: _Race | None = None

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        previous = self._running
        if previous is not None:
            self._sync_elapsed_and_start()
            if not previous.scope.expired():
                previous.scope.reschedule(None)

        scope = asyncio.timeout(None)
        try:
            async with scope:
                race = self._running = _Race(start=_now(), scope=scope)
                self._arm(race)
                try:
                    result = await operation()
                finally:
                    self._sync_elapsed_and_start()
                    self._running = previous
                    if previous is not None:
                        previous.start = _now()
            # The operation may swallow the cancellation and return anyway.
            if scope.expired() or race.interrupted:
                raise TimeoutRunnerError()
            return result
        except TimeoutError:
            if scope.expired():
                raise TimeoutRunnerError() from None
            raise
        finally:
            if previous is not None and self._running is previous:
                self._arm(previous)

    def interrupt(self) -> None:
        """Expire the active race on the next loop iteration."""
        if self._running is None:
            return
        self._running.interrupted = True
        self._arm(self._running)

    def elapsed(self) -> float:
        self._sync_elapsed_and_start()
        return self._elapsed

    def deadline(self) -> float:
        """Monotonic timestamp (ms) at which the active race expires, 0 if none."""
        if self._running is None or not self._timeout:
            return 0.0
        self._sync_elapsed_and_start()
        return self._running.start + self._timeout - self._elapsed

    def update_timeout(self, timeout: float, elapsed: float | None = None) -> None:
        """Set the budget; ``elapsed`` replaces the accumulated elapsed time when given."""
        self._timeout = timeout
        if elapsed is not None:
            self._sync_elapsed_and_start()
            self._elapsed = elapsed
        if self._running is not None:
            self._arm(self._running)

    def _sync_elapsed_and_start(self) -> None:
        if self._running is None:
            return
        now = _now()
        self._elapsed += now - self._running.start
        self._running.start = now

    def _arm(self, race: _Race) -> None:
        # An expiring scope has already cancelled the operation.
        if race.scope.expired():
            return
        self._sync_elapsed_and_start()
        loop = asyncio.get_running_loop()
        if race.interrupted:
            race.scope.reschedule(loop.time())
            return
        if not self._timeout:
            race.scope.reschedule(None)
            return
        remaining = max(0.0, self._timeout - self._elapsed)
        race.scope.reschedule(loop.time() + remaining / 1000)
