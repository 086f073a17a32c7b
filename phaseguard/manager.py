"""Per-phase timeout budgets on top of a single deadline runner."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from phaseguard.logging.events import EventLog
from phaseguard.reporter import TimeoutManagerError, create_timeout_error
from phaseguard.runner import TimeoutRunner, TimeoutRunnerError
from phaseguard.slots import Location, RunnableDescription, RunnableType, TimeSlot, resolve_slot

T = TypeVar("T")

SLOW_FACTOR = 3


class TimeoutManager:
    """Tracks which phase is running and which time slot it is charged to.

    The runner only knows about one budget at a time. Every phase switch
    stamps the runner's elapsed time into the outgoing slot and loads the
    incoming slot's (timeout, elapsed) back into the runner.
    """

    def __init__(self, timeout: float, event_log: EventLog | None = None) -> None:
        self._default_slot = TimeSlot(timeout=timeout)
        self._runnable = RunnableDescription.resting()
        self._timeout_runner = TimeoutRunner(timeout)
        self._event_log = event_log

    def interrupt(self) -> None:
        self._emit("runner.interrupt", "Interrupting the active phase")
        self._timeout_runner.interrupt()

    async def with_runnable(
        self,
        runnable: RunnableDescription | None,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Run ``operation`` charged to ``runnable``; ``None`` runs it unguarded."""
        if runnable is None:
            return await operation()
        self._update_runnable(runnable)
        try:
            return await self._timeout_runner.run(operation)
        except TimeoutRunnerError:
            error = self._create_timeout_error()
            raise error from None
        finally:
            self._update_runnable(RunnableDescription.resting())

    def default_slot_timings(self) -> TimeSlot:
        slot = self._current_slot()
        slot.elapsed = self._timeout_runner.elapsed()
        return self._default_slot

    def slow(self) -> None:
        slot = self._current_slot()
        slot.timeout = slot.timeout * SLOW_FACTOR
        self._timeout_runner.update_timeout(slot.timeout)
        self._emit_slot("slot.slow", f"Timeout raised to {slot.timeout}ms", slot)

    def set_timeout(self, timeout: float) -> None:
        slot = self._current_slot()
        if not slot.timeout:
            return  # Zero timeout means some debug mode - do not set a timeout.
        slot.timeout = timeout
        self._timeout_runner.update_timeout(timeout)
        self._emit_slot("slot.set_timeout", f"Timeout set to {timeout}ms", slot)

    def current_runnable_type(self) -> RunnableType:
        return self._runnable.type

    def current_slot_deadline(self) -> float:
        return self._timeout_runner.deadline()

    def _current_slot(self) -> TimeSlot:
        return resolve_slot(self._runnable, self._default_slot)

    def _update_runnable(self, runnable: RunnableDescription) -> None:
        slot = self._current_slot()
        slot.elapsed = self._timeout_runner.elapsed()

        self._runnable = runnable

        slot = self._current_slot()
        self._timeout_runner.update_timeout(slot.timeout, slot.elapsed)

    def _create_timeout_error(self) -> TimeoutManagerError:
        slot = self._current_slot()
        error = create_timeout_error(self._runnable, slot.timeout)
        slot.elapsed = self._timeout_runner.elapsed()
        self._emit_slot("runnable.timeout", error.message, slot, location=error.location)
        return error

    def _emit(self, event_type: str, summary: str, data: dict[str, object] | None = None) -> None:
        if self._event_log is None:
            return
        self._event_log.emit(
            phase=self._runnable.type.value,
            event_type=event_type,
            summary=summary,
            data=data,
        )

    def _emit_slot(
        self,
        event_type: str,
        summary: str,
        slot: TimeSlot,
        location: Location | None = None,
    ) -> None:
        if self._event_log is None:
            return
        fixture = self._runnable.fixture
        self._event_log.slot_event(
            phase=self._runnable.type.value,
            event_type=event_type,
            summary=summary,
            slot=slot,
            fixture=fixture.title if fixture else None,
            location=location,
        )
