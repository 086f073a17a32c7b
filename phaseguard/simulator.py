"""Plan simulator: drives scripted phases through a TimeoutManager."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from phaseguard.logging.events import EventLog
from phaseguard.manager import TimeoutManager
from phaseguard.plan.models import PhasePlan, PlannedFixture, PlannedPhase
from phaseguard.reporter import TimeoutManagerError
from phaseguard.slots import Location, RunnableDescription, RunnableType, TimeSlot

if TYPE_CHECKING:
    from phaseguard.ui.console import ConsoleUI


@dataclass
class StepResult:
    """Outcome of one fixture setup, body or fixture teardown."""

    phase: str
    type: RunnableType
    step: Literal["setup", "body", "teardown"]
    fixture: str | None = None
    status: Literal["passed", "timedOut"] = "passed"
    message: str = ""
    location: str | None = None
    duration: float = 0.0


@dataclass
class SimulationReport:
    plan: str
    steps: list[StepResult] = field(default_factory=list)
    default_slot: TimeSlot = field(default_factory=lambda: TimeSlot(timeout=0))

    @property
    def timed_out(self) -> list[StepResult]:
        return [s for s in self.steps if s.status == "timedOut"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan": self.plan,
            "steps": [asdict(s) for s in self.steps],
            "default_slot": asdict(self.default_slot),
            "timed_out": len(self.timed_out),
        }


class PlanSimulator:
    """Plays a PhasePlan the way a worker plays a test.

    For each phase: fixture setups in order, then the body, then fixture
    teardowns in reverse. A timeout skips the rest of the setup and the body;
    fixtures that were set up are still torn down.
    """

    def __init__(
        self,
        manager: TimeoutManager,
        event_log: EventLog | None = None,
        ui: ConsoleUI | None = None,
    ) -> None:
        self.manager = manager
        self.event_log = event_log
        self.ui = ui

    async def run(self, plan: PhasePlan) -> SimulationReport:
        report = SimulationReport(plan=plan.name)
        self._emit(
            "plan.start",
            f"Starting plan: {plan.name}",
            {"phases": len(plan.phases)},
        )

        for phase in plan.phases:
            steps = await self._run_phase(phase)
            report.steps.extend(steps)
            self._emit(
                "phase.done",
                f"{phase.label}: {sum(1 for s in steps if s.status == 'passed')}/{len(steps)} steps passed",
                result={"steps": [asdict(s) for s in steps]},
                phase=phase.type.value,
            )

        timings = self.manager.default_slot_timings()
        report.default_slot = TimeSlot(timeout=timings.timeout, elapsed=timings.elapsed)

        self._emit(
            "plan.done",
            f"Plan complete: {len(report.timed_out)} timeout(s)",
            result=report.to_dict(),
        )
        if self.event_log is not None:
            self.event_log.run_dir.report_path.write_text(
                json.dumps(report.to_dict(), indent=2, default=str), encoding="utf-8"
            )
        return report

    async def _run_phase(self, phase: PlannedPhase) -> list[StepResult]:
        location = Location.parse(phase.location) if phase.location else None
        runnable_slot = TimeSlot(timeout=phase.timeout) if phase.timeout is not None else None
        steps: list[StepResult] = []

        # Each fixture owns one slot for both its setup and its teardown.
        set_up: list[tuple[PlannedFixture, TimeSlot | None]] = []
        failed = False
        for fixture in phase.fixtures:
            slot = TimeSlot(timeout=fixture.timeout) if fixture.timeout is not None else None
            runnable = RunnableDescription(
                type=phase.type,
                location=location,
                slot=runnable_slot,
                fixture=fixture.describe("setup", slot),
            )
            result = await self._step(phase, runnable, "setup", fixture.setup, fixture.title)
            steps.append(result)
            if result.status == "timedOut":
                failed = True
                break
            set_up.append((fixture, slot))

        if not failed:
            runnable = RunnableDescription(type=phase.type, location=location, slot=runnable_slot)
            steps.append(await self._step(phase, runnable, "body", phase.duration))

        for fixture, slot in reversed(set_up):
            runnable = RunnableDescription(
                type=phase.type,
                location=location,
                slot=runnable_slot,
                fixture=fixture.describe("teardown", slot),
            )
            steps.append(
                await self._step(phase, runnable, "teardown", fixture.teardown, fixture.title)
            )

        return steps

    async def _step(
        self,
        phase: PlannedPhase,
        runnable: RunnableDescription,
        step: Literal["setup", "body", "teardown"],
        duration: float,
        fixture: str | None = None,
    ) -> StepResult:
        async def work() -> None:
            if step == "body":
                if phase.slow:
                    self.manager.slow()
                if phase.set_timeout is not None:
                    self.manager.set_timeout(phase.set_timeout)
            await asyncio.sleep(duration / 1000)

        result = StepResult(phase=phase.label, type=phase.type, step=step, fixture=fixture)
        start = time.monotonic()
        try:
            await self.manager.with_runnable(runnable, work)
        except TimeoutManagerError as e:
            result.status = "timedOut"
            result.message = e.message
            result.location = str(e.location) if e.location else None
        result.duration = (time.monotonic() - start) * 1000

        if self.ui:
            self.ui.step_result(result)
            if result.status == "timedOut":
                self.ui.timeout_error(result.message, result.location)
        return result

    def _emit(
        self,
        event_type: str,
        summary: str,
        data: dict[str, Any] | None = None,
        result: dict[str, Any] | None = None,
        phase: str = "plan",
    ) -> None:
        if self.event_log is None:
            return
        self.event_log.emit(
            phase=phase, event_type=event_type, summary=summary, data=data, result=result
        )
