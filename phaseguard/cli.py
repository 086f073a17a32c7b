"""CLI entry point using Typer."""

from __future__ import annotations

import asyncio
import signal
import sys
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from phaseguard import __version__

if TYPE_CHECKING:
    from phaseguard.plan.models import PhasePlan
    from phaseguard.simulator import SimulationReport
    from phaseguard.ui.console import ConsoleUI

app = typer.Typer(
    name="phaseguard",
    help="Per-phase timeout budgets for test execution",
    no_args_is_help=True,
)
console = Console()


@app.command()
def run(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to a JSON phase plan"),
    timeout: int = typer.Option(None, "--timeout", "-t", help="Default timeout in ms (0 disables)"),
    debug: bool = typer.Option(False, "--debug", help="Disable timeout enforcement"),
    events: bool = typer.Option(None, "--events/--no-events", help="Write a JSONL event log"),
) -> None:
    """Simulate a phase plan against the timeout manager."""
    from phaseguard.config.settings import load_settings
    from phaseguard.plan.parser import parse_plan
    from phaseguard.ui.console import ConsoleUI

    ui = ConsoleUI(console)

    try:
        settings = load_settings(timeout=timeout, debug=debug or None, record_events=events)
        phase_plan = parse_plan(plan)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from None

    budget = settings.effective_timeout
    if timeout is None and phase_plan.timeout is not None and not settings.debug:
        budget = phase_plan.timeout

    ui.header(phase_plan.name, budget)
    report = asyncio.run(
        _simulate(phase_plan, budget, settings.runs_dir, settings.record_events, ui)
    )

    ui.results_table(report)
    ui.slot_summary(report.default_slot)
    if report.timed_out:
        raise typer.Exit(1)


async def _simulate(
    phase_plan: PhasePlan,
    budget: float,
    runs_dir: Path,
    record_events: bool,
    ui: ConsoleUI,
) -> SimulationReport:
    from phaseguard.logging.events import EventLog, RunDir
    from phaseguard.manager import TimeoutManager
    from phaseguard.simulator import PlanSimulator

    event_log = EventLog(RunDir(base=runs_dir)) if record_events else None
    manager = TimeoutManager(budget, event_log=event_log)

    # Ctrl+C aborts the running phase instead of killing the loop.
    loop = asyncio.get_running_loop()
    with suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, manager.interrupt)
    try:
        return await PlanSimulator(manager, event_log=event_log, ui=ui).run(phase_plan)
    finally:
        with suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)
        if event_log is not None:
            event_log.close()
            console.print(f"  [dim]Event log: {event_log.run_dir.events_path}[/dim]")


@app.command()
def doctor() -> None:
    """Check the environment and show effective settings."""
    from phaseguard.config.settings import load_settings

    console.print(f"[bold]phaseguard Doctor[/bold] v{__version__}\n")

    v = sys.version_info
    ok = v >= (3, 12)
    icon = "[green]✓[/green]" if ok else "[red]✗[/red]"
    console.print(f"  {icon} Python ≥ 3.12 ({v.major}.{v.minor}.{v.micro})")

    try:
        settings = load_settings()
    except ValueError as e:
        console.print(f"  [red]✗[/red] Settings: {e}")
        raise typer.Exit(1) from None

    budget = f"{settings.effective_timeout}ms" if settings.effective_timeout else "disabled"
    console.print(f"  [green]✓[/green] Default timeout: {budget}")
    console.print(f"  [green]✓[/green] Runs directory: {settings.runs_dir}")

    console.print()
    if ok:
        console.print("[green]All checks passed![/green]")
    else:
        console.print("[yellow]Some checks failed. Fix the issues above.[/yellow]")


@app.command()
def init() -> None:
    """Create a phase plan template."""
    template = """{
  "name": "Sample test",
  "timeout": "2s",
  "phases": [
    {"type": "beforeAll", "duration": "100ms", "timeout": "1s", "location": "tests/sample.py:3:1"},
    {
      "type": "test",
      "title": "renders page",
      "duration": "300ms",
      "location": "tests/sample.py:10:1",
      "fixtures": [
        {"title": "browser", "setup": "200ms", "teardown": "50ms", "timeout": "5s"},
        {"title": "page", "setup": "50ms", "teardown": "50ms"}
      ]
    },
    {"type": "afterAll", "duration": "50ms", "location": "tests/sample.py:20:1"}
  ]
}
"""
    path = Path("plan.json")
    if path.exists():
        for i in range(1, 100):
            path = Path(f"plan-{i}.json")
            if not path.exists():
                break

    path.write_text(template, encoding="utf-8")
    console.print(f"[green]Created {path}[/green], edit it and run: phaseguard run --plan {path}")


def main() -> None:
    app()
