"""Rich console output for phaseguard."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from phaseguard import __version__
from phaseguard.reporter import format_ms
from phaseguard.slots import TimeSlot

if TYPE_CHECKING:
    from phaseguard.simulator import SimulationReport, StepResult


class ConsoleUI:
    """Rich-powered console output for plan runs."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def header(self, plan_name: str, timeout: float) -> None:
        budget = f"{format_ms(timeout)}ms" if timeout else "disabled"
        self.console.print(
            Panel(
                f"[bold white]{escape(plan_name)}[/bold white]\n"
                f"Default timeout: [cyan]{budget}[/cyan]",
                title=f"[bold blue]phaseguard[/bold blue] v{__version__}",
                border_style="blue",
            )
        )

    def step_result(self, result: StepResult) -> None:
        """Show one step as soon as it settles."""
        icon = "[green]✓[/green]" if result.status == "passed" else "[red]✗[/red]"
        target = f" [cyan]{escape(result.fixture)}[/cyan]" if result.fixture else ""
        self.console.print(
            f"  {icon} [bold]{escape(result.phase)}[/bold] {result.step}{target} "
            f"[dim]({result.duration:.0f}ms)[/dim]"
        )

    def timeout_error(self, message: str, location: str | None = None) -> None:
        """Show a timeout message in red, with the 'at' line when known."""
        body = f"[bold red]{escape(message)}[/bold red]"
        if location:
            body += f"\n[dim]    at {escape(location)}[/dim]"
        self.console.print(Panel(body, border_style="red"))

    def results_table(self, report: SimulationReport) -> None:
        table = Table(title="Phase Results", show_header=True, header_style="bold")
        table.add_column("Phase", style="cyan")
        table.add_column("Step")
        table.add_column("Fixture")
        table.add_column("Result", justify="center")
        table.add_column("Duration", justify="right")

        for s in report.steps:
            status = "[green]✓ Pass[/green]" if s.status == "passed" else "[red]✗ Timeout[/red]"
            table.add_row(
                escape(s.phase),
                s.step,
                escape(s.fixture or "-"),
                status,
                f"{s.duration:.0f}ms",
            )

        self.console.print(table)

    def slot_summary(self, slot: TimeSlot) -> None:
        budget = f"{format_ms(slot.timeout)}ms" if slot.timeout else "disabled"
        self.console.print(
            f"\n  [dim]Default slot: {slot.elapsed:.0f}ms used of {budget}[/dim]"
        )
