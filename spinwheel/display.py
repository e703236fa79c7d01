"""Rich terminal rendering for spins, knockouts and fairness audits."""

from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spinwheel.audit import AuditReport
from spinwheel.knockout.models import TournamentResult
from spinwheel.models import Candidate, CandidateId, SpinResult

# Shared console instance
console = Console()


class ConsoleEventHandler:
    """Event handler that narrates a spin or knockout in the terminal.

    Frames are ignored; ticks are only shown when ``show_ticks`` is set.
    """

    def __init__(
        self,
        candidates: list[Candidate],
        show_ticks: bool = False,
        out: Console | None = None,
    ):
        self.names = {candidate.id: candidate.display_name for candidate in candidates}
        self.show_ticks = show_ticks
        self.console = out or console

    def _name(self, candidate_id: CandidateId | None) -> str:
        if candidate_id is None:
            return "-"
        return self.names.get(candidate_id, str(candidate_id))

    def on_frame(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_tick(self, candidate_id: CandidateId, segment_index: int, **kwargs: Any) -> None:
        if self.show_ticks:
            self.console.print(f"[dim]  tick → {self._name(candidate_id)}[/dim]")

    def on_settled(self, result: SpinResult, **kwargs: Any) -> None:
        if result.winning_candidate_id is None:
            self.console.print("[yellow]Nothing to spin.[/yellow]")
        else:
            self.console.print(f"[dim]Wheel stopped on[/dim] [cyan]{self._name(result.winning_candidate_id)}[/cyan]")

    def on_round_started(
        self,
        round_number: int,
        remaining: int,
        is_final: bool,
        odds: dict[CandidateId, float],
        **kwargs: Any
    ) -> None:
        title = "FINAL ROUND" if is_final else f"Round {round_number}"
        self.console.rule(f"[bold yellow]{title}[/bold yellow] [dim]({remaining} remaining)[/dim]")

    def on_eliminated(self, candidate_id: CandidateId, order: int, remaining: int, **kwargs: Any) -> None:
        self.console.print(f"[bold red]✖ #{order}[/bold red] {self._name(candidate_id)} is out")

    def on_champion(self, candidate_id: CandidateId, order: int, **kwargs: Any) -> None:
        content = Text()
        content.append("🏆 ", style="bold")
        content.append(self._name(candidate_id), style="bold green")
        content.append(f"\n\nLast one standing (#{order})", style="dim")
        self.console.print(Panel(content, title="[bold]Champion[/bold]", border_style="green", box=box.ROUNDED))

    def on_inconclusive(self, remaining: list[CandidateId], **kwargs: Any) -> None:
        names = ", ".join(self._name(candidate_id) for candidate_id in remaining)
        self.console.print(f"[yellow]Knockout ended without a champion. Still in: {names}[/yellow]")


def create_audit_table(report: AuditReport) -> Table:
    """Create a Rich table comparing expected and observed win ratios."""
    table = Table(
        title=f"[bold cyan]Fairness Audit[/bold cyan] [dim]({report.iterations:,} spins)[/dim]",
        box=box.ROUNDED,
        header_style="bold magenta",
        title_justify="left",
    )

    table.add_column("Candidate", style="cyan", max_width=40, overflow="ellipsis")
    table.add_column("Weight", style="yellow", width=7, justify="right")
    table.add_column("Expected", width=9, justify="right")
    table.add_column("Actual", width=9, justify="right")
    table.add_column("Wins", style="dim", width=8, justify="right")
    table.add_column("Diff", width=9, justify="right")

    for entry in report.results:
        # Highlight deviations above half a percentage point
        if abs(entry.diff) > 0.005:
            diff_str = f"[red]{entry.diff:+.2%}[/red]"
        else:
            diff_str = f"[green]{entry.diff:+.2%}[/green]"

        table.add_row(
            entry.label or str(entry.candidate_id),
            f"{entry.weight:g}",
            f"{entry.expected_ratio:.2%}",
            f"{entry.actual_ratio:.2%}",
            str(entry.wins),
            diff_str,
        )

    return table


def create_knockout_table(result: TournamentResult, candidates: list[Candidate]) -> Table:
    """Create a Rich table listing knockout placings, champion first."""
    names = {candidate.id: candidate.display_name for candidate in candidates}
    weights = {candidate.id: candidate.weight for candidate in candidates}

    table = Table(
        title="[bold green]Knockout Results[/bold green]",
        box=box.ROUNDED,
        header_style="bold magenta",
    )
    table.add_column("Place", style="bold", width=6, justify="center")
    table.add_column("Candidate", style="cyan", max_width=45, overflow="ellipsis")
    table.add_column("Weight", style="yellow", width=7, justify="right")
    table.add_column("Out", style="dim", width=5, justify="right")

    placings = []
    if result.champion_id is not None:
        placings.append((result.champion_id, None))
    placings.extend((e.candidate_id, e.order) for e in reversed(result.eliminations))

    for place, (candidate_id, order) in enumerate(placings, 1):
        if place == 1 and order is None:
            place_str = "🥇 1"
        elif place == 2:
            place_str = "🥈 2"
        elif place == 3:
            place_str = "🥉 3"
        else:
            place_str = str(place)

        table.add_row(
            place_str,
            names.get(candidate_id, str(candidate_id)),
            str(weights.get(candidate_id, "-")),
            "-" if order is None else f"#{order}",
        )

    return table


def print_audit_report(report: AuditReport) -> None:
    console.print(create_audit_table(report))
    console.print(f"[dim]Largest deviation: {report.max_abs_diff:.3%}[/dim]")
