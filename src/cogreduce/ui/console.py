"""Rich-powered console output for cogreduce."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from cogreduce import __version__
from cogreduce.search.cache import ExtractionCache
from cogreduce.search.solution import Solution


class Console:
    """Terminal output for cogreduce using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        self.console.print(
            Panel(
                f"[bold cyan]cogreduce[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Extract-method search for cognitive complexity[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_solution(self, solution: Solution, max_complexity: int) -> None:
        """Display a solution and its extractions."""
        ok = solution.feasible and solution.final_complexity <= max_complexity
        color = "green" if ok else "yellow" if solution.feasible else "red"
        self.console.print(
            Panel(
                f"[bold]Method:[/bold] {solution.method.name}\n"
                f"[bold]Complexity:[/bold] {solution.initial_complexity} → "
                f"[{color}]{solution.final_complexity}[/{color}] "
                f"(threshold {max_complexity})\n"
                f"[bold]Extractions:[/bold] {len(solution)}\n"
                f"[bold]Fitness:[/bold] {solution.fitness}",
                title="[bold]Best Solution[/bold]",
                border_style=color,
            )
        )
        if not len(solution):
            return

        table = Table(border_style="cyan")
        table.add_column("#", justify="right")
        table.add_column("Interval")
        table.add_column("Statements")
        table.add_column("Complexity", justify="right")
        table.add_column("Nesting", justify="right")
        for i, sequence in enumerate(solution, start=1):
            first, last = sequence.positions
            table.add_row(
                str(i),
                str(sequence.interval),
                f"{first}..{last}",
                str(sequence.accumulated_complexity),
                str(sequence.nesting),
            )
        self.console.print(table)

    def show_cache(self, cache: ExtractionCache) -> None:
        """Display cache contents."""
        table = Table(title="Extraction Cache", border_style="cyan")
        table.add_column("Interval")
        table.add_column("Feasible")
        table.add_column("Reason")
        table.add_column("Params", justify="right")
        table.add_column("LOC", justify="right")
        table.add_column("Reduction", justify="right")
        table.add_column("New CC", justify="right")
        for row in cache.export():
            m = row.metrics
            table.add_row(
                str(row.interval),
                "[green]yes[/green]" if m.feasible else "[red]no[/red]",
                m.reason,
                str(m.parameter_count),
                str(m.extracted_line_count),
                str(m.reduction_of_complexity),
                str(m.complexity_of_new_method),
            )
        self.console.print(table)

    def show_stats(self, stats: dict, title: str = "Search Statistics") -> None:
        table = Table(title=title, border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="cyan")
        for key, value in stats.items():
            table.add_row(key.replace("_", " ").capitalize(), str(value))
        self.console.print(table)

    def show_groups(self, method_name: str, groups: list) -> None:
        """Display sentence groups as a tree."""
        tree = Tree(f"[bold cyan]{method_name}[/bold cyan]")
        for i, group in enumerate(groups, start=1):
            node = tree.add(
                f"[bold]group {i}[/bold] [dim]({group.parent.kind.value} "
                f"at {group.parent.start})[/dim]"
            )
            for slot in group.slots:
                marker = " [dim](empty)[/dim]" if slot.is_empty else ""
                node.add(f"{slot.position}: [{slot.start}, {slot.end}] cc={slot.complexity}{marker}")
        self.console.print(tree)
