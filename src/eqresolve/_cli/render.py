"""Rich rendering utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from eqresolve._graph import format_cycle

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rich.console import Console

    from eqresolve._resolver import EquationResolver


def render_equation_table(equations: Mapping[str, str], title: str, console: Console) -> None:
    """Render equations as a Rich table sorted by name.

    Args:
        equations: Mapping from equation name to expression text.
        title: Panel title.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Name", style="bold")
    table.add_column("Expression")

    for name in sorted(equations):
        table.add_row(escape(name), escape(equations[name]))

    console.print(Panel(table, title=f"[bold]{escape(title)}[/bold]", border_style="cyan"))


def render_cycle(cycle: tuple[str, ...], console: Console) -> None:
    """Render a dependency cycle as an error line."""
    console.print(
        f"[red]✗ Equations have a cycle, cannot resolve. Cycle: {escape(format_cycle(cycle))}[/red]",
        soft_wrap=True,
    )


def render_resolution_summary(resolver: EquationResolver, console: Console) -> None:
    """Render the resolution order and free variables of a resolver.

    Args:
        resolver: An EquationResolver without a cycle.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Step", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Depends on")

    for step, name in enumerate(resolver.ordering(), start=1):
        if name in resolver.equations:
            deps = ", ".join(resolver.graph.adjacency(name)) or "-"
            table.add_row(str(step), escape(name), escape(deps))
        else:
            table.add_row(str(step), f"[yellow]{escape(name)}[/yellow]", "[yellow](undefined)[/yellow]")

    console.print(
        Panel(
            table,
            title="[bold]Resolution Order[/bold]",
            subtitle=f"[dim]{len(resolver.equations)} equations[/dim]",
            border_style="cyan",
        ),
    )
