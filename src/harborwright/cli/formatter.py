# src/harborwright/cli/formatter.py
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from harborwright.core.errors import DerivationError
from harborwright.graph.resources import Resource

console = Console()


class GraphFormatter:
    """
    GraphFormatter: renders manifests, graph tables and failure paths.
    """

    def __init__(self, target: Console = None):
        self.console = target or console

    def display_manifests(self, yaml_text: str, title: str):
        syntax = Syntax(yaml_text.rstrip(), "yaml", theme="monokai", line_numbers=False)
        self.console.print(Panel(syntax, title=title, border_style="green"))

    def print_graph_table(self, nodes: List[Resource]):
        table = Table(title="Registry Resource Graph", show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Kind")
        table.add_column("Name", style="cyan")
        table.add_column("Immutable", justify="center")
        table.add_column("Depends On")

        for i, node in enumerate(nodes, start=1):
            immutable = getattr(node.obj, "immutable", None)
            table.add_row(
                str(i),
                node.kind,
                f"{node.namespace}/{node.name}",
                "-" if immutable is None else ("yes" if immutable else "no"),
                ", ".join(d.name for d in node.dependencies) or "-",
            )

        self.console.print(table)

    def show_failure(self, err: DerivationError):
        """Prints the stage path leading to the root cause, outermost first."""
        lines = [f"{'  ' * depth}↳ {escape(stage)}" for depth, stage in enumerate(err.stages)]
        root = err.root_cause
        lines.append(f"[bold]Cause:[/bold] {type(root).__name__}: {escape(str(root))}")
        self.console.print(Panel(
            "\n".join(lines),
            title="[bold red]Registry derivation failed[/bold red]",
            border_style="red",
        ))

    def show_problems(self, problems: List[str]):
        for problem in problems:
            self.console.print(f"[bold red]✗ VERIFY:[/bold red] {escape(problem)}")

    def show_error(self, message: str):
        self.console.print(Panel(escape(message), title="[bold red]Invalid input[/bold red]", border_style="red"))

    def info(self, message: str):
        self.console.print(f"[green]{message}[/green]")
