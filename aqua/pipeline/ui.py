"""Console output for AQUA.

One themed rich Console for the whole process; engines, the reporter and
the CLI commands all print through it:

    from aqua.pipeline.ui import console, print_task_results

    console.print("[task]app-test-unit[/task] started")
    print_task_results(results)
"""

import sys
from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from .structures import TaskResult

AQUA_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "task": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(
    theme=AQUA_THEME,
    force_terminal=sys.stdout.isatty()
)


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")


def print_task_results(results: Iterable[TaskResult]) -> None:
    """Summary table: one row per task invocation with status and time."""
    table = Table(title="Task Summary", expand=False)
    table.add_column("Task", style="task", no_wrap=True)
    table.add_column("Status")
    table.add_column("Time", justify="right")
    for result in results:
        style = "success" if result.success else "error"
        table.add_row(result.name, f"[{style}]{result.status.value}[/{style}]", f"{result.elapsed:.2f}s")
    console.print(table)


def print_task_list(usage: Mapping[str, str | None]) -> None:
    """Registered task names with their usage text, sorted by name."""
    table = Table(title="Tasks", expand=False)
    table.add_column("Task", style="task", no_wrap=True)
    table.add_column("Usage")
    for name in sorted(usage):
        table.add_row(name, usage[name] or "")
    console.print(table)
